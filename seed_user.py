from configs import db
from werkzeug.security import generate_password_hash
from db.models.user import User, UserRole, UserStatus
from app import app  # for the app context

STAFF = [
    ("admin", "System Admin", UserRole.ADMIN),
    ("office1", "Office Employee", UserRole.EMPLOYEE),
    ("courier1", "Courier", UserRole.COURIER),
    ("customer1", "Demo Customer", UserRole.CUSTOMER),
]

with app.app_context():
    db.create_all()
    created = 0
    for username, full_name, role in STAFF:
        if User.query.filter_by(username=username).first():
            continue
        db.session.add(
            User(
                username=username,
                password_hash=generate_password_hash("1"),
                full_name=full_name,
                role=role,
                status=UserStatus.ACTIVE,
            )
        )
        created += 1
    db.session.commit()

    print(f"✅ Seeded {created} user(s) for the staff, courier and customer roles")
