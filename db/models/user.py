# db/models/user.py
import enum
from datetime import datetime
from configs import db
from flask_login import UserMixin


class UserRole(enum.Enum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"  # office staff
    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"  # print house / finishing shop
    COURIER = "COURIER"


class UserStatus(enum.Enum):
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"
    DEACTIVATED = "DEACTIVATED"


class User(db.Model, UserMixin):
    __tablename__ = "user_account"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(120))
    company_name = db.Column(db.String(255))
    email = db.Column(db.String(255))
    phone = db.Column(db.String(30))

    role = db.Column(db.Enum(UserRole), default=UserRole.CUSTOMER, nullable=False)
    status = db.Column(
        db.Enum(UserStatus), default=UserStatus.PENDING_APPROVAL, nullable=False
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def is_active(self):
        # Flask-Login refuses sessions for inactive accounts
        return self.status == UserStatus.ACTIVE

    def get_id(self):
        return str(self.id)

    def has_role(self, *roles: UserRole):
        return self.role in roles

    @property
    def display_name(self) -> str:
        return self.company_name or self.full_name or self.username

    def __str__(self):
        return self.display_name
