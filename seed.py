# seed.py - demo catalog, suppliers and price lists
from werkzeug.security import generate_password_hash
from configs import db
from db.models.catalog import Category, Product, ProductSize, SizeQuantity
from db.models.supplier_price import SupplierPrice
from db.models.user import User, UserRole, UserStatus
from app import app  # Flask app


# -------- Categories --------
def seed_categories():
    for name in ("Printing", "Signage", "Promotional"):
        if not Category.query.filter_by(name=name).first():
            db.session.add(Category(name=name, is_active=True))
    db.session.commit()
    print("✓ Categories seeded/updated")


def get_category_id(name: str) -> int:
    c = Category.query.filter_by(name=name).first()
    if not c:
        raise RuntimeError(f"Category '{name}' is missing. Run seed_categories() first.")
    return c.id


# -------- Products / sizes / quantity tiers --------
def seed_products():
    products = [
        # name, category, [(size, dimensions, [(qty, list price)])]
        (
            "Business Cards",
            "Printing",
            [("Standard", "90x50mm", [(100, 60), (500, 180), (1000, 290)])],
        ),
        (
            "Flyers",
            "Printing",
            [
                ("A5", "148x210mm", [(250, 220), (1000, 540)]),
                ("A4", "210x297mm", [(250, 320), (1000, 790)]),
            ],
        ),
        (
            "Roll-up Banner",
            "Signage",
            [("85x200", "850x2000mm", [(1, 390), (5, 1750)])],
        ),
        (
            "Branded Mugs",
            "Promotional",
            [("330ml", None, [(12, 420), (48, 1490)])],
        ),
        # no category: lands in "General"
        ("Custom Stickers", None, [("Round 5cm", "50mm", [(200, 150)])]),
    ]

    for name, category, sizes in products:
        p = Product.query.filter_by(name=name).first()
        if not p:
            p = Product(name=name, is_active=True)
            db.session.add(p)
        p.category_id = get_category_id(category) if category else None
        db.session.flush()

        for size_name, dims, tiers in sizes:
            s = ProductSize.query.filter_by(product_id=p.id, name=size_name).first()
            if not s:
                s = ProductSize(product_id=p.id, name=size_name)
                db.session.add(s)
            s.dimensions = dims
            db.session.flush()

            for qty, price in tiers:
                sq = SizeQuantity.query.filter_by(size_id=s.id, quantity=qty).first()
                if not sq:
                    db.session.add(SizeQuantity(size_id=s.id, quantity=qty, price=price))
                else:
                    sq.price = price
    db.session.commit()
    print("✓ Products seeded/updated")


# -------- Suppliers --------
def seed_suppliers():
    suppliers = [
        ("printhouse", "Dan Cohen", "Print House Ltd", "sales@printhouse.example"),
        ("signpro", "Maya Levi", "SignPro", "office@signpro.example"),
        ("giftco", "Avi Mizrahi", "GiftCo Promotions", "orders@giftco.example"),
    ]
    for username, full_name, company, email in suppliers:
        if User.query.filter_by(username=username).first():
            continue
        db.session.add(
            User(
                username=username,
                password_hash=generate_password_hash("1"),
                full_name=full_name,
                company_name=company,
                email=email,
                role=UserRole.SUPPLIER,
                status=UserStatus.ACTIVE,
            )
        )
    db.session.commit()
    print("✓ Suppliers seeded/updated")


# -------- Price lists --------
def seed_prices():
    # supplier -> categories it prints, cost factor vs list price, delivery days
    offers = {
        "printhouse": (("Printing", "Signage"), 0.55, 2),
        "signpro": (("Signage",), 0.50, 4),
        "giftco": (("Promotional", "Printing"), 0.65, 5),
    }
    for username, (categories, factor, days) in offers.items():
        supplier = User.query.filter_by(username=username).first()
        if not supplier:
            raise RuntimeError(f"Supplier '{username}' is missing. Run seed_suppliers() first.")
        units = (
            db.session.query(SizeQuantity)
            .join(ProductSize, ProductSize.id == SizeQuantity.size_id)
            .join(Product, Product.id == ProductSize.product_id)
            .join(Category, Category.id == Product.category_id)
            .filter(Category.name.in_(categories))
            .all()
        )
        for sq in units:
            unit_price = round(float(sq.price or 0) * factor / sq.quantity, 2)
            sp = SupplierPrice.query.filter_by(
                supplier_id=supplier.id, size_quantity_id=sq.id
            ).first()
            if not sp:
                db.session.add(
                    SupplierPrice(
                        supplier_id=supplier.id,
                        size_quantity_id=sq.id,
                        price_per_unit=unit_price,
                        delivery_days=days,
                    )
                )
            else:
                sp.price_per_unit = unit_price
                sp.delivery_days = days
    db.session.commit()
    print("✓ Supplier prices seeded/updated")


if __name__ == "__main__":
    with app.app_context():
        db.create_all()
        seed_categories()
        seed_products()
        seed_suppliers()
        seed_prices()
        print("✅ Seeded catalog, suppliers & prices!")
