from datetime import datetime
from configs import db


class SupplierPrice(db.Model):
    __tablename__ = "supplier_price"
    __table_args__ = (
        db.UniqueConstraint(
            "supplier_id", "size_quantity_id", name="uq_supplier_price_unit"
        ),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    supplier_id = db.Column(
        db.Integer, db.ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False
    )
    size_quantity_id = db.Column(
        db.Integer, db.ForeignKey("size_quantity.id"), nullable=False, index=True
    )
    price_per_unit = db.Column(db.Numeric(12, 2), nullable=False)
    delivery_days = db.Column(db.Integer, default=3, nullable=False)
    is_preferred = db.Column(db.Boolean, default=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    supplier = db.relationship(
        "User",
        backref=db.backref(
            "supplier_prices", cascade="all, delete-orphan"
        ),
    )
    size_quantity = db.relationship("SizeQuantity")
