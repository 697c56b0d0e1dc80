from configs import db
from datetime import datetime
import enum


class SupplierJobStatus(enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    READY = "READY"
    PICKED_UP = "PICKED_UP"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"  # only from PENDING


class SupplierJob(db.Model):
    __tablename__ = "supplier_job"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    supplier_id = db.Column(
        db.Integer, db.ForeignKey("user_account.id"), nullable=False, index=True
    )
    customer_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    quote_id = db.Column(
        db.Integer, db.ForeignKey("quote.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quote_item_id = db.Column(
        db.Integer, db.ForeignKey("quote_item.id", ondelete="CASCADE"), nullable=False
    )
    size_quantity_id = db.Column(db.Integer, db.ForeignKey("size_quantity.id"))

    quantity = db.Column(db.Integer, nullable=False)
    price_per_unit = db.Column(db.Numeric(12, 2), nullable=False)
    status = db.Column(
        db.Enum(SupplierJobStatus, name="supplierjobstatus"),
        default=SupplierJobStatus.PENDING,
        nullable=False,
    )
    promised_delivery_days = db.Column(db.Integer)

    is_accepted = db.Column(db.Boolean, default=False, nullable=False)
    accepted_at = db.Column(db.DateTime)

    supplier_marked_ready = db.Column(db.Boolean, default=False, nullable=False)
    supplier_ready_at = db.Column(db.DateTime)
    courier_confirmed_ready = db.Column(db.Boolean)
    picked_up_at = db.Column(db.DateTime)
    delivered_at = db.Column(db.DateTime)

    supplier_rating = db.Column(db.Numeric(3, 1))  # 1-5

    is_cancelled = db.Column(db.Boolean, default=False, nullable=False)
    cancelled_at = db.Column(db.DateTime)
    cancelled_reason = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    supplier = db.relationship("User", foreign_keys=[supplier_id])
    customer = db.relationship("User", foreign_keys=[customer_id])
    quote = db.relationship("Quote", backref="jobs")
    quote_item = db.relationship("QuoteItem", backref="jobs")
