from configs import db
from datetime import datetime
import enum


class QuoteStatus(enum.Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SUPERSEDED = "SUPERSEDED"
    IN_PRODUCTION = "IN_PRODUCTION"  # every item has a supplier
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class Quote(db.Model):
    __tablename__ = "quote"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    customer = db.relationship("User", foreign_keys=[customer_id])

    status = db.Column(
        db.Enum(QuoteStatus, name="quotestatus"),
        default=QuoteStatus.DRAFT,
        nullable=False,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class QuoteItem(db.Model):
    __tablename__ = "quote_item"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    quote_id = db.Column(
        db.Integer, db.ForeignKey("quote.id", ondelete="CASCADE"), nullable=False
    )
    size_quantity_id = db.Column(
        db.Integer, db.ForeignKey("size_quantity.id"), nullable=False
    )
    quantity = db.Column(db.Integer, nullable=False)
    price_at_time_of_quote = db.Column(db.Numeric(12, 2), default=0)

    # supplier stamp, set by assignment and cleared by cancellation
    supplier_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    supplier_cost = db.Column(db.Numeric(12, 2))
    delivery_days = db.Column(db.Integer)

    quote = db.relationship(
        "Quote",
        backref=db.backref(
            "items", cascade="all, delete-orphan", lazy="select", passive_deletes=True
        ),
    )
    size_quantity = db.relationship("SizeQuantity")
    supplier = db.relationship("User", foreign_keys=[supplier_id])
