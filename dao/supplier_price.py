# dao/supplier_price.py
from typing import Dict, Iterable, List, Optional
from decimal import Decimal
from sqlalchemy.exc import SQLAlchemyError
from configs import db
from db.models.catalog import Product, ProductSize, SizeQuantity
from db.models.supplier_price import SupplierPrice
from db.models.user import User, UserRole, UserStatus
from schemas.recommendation import PriceRow

DEFAULT_DELIVERY_DAYS = 3


# ======== Queries ========
def get_supplier_prices_for(unit_ids: Iterable[int]) -> Dict[int, List[PriceRow]]:
    """
    unit_id -> [PriceRow] for every active supplier that priced the unit.
    Units nobody prices are simply absent from the result.
    """
    ids = {int(u) for u in unit_ids}
    if not ids:
        return {}

    q = (
        db.session.query(
            SupplierPrice.supplier_id,
            SupplierPrice.size_quantity_id,
            SupplierPrice.price_per_unit,
            SupplierPrice.delivery_days,
        )
        .join(User, User.id == SupplierPrice.supplier_id)
        .filter(
            SupplierPrice.size_quantity_id.in_(ids),
            User.status == UserStatus.ACTIVE,
            User.role == UserRole.SUPPLIER,
        )
        .order_by(SupplierPrice.size_quantity_id, SupplierPrice.supplier_id)
    )

    result: Dict[int, List[PriceRow]] = {}
    for r in q:
        result.setdefault(r.size_quantity_id, []).append(
            PriceRow(
                supplier_id=r.supplier_id,
                price_per_unit=float(r.price_per_unit or 0),
                delivery_days=(
                    r.delivery_days if r.delivery_days is not None else DEFAULT_DELIVERY_DAYS
                ),
            )
        )
    return result


def list_supplier_prices(supplier_id: int) -> List[Dict]:
    q = (
        db.session.query(
            SupplierPrice.id,
            SupplierPrice.size_quantity_id,
            SizeQuantity.quantity,
            ProductSize.name.label("size_name"),
            ProductSize.dimensions,
            Product.id.label("product_id"),
            Product.name.label("product_name"),
            SupplierPrice.price_per_unit,
            SupplierPrice.delivery_days,
            SupplierPrice.is_preferred,
            SupplierPrice.updated_at,
        )
        .join(SizeQuantity, SizeQuantity.id == SupplierPrice.size_quantity_id)
        .join(ProductSize, ProductSize.id == SizeQuantity.size_id)
        .join(Product, Product.id == ProductSize.product_id)
        .filter(SupplierPrice.supplier_id == int(supplier_id))
        .order_by(Product.name, ProductSize.name, SizeQuantity.quantity)
    )
    return [
        {
            "id": r.id,
            "unit_id": r.size_quantity_id,
            "quantity": r.quantity,
            "size_name": r.size_name,
            "dimensions": r.dimensions,
            "product_id": r.product_id,
            "product_name": r.product_name,
            "price": float(r.price_per_unit or 0),
            "delivery_days": r.delivery_days,
            "is_preferred": bool(r.is_preferred),
            "updated_at": r.updated_at.isoformat() if r.updated_at else None,
        }
        for r in q
    ]


def get_price(supplier_id: int, unit_id: int) -> Optional[SupplierPrice]:
    return SupplierPrice.query.filter_by(
        supplier_id=int(supplier_id), size_quantity_id=int(unit_id)
    ).first()


# ======== Mutations ========
def upsert_supplier_price(
    supplier_id: int,
    unit_id: int,
    price: float,
    delivery_days: Optional[int] = None,
    is_preferred: Optional[bool] = None,
) -> SupplierPrice:
    """One live price per (supplier, unit): update it if present, insert otherwise."""
    price = _validate_price(price)
    if delivery_days is not None and int(delivery_days) < 0:
        raise ValueError("delivery_days must be >= 0.")
    if not db.session.get(SizeQuantity, int(unit_id)):
        raise ValueError(f"Priceable unit #{unit_id} does not exist.")

    sp = get_price(supplier_id, unit_id)
    if sp:
        sp.price_per_unit = price
        if delivery_days is not None:
            sp.delivery_days = int(delivery_days)
        if is_preferred is not None:
            sp.is_preferred = bool(is_preferred)
    else:
        sp = SupplierPrice(
            supplier_id=int(supplier_id),
            size_quantity_id=int(unit_id),
            price_per_unit=price,
            delivery_days=(
                int(delivery_days) if delivery_days is not None else DEFAULT_DELIVERY_DAYS
            ),
            is_preferred=bool(is_preferred) if is_preferred is not None else False,
        )
        db.session.add(sp)
    _commit()
    return sp


def delete_supplier_price(supplier_id: int, unit_id: int) -> bool:
    sp = get_price(supplier_id, unit_id)
    if not sp:
        return False
    db.session.delete(sp)
    _commit()
    return True


def _validate_price(value) -> Decimal:
    try:
        price = Decimal(str(value))
    except Exception:
        raise ValueError("price is not a number.")
    if price < 0:
        raise ValueError("price must not be negative.")
    return price.quantize(Decimal("0.01"))


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
