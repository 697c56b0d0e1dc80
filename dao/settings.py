# dao/settings.py
from typing import Optional
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from configs import db
from db.models.setting import SystemSetting
from schemas.recommendation import DEFAULT_SUPPLIER_WEIGHTS, SupplierWeights

SUPPLIER_WEIGHTS_KEY = "supplier_recommendation_weights"


def get_setting(key: str) -> Optional[SystemSetting]:
    return SystemSetting.query.filter_by(key=key).first()


def get_supplier_weights() -> SupplierWeights:
    """Stored weights merged over the defaults; unset keys keep their default."""
    row = get_setting(SUPPLIER_WEIGHTS_KEY)
    if not row or not isinstance(row.value, dict):
        return DEFAULT_SUPPLIER_WEIGHTS.model_copy()
    merged = DEFAULT_SUPPLIER_WEIGHTS.model_dump()
    merged.update({k: v for k, v in row.value.items() if k in merged and v is not None})
    try:
        return SupplierWeights(**merged)
    except ValidationError:
        # a hand-edited row must not break recommendations
        return DEFAULT_SUPPLIER_WEIGHTS.model_copy()


def update_supplier_weights(weights: SupplierWeights, updated_by: Optional[int] = None):
    for name, value in weights.model_dump().items():
        if value < 0 or value > 100:
            raise ValueError(f"Weight '{name}' must be between 0 and 100.")
    total = weights.total
    if abs(total - 100) > 1e-9:
        raise ValueError(f"Weights must sum to 100% (currently {total:g}%).")

    row = get_setting(SUPPLIER_WEIGHTS_KEY)
    if row is None:
        row = SystemSetting(
            key=SUPPLIER_WEIGHTS_KEY,
            description="Supplier recommendation weights, in percent",
        )
        db.session.add(row)
    row.value = weights.model_dump()
    row.updated_by = updated_by
    _commit()
    return weights


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
