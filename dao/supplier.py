# dao/supplier.py
from typing import Optional, List, Dict, Iterable
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash
from configs import db
from db.models.user import User, UserRole, UserStatus
from db.models.supplier_job import SupplierJob

DEFAULT_SUPPLIER_NAME = "Supplier"


def _suppliers_query():
    return User.query.filter(User.role == UserRole.SUPPLIER)


def list_suppliers(active_only: bool = True) -> List[User]:
    q = _suppliers_query()
    if active_only:
        q = q.filter(User.status == UserStatus.ACTIVE)
    return q.order_by(User.id.asc()).all()


def get_supplier(supplier_id: int) -> Optional[User]:
    return _suppliers_query().filter(User.id == int(supplier_id)).first()


def get_active_supplier(supplier_id: int) -> User:
    s = get_supplier(supplier_id)
    if not s:
        raise ValueError(f"Supplier #{supplier_id} does not exist.")
    if s.status != UserStatus.ACTIVE:
        raise ValueError(f"Supplier #{supplier_id} is not active.")
    return s


def supplier_names(supplier_ids: Iterable[int]) -> Dict[int, Dict]:
    """{supplier_id: {"name":..., "company":...}} for the ids that exist."""
    ids = {int(i) for i in supplier_ids}
    if not ids:
        return {}
    rows = (
        db.session.query(User.id, User.full_name, User.username, User.company_name)
        .filter(User.id.in_(ids))
        .all()
    )
    return {
        r.id: {
            "name": r.full_name or r.username or DEFAULT_SUPPLIER_NAME,
            "company": r.company_name,
        }
        for r in rows
    }


def create_supplier(
    username: str,
    password: str,
    company_name: str,
    full_name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    status: UserStatus = UserStatus.PENDING_APPROVAL,
) -> User:
    username = (username or "").strip()
    if not username:
        raise ValueError("Username is required.")
    if not password:
        raise ValueError("Password is required.")
    if User.query.filter_by(username=username).first():
        raise ValueError(f"Username '{username}' is already taken.")
    s = User(
        username=username,
        password_hash=generate_password_hash(password),
        company_name=(company_name or "").strip() or None,
        full_name=full_name,
        email=email,
        phone=phone,
        role=UserRole.SUPPLIER,
        status=status,
    )
    db.session.add(s)
    _commit()
    return s


def set_supplier_status(supplier_id: int, status: UserStatus) -> User:
    s = get_supplier(supplier_id)
    if not s:
        raise ValueError(f"Supplier #{supplier_id} does not exist.")
    s.status = status
    _commit()
    return s


def delete_supplier(supplier_id: int) -> bool:
    # suppliers with job history are deactivated, never deleted
    cnt = SupplierJob.query.filter_by(supplier_id=supplier_id).count()
    if cnt > 0:
        return False
    s = get_supplier(supplier_id)
    if not s:
        return False
    db.session.delete(s)
    _commit()
    return True


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
