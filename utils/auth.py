# utils/auth.py
from functools import wraps
from flask import abort
from flask_login import current_user
from db.models.user import UserRole

STAFF_ROLES = (UserRole.ADMIN, UserRole.EMPLOYEE)


def roles_required(*roles):
    """401 when anonymous, 403 when the account holds none of `roles`."""

    def deco(fn):
        @wraps(fn)
        def inner(*a, **kw):
            if not current_user.is_authenticated:
                abort(401)
            if not current_user.has_role(*roles):
                abort(403)
            return fn(*a, **kw)

        return inner

    return deco


# recommendations, assignment and cancellation are office-only
staff_required = roles_required(*STAFF_ROLES)


def is_staff(user) -> bool:
    return bool(user and user.is_authenticated and user.has_role(*STAFF_ROLES))


def acting_supplier_id():
    """Supplier id to scope job actions to; None for staff acting on anyone's job."""
    if not current_user.is_authenticated:
        abort(401)
    if is_staff(current_user):
        return None
    if current_user.has_role(UserRole.SUPPLIER):
        return current_user.id
    abort(403)
