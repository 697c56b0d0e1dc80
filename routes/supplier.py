from flask import Blueprint, abort, jsonify, request
from dao import supplier as supplier_dao
from dao import supplier_performance as perf_dao
from dao import supplier_price as price_dao
from db.models.user import UserStatus
from schemas.assignment import SupplierPriceIn
from utils.auth import acting_supplier_id, staff_required
from utils.http import parse_body

supplier_bp = Blueprint("supplier_api", __name__, url_prefix="/api/suppliers")


def _supplier_dict(s) -> dict:
    return {
        "id": s.id,
        "username": s.username,
        "name": s.full_name or s.username,
        "company": s.company_name,
        "email": s.email,
        "phone": s.phone,
        "status": s.status.value,
    }


def _guard_own(supplier_id: int):
    """Staff manage every price list; a supplier only its own."""
    own = acting_supplier_id()
    if own is not None and own != supplier_id:
        abort(403)
    if not supplier_dao.get_supplier(supplier_id):
        abort(404, description=f"Supplier #{supplier_id} not found.")


@supplier_bp.route("", methods=["GET"])
@staff_required
def suppliers_list():
    active_only = request.args.get("all") not in ("1", "true")
    return jsonify([_supplier_dict(s) for s in supplier_dao.list_suppliers(active_only)])


@supplier_bp.route("", methods=["POST"])
@staff_required
def suppliers_add():
    data = request.get_json(silent=True) or {}
    s = supplier_dao.create_supplier(
        username=data.get("username", ""),
        password=data.get("password") or "",
        company_name=data.get("company_name", ""),
        full_name=data.get("full_name"),
        email=data.get("email"),
        phone=data.get("phone"),
    )
    return jsonify(_supplier_dict(s)), 201


@supplier_bp.route("/<int:supplier_id>/status", methods=["PUT"])
@staff_required
def suppliers_set_status(supplier_id: int):
    raw = ((request.get_json(silent=True) or {}).get("status") or "").strip().upper()
    try:
        status = UserStatus(raw)
    except ValueError:
        raise ValueError(f"Unknown supplier status '{raw}'.")
    s = supplier_dao.set_supplier_status(supplier_id, status)
    return jsonify(_supplier_dict(s))


@supplier_bp.route("/<int:supplier_id>", methods=["DELETE"])
@staff_required
def suppliers_delete(supplier_id: int):
    if not supplier_dao.delete_supplier(supplier_id):
        return (
            jsonify(
                {
                    "error": "in_use",
                    "message": "Cannot delete: supplier has job history or does not exist. Deactivate it instead.",
                }
            ),
            409,
        )
    return "", 204


@supplier_bp.route("/<int:supplier_id>/performance", methods=["GET"])
@staff_required
def suppliers_performance(supplier_id: int):
    return jsonify(
        {
            "supplier_id": supplier_id,
            "reliability": perf_dao.reliability(supplier_id).model_dump(),
            "rating": perf_dao.rating(supplier_id).model_dump(),
            "speed": perf_dao.speed(supplier_id).model_dump(),
        }
    )


@supplier_bp.route("/<int:supplier_id>/prices", methods=["GET"])
def prices_list(supplier_id: int):
    _guard_own(supplier_id)
    return jsonify(price_dao.list_supplier_prices(supplier_id))


@supplier_bp.route("/<int:supplier_id>/prices", methods=["PUT"])
def prices_upsert(supplier_id: int):
    _guard_own(supplier_id)
    body = parse_body(SupplierPriceIn)
    sp = price_dao.upsert_supplier_price(
        supplier_id,
        body.unit_id,
        body.price,
        delivery_days=body.delivery_days,
        is_preferred=body.is_preferred,
    )
    return jsonify(
        {
            "id": sp.id,
            "supplier_id": sp.supplier_id,
            "unit_id": sp.size_quantity_id,
            "price": float(sp.price_per_unit),
            "delivery_days": sp.delivery_days,
            "is_preferred": bool(sp.is_preferred),
        }
    )


@supplier_bp.route("/<int:supplier_id>/prices/<int:unit_id>", methods=["DELETE"])
def prices_delete(supplier_id: int, unit_id: int):
    _guard_own(supplier_id)
    if not price_dao.delete_supplier_price(supplier_id, unit_id):
        abort(404, description=f"No price for unit #{unit_id}.")
    return "", 204
