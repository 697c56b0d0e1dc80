from flask import Blueprint, jsonify
from flask_login import current_user
from dao import settings as settings_dao
from db.models.user import UserRole
from schemas.recommendation import SupplierWeights
from utils.auth import roles_required, staff_required
from utils.http import parse_body

settings_bp = Blueprint("settings_api", __name__, url_prefix="/api/settings")


@settings_bp.route("/supplier-weights", methods=["GET"])
@staff_required
def weights_get():
    return jsonify(settings_dao.get_supplier_weights().model_dump())


@settings_bp.route("/supplier-weights", methods=["PUT"])
@roles_required(UserRole.ADMIN)
def weights_put():
    weights = parse_body(SupplierWeights)
    saved = settings_dao.update_supplier_weights(weights, updated_by=current_user.id)
    return jsonify(saved.model_dump())
