import logging
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash
from db.models.user import User

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

logger = logging.getLogger(__name__)


def _user_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "name": user.full_name,
        "company": user.company_name,
        "role": user.role.value,
        "status": user.status.value,
    }


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or request.form
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""
    user = User.query.filter_by(username=username).first()

    if not user or not check_password_hash(user.password_hash, password):
        logger.info("Failed login for %r", username, extra={"user": username})
        return jsonify({"error": "invalid_credentials", "message": "Wrong username or password."}), 401

    if not user.is_active:
        return jsonify({"error": "inactive", "message": "This account is not active."}), 403

    login_user(user, remember=True)
    return jsonify(_user_dict(user))


@auth_bp.route("/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        logout_user()
    return jsonify({"success": True})


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    return jsonify(_user_dict(current_user))
