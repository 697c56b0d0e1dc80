# utils/http.py
# JSON body parsing and error responses shared by the API blueprints.
import logging
from flask import jsonify, request
from flask_login import current_user
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from configs import db
from utils.errors import BusinessRuleError

logger = logging.getLogger(__name__)


def parse_body(model):
    """Validate the request JSON against a pydantic model (raises ValidationError)."""
    return model.model_validate(request.get_json(silent=True) or {})


def _who():
    if current_user and current_user.is_authenticated:
        return current_user.username
    return None


def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return (
            jsonify(
                {
                    "error": "validation_error",
                    "message": "Invalid request body.",
                    "details": e.errors(include_url=False, include_context=False),
                }
            ),
            400,
        )

    @app.errorhandler(BusinessRuleError)
    def _business_rule(e: BusinessRuleError):
        logger.info(
            "Rejected %s %s: %s",
            request.method,
            request.path,
            e,
            extra={"route": request.path, "user": _who()},
        )
        return jsonify({"error": type(e).__name__, "message": str(e)}), e.status_code

    @app.errorhandler(ValueError)
    def _bad_value(e: ValueError):
        return jsonify({"error": "bad_request", "message": str(e)}), 400

    @app.errorhandler(SQLAlchemyError)
    def _database(e: SQLAlchemyError):
        db.session.rollback()
        logger.exception("Database error on %s %s", request.method, request.path)
        return jsonify({"error": "database_error", "message": "Database error."}), 500

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return jsonify({"error": e.name, "message": e.description}), e.code
