from flask import Blueprint, jsonify
from dao import settings as settings_dao
from dao import supplier_recommendation as rec_dao
from schemas.recommendation import RecommendationRequest
from utils.auth import staff_required
from utils.http import parse_body

recommendation_bp = Blueprint("recommendation_api", __name__, url_prefix="/api/recommendations")


def _request_and_weights():
    req = parse_body(RecommendationRequest)
    # explicit weights win; otherwise the configured ones
    weights = req.weights or settings_dao.get_supplier_weights()
    return req, weights


@recommendation_bp.route("/by-category", methods=["POST"])
@staff_required
def by_category():
    req, weights = _request_and_weights()
    result = rec_dao.recommend_by_category(req.quote_items, weights)
    return jsonify([r.model_dump() for r in result])


@recommendation_bp.route("/by-item", methods=["POST"])
@staff_required
def by_item():
    req, weights = _request_and_weights()
    result = rec_dao.recommend_by_item(req.quote_items, weights)
    return jsonify([r.model_dump() for r in result])
