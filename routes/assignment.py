from flask import Blueprint, jsonify
from dao import supplier_assignment as assign_dao
from schemas.assignment import AssignCategoryRequest, CancelRequest
from utils.auth import staff_required
from utils.http import parse_body

assignment_bp = Blueprint("assignment_api", __name__, url_prefix="/api")


@assignment_bp.route("/quotes/<int:quote_id>/assign-category", methods=["POST"])
@staff_required
def assign_category(quote_id: int):
    req = parse_body(AssignCategoryRequest)
    result = assign_dao.assign_supplier_to_category(quote_id, req.supplier_id, req.items)
    return jsonify(result.model_dump()), 201


@assignment_bp.route("/quotes/<int:quote_id>/cancel-jobs", methods=["POST"])
@staff_required
def cancel_quote_jobs(quote_id: int):
    req = parse_body(CancelRequest)
    result = assign_dao.cancel_jobs_by_quote(quote_id, req.reason)
    return jsonify(result.model_dump())


@assignment_bp.route("/jobs/<int:job_id>/cancel", methods=["POST"])
@staff_required
def cancel_job(job_id: int):
    req = parse_body(CancelRequest)
    result = assign_dao.cancel_job(job_id, req.reason)
    return jsonify(result.model_dump())
