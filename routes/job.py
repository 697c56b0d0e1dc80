from flask import Blueprint, jsonify, request
from dao import supplier_job as job_dao
from db.models.user import UserRole
from schemas.assignment import ConfirmReadyRequest, JobCorrection, RateJobRequest
from utils.auth import STAFF_ROLES, acting_supplier_id, roles_required, staff_required
from utils.errors import JobNotFound
from utils.http import parse_body

job_bp = Blueprint("job_api", __name__, url_prefix="/api/jobs")

# pickup and delivery are recorded by the courier or the office
logistics_required = roles_required(*STAFF_ROLES, UserRole.COURIER)


@job_bp.route("", methods=["GET"])
def jobs_list():
    own = acting_supplier_id()
    supplier_id = own if own is not None else request.args.get("supplier_id", type=int)
    jobs = job_dao.list_jobs(
        quote_id=request.args.get("quote_id", type=int),
        supplier_id=supplier_id,
        status=request.args.get("status"),
    )
    return jsonify([job_dao.job_to_dict(j) for j in jobs])


@job_bp.route("/<int:job_id>", methods=["GET"])
def job_detail(job_id: int):
    own = acting_supplier_id()
    job = job_dao.get_job(job_id)
    if not job or (own is not None and job.supplier_id != own):
        raise JobNotFound(job_id)
    return jsonify(job_dao.job_to_dict(job))


@job_bp.route("/<int:job_id>", methods=["PATCH"])
@roles_required(UserRole.ADMIN)
def job_correct(job_id: int):
    fields = parse_body(JobCorrection).model_dump(exclude_unset=True)
    job = job_dao.update_job_data(job_id, **fields)
    return jsonify(job_dao.job_to_dict(job))


@job_bp.route("/<int:job_id>/accept", methods=["POST"])
def job_accept(job_id: int):
    job = job_dao.accept_job(job_id, supplier_id=acting_supplier_id())
    return jsonify(job_dao.job_to_dict(job))


@job_bp.route("/<int:job_id>/ready", methods=["POST"])
def job_ready(job_id: int):
    job = job_dao.mark_job_ready(job_id, supplier_id=acting_supplier_id())
    return jsonify(job_dao.job_to_dict(job))


@job_bp.route("/<int:job_id>/confirm-ready", methods=["POST"])
@logistics_required
def job_confirm_ready(job_id: int):
    req = parse_body(ConfirmReadyRequest)
    job = job_dao.confirm_job_ready(job_id, req.confirmed)
    return jsonify(job_dao.job_to_dict(job))


@job_bp.route("/<int:job_id>/picked-up", methods=["POST"])
@logistics_required
def job_picked_up(job_id: int):
    job = job_dao.mark_job_picked_up(job_id)
    return jsonify(job_dao.job_to_dict(job))


@job_bp.route("/<int:job_id>/delivered", methods=["POST"])
@logistics_required
def job_delivered(job_id: int):
    job = job_dao.mark_job_delivered(job_id)
    return jsonify(job_dao.job_to_dict(job))


@job_bp.route("/<int:job_id>/rate", methods=["POST"])
@staff_required
def job_rate(job_id: int):
    req = parse_body(RateJobRequest)
    job = job_dao.rate_job(job_id, req.rating)
    return jsonify(job_dao.job_to_dict(job))
