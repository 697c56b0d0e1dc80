# dao/supplier_job.py
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from configs import db
from db.models.supplier_job import SupplierJob, SupplierJobStatus
from utils.errors import InvalidJobTransition, JobNotFound

logger = logging.getLogger(__name__)

CORRECTABLE_FIELDS = (
    "supplier_rating",
    "courier_confirmed_ready",
    "promised_delivery_days",
    "supplier_ready_at",
)


# ---------- status helpers ----------
def _to_job_status(v: str) -> Optional[SupplierJobStatus]:
    s = (v or "").strip().upper().replace("-", "_")
    try:
        return SupplierJobStatus(s)
    except ValueError:
        return None


# ---------- queries ----------
def list_jobs(
    quote_id: Optional[int] = None,
    supplier_id: Optional[int] = None,
    status: Optional[str] = None,
) -> List[SupplierJob]:
    q = SupplierJob.query
    if quote_id is not None:
        q = q.filter(SupplierJob.quote_id == int(quote_id))
    if supplier_id is not None:
        q = q.filter(SupplierJob.supplier_id == int(supplier_id))
    if status:
        st = _to_job_status(status)
        if st is None:
            raise ValueError(f"Unknown job status '{status}'.")
        q = q.filter(SupplierJob.status == st)
    return q.order_by(SupplierJob.id.desc()).all()


def get_job(job_id: int) -> Optional[SupplierJob]:
    return db.session.get(SupplierJob, int(job_id))


def _load(job_id: int, supplier_id: Optional[int] = None) -> SupplierJob:
    """Fetch a job; a supplier only ever sees its own jobs."""
    job = get_job(job_id)
    if not job or (supplier_id is not None and job.supplier_id != int(supplier_id)):
        raise JobNotFound(job_id)
    return job


def _move(job: SupplierJob, source: SupplierJobStatus, target: SupplierJobStatus):
    if job.is_cancelled or job.status != source:
        raise InvalidJobTransition(job.id, job.status.value, target.value)
    job.status = target


# ---------- lifecycle ----------
def accept_job(job_id: int, supplier_id: Optional[int] = None) -> SupplierJob:
    job = _load(job_id, supplier_id)
    _move(job, SupplierJobStatus.PENDING, SupplierJobStatus.ACCEPTED)
    job.is_accepted = True
    job.accepted_at = datetime.utcnow()
    _commit()
    logger.info("Job %s accepted by supplier %s", job.id, job.supplier_id,
                extra={"job_id": job.id, "supplier_id": job.supplier_id})
    return job


def mark_job_ready(job_id: int, supplier_id: Optional[int] = None) -> SupplierJob:
    job = _load(job_id, supplier_id)
    _move(job, SupplierJobStatus.ACCEPTED, SupplierJobStatus.READY)
    job.supplier_marked_ready = True
    job.supplier_ready_at = datetime.utcnow()
    _commit()
    logger.info("Job %s ready for pickup", job.id, extra={"job_id": job.id})
    return job


def confirm_job_ready(job_id: int, confirmed: bool = True) -> SupplierJob:
    """Courier check at pickup; only meaningful once the supplier marked it ready."""
    job = _load(job_id)
    if job.status not in (SupplierJobStatus.READY, SupplierJobStatus.PICKED_UP):
        raise InvalidJobTransition(job.id, job.status.value, "courier confirmation")
    job.courier_confirmed_ready = bool(confirmed)
    _commit()
    return job


def mark_job_picked_up(job_id: int) -> SupplierJob:
    job = _load(job_id)
    _move(job, SupplierJobStatus.READY, SupplierJobStatus.PICKED_UP)
    job.picked_up_at = datetime.utcnow()
    _commit()
    return job


def mark_job_delivered(job_id: int) -> SupplierJob:
    job = _load(job_id)
    _move(job, SupplierJobStatus.PICKED_UP, SupplierJobStatus.DELIVERED)
    job.delivered_at = datetime.utcnow()
    _commit()
    logger.info("Job %s delivered", job.id, extra={"job_id": job.id})
    return job


def rate_job(job_id: int, rating: int) -> SupplierJob:
    rating = _validate_rating(rating)
    job = _load(job_id)
    if job.is_cancelled:
        raise InvalidJobTransition(job.id, job.status.value, "rated")
    job.supplier_rating = Decimal(rating)
    _commit()
    return job


def update_job_data(job_id: int, **fields) -> SupplierJob:
    """
    Back-office correction of the measured fields behind the supplier metrics.
    Only the keyword arguments passed are applied; None clears a field.
    """
    unknown = set(fields) - set(CORRECTABLE_FIELDS)
    if unknown:
        raise ValueError(f"Fields cannot be corrected: {', '.join(sorted(unknown))}.")
    if not fields:
        raise ValueError("No fields to update.")

    job = _load(job_id)
    if "supplier_rating" in fields:
        r = fields["supplier_rating"]
        job.supplier_rating = Decimal(_validate_rating(r)) if r is not None else None
    if "courier_confirmed_ready" in fields:
        v = fields["courier_confirmed_ready"]
        job.courier_confirmed_ready = bool(v) if v is not None else None
    if "promised_delivery_days" in fields:
        d = fields["promised_delivery_days"]
        if d is not None and not 0 <= int(d) <= 365:
            raise ValueError("promised_delivery_days must be between 0 and 365.")
        job.promised_delivery_days = int(d) if d is not None else None
    if "supplier_ready_at" in fields:
        job.supplier_ready_at = fields["supplier_ready_at"]
    _commit()
    logger.info("Job %s corrected: %s", job.id, ", ".join(sorted(fields)),
                extra={"job_id": job.id})
    return job


def _validate_rating(value) -> int:
    try:
        r = int(value)
    except (TypeError, ValueError):
        raise ValueError("Rating must be a whole number from 1 to 5.")
    if r != value or not 1 <= r <= 5:
        raise ValueError("Rating must be a whole number from 1 to 5.")
    return r


def job_to_dict(job: SupplierJob) -> dict:
    def _iso(dt):
        return dt.isoformat() if dt else None

    return {
        "id": job.id,
        "supplier_id": job.supplier_id,
        "customer_id": job.customer_id,
        "quote_id": job.quote_id,
        "quote_item_id": job.quote_item_id,
        "unit_id": job.size_quantity_id,
        "quantity": job.quantity,
        "price_per_unit": float(job.price_per_unit or 0),
        "status": job.status.value,
        "promised_delivery_days": job.promised_delivery_days,
        "is_accepted": bool(job.is_accepted),
        "accepted_at": _iso(job.accepted_at),
        "supplier_marked_ready": bool(job.supplier_marked_ready),
        "supplier_ready_at": _iso(job.supplier_ready_at),
        "courier_confirmed_ready": job.courier_confirmed_ready,
        "picked_up_at": _iso(job.picked_up_at),
        "delivered_at": _iso(job.delivered_at),
        "supplier_rating": (
            float(job.supplier_rating) if job.supplier_rating is not None else None
        ),
        "is_cancelled": bool(job.is_cancelled),
        "cancelled_at": _iso(job.cancelled_at),
        "cancelled_reason": job.cancelled_reason,
        "created_at": _iso(job.created_at),
    }


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
