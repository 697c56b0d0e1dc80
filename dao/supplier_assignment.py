# dao/supplier_assignment.py
import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from configs import db
from db.models.quote import Quote, QuoteItem, QuoteStatus
from db.models.supplier_job import SupplierJob, SupplierJobStatus
from dao import supplier as supplier_dao
from schemas.assignment import AssignItem, AssignmentResult, CancellationResult
from utils.errors import (
    CancellationNotAllowed,
    ItemAlreadyAssigned,
    JobAlreadyCancelled,
    JobNotFound,
    NoActiveJobs,
    QuoteNotAssignable,
)

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_REASON = "Cancelled by office"

PRE_PRODUCTION_STATUSES = (QuoteStatus.DRAFT, QuoteStatus.SENT, QuoteStatus.APPROVED)
ASSIGNABLE_STATUSES = PRE_PRODUCTION_STATUSES + (QuoteStatus.IN_PRODUCTION,)


# ---------- quote status ----------
def _count_unassigned(quote_id: int) -> int:
    return (
        db.session.query(func.count(QuoteItem.id))
        .filter(QuoteItem.quote_id == quote_id, QuoteItem.supplier_id.is_(None))
        .scalar()
        or 0
    )


def _count_items(quote_id: int) -> int:
    return (
        db.session.query(func.count(QuoteItem.id))
        .filter(QuoteItem.quote_id == quote_id)
        .scalar()
        or 0
    )


def recompute_quote_status(quote: Quote) -> QuoteStatus:
    """
    IN_PRODUCTION iff every item of the quote carries a supplier.
    Re-reads the items from the current transaction, so call it after flush().
    Quotes already past production (ready, delivered, closed) are left alone.
    """
    unassigned = _count_unassigned(quote.id)
    has_items = _count_items(quote.id) > 0
    if quote.status in PRE_PRODUCTION_STATUSES and has_items and unassigned == 0:
        quote.status = QuoteStatus.IN_PRODUCTION
    elif quote.status == QuoteStatus.IN_PRODUCTION and unassigned > 0:
        quote.status = QuoteStatus.APPROVED
    return quote.status


def _live_jobs_by_item(quote_id: int) -> Dict[int, int]:
    rows = (
        db.session.query(SupplierJob.quote_item_id, SupplierJob.id)
        .filter(
            SupplierJob.quote_id == quote_id,
            SupplierJob.is_cancelled.is_(False),
        )
        .all()
    )
    return {item_id: job_id for item_id, job_id in rows}


def _lock_quote(quote_id: int) -> Optional[Quote]:
    # row lock serialises concurrent assignments on one quote (no-op on SQLite)
    return (
        Quote.query.filter_by(id=int(quote_id)).with_for_update().first()
    )


# ---------- assignment ----------
def assign_supplier_to_category(
    quote_id: int, supplier_id: int, items: List[AssignItem]
) -> AssignmentResult:
    """
    Create one PENDING job per item and stamp the quote items, all in one
    transaction. Any invalid item rejects the whole batch.
    """
    if not items:
        raise ValueError("Please choose at least one item to assign.")

    quote = _lock_quote(quote_id)
    if not quote:
        raise ValueError(f"Quote #{quote_id} does not exist.")
    if quote.status not in ASSIGNABLE_STATUSES:
        raise QuoteNotAssignable(quote.id, quote.status.value)
    supplier = supplier_dao.get_active_supplier(supplier_id)

    quote_items = {qi.id: qi for qi in QuoteItem.query.filter_by(quote_id=quote.id)}
    live = _live_jobs_by_item(quote.id)
    seen = set()
    for idx, it in enumerate(items, start=1):
        qi = quote_items.get(it.line_item_id)
        if qi is None:
            raise ValueError(
                f"Line {idx}: item #{it.line_item_id} does not belong to quote #{quote.id}."
            )
        if qi.size_quantity_id != it.unit_id:
            raise ValueError(
                f"Line {idx}: unit #{it.unit_id} does not match item #{qi.id}."
            )
        if it.line_item_id in seen:
            raise ValueError(f"Line {idx}: item #{it.line_item_id} is listed twice.")
        if it.line_item_id in live:
            raise ItemAlreadyAssigned(it.line_item_id, live[it.line_item_id])
        seen.add(it.line_item_id)

    try:
        jobs = []
        for it in items:
            qi = quote_items[it.line_item_id]
            price = Decimal(str(it.price_per_unit)).quantize(Decimal("0.01"))
            job = SupplierJob(
                supplier_id=supplier.id,
                customer_id=quote.customer_id,
                quote_id=quote.id,
                quote_item_id=qi.id,
                size_quantity_id=qi.size_quantity_id,
                quantity=qi.quantity,
                price_per_unit=price,
                status=SupplierJobStatus.PENDING,
                promised_delivery_days=int(it.delivery_days),
            )
            db.session.add(job)
            jobs.append(job)

            qi.supplier_id = supplier.id
            qi.supplier_cost = price
            qi.delivery_days = int(it.delivery_days)

        db.session.flush()  # ids + make the stamps visible to the recount
        status = recompute_quote_status(quote)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    job_ids = [j.id for j in jobs]
    logger.info(
        "Assigned %d item(s) of quote %s to supplier %s",
        len(job_ids),
        quote.id,
        supplier.id,
        extra={"quote_id": quote.id, "supplier_id": supplier.id, "job_ids": job_ids},
    )
    return AssignmentResult(success=True, job_ids=job_ids, quote_status=status.value)


# ---------- cancellation ----------
def _check_cancellable(job: SupplierJob):
    if job.is_cancelled or job.status == SupplierJobStatus.CANCELLED:
        raise JobAlreadyCancelled(job.id)
    if job.is_accepted:
        raise CancellationNotAllowed()
    if job.status != SupplierJobStatus.PENDING:
        raise CancellationNotAllowed(
            f"Supplier job #{job.id} is {job.status.value} and can no longer be cancelled."
        )


def _cancel(job: SupplierJob, reason: str, now: datetime):
    job.status = SupplierJobStatus.CANCELLED
    job.is_cancelled = True
    job.cancelled_at = now
    job.cancelled_reason = reason


def _clear_stamp(item: Optional[QuoteItem]):
    if item is None:
        return
    item.supplier_id = None
    item.supplier_cost = None
    item.delivery_days = None


def _finish_cancellation(quote: Quote) -> bool:
    """
    Recompute the quote after stamps were cleared. True when the quote is back
    to waiting for suppliers: it left IN_PRODUCTION, or no item is assigned.
    """
    db.session.flush()
    before = quote.status
    after = recompute_quote_status(quote)
    if before == QuoteStatus.IN_PRODUCTION and after != before:
        return True
    return _count_unassigned(quote.id) == _count_items(quote.id)


def cancel_job(job_id: int, reason: Optional[str] = None) -> CancellationResult:
    job = db.session.get(SupplierJob, int(job_id))
    if not job:
        raise JobNotFound(job_id)
    _check_cancellable(job)

    reason = (reason or "").strip() or DEFAULT_CANCEL_REASON
    try:
        _cancel(job, reason, datetime.utcnow())
        qi = job.quote_item
        if qi is not None and qi.supplier_id == job.supplier_id:
            _clear_stamp(qi)
        quote = _lock_quote(job.quote_id)
        reverted = _finish_cancellation(quote) if quote else False
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info(
        "Cancelled job %s of quote %s: %s",
        job.id,
        job.quote_id,
        reason,
        extra={"job_id": job.id, "quote_id": job.quote_id, "reason": reason},
    )
    return CancellationResult(
        success=True,
        quote_reverted=reverted,
        cancelled_job_ids=[job.id],
        message=f"Supplier job #{job.id} cancelled.",
    )


def cancel_jobs_by_quote(quote_id: int, reason: Optional[str] = None) -> CancellationResult:
    quote = _lock_quote(quote_id)
    if not quote:
        raise ValueError(f"Quote #{quote_id} does not exist.")

    active = (
        SupplierJob.query.filter(
            SupplierJob.quote_id == quote.id,
            SupplierJob.is_cancelled.is_(False),
        )
        .order_by(SupplierJob.id)
        .all()
    )
    if not active:
        raise NoActiveJobs(quote.id)
    # all-or-nothing: one accepted job blocks the whole batch
    accepted = [j.id for j in active if j.is_accepted]
    if accepted:
        raise CancellationNotAllowed(
            "Cannot cancel: supplier already accepted job(s) "
            + ", ".join(f"#{i}" for i in accepted)
            + "."
        )
    for job in active:
        _check_cancellable(job)

    reason = (reason or "").strip() or DEFAULT_CANCEL_REASON
    now = datetime.utcnow()
    try:
        for job in active:
            _cancel(job, reason, now)
        for qi in QuoteItem.query.filter_by(quote_id=quote.id):
            _clear_stamp(qi)
        reverted = _finish_cancellation(quote)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    ids = [j.id for j in active]
    logger.info(
        "Cancelled %d job(s) of quote %s: %s",
        len(ids),
        quote.id,
        reason,
        extra={"quote_id": quote.id, "job_ids": ids, "reason": reason},
    )
    return CancellationResult(
        success=True,
        quote_reverted=reverted,
        cancelled_job_ids=ids,
        message=f"{len(ids)} supplier job(s) cancelled.",
    )
