# dao/supplier_performance.py
"""
Historical supplier metrics used by the recommendation engine.

Three independent, read-only measures per supplier:

* reliability - share of jobs that reached "ready" within the promised days
* rating      - mean 1-5 rating given on jobs
* speed       - mean days from job creation to "ready"

Each has a single-supplier form and a batched ``*_for(ids)`` form that runs one
grouped query for all ids. Suppliers without history, and suppliers whose metric
query fails, get the documented defaults below.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from configs import db
from db.models.supplier_job import SupplierJob
from schemas.recommendation import RatingStats, ReliabilityStats, SpeedStats

logger = logging.getLogger(__name__)

DEFAULT_RELIABILITY_PCT = 80.0
DEFAULT_RATING = 3.0
DEFAULT_DELIVERY_DAYS = 3.0

SECONDS_PER_DAY = 86400.0


def _elapsed_days(created_at, ready_at) -> float:
    return (ready_at - created_at).total_seconds() / SECONDS_PER_DAY


def _ids(supplier_ids: Iterable[int]) -> set:
    return {int(i) for i in supplier_ids}


def _ready_jobs(ids: set, require_promise: bool):
    q = db.session.query(
        SupplierJob.supplier_id,
        SupplierJob.created_at,
        SupplierJob.supplier_ready_at,
        SupplierJob.promised_delivery_days,
    ).filter(
        SupplierJob.supplier_id.in_(ids),
        SupplierJob.supplier_ready_at.isnot(None),
        SupplierJob.is_cancelled.is_(False),
    )
    if require_promise:
        q = q.filter(SupplierJob.promised_delivery_days.isnot(None))
    return q.all()


# ---------- batched ----------
def reliability_for(supplier_ids: Iterable[int]) -> Dict[int, ReliabilityStats]:
    ids = _ids(supplier_ids)
    out = {i: ReliabilityStats(reliability_pct=DEFAULT_RELIABILITY_PCT) for i in ids}
    if not ids:
        return out
    try:
        rows = _ready_jobs(ids, require_promise=True)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Reliability query failed, using defaults for %s", sorted(ids))
        return out

    total = defaultdict(int)
    on_time = defaultdict(int)
    for r in rows:
        total[r.supplier_id] += 1
        if _elapsed_days(r.created_at, r.supplier_ready_at) <= r.promised_delivery_days:
            on_time[r.supplier_id] += 1

    for sid, n in total.items():
        out[sid] = ReliabilityStats(
            reliability_pct=on_time[sid] / n * 100, total_ready_jobs=n
        )
    return out


def rating_for(supplier_ids: Iterable[int]) -> Dict[int, RatingStats]:
    ids = _ids(supplier_ids)
    out = {i: RatingStats(avg_rating=DEFAULT_RATING) for i in ids}
    if not ids:
        return out
    try:
        rows = (
            db.session.query(
                SupplierJob.supplier_id,
                func.avg(SupplierJob.supplier_rating).label("avg_rating"),
                func.count(SupplierJob.supplier_rating).label("total_ratings"),
            )
            .filter(
                SupplierJob.supplier_id.in_(ids),
                SupplierJob.supplier_rating.isnot(None),
            )
            .group_by(SupplierJob.supplier_id)
            .all()
        )
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Rating query failed, using defaults for %s", sorted(ids))
        return out

    for r in rows:
        if r.total_ratings:
            out[r.supplier_id] = RatingStats(
                avg_rating=float(r.avg_rating), total_ratings=int(r.total_ratings)
            )
    return out


def speed_for(supplier_ids: Iterable[int]) -> Dict[int, SpeedStats]:
    ids = _ids(supplier_ids)
    out = {i: SpeedStats(avg_delivery_days=DEFAULT_DELIVERY_DAYS) for i in ids}
    if not ids:
        return out
    try:
        rows = _ready_jobs(ids, require_promise=False)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Speed query failed, using defaults for %s", sorted(ids))
        return out

    days = defaultdict(list)
    for r in rows:
        days[r.supplier_id].append(_elapsed_days(r.created_at, r.supplier_ready_at))

    for sid, values in days.items():
        out[sid] = SpeedStats(
            avg_delivery_days=sum(values) / len(values), total_deliveries=len(values)
        )
    return out


# ---------- single supplier ----------
def reliability(supplier_id: int) -> ReliabilityStats:
    return reliability_for([supplier_id])[int(supplier_id)]


def rating(supplier_id: int) -> RatingStats:
    return rating_for([supplier_id])[int(supplier_id)]


def speed(supplier_id: int) -> SpeedStats:
    return speed_for([supplier_id])[int(supplier_id)]
