from datetime import datetime

import pytest

from dao import supplier_assignment as assign_dao
from dao import supplier_job as job_dao
from dao import supplier_performance as perf_dao
from db.models.supplier_job import SupplierJobStatus
from schemas.assignment import AssignItem
from utils.errors import InvalidJobTransition, JobNotFound


@pytest.fixture
def job(factory):
    unit = factory.unit()
    quote, items = factory.quote([(unit, 50)])
    supplier = factory.supplier()
    res = assign_dao.assign_supplier_to_category(
        quote.id,
        supplier.id,
        [AssignItem(line_item_id=items[0].id, unit_id=unit.id, price_per_unit=2, delivery_days=4)],
    )
    return job_dao.get_job(res.job_ids[0])


class TestLifecycle:
    def test_forward_path(self, job):
        sid = job.supplier_id
        job_dao.accept_job(job.id, supplier_id=sid)
        assert job.status == SupplierJobStatus.ACCEPTED
        assert job.is_accepted is True
        assert job.accepted_at is not None

        job_dao.mark_job_ready(job.id, supplier_id=sid)
        assert job.status == SupplierJobStatus.READY
        assert job.supplier_marked_ready is True
        assert job.supplier_ready_at is not None

        job_dao.confirm_job_ready(job.id, True)
        assert job.courier_confirmed_ready is True

        job_dao.mark_job_picked_up(job.id)
        assert job.status == SupplierJobStatus.PICKED_UP
        assert job.picked_up_at is not None

        job_dao.mark_job_delivered(job.id)
        assert job.status == SupplierJobStatus.DELIVERED
        assert job.delivered_at is not None

    def test_no_skipping_steps(self, job):
        with pytest.raises(InvalidJobTransition):
            job_dao.mark_job_ready(job.id)
        with pytest.raises(InvalidJobTransition):
            job_dao.mark_job_delivered(job.id)
        with pytest.raises(InvalidJobTransition):
            job_dao.confirm_job_ready(job.id)
        assert job.status == SupplierJobStatus.PENDING

    def test_no_going_back(self, job):
        job_dao.accept_job(job.id)
        with pytest.raises(InvalidJobTransition):
            job_dao.accept_job(job.id)

    def test_supplier_only_sees_own_jobs(self, job, factory):
        other = factory.supplier()
        with pytest.raises(JobNotFound):
            job_dao.accept_job(job.id, supplier_id=other.id)
        assert job.status == SupplierJobStatus.PENDING

    def test_cancelled_job_cannot_be_accepted(self, job):
        assign_dao.cancel_job(job.id)
        with pytest.raises(InvalidJobTransition):
            job_dao.accept_job(job.id)

    def test_ready_job_counts_for_reliability(self, job):
        job_dao.accept_job(job.id)
        job_dao.mark_job_ready(job.id)
        stats = perf_dao.reliability(job.supplier_id)
        assert stats.total_ready_jobs == 1
        assert stats.reliability_pct == 100


class TestRating:
    def test_rate(self, job):
        job_dao.rate_job(job.id, 4)
        assert float(job.supplier_rating) == 4.0
        assert perf_dao.rating(job.supplier_id).avg_rating == pytest.approx(4.0)

    @pytest.mark.parametrize("bad", [0, 6, 3.5, "x"])
    def test_out_of_range(self, job, bad):
        with pytest.raises(ValueError, match="1 to 5"):
            job_dao.rate_job(job.id, bad)


class TestCorrections:
    def test_applies_only_given_fields(self, job):
        ready_at = datetime(2024, 3, 1, 12, 0)
        job_dao.update_job_data(job.id, promised_delivery_days=7, supplier_ready_at=ready_at)
        assert job.promised_delivery_days == 7
        assert job.supplier_ready_at == ready_at
        assert job.supplier_rating is None

    def test_clear_rating(self, job):
        job_dao.rate_job(job.id, 2)
        job_dao.update_job_data(job.id, supplier_rating=None)
        assert job.supplier_rating is None

    def test_no_fields(self, job):
        with pytest.raises(ValueError, match="No fields"):
            job_dao.update_job_data(job.id)

    def test_days_out_of_range(self, job):
        with pytest.raises(ValueError, match="between 0 and 365"):
            job_dao.update_job_data(job.id, promised_delivery_days=400)

    def test_unknown_field(self, job):
        with pytest.raises(ValueError, match="cannot be corrected"):
            job_dao.update_job_data(job.id, status="DELIVERED")


def test_list_jobs_filters(job, factory):
    assert [j.id for j in job_dao.list_jobs(quote_id=job.quote_id)] == [job.id]
    assert job_dao.list_jobs(supplier_id=factory.supplier().id) == []
    assert [j.id for j in job_dao.list_jobs(status="pending")] == [job.id]
    with pytest.raises(ValueError):
        job_dao.list_jobs(status="lost")
