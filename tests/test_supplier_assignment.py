import pytest

from configs import db
from dao import supplier_assignment as assign_dao
from db.models.quote import QuoteStatus
from db.models.supplier_job import SupplierJob, SupplierJobStatus
from db.models.user import UserRole, UserStatus
from schemas.assignment import AssignItem
from utils.errors import (
    CancellationNotAllowed,
    ItemAlreadyAssigned,
    JobAlreadyCancelled,
    JobNotFound,
    NoActiveJobs,
    QuoteNotAssignable,
)


def _items(*quote_items, price=12.5, days=3):
    return [
        AssignItem(
            line_item_id=qi.id,
            unit_id=qi.size_quantity_id,
            price_per_unit=price,
            delivery_days=days,
        )
        for qi in quote_items
    ]


@pytest.fixture
def setup(factory):
    u1, u2 = factory.unit(), factory.unit(category="Signage")
    customer = factory.user(role=UserRole.CUSTOMER)
    quote, items = factory.quote([(u1, 100), (u2, 2)], customer=customer)
    supplier = factory.supplier()
    return quote, items, supplier


class TestAssign:
    def test_assigning_every_item_starts_production(self, setup):
        quote, items, supplier = setup
        result = assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(*items))

        assert result.success is True
        assert len(result.job_ids) == 2
        assert result.quote_status == QuoteStatus.IN_PRODUCTION.value
        assert quote.status == QuoteStatus.IN_PRODUCTION

        jobs = SupplierJob.query.order_by(SupplierJob.id).all()
        assert [j.status for j in jobs] == [SupplierJobStatus.PENDING] * 2
        assert jobs[0].quantity == 100
        assert jobs[0].customer_id == quote.customer_id
        assert jobs[0].promised_delivery_days == 3
        for qi in items:
            assert qi.supplier_id == supplier.id
            assert float(qi.supplier_cost) == pytest.approx(12.5)
            assert qi.delivery_days == 3

    def test_status_rechecked_across_calls(self, setup, factory):
        quote, items, supplier = setup
        other = factory.supplier()

        first = assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(items[0]))
        assert first.quote_status == QuoteStatus.APPROVED.value

        second = assign_dao.assign_supplier_to_category(quote.id, other.id, _items(items[1]))
        assert second.quote_status == QuoteStatus.IN_PRODUCTION.value

    def test_foreign_item_rejects_whole_batch(self, setup, factory):
        quote, items, supplier = setup
        _, stranger = factory.quote([(factory.unit(), 1)])

        with pytest.raises(ValueError, match="does not belong"):
            assign_dao.assign_supplier_to_category(
                quote.id, supplier.id, _items(items[0], stranger[0])
            )

        assert SupplierJob.query.count() == 0
        db.session.refresh(items[0])
        assert items[0].supplier_id is None
        assert quote.status == QuoteStatus.APPROVED

    def test_unit_mismatch_rejected(self, setup):
        quote, items, supplier = setup
        bad = _items(items[0])
        bad[0].unit_id = items[1].size_quantity_id
        with pytest.raises(ValueError, match="does not match"):
            assign_dao.assign_supplier_to_category(quote.id, supplier.id, bad)

    def test_inactive_supplier_rejected(self, setup, factory):
        quote, items, _ = setup
        off = factory.supplier(status=UserStatus.DEACTIVATED)
        with pytest.raises(ValueError, match="not active"):
            assign_dao.assign_supplier_to_category(quote.id, off.id, _items(*items))
        assert SupplierJob.query.count() == 0

    def test_unknown_quote_and_empty_items(self, setup):
        quote, items, supplier = setup
        with pytest.raises(ValueError, match="does not exist"):
            assign_dao.assign_supplier_to_category(987654, supplier.id, _items(*items))
        with pytest.raises(ValueError):
            assign_dao.assign_supplier_to_category(quote.id, supplier.id, [])

    def test_item_with_live_job_rejected(self, setup, factory):
        quote, items, supplier = setup
        first = assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(items[0]))
        other = factory.supplier()

        with pytest.raises(ItemAlreadyAssigned) as exc:
            assign_dao.assign_supplier_to_category(quote.id, other.id, _items(*items))

        assert exc.value.job_id == first.job_ids[0]
        assert SupplierJob.query.count() == 1
        db.session.refresh(items[0])
        assert items[0].supplier_id == supplier.id
        assert items[1].supplier_id is None

    def test_reassign_after_cancel(self, setup, factory):
        quote, items, supplier = setup
        first = assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(items[0]))
        assign_dao.cancel_job(first.job_ids[0])

        other = factory.supplier()
        second = assign_dao.assign_supplier_to_category(quote.id, other.id, _items(items[0]))

        assert items[0].supplier_id == other.id
        live = SupplierJob.query.filter_by(quote_item_id=items[0].id, is_cancelled=False).all()
        assert [j.id for j in live] == second.job_ids

    @pytest.mark.parametrize(
        "status",
        [QuoteStatus.REJECTED, QuoteStatus.SUPERSEDED, QuoteStatus.CANCELLED, QuoteStatus.DELIVERED],
    )
    def test_closed_quote_rejected(self, factory, status):
        unit = factory.unit()
        quote, items = factory.quote([(unit, 5)], status=status)
        supplier = factory.supplier()

        with pytest.raises(QuoteNotAssignable):
            assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(*items))

        assert SupplierJob.query.count() == 0
        assert items[0].supplier_id is None
        assert quote.status == status


class TestCancelJob:
    def test_cancel_only_assigned_item_reverts_quote(self, factory):
        unit = factory.unit()
        quote, items = factory.quote([(unit, 10)])
        supplier = factory.supplier()
        res = assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(*items))
        assert quote.status == QuoteStatus.IN_PRODUCTION

        out = assign_dao.cancel_job(res.job_ids[0])

        assert out.success is True
        assert out.quote_reverted is True
        assert quote.status == QuoteStatus.APPROVED
        job = db.session.get(SupplierJob, res.job_ids[0])
        assert job.status == SupplierJobStatus.CANCELLED
        assert job.is_cancelled is True
        assert job.cancelled_at is not None
        assert job.cancelled_reason == assign_dao.DEFAULT_CANCEL_REASON
        assert items[0].supplier_id is None
        assert items[0].supplier_cost is None
        assert items[0].delivery_days is None

    def test_cancel_one_of_two_leaves_quote_waiting(self, setup):
        quote, items, supplier = setup
        res = assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(*items))

        out = assign_dao.cancel_job(res.job_ids[0], reason="Customer changed size")

        assert quote.status == QuoteStatus.APPROVED
        assert out.quote_reverted is True
        assert items[1].supplier_id == supplier.id
        assert db.session.get(SupplierJob, res.job_ids[0]).cancelled_reason == "Customer changed size"

    def test_partial_assignment_cancel_keeps_other_stamp(self, setup, factory):
        quote, items, supplier = setup
        first = assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(items[0]))
        assign_dao.assign_supplier_to_category(quote.id, factory.supplier().id, _items(items[1]))
        # quote is in production now; fall back to approved, second stamp untouched
        out = assign_dao.cancel_job(first.job_ids[0])
        assert out.quote_reverted is True
        assert items[1].supplier_id is not None

    def test_cancel_leaves_other_suppliers_stamp(self, setup, factory):
        quote, items, supplier = setup
        assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(*items))
        # a stale job from another supplier on the same line
        stale = factory.job(factory.supplier(), items[0])

        out = assign_dao.cancel_job(stale.id)

        assert out.quote_reverted is False
        assert items[0].supplier_id == supplier.id
        assert quote.status == QuoteStatus.IN_PRODUCTION

    def test_accepted_job_cannot_be_cancelled(self, setup):
        quote, items, supplier = setup
        res = assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(*items))
        job = db.session.get(SupplierJob, res.job_ids[0])
        job.is_accepted = True
        job.status = SupplierJobStatus.ACCEPTED
        db.session.commit()

        with pytest.raises(CancellationNotAllowed, match="after supplier acceptance"):
            assign_dao.cancel_job(job.id)

        db.session.refresh(job)
        assert job.is_cancelled is False
        assert job.status == SupplierJobStatus.ACCEPTED
        assert items[0].supplier_id == supplier.id
        assert quote.status == QuoteStatus.IN_PRODUCTION

    def test_already_cancelled(self, setup):
        quote, items, supplier = setup
        res = assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(items[0]))
        assign_dao.cancel_job(res.job_ids[0])
        with pytest.raises(JobAlreadyCancelled):
            assign_dao.cancel_job(res.job_ids[0])

    def test_missing_job(self, app):
        with pytest.raises(JobNotFound) as exc:
            assign_dao.cancel_job(31337)
        assert exc.value.status_code == 404


class TestCancelJobsByQuote:
    def test_cancels_everything_and_reverts(self, setup):
        quote, items, supplier = setup
        res = assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(*items))

        out = assign_dao.cancel_jobs_by_quote(quote.id, "Quote reopened")

        assert sorted(out.cancelled_job_ids) == sorted(res.job_ids)
        assert out.quote_reverted is True
        assert quote.status == QuoteStatus.APPROVED
        assert all(qi.supplier_id is None for qi in items)
        assert {j.cancelled_reason for j in SupplierJob.query} == {"Quote reopened"}

    def test_one_accepted_job_blocks_all(self, setup):
        quote, items, supplier = setup
        res = assign_dao.assign_supplier_to_category(quote.id, supplier.id, _items(*items))
        accepted = db.session.get(SupplierJob, res.job_ids[1])
        accepted.is_accepted = True
        accepted.status = SupplierJobStatus.ACCEPTED
        db.session.commit()

        with pytest.raises(CancellationNotAllowed):
            assign_dao.cancel_jobs_by_quote(quote.id)

        assert SupplierJob.query.filter_by(is_cancelled=True).count() == 0
        assert quote.status == QuoteStatus.IN_PRODUCTION

    def test_no_active_jobs(self, setup):
        quote, _, _ = setup
        with pytest.raises(NoActiveJobs):
            assign_dao.cancel_jobs_by_quote(quote.id)


def test_recompute_leaves_finished_quotes_alone(factory):
    unit = factory.unit()
    quote, items = factory.quote([(unit, 1)], status=QuoteStatus.DELIVERED)
    assert assign_dao.recompute_quote_status(quote) == QuoteStatus.DELIVERED
