import pytest

from dao import supplier_performance as perf_dao
from db.models.supplier_job import SupplierJobStatus


@pytest.fixture
def item(factory):
    unit = factory.unit()
    _, items = factory.quote([(unit, 100)])
    return items[0]


class TestDefaults:
    def test_no_history(self, factory):
        s = factory.supplier()
        assert perf_dao.reliability(s.id).reliability_pct == perf_dao.DEFAULT_RELIABILITY_PCT
        assert perf_dao.rating(s.id).avg_rating == perf_dao.DEFAULT_RATING
        assert perf_dao.speed(s.id).avg_delivery_days == perf_dao.DEFAULT_DELIVERY_DAYS
        assert perf_dao.reliability(s.id).total_ready_jobs == 0

    def test_batched_forms_fill_every_id(self, factory):
        a, b = factory.supplier(), factory.supplier()
        rel = perf_dao.reliability_for([a.id, b.id])
        assert set(rel) == {a.id, b.id}
        assert perf_dao.rating_for([]) == {}


class TestReliability:
    def test_on_time_share(self, factory, item):
        s = factory.supplier()
        ready = SupplierJobStatus.READY
        factory.job(s, item, status=ready, promised_days=3, elapsed_days=2)
        factory.job(s, item, status=ready, promised_days=3, elapsed_days=3)
        factory.job(s, item, status=ready, promised_days=3, elapsed_days=5)
        factory.job(s, item, status=ready, promised_days=2, elapsed_days=4)

        stats = perf_dao.reliability(s.id)
        assert stats.reliability_pct == pytest.approx(50.0)
        assert stats.total_ready_jobs == 4

    def test_ignores_unready_cancelled_and_unpromised(self, factory, item):
        s = factory.supplier()
        factory.job(s, item, status=SupplierJobStatus.READY, promised_days=3, elapsed_days=1)
        factory.job(s, item, status=SupplierJobStatus.ACCEPTED)  # not ready yet
        factory.job(s, item, promised_days=3, elapsed_days=9, cancelled=True,
                    status=SupplierJobStatus.CANCELLED)
        factory.job(s, item, status=SupplierJobStatus.READY, promised_days=None, elapsed_days=9)

        stats = perf_dao.reliability(s.id)
        assert stats.reliability_pct == pytest.approx(100.0)
        assert stats.total_ready_jobs == 1

    def test_batched_keeps_suppliers_apart(self, factory, item):
        good, late = factory.supplier(), factory.supplier()
        factory.job(good, item, status=SupplierJobStatus.READY, elapsed_days=1)
        factory.job(late, item, status=SupplierJobStatus.READY, elapsed_days=10)

        out = perf_dao.reliability_for([good.id, late.id])
        assert out[good.id].reliability_pct == pytest.approx(100.0)
        assert out[late.id].reliability_pct == pytest.approx(0.0)


class TestRating:
    def test_mean_of_given_ratings(self, factory, item):
        s = factory.supplier()
        factory.job(s, item, rating=4)
        factory.job(s, item, rating=5)
        factory.job(s, item)  # unrated

        stats = perf_dao.rating(s.id)
        assert stats.avg_rating == pytest.approx(4.5)
        assert stats.total_ratings == 2


class TestSpeed:
    def test_mean_elapsed_days(self, factory, item):
        s = factory.supplier()
        factory.job(s, item, status=SupplierJobStatus.READY, elapsed_days=2)
        factory.job(s, item, status=SupplierJobStatus.DELIVERED, elapsed_days=4)

        stats = perf_dao.speed(s.id)
        assert stats.avg_delivery_days == pytest.approx(3.0)
        assert stats.total_deliveries == 2
