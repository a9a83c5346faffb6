# Overview: Pytest coverage for the distribution write path.

import pytest

from distrack.models import Distribution
from distrack.services import distribution_service
from distrack.services.distribution_service import (
    WorkerIdentity,
    list_previous_workers,
    record_distribution,
)
from distrack.services.ledger_service import remaining_stock
from distrack.services.stock_service import InsufficientStockError
from distrack.validation import ValidationError
from datetime import datetime


class TestRecordDistribution:

    def test_writes_one_row_per_product_with_shared_identity(self, db_session, manager_a, make_product):
        gloves = make_product(manager_a.company_id, "Gloves", 10)
        boots = make_product(manager_a.company_id, "Boots", 10)

        count = record_distribution(
            company_id=manager_a.company_id,
            user_id=manager_a.id,
            worker=WorkerIdentity(name="Ravi", gender="male", mobile="555"),
            allocations=[(gloves.id, 3), (boots.id, 2)],
        )

        assert count == 2
        rows = db_session.query(Distribution).order_by(Distribution.product_id).all()
        assert [(r.product_id, r.quantity) for r in rows] == [(gloves.id, 3), (boots.id, 2)]
        assert {r.worker_name for r in rows} == {"Ravi"}
        assert {r.worker_mobile for r in rows} == {"555"}
        assert {r.distributed_by_user_id for r in rows} == {manager_a.id}
        assert len({r.distributed_at for r in rows}) == 1

    def test_remaining_drops_by_exactly_the_quantity(self, manager_a, make_product):
        product = make_product(manager_a.company_id, "Gloves", 100)

        record_distribution(
            company_id=manager_a.company_id,
            user_id=manager_a.id,
            worker=WorkerIdentity(name="Ravi", gender="male"),
            allocations=[(product.id, 30)],
        )

        assert remaining_stock(manager_a.company_id, product.id) == 70

    def test_rejection_writes_nothing(self, db_session, manager_a, make_product):
        gloves = make_product(manager_a.company_id, "Gloves", 10)
        boots = make_product(manager_a.company_id, "Boots", 1)

        with pytest.raises(InsufficientStockError):
            record_distribution(
                company_id=manager_a.company_id,
                user_id=manager_a.id,
                worker=WorkerIdentity(name="Ravi", gender="male"),
                allocations=[(gloves.id, 3), (boots.id, 2)],
            )

        assert db_session.query(Distribution).count() == 0
        assert remaining_stock(manager_a.company_id, gloves.id) == 10

    def test_failure_mid_batch_rolls_back_earlier_rows(self, db_session, manager_a, make_product, monkeypatch):
        gloves = make_product(manager_a.company_id, "Gloves", 10)
        boots = make_product(manager_a.company_id, "Boots", 10)

        real_build = distribution_service._build_distribution_row

        def failing_build(**kwargs):
            if kwargs["product_id"] == boots.id:
                raise RuntimeError("insert failed")
            return real_build(**kwargs)

        monkeypatch.setattr(distribution_service, "_build_distribution_row", failing_build)

        with pytest.raises(RuntimeError):
            record_distribution(
                company_id=manager_a.company_id,
                user_id=manager_a.id,
                worker=WorkerIdentity(name="Ravi", gender="male"),
                allocations=[(gloves.id, 3), (boots.id, 2)],
            )

        assert db_session.query(Distribution).count() == 0
        assert remaining_stock(manager_a.company_id, gloves.id) == 10

    def test_blank_worker_name_rejected(self, manager_a, make_product):
        product = make_product(manager_a.company_id, "Gloves", 10)

        with pytest.raises(ValidationError):
            record_distribution(
                company_id=manager_a.company_id,
                user_id=manager_a.id,
                worker=WorkerIdentity(name="   "),
                allocations=[(product.id, 1)],
            )

    def test_empty_allocations_rejected(self, manager_a):
        with pytest.raises(ValidationError):
            record_distribution(
                company_id=manager_a.company_id,
                user_id=manager_a.id,
                worker=WorkerIdentity(name="Ravi"),
                allocations=[],
            )

    def test_strict_locking_path_writes(self, manager_a, make_product):
        product = make_product(manager_a.company_id, "Gloves", 5)

        count = record_distribution(
            company_id=manager_a.company_id,
            user_id=manager_a.id,
            worker=WorkerIdentity(name="Ravi"),
            allocations=[(product.id, 5)],
            strict_locking=True,
        )

        assert count == 1
        assert remaining_stock(manager_a.company_id, product.id) == 0


class TestPreviousWorkers:

    def test_distinct_identities_most_recent_first(self, manager_a, make_product, make_distribution):
        product = make_product(manager_a.company_id, "Gloves", 100)
        make_distribution(product, manager_a, "Ravi", 1, distributed_at=datetime(2026, 3, 1, 9))
        make_distribution(product, manager_a, "Sita", 1, distributed_at=datetime(2026, 3, 2, 9),
                          worker_gender="female")
        make_distribution(product, manager_a, "Ravi", 1, distributed_at=datetime(2026, 3, 3, 9))

        workers = list_previous_workers(manager_a.company_id)

        assert [w["worker_name"] for w in workers] == ["Ravi", "Sita"]
        assert workers[0]["last_distributed_at"] == "2026-03-03T09:00:00Z"

    def test_names_are_not_merged(self, manager_a, make_product, make_distribution):
        product = make_product(manager_a.company_id, "Gloves", 100)
        make_distribution(product, manager_a, "Ravi", 1)
        make_distribution(product, manager_a, "ravi", 1)

        names = {w["worker_name"] for w in list_previous_workers(manager_a.company_id)}
        assert names == {"Ravi", "ravi"}

    def test_limit(self, manager_a, make_product, make_distribution):
        product = make_product(manager_a.company_id, "Gloves", 100)
        for i in range(5):
            make_distribution(product, manager_a, f"Worker {i}", 1)

        assert len(list_previous_workers(manager_a.company_id, limit=3)) == 3
