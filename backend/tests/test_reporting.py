# Overview: Pytest coverage for reports and analytics.

from datetime import date, datetime

import pytest

from distrack.services import reporting_service
from distrack.services.reporting_service import ReportFilters
from distrack.validation import ValidationError


@pytest.fixture
def history(manager_a, manager_a2, make_product, make_distribution):
    """
    Acme history across two managers and three days.

    mgr1: Ravi 10 Gloves (Mar 1), Sita 5 Boots (Mar 2)
    mgr2: Ravi 3 Gloves (Mar 3), ravi 1 Boots (Mar 3)
    """
    gloves = make_product(manager_a.company_id, "Gloves", 100, category="Safety")
    boots = make_product(manager_a.company_id, "Boots", 50, category="Footwear")
    make_distribution(gloves, manager_a, "Ravi", 10, distributed_at=datetime(2026, 3, 1, 8, 30))
    make_distribution(boots, manager_a, "Sita", 5, distributed_at=datetime(2026, 3, 2, 23, 59),
                      worker_gender="female")
    make_distribution(gloves, manager_a2, "Ravi", 3, distributed_at=datetime(2026, 3, 3, 0, 0))
    make_distribution(boots, manager_a2, "ravi", 1, distributed_at=datetime(2026, 3, 3, 12, 0))
    return {"gloves": gloves, "boots": boots}


class TestReportFilters:

    def test_from_args(self):
        filters = ReportFilters.from_args({
            "start_date": "2026-03-01",
            "end_date": "2026-03-02",
            "worker": " Ravi ",
            "product": "",
        })
        assert filters.start_date == date(2026, 3, 1)
        assert filters.end_date == date(2026, 3, 2)
        assert filters.worker == "Ravi"
        assert filters.product is None
        assert filters.category is None

    @pytest.mark.parametrize(
        "args",
        [
            {"start_date": "03/01/2026"},
            {"end_date": "2026-02-30"},
            {"start_date": "2026-03-05", "end_date": "2026-03-01"},
        ],
    )
    def test_bad_dates(self, args):
        with pytest.raises(ValidationError):
            ReportFilters.from_args(args)

    def test_bad_date_is_400_over_http(self, client, manager_headers):
        resp = client.get("/api/reports/distributions?start_date=yesterday", headers=manager_headers)
        assert resp.status_code == 400


class TestDistributionReport:

    def test_manager_sees_every_company_row(self, client, history, manager_headers):
        rows = client.get("/api/reports/distributions", headers=manager_headers).json

        assert len(rows) == 4
        assert [r["distributed_at"] for r in rows] == sorted((r["distributed_at"] for r in rows), reverse=True)

    def test_admin_sees_every_company_row(self, client, history, admin_headers):
        assert len(client.get("/api/reports/distributions", headers=admin_headers).json) == 4

    def test_worker_sees_only_own_rows(self, history, worker_a, manager_a):
        assert reporting_service.list_distributions(
            company_id=worker_a.company_id, role="worker", user_id=worker_a.id,
        ) == []

        own = reporting_service.list_distributions(
            company_id=manager_a.company_id, role="worker", user_id=manager_a.id,
        )
        assert len(own) == 2
        assert {r["distributed_by_user_id"] for r in own} == {manager_a.id}

    def test_date_window_is_inclusive_calendar_days(self, history, manager_a):
        rows = reporting_service.list_distributions(
            company_id=manager_a.company_id,
            role="manager",
            user_id=manager_a.id,
            filters=ReportFilters(start_date=date(2026, 3, 2), end_date=date(2026, 3, 2)),
        )
        assert [r["worker_name"] for r in rows] == ["Sita"]

    def test_filters_combine(self, client, history, manager_headers):
        rows = client.get(
            "/api/reports/distributions?worker=Ravi&category=Safety&start_date=2026-03-02",
            headers=manager_headers,
        ).json

        assert len(rows) == 1
        assert rows[0]["quantity"] == 3

    def test_product_filter_is_exact_name(self, client, history, manager_headers):
        rows = client.get("/api/reports/distributions?product=Boots", headers=manager_headers).json
        assert {r["product_name"] for r in rows} == {"Boots"}
        assert client.get("/api/reports/distributions?product=boot", headers=manager_headers).json == []


class TestProductAnalytics:

    def test_totals_per_product_largest_first(self, client, history, manager_headers):
        rows = client.get("/api/reports/product-analytics", headers=manager_headers).json

        assert [(r["product_name"], r["total_distributed"], r["distribution_count"]) for r in rows] == [
            ("Gloves", 13, 2),
            ("Boots", 6, 2),
        ]
        assert rows[0]["category"] == "Safety"

    def test_filtered_by_date(self, client, history, manager_headers):
        rows = client.get("/api/reports/product-analytics?end_date=2026-03-01", headers=manager_headers).json
        assert rows == [{
            "product_id": history["gloves"].id,
            "product_name": "Gloves",
            "category": "Safety",
            "total_distributed": 10,
            "distribution_count": 1,
        }]

    def test_worker_scope_applies(self, history, manager_a2):
        rows = reporting_service.product_analytics(
            company_id=manager_a2.company_id, role="worker", user_id=manager_a2.id,
        )
        assert {(r["product_name"], r["total_distributed"]) for r in rows} == {("Gloves", 3), ("Boots", 1)}


class TestWorkerAnalytics:

    def test_grouped_by_exact_name(self, client, history, manager_headers):
        rows = client.get("/api/reports/worker-analytics", headers=manager_headers).json

        by_name = {r["worker_name"]: r for r in rows}
        assert set(by_name) == {"Ravi", "Sita", "ravi"}
        assert by_name["Ravi"]["total_items"] == 13
        assert by_name["Ravi"]["distribution_count"] == 2
        assert by_name["Ravi"]["last_distribution"] == "2026-03-03T00:00:00Z"
        assert by_name["ravi"]["total_items"] == 1
        assert rows[0]["worker_name"] == "Ravi"

    def test_company_isolation(self, client, history, manager_b_headers):
        assert client.get("/api/reports/worker-analytics", headers=manager_b_headers).json == []
