# Overview: Pytest coverage for the dashboard summary.

from datetime import date, datetime

from distrack.services.dashboard_service import dashboard_summary


class TestDashboardSummary:

    def test_totals(self, manager_a, make_product, make_distribution):
        gloves = make_product(manager_a.company_id, "Gloves", 100)
        boots = make_product(manager_a.company_id, "Boots", 20)
        make_distribution(gloves, manager_a, "Ravi", 10, distributed_at=datetime(2026, 2, 27, 10))
        make_distribution(gloves, manager_a, "Ravi", 5, distributed_at=datetime(2026, 3, 1, 10))
        make_distribution(boots, manager_a, "Sita", 2, distributed_at=datetime(2026, 3, 14, 9))
        make_distribution(boots, manager_a, "Ravi", 1, distributed_at=datetime(2026, 3, 14, 23, 59))

        summary = dashboard_summary(manager_a.company_id, today=date(2026, 3, 14))

        assert summary == {
            "total_stock": 120,
            "remaining_stock": 102,
            "distributed_today": 3,
            "distributed_month": 8,
            "active_workers": 2,
        }

    def test_empty_company(self, manager_a):
        assert dashboard_summary(manager_a.company_id, today=date(2026, 3, 14)) == {
            "total_stock": 0,
            "remaining_stock": 0,
            "distributed_today": 0,
            "distributed_month": 0,
            "active_workers": 0,
        }

    def test_stats_route_is_the_same_for_every_role(
        self, client, manager_a, manager_headers, worker_headers, make_product, make_distribution
    ):
        product = make_product(manager_a.company_id, "Gloves", 10)
        make_distribution(product, manager_a, "Ravi", 4)

        as_manager = client.get("/api/dashboard/stats", headers=manager_headers)
        as_worker = client.get("/api/dashboard/stats", headers=worker_headers)

        assert as_manager.status_code == 200
        assert as_manager.json == as_worker.json
        assert as_manager.json["remaining_stock"] == 6
        assert as_manager.json["distributed_today"] == 4


class TestRecentDistributions:

    def test_recent_is_capped_at_ten_and_role_scoped(
        self, client, manager_a, manager_headers, worker_headers, make_product, make_distribution
    ):
        product = make_product(manager_a.company_id, "Gloves", 100)
        for i in range(12):
            make_distribution(product, manager_a, f"Worker {i}", 1, distributed_at=datetime(2026, 3, 1, 8, i))

        rows = client.get("/api/dashboard/recent", headers=manager_headers).json
        assert len(rows) == 10
        assert rows[0]["worker_name"] == "Worker 11"

        assert client.get("/api/dashboard/recent", headers=worker_headers).json == []
