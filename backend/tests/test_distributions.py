# Overview: Pytest coverage for the distribution API.

"""
Distribution API tests

End-to-end scenario:
    P has 100, nothing distributed           -> remaining 100
    Worker A gets 30                         -> remaining 70
    Worker B asks for 80                     -> rejected, available=70 requested=80
    Worker B asks for 70                     -> accepted, remaining 0, P leaves "available"
"""

import pytest

from distrack.models import Distribution, SecurityEvent
from distrack.services.ledger_service import remaining_stock


def distribute(client, headers, product_id, quantity, worker_name="Worker A", **extra):
    body = {
        "worker_name": worker_name,
        "worker_gender": "female",
        "allocations": [{"product_id": product_id, "quantity": quantity}],
    }
    body.update(extra)
    return client.post("/api/distributions", headers=headers, json=body)


class TestStockScenario:

    def test_full_scenario(self, client, db_session, manager_a, manager_headers, make_product):
        product = make_product(manager_a.company_id, "P", 100)
        assert remaining_stock(manager_a.company_id, product.id) == 100

        resp = distribute(client, manager_headers, product.id, 30, worker_name="Worker A")
        assert resp.status_code == 201
        assert resp.json == {"success": True, "count": 1}
        assert remaining_stock(manager_a.company_id, product.id) == 70

        resp = distribute(client, manager_headers, product.id, 80, worker_name="Worker B")
        assert resp.status_code == 409
        assert resp.json["available"] == 70
        assert resp.json["requested"] == 80
        assert resp.json["product_id"] == product.id
        assert "Insufficient stock" in resp.json["error"]
        assert db_session.query(Distribution).filter_by(worker_name="Worker B").count() == 0

        resp = distribute(client, manager_headers, product.id, 70, worker_name="Worker B")
        assert resp.status_code == 201
        assert remaining_stock(manager_a.company_id, product.id) == 0

        available = client.get("/api/products/available", headers=manager_headers).json
        assert product.id not in [p["id"] for p in available]


class TestSubmissionValidation:

    def test_multi_product_submission(self, client, db_session, manager_a, manager_headers, make_product):
        gloves = make_product(manager_a.company_id, "Gloves", 10)
        boots = make_product(manager_a.company_id, "Boots", 10)

        resp = client.post("/api/distributions", headers=manager_headers, json={
            "worker_name": "Ravi",
            "worker_gender": "male",
            "worker_mobile": "98450 12345",
            "allocations": [
                {"product_id": gloves.id, "quantity": 2},
                {"product_id": boots.id, "quantity": 1},
            ],
        })

        assert resp.status_code == 201
        assert resp.json["count"] == 2
        rows = db_session.query(Distribution).all()
        assert {r.worker_mobile for r in rows} == {"98450 12345"}

    def test_one_bad_line_rejects_the_whole_submission(
        self, client, db_session, manager_a, manager_headers, make_product
    ):
        gloves = make_product(manager_a.company_id, "Gloves", 10)
        boots = make_product(manager_a.company_id, "Boots", 1)

        resp = client.post("/api/distributions", headers=manager_headers, json={
            "worker_name": "Ravi",
            "allocations": [
                {"product_id": gloves.id, "quantity": 2},
                {"product_id": boots.id, "quantity": 5},
            ],
        })

        assert resp.status_code == 409
        assert db_session.query(Distribution).count() == 0

    def test_gender_and_mobile_are_optional(self, client, manager_a, manager_headers, make_product):
        product = make_product(manager_a.company_id, "Gloves", 10)

        resp = client.post("/api/distributions", headers=manager_headers, json={
            "worker_name": "Ravi",
            "allocations": [{"product_id": product.id, "quantity": 1}],
        })
        assert resp.status_code == 201

    @pytest.mark.parametrize(
        "body",
        [
            {"allocations": [{"product_id": 1, "quantity": 1}]},
            {"worker_name": "", "allocations": [{"product_id": 1, "quantity": 1}]},
            {"worker_name": "Ravi"},
            {"worker_name": "Ravi", "allocations": []},
            {"worker_name": "Ravi", "allocations": [{"product_id": 1, "quantity": 0}]},
            {"worker_name": "Ravi", "allocations": [{"product_id": 1, "quantity": 1}], "distributed_at": "2020-01-01"},
        ],
    )
    def test_malformed_body_is_400(self, client, db_session, manager_headers, body):
        resp = client.post("/api/distributions", headers=manager_headers, json=body)
        assert resp.status_code == 400

    def test_duplicate_product_is_400(self, client, manager_a, manager_headers, make_product):
        product = make_product(manager_a.company_id, "Gloves", 10)

        resp = client.post("/api/distributions", headers=manager_headers, json={
            "worker_name": "Ravi",
            "allocations": [
                {"product_id": product.id, "quantity": 1},
                {"product_id": product.id, "quantity": 1},
            ],
        })
        assert resp.status_code == 400

    def test_unknown_product_is_404(self, client, manager_headers):
        resp = distribute(client, manager_headers, 99999, 1)
        assert resp.status_code == 404

    def test_client_stock_figures_are_ignored(self, client, manager_a, manager_headers, make_product):
        product = make_product(manager_a.company_id, "Gloves", 2)

        resp = client.post("/api/distributions", headers=manager_headers, json={
            "worker_name": "Ravi",
            "allocations": [{"product_id": product.id, "quantity": 5, "remaining_quantity": 500}],
        })
        assert resp.status_code == 409


class TestTenantBoundaries:

    def test_foreign_product_is_404_and_audited(
        self, client, db_session, manager_a, manager_b, manager_headers, make_product
    ):
        foreign = make_product(manager_b.company_id, "Beta Gloves", 10)

        resp = distribute(client, manager_headers, foreign.id, 1)

        assert resp.status_code == 404
        assert remaining_stock(manager_b.company_id, foreign.id) == 10
        event = db_session.query(SecurityEvent).filter_by(event_type="CROSS_TENANT_ACCESS_DENIED").one()
        assert event.company_id == manager_a.company_id
        assert event.user_id == manager_a.id


class TestListing:

    def test_list_newest_first_with_names(
        self, client, manager_a, manager_headers, make_product
    ):
        product = make_product(manager_a.company_id, "Gloves", 10, category="Safety")
        distribute(client, manager_headers, product.id, 1, worker_name="First")
        distribute(client, manager_headers, product.id, 2, worker_name="Second")

        rows = client.get("/api/distributions", headers=manager_headers).json

        assert [r["worker_name"] for r in rows] == ["Second", "First"]
        assert rows[0]["product_name"] == "Gloves"
        assert rows[0]["product_category"] == "Safety"
        assert rows[0]["distributed_by"] == "Maria Manager"
        assert rows[0]["distributed_at"].endswith("Z")

    def test_previous_workers(self, client, manager_a, manager_headers, make_product):
        product = make_product(manager_a.company_id, "Gloves", 10)
        distribute(client, manager_headers, product.id, 1, worker_name="Ravi", worker_mobile="555")

        workers = client.get("/api/distributions/workers", headers=manager_headers).json

        assert workers == [{
            "worker_name": "Ravi",
            "worker_gender": "female",
            "worker_mobile": "555",
            "last_distributed_at": workers[0]["last_distributed_at"],
        }]
