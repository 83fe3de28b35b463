"""Integration tests for API endpoints"""

import asyncio
import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient
from conftest import login
from ewa_gateway.domain.exceptions import BackendUnavailableError
from ewa_gateway.infrastructure.clients.fixtures import FixtureBackend
from ewa_gateway.infrastructure.clients.step_up import PresentedAssertionAuthenticator


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "ewa_advance" in response.text
    assert "ewa_voucher_purchase" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


class TestSession:
    def test_login_returns_profile_and_employer(self, client: TestClient):
        response = client.post("/v1/session/login", json={"email": "sarah@example.com", "password": "pw"})

        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["is_admin"] is False
        assert data["user"]["name"] == "Sarah van der Merwe"
        assert data["employer"]["code"] == "RETAIL99"
        assert data["employer"]["fee_structure"]["flat_cents"] == 2_000

    def test_login_unknown_account(self, client: TestClient):
        response = client.post("/v1/session/login", json={"email": "nobody@example.com", "password": "pw"})
        assert response.status_code == 401

    def test_login_requires_password(self, client: TestClient):
        response = client.post("/v1/session/login", json={"email": "sarah@example.com", "password": ""})
        assert response.status_code == 422

    def test_admin_login_flag(self, client: TestClient):
        response = client.post("/v1/session/login", json={"email": "admin@example.com", "password": "pw"})
        assert response.status_code == 200
        assert response.json()["is_admin"] is True

    def test_missing_or_unknown_token(self, client: TestClient):
        assert client.get("/v1/me/earnings").status_code == 401
        assert client.get("/v1/me/earnings", headers={"Authorization": "Bearer nope"}).status_code == 401

    def test_logout_invalidates_token(self, client: TestClient, sarah_headers):
        assert client.post("/v1/session/logout", headers=sarah_headers).status_code == 204
        assert client.get("/v1/me/earnings", headers=sarah_headers).status_code == 401

    def test_update_settings(self, client: TestClient, sarah_headers):
        response = client.patch(
            "/v1/me/settings",
            json={"biometric_enabled": True, "preferred_payment_method": "ewallet"},
            headers=sarah_headers,
        )

        assert response.status_code == 200
        assert response.json()["biometric_enabled"] is True
        assert response.json()["preferred_payment_method"] == "ewallet"

        messages = [n["message"] for n in client.get("/v1/me/notifications", headers=sarah_headers).json()["notifications"]]
        assert "Settings updated" in messages


class TestEarningsAndQuote:
    def test_earnings_dashboard(self, client: TestClient, sarah_headers):
        """Sarah on Mar 11: 10 days x 8h x R120 = R9,600 earned, 30% = R2,880 available"""
        response = client.get("/v1/me/earnings", headers=sarah_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["period_start"] == "2024-03-01"
        assert data["elapsed_days"] == 10
        assert data["earned_cents"] == 960_000
        assert data["available_cents"] == 288_000
        assert data["next_payroll_date"] == "2024-03-30"
        assert data["advance_cap"] == 0.30

    def test_quote(self, client: TestClient, sarah_headers):
        """RetailHub: R20 + 1.5% of R500 = R27.50"""
        response = client.post("/v1/advances/quote", json={"amount_cents": 50_000}, headers=sarah_headers)

        assert response.status_code == 200
        assert response.json() == {"amount_cents": 50_000, "fee_cents": 2_750, "total_repayable_cents": 52_750}

    def test_quote_rejects_non_positive_amount(self, client: TestClient, sarah_headers):
        response = client.post("/v1/advances/quote", json={"amount_cents": 0}, headers=sarah_headers)
        assert response.status_code == 422


class TestAdvances:
    def test_advance_without_step_up(self, client: TestClient, sarah_headers):
        response = client.post("/v1/advances", json={"amount_cents": 50_000}, headers=sarah_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "completed"
        assert data["transaction"]["type"] == "advance"
        assert data["transaction"]["fee_cents"] == 2_750
        assert data["transaction"]["total_cents"] == 52_750
        assert data["transaction"]["payment_method"] == "eft"

        notifications = client.get("/v1/me/notifications", headers=sarah_headers).json()["notifications"]
        assert notifications[-1]["type"] == "success"
        assert notifications[-1]["message"] == "Advance of R500.00 approved! Fee: R27.50"

        history = client.get("/v1/me/transactions", headers=sarah_headers).json()
        assert [t["transaction_id"] for t in history["transactions"]] == [data["transaction"]["transaction_id"]]

    def test_advance_payment_method_override(self, client: TestClient, sarah_headers):
        response = client.post(
            "/v1/advances",
            json={"amount_cents": 10_000, "payment_method": "ewallet"},
            headers=sarah_headers,
        )
        assert response.status_code == 200
        assert response.json()["transaction"]["payment_method"] == "ewallet"

    def test_advance_above_ceiling(self, client: TestClient, sarah_headers):
        response = client.post("/v1/advances", json={"amount_cents": 300_000}, headers=sarah_headers)

        assert response.status_code == 422
        notifications = client.get("/v1/me/notifications", headers=sarah_headers).json()["notifications"]
        assert notifications[-1]["type"] == "error"

    def test_advance_invalid_amount(self, client: TestClient, sarah_headers):
        response = client.post("/v1/advances", json={"amount_cents": 0}, headers=sarah_headers)
        assert response.status_code == 422

    def test_advance_with_step_up_success(self, client: TestClient, thabo_headers):
        response = client.post(
            "/v1/advances",
            json={"amount_cents": 50_000, "step_up_outcome": "success"},
            headers=thabo_headers,
        )

        assert response.status_code == 200
        assert response.json()["transaction"]["fee_cents"] == 3_000
        assert response.json()["transaction"]["total_cents"] == 53_000

    def test_advance_step_up_missing_is_rejected(self, client: TestClient, thabo_headers):
        response = client.post("/v1/advances", json={"amount_cents": 50_000}, headers=thabo_headers)
        assert response.status_code == 403

        # A failed request does not block the next one
        retry = client.post(
            "/v1/advances",
            json={"amount_cents": 50_000, "step_up_outcome": "success"},
            headers=thabo_headers,
        )
        assert retry.status_code == 200

    def test_advance_step_up_cancelled(self, client: TestClient, thabo_headers):
        response = client.post(
            "/v1/advances",
            json={"amount_cents": 50_000, "step_up_outcome": "cancelled"},
            headers=thabo_headers,
        )
        assert response.status_code == 409

    def test_advance_refused_while_previous_awaits_step_up(self, client: TestClient, container, thabo_headers):
        session = container.get_session(thabo_headers["Authorization"][7:])
        pending = container.start_advance(session, 20_000, PresentedAssertionAuthenticator(None))
        asyncio.run(pending.submit())

        response = client.post(
            "/v1/advances",
            json={"amount_cents": 50_000, "step_up_outcome": "success"},
            headers=thabo_headers,
        )

        assert response.status_code == 409

    def test_advance_backend_unavailable(self, client: TestClient, sarah_headers):
        with patch.object(FixtureBackend, "record_transaction", side_effect=BackendUnavailableError("down")):
            response = client.post("/v1/advances", json={"amount_cents": 50_000}, headers=sarah_headers)

        assert response.status_code == 503


class TestVouchers:
    def test_list_all(self, client: TestClient, sarah_headers):
        response = client.get("/v1/vouchers", headers=sarah_headers)
        assert response.status_code == 200
        assert len(response.json()["vouchers"]) == 8

    def test_filter_by_category_and_term(self, client: TestClient, sarah_headers):
        mobile = client.get("/v1/vouchers", params={"category": "mobile"}, headers=sarah_headers).json()
        assert {v["provider"] for v in mobile["vouchers"]} == {"Vodacom", "MTN", "Telkom"}

        airtime = client.get("/v1/vouchers", params={"q": "AIRTIME"}, headers=sarah_headers).json()
        assert [v["voucher_id"] for v in airtime["vouchers"]] == ["1", "3"]

    def test_unknown_category(self, client: TestClient, sarah_headers):
        response = client.get("/v1/vouchers", params={"category": "travel"}, headers=sarah_headers)
        assert response.status_code == 422

    def test_purchase(self, client: TestClient, sarah_headers, admin_headers):
        response = client.post("/v1/vouchers/1/purchase", headers=sarah_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "voucher"
        assert data["amount_cents"] == 4_800
        assert data["fee_cents"] == 0
        assert data["voucher_details"]["code"] == "TST-000-001"

        stock = {v["voucher_id"]: v["stock"] for v in client.get("/v1/admin/vouchers", headers=admin_headers).json()["vouchers"]}
        assert stock["1"] == 99

    def test_purchase_unknown_voucher(self, client: TestClient, sarah_headers):
        assert client.post("/v1/vouchers/999/purchase", headers=sarah_headers).status_code == 404

    def test_purchase_out_of_stock(self, client: TestClient, container, sarah_headers):
        marketplace = asyncio.run(container.marketplace())
        marketplace.get("8").stock = 0

        response = client.post("/v1/vouchers/8/purchase", headers=sarah_headers)

        assert response.status_code == 409


class TestHistory:
    def test_transactions_most_recent_first(self, client: TestClient, thabo_headers):
        response = client.get("/v1/me/transactions", headers=thabo_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == "1"
        assert [t["transaction_id"] for t in data["transactions"]] == ["2", "1"]
        assert data["transactions"][0]["voucher_details"]["code"] == "VOD-123-456"

    def test_wellness(self, client: TestClient, thabo_headers):
        response = client.get("/v1/me/wellness", headers=thabo_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["score"] == 750
        assert data["max_score"] == 850
        assert data["percentage"] == 88.2
        assert data["band"] == "excellent"
        assert len(data["tips"]) == 4

    def test_notifications_dismiss(self, client: TestClient, sarah_headers):
        notifications = client.get("/v1/me/notifications", headers=sarah_headers).json()["notifications"]
        assert [n["message"] for n in notifications] == ["Login successful!"]

        notification_id = notifications[0]["notification_id"]
        assert client.delete(f"/v1/me/notifications/{notification_id}", headers=sarah_headers).status_code == 204
        # Second dismissal is a no-op
        assert client.delete(f"/v1/me/notifications/{notification_id}", headers=sarah_headers).status_code == 204

        assert client.get("/v1/me/notifications", headers=sarah_headers).json()["notifications"] == []


class TestAdmin:
    @pytest.mark.parametrize("path", ["employers", "users", "transactions", "vouchers"])
    def test_requires_admin(self, client: TestClient, sarah_headers, path):
        assert client.get(f"/v1/admin/{path}", headers=sarah_headers).status_code == 403

    def test_listings(self, client: TestClient, admin_headers):
        employers = client.get("/v1/admin/employers", headers=admin_headers).json()
        users = client.get("/v1/admin/users", headers=admin_headers).json()
        transactions = client.get("/v1/admin/transactions", headers=admin_headers).json()

        assert [e["name"] for e in employers] == ["TechCorp SA", "RetailHub", "HealthCare Plus"]
        assert {u["email"] for u in users} == {"thabo@example.com", "sarah@example.com"}
        assert len(transactions) == 2

    def test_restock(self, client: TestClient, admin_headers):
        response = client.post("/v1/admin/vouchers/4/restock", json={"quantity": 25}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["stock"] == 225

    def test_restock_validation(self, client: TestClient, admin_headers):
        assert client.post("/v1/admin/vouchers/999/restock", json={"quantity": 1}, headers=admin_headers).status_code == 404
        assert client.post("/v1/admin/vouchers/4/restock", json={"quantity": 0}, headers=admin_headers).status_code == 422


def test_second_login_gets_independent_session(client: TestClient):
    first = login(client, "sarah@example.com")
    second = login(client, "sarah@example.com")
    assert first != second

    client.post("/v1/session/logout", headers=first)
    assert client.get("/v1/me/earnings", headers=second).status_code == 200
