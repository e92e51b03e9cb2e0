"""
HTTP tests for the wallet API, run against an isolated service per test.
"""

import pytest
from fastapi.testclient import TestClient

from wallet.api import create_app
from wallet.config import Settings
from wallet.service import WalletService


@pytest.fixture
def client():
    app = create_app(service=WalletService(), settings=Settings(static_dir=""))
    return TestClient(app)


class TestSystemRoutes:
    """Tests for health and reconciliation routes."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_reconciliation(self, client):
        client.post("/accounts/acc-1/award", json={"currency": "POINTS", "amount": 300})

        response = client.get("/reconciliation")

        assert response.status_code == 200
        assert response.json()["checked"] == 1
        assert response.json()["anomalies"] == 0


class TestAccountRoutes:
    """Tests for balance, ledger and operation routes."""

    def test_balance_of_new_account(self, client):
        response = client.get("/accounts/acc-1/balance")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == "acc-1"
        assert (body["points"], body["money"]) == (0, 0)
        assert "created_at" in body

    def test_award_redeem_and_ledger(self, client):
        client.post("/accounts/acc-1/award", json={"currency": "POINTS", "amount": 150, "reason": "bonus"})
        response = client.post("/accounts/acc-1/redeem", json={"points": 100, "reason": "shop"})

        assert response.status_code == 200
        assert response.json()["account"]["points"] == 50

        ledger = client.get("/accounts/acc-1/ledger").json()
        assert ledger["total_count"] == 2
        assert [e["entry_type"] for e in ledger["entries"]] == ["REDEEM", "AWARD"]
        assert [e["amount"] for e in ledger["entries"]] == [-100, 150]

    def test_convert(self, client):
        client.post("/accounts/acc-1/award", json={"currency": "POINTS", "amount": 1000})

        response = client.post("/accounts/acc-1/convert", json={"direction": "POINTS_TO_MONEY", "amount": 3})

        assert response.status_code == 200
        body = response.json()
        assert (body["account"]["points"], body["account"]["money"]) == (700, 3)
        assert len(body["entries"]) == 2


class TestErrorMapping:
    """Tests for mapping service errors and bad bodies to HTTP status codes."""

    def test_insufficient_funds(self, client):
        client.post("/accounts/acc-1/award", json={"currency": "MONEY", "amount": 10})

        response = client.post("/accounts/acc-1/withdraw", json={"amount": 20, "reason": "cashout"})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "InsufficientFunds"
        assert client.get("/accounts/acc-1/balance").json()["money"] == 10

    def test_invalid_direction(self, client):
        response = client.post("/accounts/acc-1/convert", json={"direction": "SIDEWAYS", "amount": 5})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "InvalidDirection"
        assert client.get("/accounts/acc-1/ledger").json()["total_count"] == 0

    def test_non_positive_amount(self, client):
        response = client.post("/accounts/acc-1/award", json={"currency": "POINTS", "amount": 0})

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "InvalidInput"

    def test_malformed_body(self, client):
        response = client.post("/accounts/acc-1/redeem", json={"reason": "no points"})

        assert response.status_code == 422

    @pytest.mark.parametrize("amount", [True, 2.0, "3"])
    def test_non_integer_amount_rejected(self, client, amount):
        """Amounts are not coerced: booleans, floats and strings never reach the ledger."""
        award = client.post("/accounts/acc-1/award", json={"currency": "POINTS", "amount": amount})
        redeem = client.post("/accounts/acc-1/redeem", json={"points": amount})
        withdraw = client.post("/accounts/acc-1/withdraw", json={"amount": amount})
        convert = client.post("/accounts/acc-1/convert", json={"direction": "MONEY_TO_POINTS", "amount": amount})

        assert [r.status_code for r in (award, redeem, withdraw, convert)] == [422, 422, 422, 422]
        assert client.get("/accounts/acc-1/ledger").json()["total_count"] == 0


class TestStaticFiles:
    """Tests for the optional static file mount."""

    def test_static_dir_served_without_shadowing_api(self, tmp_path):
        (tmp_path / "index.html").write_text("<h1>wallet</h1>")
        app = create_app(service=WalletService(), settings=Settings(static_dir=str(tmp_path)))
        client = TestClient(app)

        assert "wallet" in client.get("/").text
        assert client.get("/health").json()["status"] == "ok"


class TestEntryPoint:
    """Tests for building the app from the command-line entry point."""

    def test_importing_api_builds_no_app(self):
        import wallet.api

        assert not hasattr(wallet.api, "app")

    def test_main_builds_app_after_logging(self, monkeypatch):
        import wallet.__main__ as entry

        calls = []
        monkeypatch.setenv("WALLET_STATIC_DIR", "")
        monkeypatch.setattr(entry, "configure_logging", lambda level: calls.append("logging"))
        monkeypatch.setattr(entry.uvicorn, "run", lambda app, host, port: calls.append(app))

        entry.main()

        assert calls[0] == "logging"
        assert TestClient(calls[1]).get("/health").status_code == 200
