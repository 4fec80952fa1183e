"""End-to-end API tests over a migrated temporary database."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from shopledger.api.dependencies import get_checkout_use_case
from shopledger.api.main import app
from shopledger.core.exceptions import InvoiceCreationFailedError

ACME = {"X-Shop-Id": "acme", "X-Actor-Id": "clerk-1"}
RIVAL = {"X-Shop-Id": "rival", "X-Actor-Id": "clerk-9"}


@pytest.fixture
async def client(ledger_db) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def catalog(client: AsyncClient) -> dict[str, str]:
    """Two shops; acme sells a phone (1000) and a case (500)."""
    for shop_id in ("acme", "rival"):
        response = await client.post("/api/shops", json={"id": shop_id, "name": shop_id.title()})
        assert response.status_code == 201

    ids = {}
    for name, price in (("phone", 1000.0), ("case", 500.0)):
        response = await client.post(
            "/api/products",
            json={"name": name.title(), "price": price, "stock": 10},
            headers=ACME,
        )
        assert response.status_code == 201
        ids[name] = response.json()["id"]
    return ids


async def _checkout(client: AsyncClient, catalog: dict[str, str]) -> dict:
    response = await client.post(
        "/api/checkout",
        json={
            "customer_name": "Dana",
            "items": [
                {"product_id": catalog["phone"], "quantity": 2},
                {"product_id": catalog["case"], "quantity": 1},
            ],
        },
        headers=ACME,
    )
    assert response.status_code == 201
    return response.json()


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Request-ID" in response.headers

    async def test_db_health(self, client):
        response = await client.get("/api/health/db")

        assert response.json()["database"]["available"] is True


class TestShops:
    async def test_duplicate_shop(self, client, catalog):
        response = await client.post("/api/shops", json={"id": "acme", "name": "Again"})

        assert response.status_code == 409
        assert response.json()["error_code"] == "DUPLICATE_SHOP"

    async def test_unknown_shop_header(self, client, catalog):
        response = await client.get(
            "/api/products", headers={"X-Shop-Id": "ghost", "X-Actor-Id": "x"}
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "SHOP_NOT_FOUND"

    async def test_missing_tenant_headers(self, client, catalog):
        response = await client.get("/api/products")

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestCheckoutAndReconcile:
    async def test_checkout_issues_numbered_invoice(self, client, catalog):
        body = await _checkout(client, catalog)

        assert body["sale"]["total_amount"] == 2500.0
        assert body["invoice"]["invoice_number"].endswith("ACME-000001")

    async def test_reconcile_flow(self, client, catalog):
        body = await _checkout(client, catalog)
        invoice_id = body["invoice"]["id"]
        phone_item = body["sale"]["items"][0]["id"]

        response = await client.post(
            f"/api/invoices/{invoice_id}/modifications",
            json={
                "modification_type": "return",
                "reason": "Screen cracked",
                "items": [{"item_id": phone_item, "quantity": 1}],
            },
            headers=ACME,
        )
        assert response.status_code == 201
        assert response.json()["new_amount"] == 1500.0

        invoice = (await client.get(f"/api/invoices/{invoice_id}", headers=ACME)).json()
        assert invoice["is_modified"] is True
        assert invoice["effective_amount"] == 1500.0
        assert invoice["original_amount"] == 2500.0
        assert invoice["items"][0]["remaining_quantity"] == 1

        log = (await client.get(f"/api/invoices/{invoice_id}/modifications", headers=ACME)).json()
        assert log["total"] == 1
        assert log["modifications"][0]["modified_by"] == "clerk-1"

    async def test_dashboard_follows_reconcile(self, client, catalog):
        body = await _checkout(client, catalog)
        before = (await client.get("/api/reports/dashboard", headers=ACME)).json()
        assert before["sales"] == 2500.0

        await client.post(
            f"/api/invoices/{body['invoice']['id']}/modifications",
            json={"modification_type": "price", "reason": "Discount", "new_amount": 2000.0},
            headers=ACME,
        )

        after = (await client.get("/api/reports/dashboard", headers=ACME)).json()
        assert after["sales"] == 2000.0

    async def test_over_return(self, client, catalog):
        body = await _checkout(client, catalog)

        response = await client.post(
            f"/api/invoices/{body['invoice']['id']}/modifications",
            json={
                "modification_type": "return",
                "reason": "Too many",
                "items": [{"item_id": body["sale"]["items"][0]["id"], "quantity": 5}],
            },
            headers=ACME,
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "OVER_RETURN"

    async def test_missing_reason(self, client, catalog):
        body = await _checkout(client, catalog)

        response = await client.post(
            f"/api/invoices/{body['invoice']['id']}/modifications",
            json={"modification_type": "price", "new_amount": 1.0},
            headers=ACME,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    async def test_non_finite_amount_rejected(self, client, catalog, literal):
        body = await _checkout(client, catalog)
        invoice_id = body["invoice"]["id"]

        # Python's JSON parser accepts these literals
        response = await client.post(
            f"/api/invoices/{invoice_id}/modifications",
            content=(
                '{"modification_type": "price", "reason": "Typo", '
                f'"new_amount": {literal}}}'
            ),
            headers={**ACME, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        invoice = (await client.get(f"/api/invoices/{invoice_id}", headers=ACME)).json()
        assert invoice["is_modified"] is False

    async def test_other_shop_cannot_read_invoice(self, client, catalog):
        body = await _checkout(client, catalog)

        response = await client.get(f"/api/invoices/{body['invoice']['id']}", headers=RIVAL)

        assert response.status_code == 403
        assert response.json()["error_code"] == "SHOP_MISMATCH"

    async def test_invoice_failure_returns_sale_id(self, client, catalog):
        use_case = AsyncMock()
        use_case.execute.side_effect = InvoiceCreationFailedError("sale-42", "database is locked", 3)
        app.dependency_overrides[get_checkout_use_case] = lambda: use_case

        response = await client.post(
            "/api/checkout",
            json={"customer_name": "Dana", "items": [{"product_id": catalog["phone"], "quantity": 1}]},
            headers=ACME,
        )

        assert response.status_code == 503
        body = response.json()
        assert body["error_code"] == "INVOICE_CREATION_FAILED"
        assert body["details"]["sale_id"] == "sale-42"
        assert response.headers["Retry-After"] == "1"


class TestExpenses:
    async def test_corrections_reach_reports(self, client, catalog):
        response = await client.post(
            "/api/expenses",
            json={"type": "utility", "amount": 400.0, "expense_date": "2025-01-05"},
            headers=ACME,
        )
        assert response.status_code == 201
        expense_id = response.json()["id"]

        # Warm both caches before the corrections land
        dashboard = (await client.get("/api/reports/dashboard", headers=ACME)).json()
        financial = (await client.get("/api/reports/financial", headers=ACME)).json()
        assert dashboard["expenses_total"] == 400.0
        assert financial["total_expenses"] == 400.0

        response = await client.patch(
            f"/api/expenses/{expense_id}", json={"amount": 150.0}, headers=ACME
        )
        assert response.status_code == 200
        dashboard = (await client.get("/api/reports/dashboard", headers=ACME)).json()
        financial = (await client.get("/api/reports/financial", headers=ACME)).json()
        assert dashboard["expenses_total"] == 150.0
        assert financial["total_expenses"] == 150.0

        response = await client.delete(f"/api/expenses/{expense_id}", headers=ACME)
        assert response.status_code == 204
        dashboard = (await client.get("/api/reports/dashboard", headers=ACME)).json()
        financial = (await client.get("/api/reports/financial", headers=ACME)).json()
        assert dashboard["expenses_total"] == 0.0
        assert financial["total_expenses"] == 0.0
        listing = (await client.get("/api/expenses", headers=ACME)).json()
        assert listing["total"] == 0

    async def test_other_shop_cannot_delete(self, client, catalog):
        response = await client.post(
            "/api/expenses", json={"type": "other", "amount": 10.0}, headers=ACME
        )
        expense_id = response.json()["id"]

        response = await client.delete(f"/api/expenses/{expense_id}", headers=RIVAL)
        assert response.status_code == 403
        assert response.json()["error_code"] == "SHOP_MISMATCH"

        response = await client.delete("/api/expenses/ghost", headers=ACME)
        assert response.status_code == 404
        assert response.json()["error_code"] == "EXPENSE_NOT_FOUND"


class TestReports:
    async def test_oversized_range_rejected(self, client, catalog):
        response = await client.get(
            "/api/reports/financial",
            params={"start": "0001-01-01", "end": "9999-12-30"},
            headers=ACME,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
