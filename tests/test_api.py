"""
Tests for the read endpoints and application wiring.
"""

import pytest
import pytest_asyncio
from fastapi import status
from httpx import ASGITransport, AsyncClient

from saasdesk.main import create_application
from saasdesk.store.memory import InMemoryDataStore

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def async_client():
    app = create_application(data_store=InMemoryDataStore.with_demo_data())
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] == "memory"


class TestCatalogEndpoints:
    @pytest.mark.asyncio
    async def test_list_users(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/users")

        assert response.status_code == status.HTTP_200_OK
        assert {u["email"] for u in response.json()} == {
            "admin@example.com",
            "user1@example.com",
            "user2@example.com",
        }

    @pytest.mark.asyncio
    async def test_get_missing_user(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/users/missing")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "USER_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_list_plans(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/plans")

        assert response.status_code == status.HTTP_200_OK
        prices = {p["name"]: p["price"] for p in response.json()}
        assert prices == {
            "Basic Plan": "29.99",
            "Pro Plan": "99.99",
            "Enterprise Plan": "299.99",
        }

    @pytest.mark.asyncio
    async def test_get_missing_plan(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/plans/missing")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "PLAN_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_invoices_and_transactions(self, async_client: AsyncClient):
        invoices = await async_client.get("/api/v1/invoices")
        transactions = await async_client.get("/api/v1/transactions")

        assert {i["status"] for i in invoices.json()} == {"PAID", "UNPAID"}
        assert {t["status"] for t in transactions.json()} == {"COMPLETED", "PENDING"}

    @pytest.mark.asyncio
    async def test_email_content(self, async_client: AsyncClient):
        templates = await async_client.get("/api/v1/email-templates")
        campaigns = await async_client.get("/api/v1/email-campaigns")

        assert {t["name"] for t in templates.json()} == {"Welcome Email", "Magic Link"}
        assert {c["status"] for c in campaigns.json()} == {"SENT", "DRAFT"}


class TestDashboardEndpoints:
    @pytest.mark.asyncio
    async def test_dashboard_stats(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/dashboard/stats")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total_users"] == 3
        assert data["active_subscriptions"] == 1
        assert data["total_revenue"] == "29.99"
        assert data["pending_transactions"] == 1
        assert data["expired_trials"] == 0

    @pytest.mark.asyncio
    async def test_billing_summary(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/users/3/billing-summary")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["current_subscription"]["status"] == "TRIALING"
        assert data["total_paid"] == "0"
        assert data["total_pending"] == "99.99"
        assert len(data["invoices"]) == 1

    @pytest.mark.asyncio
    async def test_billing_summary_unknown_user(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/users/missing/billing-summary")

        assert response.status_code == status.HTTP_404_NOT_FOUND
