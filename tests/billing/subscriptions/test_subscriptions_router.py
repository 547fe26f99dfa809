"""
Tests for the subscription API endpoints.
"""

import pytest
import pytest_asyncio
from fastapi import status
from httpx import ASGITransport, AsyncClient

from saasdesk.communications.email_service import OutboxEmailSender
from saasdesk.main import create_application
from saasdesk.store.memory import InMemoryDataStore

pytestmark = pytest.mark.integration


@pytest.fixture
def api_store() -> InMemoryDataStore:
    return InMemoryDataStore.with_demo_data()


@pytest.fixture
def api_outbox(api_store) -> OutboxEmailSender:
    return OutboxEmailSender(api_store)


@pytest_asyncio.fixture
async def async_client(api_store, api_outbox):
    app = create_application(data_store=api_store, email_sender=api_outbox)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


class TestCreateSubscription:
    @pytest.mark.asyncio
    async def test_create_with_card(self, async_client: AsyncClient, api_outbox):
        response = await async_client.post(
            "/api/v1/subscriptions",
            json={"user_id": "2", "plan_id": "1", "payment_method": "CARD"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["success"] is True
        assert data["subscription"]["status"] == "ACTIVE"
        assert data["invoice"]["status"] == "PAID"
        assert data["invoice"]["amount"] == "29.99"
        assert data["transaction"]["status"] == "COMPLETED"
        assert data["confirmation_data"]["title"] == "Subscription Confirmed"
        assert len(api_outbox.outbox) == 1

    @pytest.mark.asyncio
    async def test_create_trial(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/v1/subscriptions",
            json={
                "user_id": "2",
                "plan_id": "2",
                "payment_method": "CARD",
                "requires_payment": False,
                "has_trial_period": True,
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["subscription"]["status"] == "TRIALING"
        assert data["subscription"]["trial_end_date"] is not None
        assert data["invoice"]["amount"] == "0"

    @pytest.mark.asyncio
    async def test_unknown_plan(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/v1/subscriptions", json={"user_id": "2", "plan_id": "missing"}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {
            "success": False,
            "message": "Plan not found",
            "subscription": None,
            "invoice": None,
            "transaction": None,
            "confirmation_data": None,
        }

    @pytest.mark.asyncio
    async def test_unknown_user(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/v1/subscriptions", json={"user_id": "missing", "plan_id": "1"}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "User not found"

    @pytest.mark.asyncio
    async def test_invalid_payment_method_rejected(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/v1/subscriptions",
            json={"user_id": "2", "plan_id": "1", "payment_method": "BITCOIN"},
        )

        assert response.status_code == 422


class TestSubscriptionQueries:
    @pytest.mark.asyncio
    async def test_list_filtered_by_user(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/subscriptions", params={"user_id": "3"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [s["id"] for s in data] == ["2"]

    @pytest.mark.asyncio
    async def test_get_subscription(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/subscriptions/1")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["plan_id"] == "1"

    @pytest.mark.asyncio
    async def test_get_missing_subscription(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/subscriptions/missing")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        data = response.json()
        assert data["error_code"] == "SUBSCRIPTION_NOT_FOUND"
        assert data["context"] == {"subscription_id": "missing"}


class TestSubscriptionLifecycleEndpoints:
    @pytest.mark.asyncio
    async def test_approve_bank_transfer(self, async_client: AsyncClient):
        created = await async_client.post(
            "/api/v1/subscriptions",
            json={"user_id": "3", "plan_id": "2", "payment_method": "BANK_TRANSFER"},
        )
        subscription_id = created.json()["subscription"]["id"]

        response = await async_client.post(
            f"/api/v1/subscriptions/{subscription_id}/status",
            json={"status": "ACTIVE", "reason": "transfer received", "changed_by": "1"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "ACTIVE"

        invoices = await async_client.get(
            "/api/v1/invoices", params={"subscription_id": subscription_id}
        )
        assert invoices.json()[0]["status"] == "PAID"

        events = await async_client.get(f"/api/v1/subscriptions/{subscription_id}/events")
        assert [e["event_type"] for e in events.json()] == [
            "subscription.created",
            "subscription.status_changed",
        ]

    @pytest.mark.asyncio
    async def test_invalid_transition(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/v1/subscriptions/1/status", json={"status": "PENDING_APPROVAL"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INVALID_SUBSCRIPTION_STATE"

    @pytest.mark.asyncio
    async def test_cancel(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/v1/subscriptions/2/cancel", json={"reason": "switching provider"}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "INACTIVE"
        assert data["auto_renewal"] is False

    @pytest.mark.asyncio
    async def test_renew_not_due(self, async_client: AsyncClient):
        response = await async_client.post("/api/v1/subscriptions/1/renew")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["renewed"] is False
        assert data["invoice"] is None
