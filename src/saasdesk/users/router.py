"""
User API router.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from saasdesk.billing.dashboard import DashboardService
from saasdesk.billing.exceptions import UserNotFoundError
from saasdesk.billing.subscriptions.models import BillingSummary
from saasdesk.dependencies import get_dashboard_service, get_data_store
from saasdesk.store.interfaces import DataStore
from saasdesk.users.models import User

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=list[User])
async def list_users(store: Annotated[DataStore, Depends(get_data_store)]) -> list[User]:
    return await store.get_users()


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    store: Annotated[DataStore, Depends(get_data_store)],
) -> User:
    user = await store.get_user(user_id)
    if user is None:
        raise UserNotFoundError(f"User {user_id} not found", user_id=user_id)
    return user


@router.get("/{user_id}/billing-summary", response_model=BillingSummary)
async def get_billing_summary(
    user_id: str,
    store: Annotated[DataStore, Depends(get_data_store)],
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> BillingSummary:
    """Current subscription and payment totals for the subscriber portal."""
    if await store.get_user(user_id) is None:
        raise UserNotFoundError(f"User {user_id} not found", user_id=user_id)
    return await service.get_billing_summary(user_id)
