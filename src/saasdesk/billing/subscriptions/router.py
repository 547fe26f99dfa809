"""
Subscription API router.

Creation always answers with the structured creation result; lifecycle
endpoints raise billing errors which the application handler renders.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from saasdesk.billing.subscriptions.models import (
    RenewalResult,
    Subscription,
    SubscriptionCancelRequest,
    SubscriptionCreationResult,
    SubscriptionEvent,
    SubscriptionRequest,
    SubscriptionStatusUpdateRequest,
)
from saasdesk.billing.subscriptions.service import (
    PLAN_NOT_FOUND_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
    SubscriptionManager,
)
from saasdesk.dependencies import get_data_store, get_subscription_manager
from saasdesk.store.interfaces import DataStore

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])

_NOT_FOUND_MESSAGES = frozenset({PLAN_NOT_FOUND_MESSAGE, USER_NOT_FOUND_MESSAGE})


def _creation_status_code(result: SubscriptionCreationResult) -> int:
    if result.success:
        return status.HTTP_201_CREATED
    if result.message in _NOT_FOUND_MESSAGES:
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@router.post(
    "",
    response_model=SubscriptionCreationResult,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": SubscriptionCreationResult}, 500: {"model": SubscriptionCreationResult}},
)
async def create_subscription(
    request: SubscriptionRequest,
    manager: Annotated[SubscriptionManager, Depends(get_subscription_manager)],
) -> JSONResponse:
    """
    Create a subscription with its invoice and transaction.

    The body is the creation result in every case; the status code tells
    success (201), unknown user or plan (404) and internal failure (500).
    """
    result = await manager.create_subscription(request)
    return JSONResponse(
        status_code=_creation_status_code(result),
        content=result.model_dump(mode="json"),
    )


@router.get("", response_model=list[Subscription])
async def list_subscriptions(
    store: Annotated[DataStore, Depends(get_data_store)],
    user_id: Annotated[str | None, Query(description="Only this user's subscriptions")] = None,
) -> list[Subscription]:
    """List subscriptions, newest first."""
    return await store.get_subscriptions(user_id=user_id)


@router.get("/{subscription_id}", response_model=Subscription)
async def get_subscription(
    subscription_id: str,
    manager: Annotated[SubscriptionManager, Depends(get_subscription_manager)],
) -> Subscription:
    return await manager.get_subscription(subscription_id)


@router.get("/{subscription_id}/events", response_model=list[SubscriptionEvent])
async def get_subscription_events(
    subscription_id: str,
    manager: Annotated[SubscriptionManager, Depends(get_subscription_manager)],
) -> list[SubscriptionEvent]:
    """Audit trail of a subscription, oldest first."""
    return await manager.get_events(subscription_id)


@router.post("/{subscription_id}/status", response_model=Subscription)
async def update_subscription_status(
    subscription_id: str,
    update: SubscriptionStatusUpdateRequest,
    manager: Annotated[SubscriptionManager, Depends(get_subscription_manager)],
) -> Subscription:
    """Change a subscription's status, e.g. approve a bank transfer."""
    return await manager.update_subscription_status(
        subscription_id,
        update.status,
        reason=update.reason,
        changed_by=update.changed_by,
    )


@router.post("/{subscription_id}/cancel", response_model=Subscription)
async def cancel_subscription(
    subscription_id: str,
    cancel: SubscriptionCancelRequest,
    manager: Annotated[SubscriptionManager, Depends(get_subscription_manager)],
) -> Subscription:
    return await manager.cancel_subscription(
        subscription_id,
        reason=cancel.reason,
        effective_date=cancel.effective_date,
    )


@router.post("/{subscription_id}/renew", response_model=RenewalResult)
async def renew_subscription(
    subscription_id: str,
    manager: Annotated[SubscriptionManager, Depends(get_subscription_manager)],
) -> RenewalResult:
    """Run the renewal for a subscription whose period has ended."""
    result = await manager.process_renewal(subscription_id)
    logger.info(
        "subscription.renewal.requested",
        subscription_id=subscription_id,
        renewed=result.renewed,
    )
    return result
