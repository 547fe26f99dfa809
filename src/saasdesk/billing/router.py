"""
Billing read API: plans, invoices, transactions and dashboard figures.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from saasdesk.billing.dashboard import DashboardService
from saasdesk.billing.exceptions import PlanNotFoundError
from saasdesk.billing.subscriptions.models import DashboardStats, Invoice, Plan, Transaction
from saasdesk.dependencies import get_dashboard_service, get_data_store
from saasdesk.store.interfaces import DataStore

router = APIRouter(tags=["Billing"])


@router.get("/plans", response_model=list[Plan])
async def list_plans(
    store: Annotated[DataStore, Depends(get_data_store)],
    active_only: Annotated[bool, Query(description="Hide retired plans")] = False,
) -> list[Plan]:
    plans = await store.get_plans()
    if active_only:
        plans = [p for p in plans if p.is_active]
    return plans


@router.get("/plans/{plan_id}", response_model=Plan)
async def get_plan(
    plan_id: str,
    store: Annotated[DataStore, Depends(get_data_store)],
) -> Plan:
    plan = await store.get_plan(plan_id)
    if plan is None:
        raise PlanNotFoundError(f"Plan {plan_id} not found", plan_id=plan_id)
    return plan


@router.get("/invoices", response_model=list[Invoice])
async def list_invoices(
    store: Annotated[DataStore, Depends(get_data_store)],
    subscription_id: Annotated[str | None, Query()] = None,
) -> list[Invoice]:
    """List invoices, newest first."""
    return await store.get_invoices(subscription_id)


@router.get("/transactions", response_model=list[Transaction])
async def list_transactions(
    store: Annotated[DataStore, Depends(get_data_store)],
    subscription_id: Annotated[str | None, Query()] = None,
) -> list[Transaction]:
    """List transactions, newest first."""
    return await store.get_transactions(subscription_id)


@router.get("/dashboard/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> DashboardStats:
    """Figures for the administration dashboard."""
    return await service.get_stats()
