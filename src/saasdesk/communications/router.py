"""
Email content API router.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from saasdesk.communications.models import EmailCampaign, EmailTemplate
from saasdesk.dependencies import get_data_store
from saasdesk.store.interfaces import DataStore

router = APIRouter(tags=["Communications"])


@router.get("/email-templates", response_model=list[EmailTemplate])
async def list_email_templates(
    store: Annotated[DataStore, Depends(get_data_store)],
) -> list[EmailTemplate]:
    return await store.get_email_templates()


@router.get("/email-campaigns", response_model=list[EmailCampaign])
async def list_email_campaigns(
    store: Annotated[DataStore, Depends(get_data_store)],
) -> list[EmailCampaign]:
    return await store.get_email_campaigns()
