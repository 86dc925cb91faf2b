"""Webhook endpoints for the n8n automation."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_db, require_webhook_secret
from portal.schemas.webhook import CompanyWebhookPayload, WebhookResponse
from portal.services.webhook_service import WebhookService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/n8n")
async def n8n_status():
    """Liveness probe for the automation."""
    return {"success": True, "message": "n8n API base endpoint is active!"}


@router.post("/n8n/company-profile", response_model=WebhookResponse)
async def upsert_company_profile(
    payload: CompanyWebhookPayload,
    response: Response,
    presented_secret: Optional[str] = Depends(require_webhook_secret),
    db: AsyncSession = Depends(get_db),
):
    """
    Create or update a company profile

    **Auth**: `X-Webhook-Secret` or `X-N8N-Secret` header when a webhook
    secret is configured.

    Answers 201 when the profile was created and 200 when it was updated.
    Only fields present in the payload overwrite stored values.
    """
    profile, created = await WebhookService(db).upsert_company_from_webhook(presented_secret, payload)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return WebhookResponse(
        message="Company profile created" if created else "Company profile updated",
        created=created,
        profile_id=str(profile.id),
    )
