"""
Webhook Service
Company profile upserts pushed by the n8n automation.
"""

import hmac
import secrets
from typing import Any, Dict, Optional, Tuple

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.config import settings
from portal.core.exceptions import BadRequest, Unauthorized, ValidationError
from portal.core.security import get_password_hash
from portal.models.company import CompanyProfile
from portal.models.user import User
from portal.schemas.webhook import CompanyWebhookPayload
from portal.services.profile_service import ProfileService
from portal.utils.validators import validate_email

logger = structlog.get_logger(__name__)


def verify_webhook_secret(presented: Optional[str]) -> None:
    """
    Check the presented secret against WEBHOOK_SECRET.

    An empty WEBHOOK_SECRET disables the check.
    """
    expected = settings.WEBHOOK_SECRET
    if not expected:
        return
    if not presented or not hmac.compare_digest(presented.encode(), expected.encode()):
        raise Unauthorized("Invalid webhook secret")


class WebhookService:
    """Upserts driven by external automation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert_company_from_webhook(
        self, presented_secret: Optional[str], payload: CompanyWebhookPayload
    ) -> Tuple[CompanyProfile, bool]:
        """
        Find-or-create the company account and profile, then overwrite
        only the fields the payload carries.

        Returns:
            (profile, created) where created is True when the profile is new

        Raises:
            Unauthorized: Secret configured and not matched
            BadRequest: email or companyName missing
            ValidationError: Email belongs to a non-company account
        """
        verify_webhook_secret(presented_secret)

        email = (payload.email or "").strip().lower()
        company_name = (payload.company_name or "").strip()
        if not email or not company_name:
            raise BadRequest("Email and companyName are required")
        if not validate_email(email):
            raise BadRequest("Invalid email address")

        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is not None and user.role != "company":
            raise ValidationError("Email is registered to a non-company account")

        if user is None:
            user = User(
                email=email,
                name=(payload.contact_person or company_name).strip(),
                # Throwaway credential; the company resets it to sign in
                password_hash=get_password_hash(secrets.token_urlsafe(24)),
                role="company",
            )
            self.db.add(user)
            await self.db.flush()
            logger.info("webhook_company_user_created", user_id=str(user.id), email=email)

        profiles = ProfileService(self.db)
        profile, created = await profiles.ensure_company_profile(
            user.id, company_name, payload.industry or ""
        )

        fields: Dict[str, Any] = payload.profile_fields()
        written = profiles.apply_company_fields(profile, fields)
        if payload.logo:
            profile.logo = payload.logo
            written.append("logo")

        await self.db.commit()
        await self.db.refresh(profile)

        logger.info(
            "webhook_company_upserted",
            profile_id=str(profile.id),
            email=email,
            created=created,
            fields=written,
        )
        return profile, created
