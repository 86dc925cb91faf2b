"""Webhook payload schemas."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class WebhookAddress(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = Field(None, alias="zipCode")


class WebhookSocialLinks(BaseModel):
    model_config = ConfigDict(extra="ignore")

    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None


class CompanyWebhookPayload(BaseModel):
    """
    Company profile pushed by n8n.

    Keys arrive camelCase (`companyName`, `contactPerson`, ...); snake_case
    is accepted too. `email` and `companyName` are required but checked by
    the service so a missing value answers 400 rather than 422.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: Optional[str] = None
    company_name: Optional[str] = Field(None, alias="companyName")
    industry: Optional[str] = None
    website: Optional[str] = None
    size: Optional[str] = None
    founded: Optional[int] = None
    description: Optional[str] = None
    contact_person: Optional[str] = Field(None, alias="contactPerson")
    phone: Optional[str] = None
    logo: Optional[str] = None
    address: Optional[WebhookAddress] = None
    social_links: Optional[WebhookSocialLinks] = Field(None, alias="socialLinks")

    def profile_fields(self) -> Dict[str, Any]:
        """Supplied profile fields in storage naming; absent ones are omitted."""
        data = self.model_dump(exclude_none=True, exclude={"email", "logo"})
        return {k: v for k, v in data.items() if v != {}}


class WebhookResponse(BaseModel):
    success: bool = True
    message: str
    created: bool
    profile_id: str
