"""Company profile schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from portal.utils.validators import validate_url


class Address(BaseModel):
    """Postal address, every part optional."""

    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None


class CompanySocialLinks(BaseModel):
    """Company social profiles."""

    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None


class CompanyProfileUpdate(BaseModel):
    """Partial company profile update; omitted fields are left untouched."""

    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    industry: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=500)
    size: Optional[str] = Field(None, max_length=50)
    founded: Optional[int] = Field(None, ge=1800, le=2100)
    description: Optional[str] = None
    contact_person: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[Address] = None
    social_links: Optional[CompanySocialLinks] = None

    @field_validator("website")
    @classmethod
    def website_must_be_url(cls, v: Optional[str]) -> Optional[str]:
        if v and not validate_url(v.strip()):
            raise ValueError("website must be an http(s) URL")
        return v.strip() if v else v


class CompanyProfileResponse(BaseModel):
    """Company profile as stored."""

    id: UUID
    user_id: UUID
    company_name: str
    industry: Optional[str] = None
    website: Optional[str] = None
    size: Optional[str] = None
    founded: Optional[int] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[dict] = None
    social_links: Optional[dict] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
