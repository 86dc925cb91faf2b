"""Authentication schemas."""

from __future__ import annotations  # Enable forward references

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class StudentSignupRequest(BaseModel):
    """Student signup request schema."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters")


class CompanySignupRequest(BaseModel):
    """Company signup request schema."""

    name: str = Field(..., min_length=1, max_length=255, description="Contact person name")
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters")
    company_name: str = Field(..., min_length=1, max_length=255)
    industry: Optional[str] = Field("", max_length=100)


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str
    role: Literal["student", "company", "admin"]


class DemoLoginRequest(BaseModel):
    """Demo login request schema."""

    role: Literal["student", "company"]
    email: Optional[EmailStr] = None


class UserResponse(BaseModel):
    """User response schema."""

    id: UUID
    email: str
    name: str
    role: str
    is_demo: bool
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Access token plus the authenticated user."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse
