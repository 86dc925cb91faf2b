"""Admin schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from portal.schemas.company import CompanyProfileResponse
from portal.schemas.student import StudentProfileResponse


class AdminStudentItem(BaseModel):
    """Student account with its profile"""
    id: UUID
    name: str
    email: str
    is_demo: bool
    is_active: bool
    created_at: datetime
    profile: Optional[StudentProfileResponse] = None


class AdminCompanyItem(BaseModel):
    """Company account with its profile"""
    id: UUID
    name: str
    email: str
    is_demo: bool
    is_active: bool
    created_at: datetime
    profile: Optional[CompanyProfileResponse] = None


class ActionResponse(BaseModel):
    """Generic action acknowledgement"""
    success: bool = True
    message: str
