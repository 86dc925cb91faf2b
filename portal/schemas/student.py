"""
Pydantic schemas for Student APIs
Profile, saved jobs and dashboard payloads
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field


class StudentProfileUpdate(BaseModel):
    """
    Partial student profile update

    Only the fields sent are written. `skills` accepts either a list or a
    comma-separated string ("Python, SQL, React").
    """
    college: Optional[str] = Field(None, max_length=255, description="Institution name")
    course: Optional[str] = Field(None, max_length=255, description="Program (e.g., B.Tech, MCA)")
    specialization: Optional[str] = Field(None, max_length=255)
    branch: Optional[str] = Field(None, max_length=100, description="Branch/department (e.g., CS, EE)")
    graduation_year: Optional[int] = Field(None, ge=1950, le=2100)
    tenth_percentage: Optional[float] = Field(None, ge=0, le=100)
    twelfth_percentage: Optional[float] = Field(None, ge=0, le=100)
    cgpa: Optional[float] = Field(None, ge=0, le=10, description="CGPA on a 10-point scale")
    phone: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[date] = None
    skills: Optional[Union[List[str], str]] = None
    social_links: Optional[Dict[str, str]] = None


class StudentProfileResponse(BaseModel):
    """Student profile as stored"""
    id: UUID
    user_id: UUID
    college: Optional[str] = None
    course: Optional[str] = None
    specialization: Optional[str] = None
    branch: Optional[str] = None
    graduation_year: Optional[int] = None
    tenth_percentage: Optional[float] = None
    twelfth_percentage: Optional[float] = None
    cgpa: Optional[float] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    skills: Optional[List[str]] = None
    social_links: Optional[Dict[str, str]] = None
    resume: Optional[str] = None
    profile_completion: int = Field(0, ge=0, le=100)
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SavedJobToggleResponse(BaseModel):
    """Result of a save/unsave toggle"""
    job_id: UUID
    saved: bool
    message: str


class RecentApplicationItem(BaseModel):
    """Compact application row for dashboards"""
    id: UUID
    job_id: UUID
    job_title: Optional[str] = None
    company: Optional[str] = None
    student_name: Optional[str] = None
    status: str
    applied_at: datetime


class StudentDashboardResponse(BaseModel):
    """Student dashboard summary"""
    active_jobs: int
    total_applications: int
    pending_applications: int
    interviews: int
    profile_completion: int = Field(..., ge=0, le=100)
    recent_applications: List[RecentApplicationItem]
