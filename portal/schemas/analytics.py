"""Dashboard and analytics schemas."""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from portal.schemas.job import PendingJobResponse
from portal.schemas.student import RecentApplicationItem


class DailyCount(BaseModel):
    date: str
    count: int


class TopJob(BaseModel):
    job_id: UUID
    title: str
    count: int


class LabelCount(BaseModel):
    label: str
    count: int


class AnalyticsOverview(BaseModel):
    total_jobs: int
    active_jobs: int
    pending_jobs: int
    total_applications: int
    recent_applications: int
    interviews: int
    hired: int
    conversion_rate: int
    interview_to_hire_rate: int


class CompanyAnalyticsResponse(BaseModel):
    """Company analytics over a trailing window."""
    overview: AnalyticsOverview
    applications_by_status: Dict[str, int]
    daily_applications: List[DailyCount]
    top_jobs: List[TopJob]
    top_colleges: List[LabelCount]
    top_skills: List[LabelCount]


class DashboardJob(BaseModel):
    id: UUID
    title: str
    job_type: Optional[str] = None
    location: Optional[str] = None
    created_at: datetime
    application_count: int


class CompanyDashboardResponse(BaseModel):
    """Company dashboard summary."""
    total_jobs: int
    active_jobs: int
    pending_jobs: int
    total_applications: int
    new_applications: int
    interviews: int
    recent_applications: List[RecentApplicationItem]
    recent_jobs: List[DashboardJob]


class AdminStats(BaseModel):
    total_students: int
    total_companies: int
    active_jobs: int
    pending_jobs: int
    total_jobs: int
    total_applications: int
    placed_students: int
    average_package: Optional[float] = None


class RecentUser(BaseModel):
    id: UUID
    name: str
    email: str
    created_at: datetime


class AdminDashboardResponse(BaseModel):
    """Admin dashboard summary."""
    stats: AdminStats
    recent_jobs: List[PendingJobResponse]
    pending_jobs: List[PendingJobResponse]
    recent_applications: List[RecentApplicationItem]
    recent_students: List[RecentUser]
    recent_companies: List[RecentUser]
