"""Job schemas for API requests and responses."""

from datetime import datetime
from typing import Any, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

JobType = Literal["internship", "full-time", "part-time", "remote"]
ExperienceLevel = Literal["fresher", "0-2", "2-5", "5+"]


class JobQuestionIn(BaseModel):
    """Question a company attaches to a posting."""
    question: str = Field(..., min_length=1)
    is_required: bool = False


class JobQuestionResponse(BaseModel):
    """Declared question."""
    id: UUID
    position: int
    question: str
    is_required: bool

    class Config:
        from_attributes = True


class EligibilityCriteria(BaseModel):
    """Optional thresholds; null means no constraint."""
    min_cgpa: Optional[float] = Field(None, ge=0, le=10)
    min_tenth_percentage: Optional[float] = Field(None, ge=0, le=100)
    min_twelfth_percentage: Optional[float] = Field(None, ge=0, le=100)
    required_graduation_year: Optional[int] = Field(None, ge=1950, le=2100)
    allowed_branches: Optional[List[str]] = None


class JobCreate(EligibilityCriteria):
    """
    Job posting request.

    `requirements`, `responsibilities` and `benefits` accept a list or
    newline-separated text; `skills` accepts a list or comma-separated text.
    """
    title: str = Field(..., min_length=1, max_length=500)
    job_type: JobType = "full-time"
    location: Optional[str] = Field(None, max_length=255)
    salary: Optional[str] = Field(None, max_length=255, description='Free text, e.g. "8 LPA" or "80k per month"')
    description: Optional[str] = None
    requirements: Optional[Union[List[str], str]] = None
    responsibilities: Optional[Union[List[str], str]] = None
    benefits: Optional[Union[List[str], str]] = None
    skills: Optional[Union[List[str], str]] = None
    experience_level: ExperienceLevel = "fresher"
    vacancies: Optional[int] = Field(1, ge=1)
    application_deadline: Optional[datetime] = None
    questions: List[JobQuestionIn] = Field(default_factory=list)


class JobUpdate(EligibilityCriteria):
    """Partial job update; omitted fields are left untouched."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    job_type: Optional[JobType] = None
    location: Optional[str] = Field(None, max_length=255)
    salary: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    requirements: Optional[Union[List[str], str]] = None
    responsibilities: Optional[Union[List[str], str]] = None
    benefits: Optional[Union[List[str], str]] = None
    skills: Optional[Union[List[str], str]] = None
    experience_level: Optional[ExperienceLevel] = None
    vacancies: Optional[int] = Field(None, ge=1)
    application_deadline: Optional[datetime] = None
    questions: Optional[List[JobQuestionIn]] = None


class JobStatusUpdate(BaseModel):
    """Owner activation toggle."""
    is_active: bool


class JobResponse(BaseModel):
    """Job as stored."""
    id: UUID
    posted_by: UUID
    company_profile_id: Optional[UUID] = None
    title: str
    company: Optional[str] = None
    job_type: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[List[str]] = None
    responsibilities: Optional[List[str]] = None
    benefits: Optional[List[str]] = None
    skills: Optional[List[str]] = None
    experience_level: Optional[str] = None
    min_cgpa: Optional[float] = None
    min_tenth_percentage: Optional[float] = None
    min_twelfth_percentage: Optional[float] = None
    required_graduation_year: Optional[int] = None
    allowed_branches: Optional[List[str]] = None
    vacancies: Optional[int] = None
    application_deadline: Optional[datetime] = None
    is_active: bool
    questions: List[JobQuestionResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CompanyJobResponse(JobResponse):
    """Company's own job with its application count."""
    application_count: int = 0


class EligibilityCheckResponse(BaseModel):
    """One criterion of the eligibility report."""
    criterion: str
    required: Any = None
    actual: Any = None
    passed: bool

    class Config:
        from_attributes = True


class StudentJobDetailResponse(BaseModel):
    """Job detail as a student sees it."""
    job: JobResponse
    eligible: bool
    eligibility: List[EligibilityCheckResponse]
    has_applied: bool
    is_saved: bool


class PendingJobResponse(BaseModel):
    """Inactive job awaiting moderation."""
    id: UUID
    title: str
    company_name: str
    owner_email: Optional[str] = None
    job_type: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    created_at: datetime
