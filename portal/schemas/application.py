"""Application schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field


class AnswerIn(BaseModel):
    """Answer to one of the job's declared questions."""
    question_id: Optional[Union[UUID, str]] = None
    answer: Optional[str] = None


class ApplicationCreate(BaseModel):
    """
    Application submission.

    Personal and education fields are a snapshot taken at submission; when
    omitted they are filled from the account and the stored profile.
    `resume` and `cover_letter_file` hold stored filenames of uploads.
    """
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None

    college: Optional[str] = None
    degree: Optional[str] = None
    education_status: Optional[str] = None
    graduation_year: Optional[int] = None
    cgpa: Optional[float] = None
    marks_type: Optional[str] = None

    skills: Optional[Union[List[str], str]] = None
    projects: Optional[str] = None
    extracurricular: Optional[str] = None
    cover_letter_text: Optional[str] = None

    resume: Optional[str] = None
    cover_letter_file: Optional[str] = None

    answers: List[Any] = Field(default_factory=list)


class ApplicationAnswerResponse(BaseModel):
    """Stored answer with its question text."""
    question_id: UUID
    position: int
    question: Optional[str] = None
    answer: str


class ApplicationResponse(BaseModel):
    """Application as stored."""
    id: UUID
    student_id: UUID
    job_id: UUID
    job_title: Optional[str] = None
    company: Optional[str] = None
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    personal_info: Optional[Dict[str, Any]] = None
    education: Optional[Dict[str, Any]] = None
    skills: Optional[List[str]] = None
    projects: Optional[str] = None
    extracurricular: Optional[str] = None
    resume: Optional[str] = None
    cover_letter_file: Optional[str] = None
    cover_letter_text: Optional[str] = None
    status: str
    eligibility_ok: bool
    applied_at: datetime
    answers: List[ApplicationAnswerResponse] = Field(default_factory=list)

    @classmethod
    def from_model(cls, application) -> "ApplicationResponse":
        """Build from an Application row whose job, student and answers are loaded."""
        job = application.job
        student = application.student
        return cls(
            id=application.id,
            student_id=application.student_id,
            job_id=application.job_id,
            job_title=job.title if job else None,
            company=job.company if job else None,
            student_name=student.name if student else None,
            student_email=student.email if student else None,
            personal_info=application.personal_info,
            education=application.education,
            skills=application.skills,
            projects=application.projects,
            extracurricular=application.extracurricular,
            resume=application.resume,
            cover_letter_file=application.cover_letter_file,
            cover_letter_text=application.cover_letter_text,
            status=application.status,
            eligibility_ok=application.eligibility_ok,
            applied_at=application.applied_at,
            answers=[
                ApplicationAnswerResponse(
                    question_id=a.question_id,
                    position=a.position,
                    question=a.question.question if a.question else None,
                    answer=a.answer,
                )
                for a in application.answers
            ],
        )


class ApplicationSubmitResponse(BaseModel):
    """Submission result."""
    success: bool = True
    message: str
    application: ApplicationResponse


class StatusUpdateRequest(BaseModel):
    """New status; checked against the status vocabulary by the service."""
    status: str
