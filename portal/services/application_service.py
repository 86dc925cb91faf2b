"""
Application Service
Submission, status lifecycle, withdrawal and listings of job applications.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.config import settings
from portal.core.exceptions import (
    DuplicateApplication,
    Forbidden,
    InvalidState,
    InvalidStatus,
    NotFound,
    ValidationError,
)
from portal.models.application import Application, ApplicationAnswer
from portal.models.job import Job
from portal.models.user import User
from portal.schemas.application import ApplicationCreate
from portal.services.eligibility import evaluate_eligibility
from portal.services.profile_service import ProfileService, calculate_profile_completion
from portal.services.storage import LocalUploadStorage
from portal.utils.helpers import clean_optional, split_csv

logger = structlog.get_logger(__name__)


class ApplicationStatus(str, Enum):
    """Application status vocabulary (exact, case-sensitive)."""

    APPLIED = "applied"
    UNDER_REVIEW = "under_review"
    SHORTLISTED = "shortlisted"
    INTERVIEW = "interview"
    REJECTED = "rejected"
    ACCEPTED = "accepted"


STATUS_VALUES = frozenset(s.value for s in ApplicationStatus)

# Pre-review states a student may still withdraw from
EARLY_STATUSES = frozenset(
    {
        ApplicationStatus.APPLIED.value,
        ApplicationStatus.UNDER_REVIEW.value,
        ApplicationStatus.SHORTLISTED.value,
    }
)

# Forward order used when transitions are enforced; accepted and rejected are terminal
STATUS_ORDER = {
    ApplicationStatus.APPLIED.value: 0,
    ApplicationStatus.UNDER_REVIEW.value: 1,
    ApplicationStatus.SHORTLISTED.value: 2,
    ApplicationStatus.INTERVIEW.value: 3,
    ApplicationStatus.ACCEPTED.value: 4,
    ApplicationStatus.REJECTED.value: 4,
}
TERMINAL_STATUSES = frozenset({ApplicationStatus.ACCEPTED.value, ApplicationStatus.REJECTED.value})


def is_allowed_transition(current: str, new: str) -> bool:
    """
    Forward-only lifecycle check.

    applied → under_review → shortlisted → interview → {accepted, rejected}.
    Skipping ahead is allowed, rejection is reachable from any open state,
    re-setting the current status is a no-op, terminal states never move.
    """
    if current == new:
        return True
    if current in TERMINAL_STATUSES:
        return False
    return STATUS_ORDER.get(new, -1) > STATUS_ORDER.get(current, -1)


class ApplicationService:
    """
    Application workflow.

    Every operation receives the acting user's id explicitly; ownership is
    checked here, role membership is checked by the API dependencies.
    """

    def __init__(self, db: AsyncSession, storage: Optional[LocalUploadStorage] = None):
        self.db = db
        self.storage = storage

    async def _get_application(self, application_id: UUID) -> Application:
        result = await self.db.execute(select(Application).where(Application.id == application_id))
        application = result.unique().scalar_one_or_none()
        if application is None:
            raise NotFound("Application not found")
        return application

    @staticmethod
    def _valid_answers(job: Job, raw_answers: List[Any]) -> List[ApplicationAnswer]:
        """
        Keep answers that reference one of this job's questions.

        Entries with an unknown or foreign question id, a repeated question,
        or blank text are dropped without failing the submission.
        """
        questions = {q.id: q for q in job.questions}
        seen = set()
        answers = []
        for raw in raw_answers or []:
            if hasattr(raw, "model_dump"):
                raw = raw.model_dump()
            if not isinstance(raw, dict):
                continue
            try:
                question_id = UUID(str(raw.get("question_id") or "").strip())
            except ValueError:
                continue
            text = raw.get("answer")
            question = questions.get(question_id)
            if question is None or question_id in seen:
                continue
            if not isinstance(text, str) or not text.strip():
                continue
            seen.add(question_id)
            answers.append(
                ApplicationAnswer(
                    question_id=question.id,
                    position=question.position,
                    answer=text.strip(),
                    question=question,
                )
            )
        return sorted(answers, key=lambda a: a.position)

    async def submit(self, student_user_id: UUID, job_id: UUID, payload: ApplicationCreate) -> Application:
        """
        Submit an application.

        Eligibility is evaluated once against the stored profile and kept on
        the record; an ineligible student may still apply. The application
        and its answers are written in one transaction.

        Raises:
            NotFound: Unknown student, or job missing/inactive
            DuplicateApplication: The student already applied to this job
            ValidationError: No resume uploaded and none on the profile
        """
        student = await self.db.get(User, student_user_id)
        if student is None or student.role != "student":
            raise NotFound("Student not found")

        result = await self.db.execute(select(Job).where(Job.id == job_id, Job.is_active.is_(True)))
        job = result.unique().scalar_one_or_none()
        if job is None:
            raise NotFound("Job not found")

        existing = await self.db.execute(
            select(Application.id).where(
                Application.student_id == student_user_id,
                Application.job_id == job_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateApplication()

        profile = await ProfileService(self.db).ensure_student_profile(student_user_id)

        uploaded_resume = clean_optional(payload.resume)
        resume = uploaded_resume or profile.resume
        if settings.REQUIRE_RESUME_FOR_APPLICATION and not resume:
            raise ValidationError(
                "Please upload your resume before applying or ensure it exists in your profile."
            )

        eligible = evaluate_eligibility(job, profile)
        answers = self._valid_answers(job, payload.answers)

        application = Application(
            student_id=student_user_id,
            job_id=job_id,
            personal_info={
                "full_name": clean_optional(payload.full_name) or student.name,
                "email": clean_optional(payload.email) or student.email,
                "phone": clean_optional(payload.phone) or profile.phone,
                "linkedin": clean_optional(payload.linkedin) or (profile.social_links or {}).get("linkedin"),
            },
            education={
                "college": clean_optional(payload.college) or profile.college,
                "degree": clean_optional(payload.degree) or profile.course,
                "status": clean_optional(payload.education_status),
                "graduation_year": payload.graduation_year or profile.graduation_year,
                "cgpa": payload.cgpa if payload.cgpa is not None else profile.cgpa,
                "marks_type": clean_optional(payload.marks_type),
            },
            skills=split_csv(payload.skills) if payload.skills else list(profile.skills or []),
            projects=payload.projects,
            extracurricular=payload.extracurricular,
            resume=resume,
            cover_letter_file=clean_optional(payload.cover_letter_file),
            cover_letter_text=clean_optional(payload.cover_letter_text),
            status=ApplicationStatus.APPLIED.value,
            eligibility_ok=eligible,
            applied_at=datetime.utcnow(),
            answers=answers,
        )
        application.job = job
        application.student = student
        self.db.add(application)

        replaced_resume = None
        if uploaded_resume and uploaded_resume != profile.resume:
            replaced_resume = profile.resume
            profile.resume = uploaded_resume
            profile.profile_completion = calculate_profile_completion(profile)

        try:
            await self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent submission for the same pair
            await self.db.rollback()
            raise DuplicateApplication()

        await self.db.commit()

        if replaced_resume:
            await ProfileService(self.db, self.storage).discard_resume_file(replaced_resume)

        logger.info(
            "application_submitted",
            application_id=str(application.id),
            student_id=str(student_user_id),
            job_id=str(job_id),
            eligible=eligible,
            answers=len(answers),
            dropped_answers=len(payload.answers or []) - len(answers),
        )
        return application

    async def update_status(
        self,
        application_id: UUID,
        new_status: str,
        acting_user_id: UUID,
        acting_role: str = "company",
    ) -> Application:
        """
        Set an application's status.

        Only the company owning the job (or an admin) may act. The new value
        overwrites the old one unless ENFORCE_STATUS_TRANSITIONS is on, in
        which case backward or post-terminal moves raise InvalidState.
        """
        if new_status not in STATUS_VALUES:
            raise InvalidStatus(
                f"Invalid status '{new_status}'. Allowed: {', '.join(s.value for s in ApplicationStatus)}"
            )

        application = await self._get_application(application_id)
        job = application.job
        if job is None:
            raise NotFound("Job not found")

        if acting_role != "admin" and job.posted_by != acting_user_id:
            raise Forbidden("You can only update applications for your own jobs")

        previous = application.status
        if settings.ENFORCE_STATUS_TRANSITIONS and not is_allowed_transition(previous, new_status):
            raise InvalidState(f"Cannot move application from '{previous}' to '{new_status}'")

        application.status = new_status
        await self.db.commit()

        logger.info(
            "application_status_updated",
            application_id=str(application_id),
            previous_status=previous,
            status=new_status,
            acting_user_id=str(acting_user_id),
            acting_role=acting_role,
        )
        return application

    async def withdraw(self, application_id: UUID, student_user_id: UUID) -> None:
        """
        Delete the student's own application while it is still in review.

        Raises:
            NotFound, Forbidden, InvalidState (status past shortlisted)
        """
        application = await self._get_application(application_id)

        if application.student_id != student_user_id:
            raise Forbidden("You can only withdraw your own applications")

        if application.status not in EARLY_STATUSES:
            raise InvalidState(
                f"Applications in '{application.status}' status can no longer be withdrawn"
            )

        await self.db.execute(
            delete(ApplicationAnswer).where(ApplicationAnswer.application_id == application_id)
        )
        await self.db.execute(delete(Application).where(Application.id == application_id))
        await self.db.commit()

        logger.info(
            "application_withdrawn",
            application_id=str(application_id),
            student_id=str(student_user_id),
        )

    async def list_for_student(
        self,
        student_user_id: UUID,
        status: Optional[str] = None,
        job_id: Optional[UUID] = None,
        search: Optional[str] = None,
    ) -> List[Application]:
        """Student's applications, newest first. Search matches job title or company."""
        query = (
            select(Application)
            .join(Job, Job.id == Application.job_id)
            .where(Application.student_id == student_user_id)
        )
        query = self._apply_common_filters(query, status, job_id)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.where(or_(Job.title.ilike(pattern), Job.company.ilike(pattern)))

        result = await self.db.execute(query.order_by(Application.applied_at.desc()))
        return list(result.unique().scalars().all())

    async def list_for_company(
        self,
        company_user_id: UUID,
        status: Optional[str] = None,
        job_id: Optional[UUID] = None,
        search: Optional[str] = None,
    ) -> List[Application]:
        """
        Applications to jobs the company owns, newest first.

        Search matches applicant name, applicant email or job title.
        """
        applicant = User.__table__.alias("applicant")
        query = (
            select(Application)
            .join(Job, Job.id == Application.job_id)
            .join(applicant, applicant.c.id == Application.student_id)
            .where(Job.posted_by == company_user_id)
        )
        query = self._apply_common_filters(query, status, job_id)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    applicant.c.name.ilike(pattern),
                    applicant.c.email.ilike(pattern),
                    Job.title.ilike(pattern),
                )
            )

        result = await self.db.execute(query.order_by(Application.applied_at.desc()))
        return list(result.unique().scalars().all())

    @staticmethod
    def _apply_common_filters(query, status: Optional[str], job_id: Optional[UUID]):
        if status and status != "all":
            if status not in STATUS_VALUES:
                raise InvalidStatus(f"Invalid status filter '{status}'")
            query = query.where(Application.status == status)
        if job_id is not None:
            query = query.where(Application.job_id == job_id)
        return query

    async def get_for_student(self, application_id: UUID, student_user_id: UUID) -> Application:
        application = await self._get_application(application_id)
        if application.student_id != student_user_id:
            raise Forbidden("You can only view your own applications")
        return application

    async def get_for_company(self, application_id: UUID, company_user_id: UUID) -> Application:
        application = await self._get_application(application_id)
        if application.job is None or application.job.posted_by != company_user_id:
            raise Forbidden("You can only view applications for your own jobs")
        return application

    async def has_applied(self, student_user_id: UUID, job_id: UUID) -> bool:
        result = await self.db.execute(
            select(Application.id).where(
                Application.student_id == student_user_id,
                Application.job_id == job_id,
            )
        )
        return result.scalar_one_or_none() is not None
