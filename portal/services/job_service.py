"""
Job Service
Company-side posting management and the student-facing job board.
"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import structlog
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFound
from portal.models.application import Application, ApplicationAnswer
from portal.models.company import CompanyProfile
from portal.models.job import Job, JobQuestion
from portal.models.student_interactions import SavedJob
from portal.models.user import User
from portal.utils.helpers import split_csv, split_lines

logger = structlog.get_logger(__name__)

# Free-text list fields entered one item per line
LINE_LIST_FIELDS = ("requirements", "responsibilities", "benefits")

PLAIN_FIELDS = (
    "title",
    "job_type",
    "location",
    "salary",
    "description",
    "experience_level",
    "min_cgpa",
    "min_tenth_percentage",
    "min_twelfth_percentage",
    "required_graduation_year",
    "vacancies",
    "application_deadline",
)


def _build_questions(raw_questions: List[Any]) -> List[JobQuestion]:
    questions = []
    for raw in raw_questions or []:
        if hasattr(raw, "model_dump"):
            raw = raw.model_dump()
        text = (raw.get("question") or "").strip()
        if not text:
            continue
        questions.append(
            JobQuestion(position=len(questions), question=text, is_required=bool(raw.get("is_required")))
        )
    return questions


async def purge_job(db: AsyncSession, job_id: UUID) -> None:
    """
    Delete a job together with everything that references it.

    Answers, applications, saved-job rows and questions go first so the
    job row is never left with dangling references, whether or not the
    backend enforces foreign keys. Runs inside the caller's transaction.
    """
    application_ids = select(Application.id).where(Application.job_id == job_id)
    await db.execute(
        delete(ApplicationAnswer).where(ApplicationAnswer.application_id.in_(application_ids))
    )
    await db.execute(delete(Application).where(Application.job_id == job_id))
    await db.execute(delete(SavedJob).where(SavedJob.job_id == job_id))
    await db.execute(delete(JobQuestion).where(JobQuestion.job_id == job_id))
    await db.execute(delete(Job).where(Job.id == job_id))


class JobService:
    """Job posting operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _apply_fields(job: Job, data: Dict[str, Any], partial: bool) -> None:
        for field in PLAIN_FIELDS:
            if field in data and (data[field] is not None or not partial):
                setattr(job, field, data[field])
        for field in LINE_LIST_FIELDS:
            if field in data and data[field] is not None:
                setattr(job, field, split_lines(data[field]))
        if "skills" in data and data["skills"] is not None:
            job.skills = split_csv(data["skills"])
        if "allowed_branches" in data:
            branches = split_csv(data["allowed_branches"]) if data["allowed_branches"] is not None else None
            job.allowed_branches = branches or None

    async def create_job(self, company_user_id: UUID, data: Dict[str, Any]) -> Job:
        """
        Post a job for the company.

        The company display name is snapshotted from the profile (falling
        back to the account name) and the job is active immediately.
        """
        user = await self.db.get(User, company_user_id)
        if user is None:
            raise NotFound("Company not found")

        result = await self.db.execute(
            select(CompanyProfile).where(CompanyProfile.user_id == company_user_id)
        )
        profile = result.scalar_one_or_none()

        job = Job(
            posted_by=company_user_id,
            company_profile_id=profile.id if profile else None,
            company=(profile.company_name if profile and profile.company_name else user.name),
            requirements=[],
            responsibilities=[],
            benefits=[],
            skills=[],
            is_active=True,
        )
        self._apply_fields(job, data, partial=False)
        job.questions = _build_questions(data.get("questions"))
        job.owner = user

        self.db.add(job)
        await self.db.commit()

        logger.info(
            "job_created",
            job_id=str(job.id),
            company_user_id=str(company_user_id),
            title=job.title,
            questions=len(job.questions),
        )
        return job

    async def get_company_job(self, job_id: UUID, company_user_id: UUID) -> Job:
        """Job owned by the company; NotFound for other owners' jobs too."""
        result = await self.db.execute(
            select(Job).where(Job.id == job_id, Job.posted_by == company_user_id)
        )
        job = result.unique().scalar_one_or_none()
        if job is None:
            raise NotFound("Job not found")
        return job

    async def update_job(self, job_id: UUID, company_user_id: UUID, data: Dict[str, Any]) -> Job:
        """Partial update; a supplied question list replaces the existing one."""
        job = await self.get_company_job(job_id, company_user_id)
        self._apply_fields(job, data, partial=True)

        if data.get("questions") is not None:
            # Existing answers point at the old questions
            answered = await self.db.execute(
                select(func.count(ApplicationAnswer.id))
                .join(JobQuestion, JobQuestion.id == ApplicationAnswer.question_id)
                .where(JobQuestion.job_id == job.id)
            )
            if answered.scalar_one() == 0:
                job.questions = _build_questions(data["questions"])
            else:
                logger.warning("job_questions_locked", job_id=str(job.id))

        await self.db.commit()
        logger.info("job_updated", job_id=str(job.id), fields=sorted(k for k, v in data.items() if v is not None))
        return job

    async def set_job_active(self, job_id: UUID, company_user_id: UUID, is_active: bool) -> Job:
        job = await self.get_company_job(job_id, company_user_id)
        job.is_active = is_active
        await self.db.commit()
        logger.info("job_status_changed", job_id=str(job.id), is_active=is_active)
        return job

    async def delete_job(self, job_id: UUID, company_user_id: UUID) -> None:
        """Owner delete, same cascade as the admin delete."""
        job = await self.get_company_job(job_id, company_user_id)
        self.db.expunge(job)
        await purge_job(self.db, job_id)
        await self.db.commit()
        logger.info("job_deleted", job_id=str(job_id), company_user_id=str(company_user_id))

    async def application_counts(self, job_ids: List[UUID]) -> Dict[UUID, int]:
        if not job_ids:
            return {}
        result = await self.db.execute(
            select(Application.job_id, func.count(Application.id))
            .where(Application.job_id.in_(job_ids))
            .group_by(Application.job_id)
        )
        return {job_id: count for job_id, count in result.all()}

    async def list_company_jobs(self, company_user_id: UUID) -> List[Tuple[Job, int]]:
        """Company's jobs newest first, each with its application count."""
        result = await self.db.execute(
            select(Job).where(Job.posted_by == company_user_id).order_by(Job.created_at.desc())
        )
        jobs = list(result.unique().scalars().all())
        counts = await self.application_counts([job.id for job in jobs])
        return [(job, counts.get(job.id, 0)) for job in jobs]

    async def list_active_jobs(
        self,
        search: Optional[str] = None,
        job_type: Optional[str] = None,
        experience: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Job]:
        """Active jobs for the student board, newest first."""
        query = select(Job).where(Job.is_active.is_(True))
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Job.title.ilike(pattern),
                    Job.company.ilike(pattern),
                    Job.location.ilike(pattern),
                    Job.description.ilike(pattern),
                )
            )
        if job_type and job_type != "all":
            query = query.where(Job.job_type == job_type)
        if experience and experience != "all":
            query = query.where(Job.experience_level == experience)

        query = query.order_by(Job.created_at.desc()).offset(offset)
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.unique().scalars().all())

    async def get_active_job(self, job_id: UUID) -> Job:
        result = await self.db.execute(select(Job).where(Job.id == job_id, Job.is_active.is_(True)))
        job = result.unique().scalar_one_or_none()
        if job is None:
            raise NotFound("Job not found")
        return job
