"""
Moderation Service
Admin review of job postings plus read-only user listings.
"""

from typing import Any, Dict, List, Tuple
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFound
from portal.models.company import CompanyProfile
from portal.models.job import Job
from portal.models.student import StudentProfile
from portal.models.user import User
from portal.services.job_service import purge_job

logger = structlog.get_logger(__name__)

UNKNOWN_COMPANY = "Unknown Company"


def resolve_owner_name(job: Job, profile_name: str = None) -> str:
    """Company profile name, else the job's snapshot, else the owner's name."""
    if profile_name:
        return profile_name
    if job.company:
        return job.company
    if job.owner is not None and job.owner.name:
        return job.owner.name
    return UNKNOWN_COMPANY


class ModerationService:
    """Admin moderation of opportunities."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_job(self, job_id: UUID) -> Job:
        result = await self.db.execute(select(Job).where(Job.id == job_id))
        job = result.unique().scalar_one_or_none()
        if job is None:
            raise NotFound("Job not found")
        return job

    async def _profile_names(self, owner_ids) -> Dict[UUID, str]:
        if not owner_ids:
            return {}
        result = await self.db.execute(
            select(CompanyProfile.user_id, CompanyProfile.company_name).where(
                CompanyProfile.user_id.in_(list(owner_ids))
            )
        )
        return {user_id: name for user_id, name in result.all() if name}

    async def annotate(self, jobs: List[Job]) -> List[Dict[str, Any]]:
        """Attach resolved owner display name and email to each job."""
        names = await self._profile_names({job.posted_by for job in jobs})
        return [
            {
                "id": job.id,
                "title": job.title,
                "company_name": resolve_owner_name(job, names.get(job.posted_by)),
                "owner_email": job.owner.email if job.owner is not None else None,
                "job_type": job.job_type,
                "location": job.location,
                "salary": job.salary,
                "created_at": job.created_at,
            }
            for job in jobs
        ]

    async def list_pending(self) -> List[Dict[str, Any]]:
        """Inactive jobs newest first, annotated with owner display name."""
        result = await self.db.execute(
            select(Job).where(Job.is_active.is_(False)).order_by(Job.created_at.desc())
        )
        return await self.annotate(list(result.unique().scalars().all()))

    async def activate(self, job_id: UUID) -> Job:
        """Make a job visible to students. Activating an active job is a no-op."""
        job = await self._get_job(job_id)
        if not job.is_active:
            job.is_active = True
            await self.db.commit()
        logger.info("job_activated", job_id=str(job_id))
        return job

    async def delete(self, job_id: UUID) -> None:
        """
        Delete a job and everything referencing it in one transaction.

        Applications, their answers, saved-job rows and questions go with
        it; the job also drops out of the owner's posted list. A second call
        for the same id raises NotFound.
        """
        job = await self._get_job(job_id)
        owner_id = job.posted_by
        self.db.expunge(job)

        await purge_job(self.db, job_id)
        await self.db.commit()

        logger.info("job_deleted_by_admin", job_id=str(job_id), owner_id=str(owner_id))

    async def list_students(self) -> List[Tuple[User, StudentProfile]]:
        """Student users with their profiles, newest first."""
        result = await self.db.execute(
            select(User, StudentProfile)
            .outerjoin(StudentProfile, StudentProfile.user_id == User.id)
            .where(User.role == "student")
            .order_by(User.created_at.desc())
        )
        return list(result.unique().all())

    async def list_companies(self) -> List[Tuple[User, CompanyProfile]]:
        """Company users with their profiles, newest first."""
        result = await self.db.execute(
            select(User, CompanyProfile)
            .outerjoin(CompanyProfile, CompanyProfile.user_id == User.id)
            .where(User.role == "company")
            .order_by(User.created_at.desc())
        )
        return list(result.unique().all())
