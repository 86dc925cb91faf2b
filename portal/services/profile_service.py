"""
Profile Service
Student and company profile management: find-or-create, completion
percentage, resume/logo references and saved jobs.
"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFound
from portal.models.application import Application
from portal.models.company import CompanyProfile
from portal.models.job import Job
from portal.models.student import StudentProfile
from portal.models.student_interactions import SavedJob
from portal.services.storage import LOGO_FOLDER, RESUME_FOLDER, LocalUploadStorage
from portal.utils.helpers import has_value, split_csv

logger = structlog.get_logger(__name__)

# Fields that count towards profile completion, all weighted equally
COMPLETION_FIELDS = ("college", "course", "graduation_year", "cgpa", "phone", "skills", "resume")

STUDENT_EDITABLE_FIELDS = (
    "college",
    "course",
    "specialization",
    "branch",
    "graduation_year",
    "tenth_percentage",
    "twelfth_percentage",
    "cgpa",
    "phone",
    "date_of_birth",
    "skills",
    "social_links",
)

COMPANY_EDITABLE_FIELDS = (
    "company_name",
    "industry",
    "website",
    "size",
    "founded",
    "description",
    "contact_person",
    "phone",
    "address",
    "social_links",
)


def calculate_profile_completion(profile: Optional[Any]) -> int:
    """
    Percentage of completion fields that carry a value.

    Returns an int in [0, 100]; a missing profile is 0.
    """
    if profile is None:
        return 0
    filled = sum(1 for field in COMPLETION_FIELDS if has_value(getattr(profile, field, None)))
    return round(filled / len(COMPLETION_FIELDS) * 100)


class ProfileService:
    """Profile operations scoped to an owning user id."""

    def __init__(self, db: AsyncSession, storage: Optional[LocalUploadStorage] = None):
        self.db = db
        self.storage = storage

    # ==================== Student ====================

    async def _find_student_profile(self, user_id: UUID) -> Optional[StudentProfile]:
        result = await self.db.execute(
            select(StudentProfile).where(StudentProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def ensure_student_profile(self, user_id: UUID) -> StudentProfile:
        """
        Find-or-create the student profile for a user.

        Idempotent: the unique user_id column guarantees a single row even
        when two requests race; the loser re-reads the winner's row.
        Flushes but does not commit.
        """
        profile = await self._find_student_profile(user_id)
        if profile is not None:
            return profile

        profile = StudentProfile(user_id=user_id, skills=[], social_links={}, profile_completion=0)
        self.db.add(profile)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            profile = await self._find_student_profile(user_id)
            if profile is None:
                raise
            return profile

        logger.info("student_profile_created", user_id=str(user_id))
        return profile

    async def get_student_profile(self, user_id: UUID) -> StudentProfile:
        profile = await self._find_student_profile(user_id)
        if profile is None:
            raise NotFound("Student profile not found")
        return profile

    def _refresh_completion(self, profile: StudentProfile) -> None:
        profile.profile_completion = calculate_profile_completion(profile)

    async def update_student_profile(self, user_id: UUID, data: Dict[str, Any]) -> StudentProfile:
        """
        Apply a partial update to the student's profile.

        Only keys present in `data` are written. Skills may be a list or a
        comma-separated string; they are de-duplicated keeping first occurrence.
        """
        profile = await self.ensure_student_profile(user_id)

        for field in STUDENT_EDITABLE_FIELDS:
            if field not in data:
                continue
            value = data[field]
            if field == "skills":
                value = split_csv(value)
            elif field == "social_links":
                value = {**(profile.social_links or {}), **(value or {})}
            setattr(profile, field, value)

        self._refresh_completion(profile)
        await self.db.commit()
        await self.db.refresh(profile)

        logger.info(
            "student_profile_updated",
            user_id=str(user_id),
            fields=sorted(k for k in data if k in STUDENT_EDITABLE_FIELDS),
            profile_completion=profile.profile_completion,
        )
        return profile

    async def _resume_in_use(self, filename: str) -> bool:
        """Whether a submitted application still points at this resume file."""
        result = await self.db.execute(
            select(Application.id).where(Application.resume == filename).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def discard_resume_file(self, filename: Optional[str]) -> None:
        if not filename or self.storage is None:
            return
        if await self._resume_in_use(filename):
            return
        self.storage.delete(RESUME_FOLDER, filename)

    async def set_resume(self, user_id: UUID, filename: str) -> StudentProfile:
        """Point the profile at a newly stored resume, removing the previous file."""
        profile = await self.ensure_student_profile(user_id)
        previous = profile.resume

        profile.resume = filename
        self._refresh_completion(profile)
        await self.db.commit()

        if previous and previous != filename:
            await self.discard_resume_file(previous)

        logger.info("student_resume_set", user_id=str(user_id), resume=filename)
        return profile

    async def clear_resume(self, user_id: UUID) -> StudentProfile:
        """Remove the profile resume reference and its stored file."""
        profile = await self.get_student_profile(user_id)
        previous = profile.resume
        if not previous:
            raise NotFound("No resume on file")

        profile.resume = None
        self._refresh_completion(profile)
        await self.db.commit()

        await self.discard_resume_file(previous)

        logger.info("student_resume_cleared", user_id=str(user_id))
        return profile

    async def toggle_saved_job(self, user_id: UUID, job_id: UUID) -> bool:
        """
        Save the job if not yet saved, otherwise unsave it.

        Returns:
            True when the job is saved after the call
        """
        job = await self.db.get(Job, job_id)
        if job is None:
            raise NotFound("Job not found")

        profile = await self.ensure_student_profile(user_id)

        result = await self.db.execute(
            select(SavedJob).where(
                SavedJob.student_profile_id == profile.id,
                SavedJob.job_id == job_id,
            )
        )
        existing = result.scalar_one_or_none()

        if existing is not None:
            await self.db.delete(existing)
            saved = False
        else:
            self.db.add(SavedJob(student_profile_id=profile.id, job_id=job_id))
            saved = True

        await self.db.commit()
        logger.info("saved_job_toggled", user_id=str(user_id), job_id=str(job_id), saved=saved)
        return saved

    async def list_saved_jobs(self, user_id: UUID) -> List[Job]:
        """Saved jobs, most recently saved first."""
        profile = await self._find_student_profile(user_id)
        if profile is None:
            return []
        result = await self.db.execute(
            select(Job)
            .join(SavedJob, SavedJob.job_id == Job.id)
            .where(SavedJob.student_profile_id == profile.id)
            .order_by(SavedJob.saved_at.desc())
        )
        return list(result.unique().scalars().all())

    async def saved_job_ids(self, user_id: UUID) -> set:
        profile = await self._find_student_profile(user_id)
        if profile is None:
            return set()
        result = await self.db.execute(
            select(SavedJob.job_id).where(SavedJob.student_profile_id == profile.id)
        )
        return set(result.scalars().all())

    # ==================== Company ====================

    async def _find_company_profile(self, user_id: UUID) -> Optional[CompanyProfile]:
        result = await self.db.execute(
            select(CompanyProfile).where(CompanyProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def ensure_company_profile(
        self, user_id: UUID, company_name: str, industry: str = ""
    ) -> Tuple[CompanyProfile, bool]:
        """
        Find-or-create the company profile for a user.

        Returns:
            (profile, created). Flushes but does not commit.
        """
        profile = await self._find_company_profile(user_id)
        if profile is not None:
            return profile, False

        profile = CompanyProfile(
            user_id=user_id,
            company_name=company_name or "",
            industry=industry or "",
            address={},
            social_links={},
        )
        self.db.add(profile)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            profile = await self._find_company_profile(user_id)
            if profile is None:
                raise
            return profile, False

        logger.info("company_profile_created", user_id=str(user_id), company_name=company_name)
        return profile, True

    async def get_company_profile(self, user_id: UUID) -> CompanyProfile:
        profile = await self._find_company_profile(user_id)
        if profile is None:
            raise NotFound("Company profile not found")
        return profile

    @staticmethod
    def apply_company_fields(profile: CompanyProfile, data: Dict[str, Any]) -> List[str]:
        """
        Overwrite only the supplied (non-None) company fields.

        Address and social links merge key by key so a partial payload keeps
        the keys it does not mention. Returns the names of written fields.
        """
        written = []
        for field in COMPANY_EDITABLE_FIELDS:
            value = data.get(field)
            if value is None:
                continue
            if field in ("address", "social_links"):
                supplied = {k: v for k, v in dict(value).items() if v is not None}
                if not supplied:
                    continue
                value = {**(getattr(profile, field) or {}), **supplied}
            setattr(profile, field, value)
            written.append(field)
        return written

    async def update_company_profile(self, user_id: UUID, data: Dict[str, Any]) -> CompanyProfile:
        """Partial update of the company's profile."""
        profile = await self.get_company_profile(user_id)
        written = self.apply_company_fields(profile, data)

        await self.db.commit()
        await self.db.refresh(profile)

        logger.info("company_profile_updated", user_id=str(user_id), fields=written)
        return profile

    async def set_company_logo(self, user_id: UUID, filename: str) -> CompanyProfile:
        """Point the profile at a newly stored logo, removing the previous file."""
        profile = await self.get_company_profile(user_id)
        previous = profile.logo

        profile.logo = filename
        await self.db.commit()

        if previous and previous != filename and self.storage is not None:
            self.storage.delete(LOGO_FOLDER, previous)

        logger.info("company_logo_set", user_id=str(user_id), logo=filename)
        return profile
