"""
Analytics Service
Read-only aggregates for the company, student and admin dashboards.

Nothing here mutates state. Counts are computed in the database; skill
tags are stored as JSON lists and are unwound in Python.
"""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.config import settings
from portal.models.application import Application
from portal.models.job import Job
from portal.models.student import StudentProfile
from portal.models.user import User
from portal.services.application_service import EARLY_STATUSES, ApplicationStatus
from portal.services.profile_service import calculate_profile_completion
from portal.utils.salary_parser import average_package

logger = structlog.get_logger(__name__)

TOP_JOBS_LIMIT = 5
TOP_COLLEGES_LIMIT = 5
TOP_SKILLS_LIMIT = 10


def conversion_rate(hired: int, total: int) -> int:
    """Hired share of all applications as a rounded percentage; 0 when there are none."""
    if not total:
        return 0
    return round(hired / total * 100)


def interview_to_hire_rate(hired: int, interviews: int) -> int:
    """Hired relative to applications in interview, rounded percentage; 0 without interviews."""
    if not interviews:
        return 0
    return round(hired / interviews * 100)


def _as_day(value: Any) -> Optional[str]:
    """Normalize a date bucket (date, datetime or ISO string) to YYYY-MM-DD."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def daily_series(buckets: Dict[str, int], days: int, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Fill a {YYYY-MM-DD: count} mapping into a contiguous oldest-first series of `days` days."""
    today = today or datetime.utcnow().date()
    start = today - timedelta(days=days - 1)
    return [
        {"date": day.isoformat(), "count": buckets.get(day.isoformat(), 0)}
        for day in (start + timedelta(days=offset) for offset in range(days))
    ]


def _application_row(application: Application) -> Dict[str, Any]:
    job = application.job
    student = application.student
    return {
        "id": application.id,
        "job_id": application.job_id,
        "job_title": job.title if job else "Unknown Job",
        "company": job.company if job else "Unknown Company",
        "student_name": student.name if student else "Unknown Student",
        "status": application.status,
        "applied_at": application.applied_at,
    }


class AnalyticsService:
    """Dashboard and analytics aggregates."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, query) -> int:
        result = await self.db.execute(query)
        return int(result.scalar_one() or 0)

    # ==================== Company ====================

    def _owned_job_ids(self, company_user_id: UUID):
        return select(Job.id).where(Job.posted_by == company_user_id)

    async def _status_counts(self, company_user_id: UUID) -> Dict[str, int]:
        result = await self.db.execute(
            select(Application.status, func.count(Application.id))
            .where(Application.job_id.in_(self._owned_job_ids(company_user_id)))
            .group_by(Application.status)
        )
        counts = {s.value: 0 for s in ApplicationStatus}
        for status, count in result.all():
            counts[status] = count
        return counts

    async def _job_counts(self, company_user_id: UUID) -> Dict[str, int]:
        result = await self.db.execute(
            select(Job.is_active, func.count(Job.id))
            .where(Job.posted_by == company_user_id)
            .group_by(Job.is_active)
        )
        counts = {bool(is_active): count for is_active, count in result.all()}
        active = counts.get(True, 0)
        pending = counts.get(False, 0)
        return {"total_jobs": active + pending, "active_jobs": active, "pending_jobs": pending}

    async def _recent_count(self, company_user_id: UUID) -> int:
        since = datetime.utcnow() - timedelta(hours=settings.RECENT_APPLICATION_HOURS)
        return await self._count(
            select(func.count(Application.id)).where(
                Application.job_id.in_(self._owned_job_ids(company_user_id)),
                Application.applied_at >= since,
            )
        )

    async def company_analytics(self, company_user_id: UUID, days: Optional[int] = None) -> Dict[str, Any]:
        """
        Full analytics for one company.

        Returns:
            overview: job counts, application totals, interview/hired counts and rates
            applications_by_status: count per status (every status present)
            daily_applications: [{date, count}] over the trailing `days` window
            top_jobs: up to 5 jobs by application count with titles
            top_colleges: up to 5 applicant institutions
            top_skills: up to 10 applicant skill tags
        """
        days = days or settings.ANALYTICS_WINDOW_DAYS
        owned = self._owned_job_ids(company_user_id)

        job_counts = await self._job_counts(company_user_id)
        by_status = await self._status_counts(company_user_id)
        total = sum(by_status.values())
        interviews = by_status[ApplicationStatus.INTERVIEW.value]
        hired = by_status[ApplicationStatus.ACCEPTED.value]

        # Daily series over the trailing window
        window_start = datetime.combine(
            datetime.utcnow().date() - timedelta(days=days - 1), datetime.min.time()
        )
        day = func.date(Application.applied_at)
        result = await self.db.execute(
            select(day, func.count(Application.id))
            .where(Application.job_id.in_(owned), Application.applied_at >= window_start)
            .group_by(day)
        )
        buckets = {_as_day(bucket): count for bucket, count in result.all()}

        # Top jobs
        app_count = func.count(Application.id).label("applications")
        result = await self.db.execute(
            select(Job.id, Job.title, app_count)
            .join(Application, Application.job_id == Job.id)
            .where(Job.posted_by == company_user_id)
            .group_by(Job.id, Job.title)
            .order_by(app_count.desc(), Job.title)
            .limit(TOP_JOBS_LIMIT)
        )
        top_jobs = [
            {"job_id": job_id, "title": title, "count": count} for job_id, title, count in result.all()
        ]

        # Applicant institutions
        college_count = func.count(Application.id).label("applicants")
        result = await self.db.execute(
            select(StudentProfile.college, college_count)
            .select_from(Application)
            .join(StudentProfile, StudentProfile.user_id == Application.student_id)
            .where(
                Application.job_id.in_(owned),
                StudentProfile.college.is_not(None),
                StudentProfile.college != "",
            )
            .group_by(StudentProfile.college)
            .order_by(college_count.desc(), StudentProfile.college)
            .limit(TOP_COLLEGES_LIMIT)
        )
        top_colleges = [{"label": college, "count": count} for college, count in result.all()]

        # Applicant skills, one row per application
        result = await self.db.execute(
            select(StudentProfile.skills)
            .select_from(Application)
            .join(StudentProfile, StudentProfile.user_id == Application.student_id)
            .where(Application.job_id.in_(owned))
        )
        skill_counter = Counter()
        for skills in result.scalars().all():
            for skill in dict.fromkeys(s.strip() for s in (skills or []) if s and s.strip()):
                skill_counter[skill] += 1
        top_skills = [
            {"label": skill, "count": count} for skill, count in skill_counter.most_common(TOP_SKILLS_LIMIT)
        ]

        overview = {
            **job_counts,
            "total_applications": total,
            "recent_applications": await self._recent_count(company_user_id),
            "interviews": interviews,
            "hired": hired,
            "conversion_rate": conversion_rate(hired, total),
            "interview_to_hire_rate": interview_to_hire_rate(hired, interviews),
        }

        logger.info(
            "company_analytics_computed",
            company_user_id=str(company_user_id),
            days=days,
            total_applications=total,
        )
        return {
            "overview": overview,
            "applications_by_status": by_status,
            "daily_applications": daily_series(buckets, days),
            "top_jobs": top_jobs,
            "top_colleges": top_colleges,
            "top_skills": top_skills,
        }

    async def company_dashboard(self, company_user_id: UUID) -> Dict[str, Any]:
        """Overview counts, 5 latest applications and 3 newest active jobs with their counts."""
        owned = self._owned_job_ids(company_user_id)
        job_counts = await self._job_counts(company_user_id)
        by_status = await self._status_counts(company_user_id)

        result = await self.db.execute(
            select(Application)
            .where(Application.job_id.in_(owned))
            .order_by(Application.applied_at.desc())
            .limit(5)
        )
        recent_applications = [_application_row(a) for a in result.unique().scalars().all()]

        result = await self.db.execute(
            select(Job)
            .where(Job.posted_by == company_user_id, Job.is_active.is_(True))
            .order_by(Job.created_at.desc())
            .limit(3)
        )
        recent_jobs = list(result.unique().scalars().all())
        counts = {}
        if recent_jobs:
            result = await self.db.execute(
                select(Application.job_id, func.count(Application.id))
                .where(Application.job_id.in_([job.id for job in recent_jobs]))
                .group_by(Application.job_id)
            )
            counts = dict(result.all())

        return {
            **job_counts,
            "total_applications": sum(by_status.values()),
            "new_applications": await self._recent_count(company_user_id),
            "interviews": by_status[ApplicationStatus.INTERVIEW.value],
            "recent_applications": recent_applications,
            "recent_jobs": [
                {
                    "id": job.id,
                    "title": job.title,
                    "job_type": job.job_type,
                    "location": job.location,
                    "created_at": job.created_at,
                    "application_count": counts.get(job.id, 0),
                }
                for job in recent_jobs
            ],
        }

    # ==================== Student ====================

    async def student_dashboard(self, student_user_id: UUID) -> Dict[str, Any]:
        """Active job count, own application counts, 3 latest applications, profile completion."""
        active_jobs = await self._count(select(func.count(Job.id)).where(Job.is_active.is_(True)))

        result = await self.db.execute(
            select(Application.status, func.count(Application.id))
            .where(Application.student_id == student_user_id)
            .group_by(Application.status)
        )
        by_status = dict(result.all())

        result = await self.db.execute(
            select(Application)
            .where(Application.student_id == student_user_id)
            .order_by(Application.applied_at.desc())
            .limit(3)
        )
        recent = [_application_row(a) for a in result.unique().scalars().all()]

        result = await self.db.execute(
            select(StudentProfile).where(StudentProfile.user_id == student_user_id)
        )
        profile = result.scalar_one_or_none()

        return {
            "active_jobs": active_jobs,
            "total_applications": sum(by_status.values()),
            "pending_applications": sum(by_status.get(s, 0) for s in EARLY_STATUSES),
            "interviews": by_status.get(ApplicationStatus.INTERVIEW.value, 0),
            "profile_completion": calculate_profile_completion(profile),
            "recent_applications": recent,
        }

    # ==================== Admin ====================

    async def admin_dashboard(self) -> Dict[str, Any]:
        """
        Portal-wide counts and recent activity.

        `average_package` is the mean of every job salary that can be
        normalized to lakhs per annum, rounded to 2 places, or None.
        """
        result = await self.db.execute(select(User.role, func.count(User.id)).group_by(User.role))
        users_by_role = dict(result.all())

        result = await self.db.execute(select(Job.is_active, func.count(Job.id)).group_by(Job.is_active))
        jobs_by_state = {bool(k): v for k, v in result.all()}
        active_jobs = jobs_by_state.get(True, 0)
        pending_jobs = jobs_by_state.get(False, 0)

        total_applications = await self._count(select(func.count(Application.id)))
        placed_students = await self._count(
            select(func.count(distinct(Application.student_id))).where(
                Application.status == ApplicationStatus.ACCEPTED.value
            )
        )

        result = await self.db.execute(
            select(Job.salary).where(Job.salary.is_not(None), Job.salary != "")
        )
        avg_package = average_package(result.scalars().all())

        result = await self.db.execute(select(Job).order_by(Job.created_at.desc()).limit(5))
        recent_jobs = list(result.unique().scalars().all())

        result = await self.db.execute(
            select(Job).where(Job.is_active.is_(False)).order_by(Job.created_at.desc()).limit(5)
        )
        recent_pending = list(result.unique().scalars().all())

        result = await self.db.execute(
            select(Application).order_by(Application.applied_at.desc()).limit(5)
        )
        recent_applications = [_application_row(a) for a in result.unique().scalars().all()]

        recent_users = {}
        for role in ("student", "company"):
            result = await self.db.execute(
                select(User).where(User.role == role).order_by(User.created_at.desc()).limit(5)
            )
            recent_users[role] = [
                {"id": u.id, "name": u.name, "email": u.email, "created_at": u.created_at}
                for u in result.scalars().all()
            ]

        return {
            "stats": {
                "total_students": users_by_role.get("student", 0),
                "total_companies": users_by_role.get("company", 0),
                "active_jobs": active_jobs,
                "pending_jobs": pending_jobs,
                "total_jobs": active_jobs + pending_jobs,
                "total_applications": total_applications,
                "placed_students": placed_students,
                "average_package": avg_package,
            },
            "recent_jobs": recent_jobs,
            "pending_jobs": recent_pending,
            "recent_applications": recent_applications,
            "recent_students": recent_users["student"],
            "recent_companies": recent_users["company"],
        }
