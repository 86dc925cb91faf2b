"""Admin endpoints for moderation and portal overview."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import forbid_demo, get_db, require_admin
from portal.models.user import User
from portal.schemas.admin import ActionResponse, AdminCompanyItem, AdminStudentItem
from portal.schemas.analytics import AdminDashboardResponse
from portal.schemas.application import ApplicationResponse, StatusUpdateRequest
from portal.schemas.company import CompanyProfileResponse
from portal.schemas.job import PendingJobResponse
from portal.schemas.student import StudentProfileResponse
from portal.services.analytics_service import AnalyticsService
from portal.services.application_service import ApplicationService
from portal.services.moderation_service import ModerationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/dashboard", response_model=AdminDashboardResponse)
async def get_dashboard(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Admin dashboard

    **Auth**: Admin (JWT required)

    Portal counts, placed students, average package in LPA and recent
    jobs, pending jobs, applications and sign-ups.
    """
    data = await AnalyticsService(db).admin_dashboard()
    moderation = ModerationService(db)
    data["recent_jobs"] = await moderation.annotate(data["recent_jobs"])
    data["pending_jobs"] = await moderation.annotate(data["pending_jobs"])
    return data


@router.get("/jobs/pending", response_model=List[PendingJobResponse])
async def list_pending_jobs(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Jobs awaiting review (inactive), newest first

    **Auth**: Admin (JWT required)
    """
    return await ModerationService(db).list_pending()


@router.post(
    "/jobs/{job_id}/activate",
    response_model=ActionResponse,
    dependencies=[Depends(forbid_demo)],
)
async def activate_job(
    job_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Activate a job

    **Auth**: Admin (JWT required, not demo)
    """
    await ModerationService(db).activate(job_id)
    logger.info(f"Admin {current_user.email} activated job {job_id}")
    return ActionResponse(message="Job activated successfully")


@router.delete(
    "/jobs/{job_id}",
    response_model=ActionResponse,
    dependencies=[Depends(forbid_demo)],
)
async def delete_job(
    job_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a job with its applications

    **Auth**: Admin (JWT required, not demo)
    """
    await ModerationService(db).delete(job_id)
    logger.info(f"Admin {current_user.email} deleted job {job_id}")
    return ActionResponse(message="Job deleted successfully")


@router.get("/students", response_model=List[AdminStudentItem])
async def list_students(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    List students with profiles, newest first

    **Auth**: Admin (JWT required)
    """
    rows = await ModerationService(db).list_students()
    return [
        AdminStudentItem(
            id=user.id,
            name=user.name,
            email=user.email,
            is_demo=user.is_demo,
            is_active=user.is_active,
            created_at=user.created_at,
            profile=StudentProfileResponse.model_validate(profile) if profile else None,
        )
        for user, profile in rows
    ]


@router.get("/companies", response_model=List[AdminCompanyItem])
async def list_companies(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    List companies with profiles, newest first

    **Auth**: Admin (JWT required)
    """
    rows = await ModerationService(db).list_companies()
    return [
        AdminCompanyItem(
            id=user.id,
            name=user.name,
            email=user.email,
            is_demo=user.is_demo,
            is_active=user.is_active,
            created_at=user.created_at,
            profile=CompanyProfileResponse.model_validate(profile) if profile else None,
        )
        for user, profile in rows
    ]


@router.patch(
    "/applications/{application_id}/status",
    response_model=ApplicationResponse,
    dependencies=[Depends(forbid_demo)],
)
async def update_application_status(
    application_id: UUID,
    status_in: StatusUpdateRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Update any application's status

    **Auth**: Admin (JWT required, not demo)
    """
    application = await ApplicationService(db).update_status(
        application_id, status_in.status, current_user.id, acting_role="admin"
    )
    return ApplicationResponse.from_model(application)
