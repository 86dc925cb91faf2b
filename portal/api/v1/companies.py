"""
Company API
Profile, job postings, received applications and analytics for the signed-in company
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import forbid_demo, get_db, require_company
from portal.config import settings
from portal.core.exceptions import PortalError
from portal.models.user import User
from portal.schemas.admin import ActionResponse
from portal.schemas.analytics import CompanyAnalyticsResponse, CompanyDashboardResponse
from portal.schemas.application import ApplicationResponse, StatusUpdateRequest
from portal.schemas.company import CompanyProfileResponse, CompanyProfileUpdate
from portal.schemas.job import CompanyJobResponse, JobCreate, JobResponse, JobStatusUpdate, JobUpdate
from portal.services.analytics_service import AnalyticsService
from portal.services.application_service import ApplicationService
from portal.services.job_service import JobService
from portal.services.profile_service import ProfileService
from portal.services.storage import LOGO_FOLDER, LocalUploadStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _company_job(job, application_count: int) -> CompanyJobResponse:
    data = JobResponse.model_validate(job).model_dump()
    return CompanyJobResponse(**data, application_count=application_count)


# ==================== Dashboard & Profile ====================

@router.get("/me/dashboard", response_model=CompanyDashboardResponse)
async def get_dashboard(
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    Company dashboard

    **Auth**: Company (JWT required)
    """
    return await AnalyticsService(db).company_dashboard(current_user.id)


@router.get("/me/profile", response_model=CompanyProfileResponse)
async def get_profile(
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    Get own company profile

    **Auth**: Company (JWT required)

    Created from the account name on first access if missing.
    """
    profile, _ = await ProfileService(db).ensure_company_profile(current_user.id, current_user.name)
    await db.commit()
    return profile


@router.put(
    "/me/profile",
    response_model=CompanyProfileResponse,
    dependencies=[Depends(forbid_demo)],
)
async def update_profile(
    profile_in: CompanyProfileUpdate,
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    Update company profile (partial)

    **Auth**: Company (JWT required, not demo)
    """
    service = ProfileService(db)
    await service.ensure_company_profile(current_user.id, current_user.name)
    return await service.update_company_profile(current_user.id, profile_in.model_dump(exclude_unset=True))


@router.post(
    "/me/logo",
    response_model=CompanyProfileResponse,
    dependencies=[Depends(forbid_demo)],
)
async def upload_logo(
    file: UploadFile = File(...),
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
    storage: LocalUploadStorage = Depends(get_storage),
):
    """
    Upload company logo

    **Auth**: Company (JWT required, not demo)
    """
    filename = await storage.save_logo(file)
    try:
        service = ProfileService(db, storage)
        await service.ensure_company_profile(current_user.id, current_user.name)
        return await service.set_company_logo(current_user.id, filename)
    except PortalError:
        storage.delete(LOGO_FOLDER, filename)
        raise


# ==================== Jobs ====================

@router.get("/me/jobs", response_model=List[CompanyJobResponse])
async def list_jobs(
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    List own jobs with application counts, newest first

    **Auth**: Company (JWT required)
    """
    rows = await JobService(db).list_company_jobs(current_user.id)
    return [_company_job(job, count) for job, count in rows]


@router.post(
    "/me/jobs",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(forbid_demo)],
)
async def create_job(
    job_in: JobCreate,
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    Post a job

    **Auth**: Company (JWT required, not demo)

    `requirements`, `responsibilities` and `benefits` may be newline
    separated text; `skills` may be comma separated. The job is active
    immediately.
    """
    return await JobService(db).create_job(current_user.id, job_in.model_dump())


@router.get("/me/jobs/{job_id}", response_model=CompanyJobResponse)
async def get_job(
    job_id: UUID,
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    Get one own job

    **Auth**: Company (JWT required)
    """
    service = JobService(db)
    job = await service.get_company_job(job_id, current_user.id)
    counts = await service.application_counts([job.id])
    return _company_job(job, counts.get(job.id, 0))


@router.put(
    "/me/jobs/{job_id}",
    response_model=JobResponse,
    dependencies=[Depends(forbid_demo)],
)
async def update_job(
    job_id: UUID,
    job_in: JobUpdate,
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    Update one own job (partial)

    **Auth**: Company (JWT required, not demo)
    """
    return await JobService(db).update_job(job_id, current_user.id, job_in.model_dump(exclude_unset=True))


@router.patch(
    "/me/jobs/{job_id}/status",
    response_model=JobResponse,
    dependencies=[Depends(forbid_demo)],
)
async def set_job_status(
    job_id: UUID,
    status_in: JobStatusUpdate,
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    Activate or deactivate one own job

    **Auth**: Company (JWT required, not demo)
    """
    return await JobService(db).set_job_active(job_id, current_user.id, status_in.is_active)


@router.delete(
    "/me/jobs/{job_id}",
    response_model=ActionResponse,
    dependencies=[Depends(forbid_demo)],
)
async def delete_job(
    job_id: UUID,
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete one own job with its applications

    **Auth**: Company (JWT required, not demo)
    """
    await JobService(db).delete_job(job_id, current_user.id)
    return ActionResponse(message="Job deleted successfully")


# ==================== Applications ====================

@router.get("/me/applications", response_model=List[ApplicationResponse])
async def list_applications(
    status_filter: Optional[str] = Query(None, alias="status", description="Status or 'all'"),
    job_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Matches applicant name, email or job title"),
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    List applications to own jobs, newest first

    **Auth**: Company (JWT required)
    """
    applications = await ApplicationService(db).list_for_company(
        current_user.id, status=status_filter, job_id=job_id, search=search
    )
    return [ApplicationResponse.from_model(a) for a in applications]


@router.get("/me/applications/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: UUID,
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    Get one application to an own job

    **Auth**: Company (JWT required)
    """
    application = await ApplicationService(db).get_for_company(application_id, current_user.id)
    return ApplicationResponse.from_model(application)


@router.patch(
    "/me/applications/{application_id}/status",
    response_model=ApplicationResponse,
    dependencies=[Depends(forbid_demo)],
)
async def update_application_status(
    application_id: UUID,
    status_in: StatusUpdateRequest,
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    Update application status

    **Auth**: Company (JWT required, not demo)

    Allowed values: applied, under_review, shortlisted, interview,
    rejected, accepted.
    """
    application = await ApplicationService(db).update_status(
        application_id, status_in.status, current_user.id, acting_role="company"
    )
    return ApplicationResponse.from_model(application)


# ==================== Analytics ====================

@router.get("/me/analytics", response_model=CompanyAnalyticsResponse)
async def get_analytics(
    days: int = Query(settings.ANALYTICS_WINDOW_DAYS, ge=1, le=365),
    current_user: User = Depends(require_company),
    db: AsyncSession = Depends(get_db),
):
    """
    Company analytics

    **Auth**: Company (JWT required)

    Status breakdown, daily applications over the last `days` days, top
    jobs, applicant institutions and skills, conversion and
    interview-to-hire rates.
    """
    return await AnalyticsService(db).company_analytics(current_user.id, days=days)
