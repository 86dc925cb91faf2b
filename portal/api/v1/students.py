"""
Student API
Profile, resume, saved jobs, job board and applications for the signed-in student
"""

import json
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import forbid_demo, get_db, require_student
from portal.config import settings
from portal.core.exceptions import PortalError
from portal.models.user import User
from portal.schemas.admin import ActionResponse
from portal.schemas.application import ApplicationCreate, ApplicationResponse, ApplicationSubmitResponse
from portal.schemas.job import EligibilityCheckResponse, JobResponse, StudentJobDetailResponse
from portal.schemas.student import (
    SavedJobToggleResponse,
    StudentDashboardResponse,
    StudentProfileResponse,
    StudentProfileUpdate,
)
from portal.services.analytics_service import AnalyticsService
from portal.services.application_service import ApplicationService
from portal.services.eligibility import eligibility_report
from portal.services.job_service import JobService
from portal.services.profile_service import ProfileService
from portal.services.storage import RESUME_FOLDER, LocalUploadStorage, get_storage
from portal.utils.helpers import paginate

logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== Dashboard & Profile ====================

@router.get("/me/dashboard", response_model=StudentDashboardResponse)
async def get_dashboard(
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """
    Student dashboard

    **Auth**: Student (JWT required)

    Active job count, own application counts, the three latest
    applications and profile completion.
    """
    return await AnalyticsService(db).student_dashboard(current_user.id)


@router.get("/me/profile", response_model=StudentProfileResponse)
async def get_profile(
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """
    Get own profile

    **Auth**: Student (JWT required)

    The profile is created on first access if it does not exist yet.
    """
    service = ProfileService(db)
    profile = await service.ensure_student_profile(current_user.id)
    await db.commit()
    return profile


@router.put(
    "/me/profile",
    response_model=StudentProfileResponse,
    dependencies=[Depends(forbid_demo)],
)
async def update_profile(
    profile_in: StudentProfileUpdate,
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """
    Update own profile (partial)

    **Auth**: Student (JWT required, not demo)

    Only fields present in the body are written; profile completion is
    recomputed.
    """
    data = profile_in.model_dump(exclude_unset=True)
    return await ProfileService(db).update_student_profile(current_user.id, data)


@router.post(
    "/me/resume",
    response_model=StudentProfileResponse,
    dependencies=[Depends(forbid_demo)],
)
async def upload_resume(
    file: UploadFile = File(...),
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
    storage: LocalUploadStorage = Depends(get_storage),
):
    """
    Upload resume

    **Auth**: Student (JWT required, not demo)

    Accepts PDF, DOC or DOCX up to 5MB. Replaces the previous resume.
    """
    filename = await storage.save_resume(file)
    try:
        return await ProfileService(db, storage).set_resume(current_user.id, filename)
    except PortalError:
        storage.delete(RESUME_FOLDER, filename)
        raise


@router.delete(
    "/me/resume",
    response_model=StudentProfileResponse,
    dependencies=[Depends(forbid_demo)],
)
async def delete_resume(
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
    storage: LocalUploadStorage = Depends(get_storage),
):
    """
    Remove resume

    **Auth**: Student (JWT required, not demo)
    """
    return await ProfileService(db, storage).clear_resume(current_user.id)


# ==================== Saved Jobs ====================

@router.get("/me/saved-jobs", response_model=List[JobResponse])
async def list_saved_jobs(
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """
    List saved jobs, most recently saved first

    **Auth**: Student (JWT required)
    """
    return await ProfileService(db).list_saved_jobs(current_user.id)


@router.post(
    "/me/saved-jobs/{job_id}",
    response_model=SavedJobToggleResponse,
    dependencies=[Depends(forbid_demo)],
)
async def toggle_saved_job(
    job_id: UUID,
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """
    Save or unsave a job (toggle)

    **Auth**: Student (JWT required, not demo)
    """
    saved = await ProfileService(db).toggle_saved_job(current_user.id, job_id)
    return SavedJobToggleResponse(
        job_id=job_id,
        saved=saved,
        message="Job saved" if saved else "Job removed from saved jobs",
    )


# ==================== Job Board ====================

@router.get("/jobs", response_model=List[JobResponse])
async def list_jobs(
    search: Optional[str] = Query(None, description="Matches title, company, location or description"),
    job_type: Optional[str] = Query(None, description="internship, full-time, part-time, remote or all"),
    experience: Optional[str] = Query(None, description="fresher, 0-2, 2-5, 5+ or all"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """
    Browse active jobs

    **Auth**: Student (JWT required)
    """
    window = paginate(page, page_size)
    return await JobService(db).list_active_jobs(
        search=search,
        job_type=job_type,
        experience=experience,
        limit=window["limit"],
        offset=window["offset"],
    )


@router.get("/jobs/{job_id}", response_model=StudentJobDetailResponse)
async def get_job(
    job_id: UUID,
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """
    Job detail with eligibility report

    **Auth**: Student (JWT required)

    Each declared threshold is listed with the required and actual value.
    Eligibility is informational; ineligible students may still apply.
    """
    job = await JobService(db).get_active_job(job_id)
    profiles = ProfileService(db)
    profile = await profiles.ensure_student_profile(current_user.id)
    await db.commit()

    report = eligibility_report(job, profile)
    return StudentJobDetailResponse(
        job=JobResponse.model_validate(job),
        eligible=all(check.passed for check in report),
        eligibility=[EligibilityCheckResponse.model_validate(check) for check in report],
        has_applied=await ApplicationService(db).has_applied(current_user.id, job_id),
        is_saved=job_id in await profiles.saved_job_ids(current_user.id),
    )


# ==================== Applications ====================

def _parse_answers(raw: Optional[str]) -> list:
    """Answers arrive as a JSON array in a form field; unreadable input counts as none."""
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring unreadable answers field on application submit")
        return []
    return parsed if isinstance(parsed, list) else []


@router.post(
    "/jobs/{job_id}/apply",
    response_model=ApplicationSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(forbid_demo)],
)
async def apply_for_job(
    job_id: UUID,
    full_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    linkedin: Optional[str] = Form(None),
    college: Optional[str] = Form(None),
    degree: Optional[str] = Form(None),
    education_status: Optional[str] = Form(None),
    graduation_year: Optional[int] = Form(None),
    cgpa: Optional[float] = Form(None),
    marks_type: Optional[str] = Form(None),
    skills: Optional[str] = Form(None, description="Comma-separated"),
    projects: Optional[str] = Form(None),
    extracurricular: Optional[str] = Form(None),
    cover_letter_text: Optional[str] = Form(None),
    answers: Optional[str] = Form(None, description='JSON array: [{"question_id": "...", "answer": "..."}]'),
    resume: Optional[UploadFile] = File(None),
    cover_letter_file: Optional[UploadFile] = File(None),
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
    storage: LocalUploadStorage = Depends(get_storage),
):
    """
    Apply for a job (multipart form)

    **Auth**: Student (JWT required, not demo)

    A resume must be uploaded here or already be on the profile. An
    uploaded resume also becomes the profile resume. Answers that do not
    reference one of the job's questions are ignored.
    """
    stored = []
    try:
        resume_name = None
        if resume is not None and resume.filename:
            resume_name = await storage.save_resume(resume)
            stored.append(resume_name)
        cover_name = None
        if cover_letter_file is not None and cover_letter_file.filename:
            cover_name = await storage.save_resume(cover_letter_file)
            stored.append(cover_name)

        payload = ApplicationCreate(
            full_name=full_name,
            email=email,
            phone=phone,
            linkedin=linkedin,
            college=college,
            degree=degree,
            education_status=education_status,
            graduation_year=graduation_year,
            cgpa=cgpa,
            marks_type=marks_type,
            skills=skills,
            projects=projects,
            extracurricular=extracurricular,
            cover_letter_text=cover_letter_text,
            resume=resume_name,
            cover_letter_file=cover_name,
            answers=_parse_answers(answers),
        )
        application = await ApplicationService(db, storage).submit(current_user.id, job_id, payload)
    except PortalError:
        for filename in stored:
            storage.delete(RESUME_FOLDER, filename)
        raise

    return ApplicationSubmitResponse(
        message="Application submitted successfully!",
        application=ApplicationResponse.from_model(application),
    )


@router.get("/me/applications", response_model=List[ApplicationResponse])
async def list_applications(
    status_filter: Optional[str] = Query(None, alias="status", description="Status or 'all'"),
    job_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Matches job title or company"),
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """
    List own applications, newest first

    **Auth**: Student (JWT required)
    """
    applications = await ApplicationService(db).list_for_student(
        current_user.id, status=status_filter, job_id=job_id, search=search
    )
    return [ApplicationResponse.from_model(a) for a in applications]


@router.get("/me/applications/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: UUID,
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """
    Get one own application with its answers

    **Auth**: Student (JWT required)
    """
    application = await ApplicationService(db).get_for_student(application_id, current_user.id)
    return ApplicationResponse.from_model(application)


@router.delete(
    "/me/applications/{application_id}",
    response_model=ActionResponse,
    dependencies=[Depends(forbid_demo)],
)
async def withdraw_application(
    application_id: UUID,
    current_user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """
    Withdraw an application

    **Auth**: Student (JWT required, not demo)

    Only possible while the status is applied, under_review or shortlisted.
    """
    await ApplicationService(db).withdraw(application_id, current_user.id)
    return ActionResponse(message="Application withdrawn")
