import os
from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from sqlalchemy import func, select

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
from portal.schemas.application import ApplicationCreate
from portal.services.application_service import ApplicationService, is_allowed_transition
from portal.services.profile_service import ProfileService
from portal.services.storage import RESUME_FOLDER


@pytest.fixture
async def posting(make_company, make_job):
    company, profile = await make_company(company_name="Acme Corp")
    job = await make_job(
        company,
        profile,
        title="Data Analyst",
        min_cgpa=7.0,
        allowed_branches=["CS", "EE"],
        questions=["Why Acme?", "Notice period?"],
    )
    return company, job


async def count_rows(db, model, *criteria):
    result = await db.execute(select(func.count(model.id)).where(*criteria))
    return result.scalar_one()


# ==================== Submission ====================

async def test_submit_snapshots_profile_and_evaluates_eligibility(db, make_student, posting):
    _, job = posting
    student, _ = await make_student(
        name="Asha Rao", college="IIT Madras", course="B.Tech", cgpa=8.1, branch="CS",
        skills=["Python", "SQL"], phone="9000000000", resume="asha.pdf",
    )

    application = await ApplicationService(db).submit(student.id, job.id, ApplicationCreate())

    assert application.status == "applied"
    assert application.eligibility_ok is True
    assert application.resume == "asha.pdf"
    assert application.personal_info["full_name"] == "Asha Rao"
    assert application.personal_info["phone"] == "9000000000"
    assert application.education["college"] == "IIT Madras"
    assert application.education["degree"] == "B.Tech"
    assert application.skills == ["Python", "SQL"]


async def test_ineligible_student_may_still_apply(db, make_student, posting):
    _, job = posting
    student, _ = await make_student(cgpa=6.2, branch="CS", resume="cv.pdf")

    application = await ApplicationService(db).submit(student.id, job.id, ApplicationCreate())

    assert application.eligibility_ok is False


async def test_submitted_values_override_profile(db, make_student, posting):
    _, job = posting
    student, _ = await make_student(college="Old College", resume="cv.pdf", skills=["Java"])

    application = await ApplicationService(db).submit(
        student.id,
        job.id,
        ApplicationCreate(college="New College", skills="Go, go, Rust", cover_letter_text="  Hello  "),
    )

    assert application.education["college"] == "New College"
    assert application.skills == ["Go", "Rust"]
    assert application.cover_letter_text == "Hello"


async def test_answers_keep_only_this_jobs_questions(db, make_student, make_company, make_job, posting):
    _, job = posting
    other_company, other_profile = await make_company(company_name="Other Co")
    other_job = await make_job(other_company, other_profile, questions=["Unrelated?"])
    student, _ = await make_student(resume="cv.pdf")
    first, second = job.questions

    payload = ApplicationCreate(
        answers=[
            {"question_id": str(second.id), "answer": "  Immediately  "},
            {"question_id": str(first.id), "answer": "Great culture"},
            {"question_id": str(first.id), "answer": "Repeated"},
            {"question_id": str(other_job.questions[0].id), "answer": "Foreign"},
            {"question_id": str(uuid4()), "answer": "Unknown"},
            {"question_id": str(first.id), "answer": "   "},
            "not an object",
        ]
    )
    application = await ApplicationService(db).submit(student.id, job.id, payload)

    assert [(a.question_id, a.answer) for a in application.answers] == [
        (first.id, "Great culture"),
        (second.id, "Immediately"),
    ]
    assert await count_rows(db, ApplicationAnswer, ApplicationAnswer.application_id == application.id) == 2


async def test_duplicate_application_is_rejected(db, make_student, posting):
    _, job = posting
    student, _ = await make_student(resume="cv.pdf")
    service = ApplicationService(db)

    await service.submit(student.id, job.id, ApplicationCreate())
    with pytest.raises(DuplicateApplication):
        await service.submit(student.id, job.id, ApplicationCreate())

    assert await count_rows(db, Application, Application.student_id == student.id) == 1


async def test_concurrent_duplicate_is_caught_by_unique_constraint(
    db, make_student, make_application, posting, monkeypatch
):
    _, job = posting
    student, _ = await make_student(resume="cv.pdf")
    student_id, job_id = student.id, job.id
    ensure_profile = ProfileService.ensure_student_profile

    async def ensure_after_competing_insert(self, user_id):
        # Another request commits the same pair after the duplicate check ran
        await make_application(student, job)
        return await ensure_profile(self, user_id)

    monkeypatch.setattr(ProfileService, "ensure_student_profile", ensure_after_competing_insert)

    with pytest.raises(DuplicateApplication):
        await ApplicationService(db).submit(student_id, job_id, ApplicationCreate())

    assert await count_rows(db, Application, Application.student_id == student_id) == 1


async def test_answer_question_ids_are_normalized(db, make_student, posting):
    _, job = posting
    student, _ = await make_student(resume="cv.pdf")
    first, second = job.questions

    payload = ApplicationCreate(
        answers=[
            {"question_id": str(first.id).upper(), "answer": "Great culture"},
            {"question_id": "{%s}" % second.id, "answer": "Immediately"},
            {"question_id": "not-a-uuid", "answer": "Dropped"},
        ]
    )
    application = await ApplicationService(db).submit(student.id, job.id, payload)

    assert [a.question_id for a in application.answers] == [first.id, second.id]


async def test_uploaded_resume_replaces_and_removes_old_profile_file(db, storage, make_student, posting):
    _, job = posting
    old_path = storage.path_for(RESUME_FOLDER, "old-cv.pdf")
    os.makedirs(os.path.dirname(old_path), exist_ok=True)
    with open(old_path, "wb") as fh:
        fh.write(b"%PDF old")
    student, profile = await make_student(resume="old-cv.pdf")

    await ApplicationService(db, storage).submit(student.id, job.id, ApplicationCreate(resume="new-cv.pdf"))

    assert profile.resume == "new-cv.pdf"
    assert not os.path.exists(old_path)


async def test_old_resume_kept_while_an_application_uses_it(
    db, storage, make_student, make_company, make_job, make_application, posting
):
    _, job = posting
    company, company_profile = await make_company(company_name="Other Co")
    earlier_job = await make_job(company, company_profile)
    old_path = storage.path_for(RESUME_FOLDER, "old-cv.pdf")
    os.makedirs(os.path.dirname(old_path), exist_ok=True)
    with open(old_path, "wb") as fh:
        fh.write(b"%PDF old")
    student, _ = await make_student(resume="old-cv.pdf")
    await make_application(student, earlier_job, resume="old-cv.pdf")

    await ApplicationService(db, storage).submit(student.id, job.id, ApplicationCreate(resume="new-cv.pdf"))

    assert os.path.exists(old_path)


async def test_submit_to_missing_or_inactive_job(db, make_student, make_company, make_job):
    company, profile = await make_company()
    inactive = await make_job(company, profile, is_active=False)
    student, _ = await make_student(resume="cv.pdf")
    service = ApplicationService(db)

    with pytest.raises(NotFound):
        await service.submit(student.id, uuid4(), ApplicationCreate())
    with pytest.raises(NotFound):
        await service.submit(student.id, inactive.id, ApplicationCreate())


async def test_only_students_can_submit(db, posting):
    company, job = posting
    with pytest.raises(NotFound):
        await ApplicationService(db).submit(company.id, job.id, ApplicationCreate())


async def test_resume_is_required(db, make_student, posting):
    _, job = posting
    student, _ = await make_student()

    with pytest.raises(ValidationError):
        await ApplicationService(db).submit(student.id, job.id, ApplicationCreate())


async def test_resume_requirement_can_be_disabled(db, make_student, posting, monkeypatch):
    monkeypatch.setattr(settings, "REQUIRE_RESUME_FOR_APPLICATION", False)
    _, job = posting
    student, _ = await make_student()

    application = await ApplicationService(db).submit(student.id, job.id, ApplicationCreate())

    assert application.resume is None


async def test_uploaded_resume_becomes_profile_resume(db, make_student, posting):
    _, job = posting
    student, profile = await make_student()

    application = await ApplicationService(db).submit(
        student.id, job.id, ApplicationCreate(resume="fresh.pdf")
    )

    await db.refresh(profile)
    assert application.resume == "fresh.pdf"
    assert profile.resume == "fresh.pdf"
    assert profile.profile_completion > 0


# ==================== Status ====================

async def test_company_updates_status_of_own_application(db, make_student, make_application, posting):
    company, job = posting
    student, _ = await make_student()
    application = await make_application(student, job, status="interview")

    updated = await ApplicationService(db).update_status(application.id, "applied", company.id)

    # Overwrite is unconditional unless transitions are enforced
    assert updated.status == "applied"


async def test_invalid_status_is_rejected_before_lookup(db, make_company):
    company, _ = await make_company()
    with pytest.raises(InvalidStatus):
        await ApplicationService(db).update_status(uuid4(), "Accepted", company.id)


async def test_status_update_for_unknown_application(db, make_company):
    company, _ = await make_company()
    with pytest.raises(NotFound):
        await ApplicationService(db).update_status(uuid4(), "accepted", company.id)


async def test_other_company_cannot_update_status(db, make_student, make_company, make_application, posting):
    _, job = posting
    rival, _ = await make_company(company_name="Rival Ltd")
    student, _ = await make_student()
    application = await make_application(student, job)

    with pytest.raises(Forbidden):
        await ApplicationService(db).update_status(application.id, "shortlisted", rival.id)


async def test_admin_can_update_any_status(db, make_user, make_student, make_application, posting):
    _, job = posting
    admin = await make_user("admin")
    student, _ = await make_student()
    application = await make_application(student, job)

    updated = await ApplicationService(db).update_status(
        application.id, "accepted", admin.id, acting_role="admin"
    )

    assert updated.status == "accepted"


async def test_enforced_transitions_block_backward_moves(
    db, make_student, make_application, posting, monkeypatch
):
    monkeypatch.setattr(settings, "ENFORCE_STATUS_TRANSITIONS", True)
    company, job = posting
    student, _ = await make_student()
    application = await make_application(student, job, status="shortlisted")
    service = ApplicationService(db)

    with pytest.raises(InvalidState):
        await service.update_status(application.id, "under_review", company.id)

    updated = await service.update_status(application.id, "rejected", company.id)
    assert updated.status == "rejected"

    with pytest.raises(InvalidState):
        await service.update_status(application.id, "interview", company.id)


@pytest.mark.parametrize(
    "current, new, allowed",
    [
        ("applied", "applied", True),
        ("applied", "interview", True),
        ("under_review", "rejected", True),
        ("interview", "accepted", True),
        ("shortlisted", "applied", False),
        ("accepted", "rejected", False),
        ("rejected", "rejected", True),
    ],
)
def test_is_allowed_transition(current, new, allowed):
    assert is_allowed_transition(current, new) is allowed


# ==================== Withdraw ====================

@pytest.mark.parametrize("status", ["applied", "under_review", "shortlisted"])
async def test_withdraw_early_application(db, make_student, make_application, posting, status):
    _, job = posting
    student, _ = await make_student()
    application = await make_application(student, job, status=status)
    db.add(ApplicationAnswer(application_id=application.id, question_id=job.questions[0].id, answer="Yes"))
    await db.commit()

    await ApplicationService(db).withdraw(application.id, student.id)

    assert await count_rows(db, Application, Application.id == application.id) == 0
    assert await count_rows(db, ApplicationAnswer, ApplicationAnswer.application_id == application.id) == 0


@pytest.mark.parametrize("status", ["interview", "accepted", "rejected"])
async def test_withdraw_after_review_is_refused(db, make_student, make_application, posting, status):
    _, job = posting
    student, _ = await make_student()
    application = await make_application(student, job, status=status)

    with pytest.raises(InvalidState):
        await ApplicationService(db).withdraw(application.id, student.id)

    assert await count_rows(db, Application, Application.id == application.id) == 1


async def test_withdraw_someone_elses_application(db, make_student, make_application, posting):
    _, job = posting
    owner, _ = await make_student()
    other, _ = await make_student()
    application = await make_application(owner, job)

    with pytest.raises(Forbidden):
        await ApplicationService(db).withdraw(application.id, other.id)


async def test_withdraw_unknown_application(db, make_student):
    student, _ = await make_student()
    with pytest.raises(NotFound):
        await ApplicationService(db).withdraw(uuid4(), student.id)


# ==================== Listings ====================

async def test_student_listing_is_newest_first_and_filterable(
    db, make_student, make_company, make_job, make_application
):
    company, profile = await make_company()
    older_job = await make_job(company, profile, title="QA Intern")
    newer_job = await make_job(company, profile, title="Platform Engineer")
    student, _ = await make_student()
    now = datetime.utcnow()
    await make_application(student, older_job, status="rejected", applied_at=now - timedelta(days=3))
    await make_application(student, newer_job, applied_at=now)
    service = ApplicationService(db)

    listed = await service.list_for_student(student.id)
    assert [a.job_id for a in listed] == [newer_job.id, older_job.id]

    assert [a.job_id for a in await service.list_for_student(student.id, status="rejected")] == [older_job.id]
    assert len(await service.list_for_student(student.id, status="all")) == 2
    assert [a.job_id for a in await service.list_for_student(student.id, search="platform")] == [newer_job.id]

    with pytest.raises(InvalidStatus):
        await service.list_for_student(student.id, status="pending")


async def test_company_listing_is_scoped_to_own_jobs(
    db, make_student, make_company, make_job, make_application, posting
):
    company, job = posting
    rival, rival_profile = await make_company(company_name="Rival Ltd")
    rival_job = await make_job(rival, rival_profile)
    asha, _ = await make_student(name="Asha Rao")
    vik, _ = await make_student(name="Vikram Shah")
    await make_application(asha, job)
    await make_application(vik, job)
    await make_application(vik, rival_job)
    service = ApplicationService(db)

    listed = await service.list_for_company(company.id)
    assert {a.student_id for a in listed} == {asha.id, vik.id}
    assert all(a.job_id == job.id for a in listed)

    searched = await service.list_for_company(company.id, search="asha")
    assert [a.student_id for a in searched] == [asha.id]


async def test_get_for_company_checks_ownership(db, make_student, make_company, make_application, posting):
    company, job = posting
    rival, _ = await make_company(company_name="Rival Ltd")
    student, _ = await make_student()
    application = await make_application(student, job)
    service = ApplicationService(db)

    assert (await service.get_for_company(application.id, company.id)).id == application.id
    with pytest.raises(Forbidden):
        await service.get_for_company(application.id, rival.id)
    assert await service.has_applied(student.id, job.id) is True
