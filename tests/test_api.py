import json
import os
from uuid import UUID

import pytest
from sqlalchemy import select

from portal.core.exceptions import Forbidden
from portal.models.student import StudentProfile
from portal.models.user import User
from portal.services.auth_service import AuthService

API = "/api/v1"


async def signup_student(client, email="asha@example.com"):
    response = await client.post(
        f"{API}/auth/student/signup",
        json={"name": "Asha Rao", "email": email, "password": "secret123"},
    )
    assert response.status_code == 201
    return response.json()


async def signup_company(client, email="hr@acme.example.com"):
    response = await client.post(
        f"{API}/auth/company/signup",
        json={
            "name": "Riya Sen",
            "email": email,
            "password": "secret123",
            "company_name": "Acme Corp",
            "industry": "Fintech",
        },
    )
    assert response.status_code == 201
    return response.json()


def bearer(token_body):
    return {"Authorization": f"Bearer {token_body['access_token']}"}


# ==================== Health & errors ====================

async def test_root_and_health(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "operational"

    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.json()["status"] == "healthy"
    assert response.headers["x-request-id"] == "abc123"


async def test_missing_token_is_unauthorized(client):
    response = await client.get(f"{API}/auth/me")

    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": "Unauthorized",
        "detail": "Not authenticated",
    }
    assert response.headers["www-authenticate"] == "Bearer"


async def test_garbage_token_is_unauthorized(client):
    response = await client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


async def test_wrong_role_is_forbidden(client, make_student, auth_headers):
    student, _ = await make_student()

    response = await client.get(f"{API}/companies/me/dashboard", headers=auth_headers(student))

    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden"


# ==================== Auth ====================

async def test_signup_login_and_me(client, session_factory):
    body = await signup_student(client)
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "student"

    async with session_factory() as session:
        result = await session.execute(
            select(StudentProfile).where(StudentProfile.user_id == UUID(body["user"]["id"]))
        )
        assert result.scalar_one_or_none() is not None

    response = await client.post(
        f"{API}/auth/login",
        json={"email": "ASHA@example.com", "password": "secret123", "role": "student"},
    )
    assert response.status_code == 200

    response = await client.get(f"{API}/auth/me", headers=bearer(response.json()))
    assert response.status_code == 200
    assert response.json()["email"] == "asha@example.com"


async def test_duplicate_signup(client):
    await signup_student(client)

    response = await client.post(
        f"{API}/auth/student/signup",
        json={"name": "Asha Again", "email": "asha@example.com", "password": "secret123"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


async def test_login_with_wrong_role_or_password(client, make_student):
    student, _ = await make_student(email="vik@example.com")

    response = await client.post(
        f"{API}/auth/login", json={"email": student.email, "password": "password123", "role": "company"}
    )
    assert response.status_code == 401

    response = await client.post(
        f"{API}/auth/login", json={"email": student.email, "password": "wrong-pass", "role": "student"}
    )
    assert response.status_code == 401


async def test_demo_login_refuses_real_accounts(client, make_student):
    await make_student(email="real@example.com")

    response = await client.post(f"{API}/auth/demo", json={"role": "student", "email": "real@example.com"})

    assert response.status_code == 403


async def test_demo_login_is_not_offered_for_admin(client):
    response = await client.post(f"{API}/auth/demo", json={"role": "admin"})
    assert response.status_code == 422

    response = await client.get(f"{API}/admin/students")
    assert response.status_code == 401


async def test_demo_login_service_refuses_admin_role(db):
    with pytest.raises(Forbidden):
        await AuthService(db).demo_login("admin")

    result = await db.execute(select(User).where(User.role == "admin"))
    assert result.scalars().all() == []


# ==================== Demo accounts ====================

async def test_demo_student_can_browse_but_not_mutate(client, make_company, make_job):
    company, profile = await make_company()
    job = await make_job(company, profile)

    response = await client.post(f"{API}/auth/demo", json={"role": "student"})
    assert response.status_code == 200
    demo = response.json()
    assert demo["user"]["is_demo"] is True

    response = await client.get(f"{API}/students/jobs", headers=bearer(demo))
    assert response.status_code == 200
    assert [j["id"] for j in response.json()] == [str(job.id)]

    response = await client.post(
        f"{API}/students/jobs/{job.id}/apply",
        data={"full_name": "Demo Student"},
        headers=bearer(demo),
    )
    assert response.status_code == 403

    response = await client.put(f"{API}/students/me/profile", json={"college": "X"}, headers=bearer(demo))
    assert response.status_code == 403


# ==================== Hiring flow ====================

async def test_post_apply_review_flow(client, storage):
    company = await signup_company(client)
    student = await signup_student(client)

    response = await client.put(
        f"{API}/students/me/profile",
        json={"college": "IIT Madras", "course": "B.Tech", "branch": "CS", "cgpa": 8.4, "skills": "Python, SQL"},
        headers=bearer(student),
    )
    assert response.status_code == 200
    assert response.json()["skills"] == ["Python", "SQL"]

    response = await client.post(
        f"{API}/companies/me/jobs",
        json={
            "title": "Backend Engineer",
            "job_type": "full-time",
            "location": "Bengaluru",
            "salary": "12 LPA",
            "requirements": "Python\nSQL",
            "min_cgpa": 7.5,
            "allowed_branches": ["CS", "EE"],
            "questions": [{"question": "Why Acme?"}],
        },
        headers=bearer(company),
    )
    assert response.status_code == 201
    job = response.json()
    assert job["company"] == "Acme Corp"
    assert job["requirements"] == ["Python", "SQL"]

    response = await client.get(f"{API}/students/jobs/{job['id']}", headers=bearer(student))
    assert response.status_code == 200
    detail = response.json()
    assert detail["eligible"] is True
    assert detail["has_applied"] is False
    question_id = detail["job"]["questions"][0]["id"]

    response = await client.post(
        f"{API}/students/jobs/{job['id']}/apply",
        data={
            "phone": "9000000000",
            "answers": json.dumps([{"question_id": question_id, "answer": "Payments at scale"}]),
        },
        files={"resume": ("asha cv.pdf", b"%PDF-1.4 resume", "application/pdf")},
        headers=bearer(student),
    )
    assert response.status_code == 201
    application = response.json()["application"]
    assert application["status"] == "applied"
    assert application["eligibility_ok"] is True
    assert application["answers"][0]["answer"] == "Payments at scale"
    assert os.path.exists(storage.path_for("resumes", application["resume"]))

    response = await client.post(f"{API}/students/jobs/{job['id']}/apply", headers=bearer(student))
    assert response.status_code == 409
    assert response.json()["error"] == "DuplicateApplication"

    response = await client.get(f"{API}/companies/me/applications", headers=bearer(company))
    assert [a["id"] for a in response.json()] == [application["id"]]

    response = await client.patch(
        f"{API}/companies/me/applications/{application['id']}/status",
        json={"status": "hired"},
        headers=bearer(company),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidStatus"

    response = await client.patch(
        f"{API}/companies/me/applications/{application['id']}/status",
        json={"status": "interview"},
        headers=bearer(company),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "interview"

    response = await client.delete(
        f"{API}/students/me/applications/{application['id']}", headers=bearer(student)
    )
    assert response.status_code == 409
    assert response.json()["error"] == "InvalidState"

    response = await client.get(f"{API}/companies/me/analytics?days=7", headers=bearer(company))
    assert response.status_code == 200
    assert response.json()["overview"]["interviews"] == 1


async def test_apply_without_resume(client, make_company, make_job, make_student, auth_headers):
    company, profile = await make_company()
    job = await make_job(company, profile)
    student, _ = await make_student()

    response = await client.post(
        f"{API}/students/jobs/{job.id}/apply", data={"phone": "9000000000"}, headers=auth_headers(student)
    )

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


async def test_resume_upload_rejects_wrong_type(client, make_student, auth_headers):
    student, _ = await make_student()

    response = await client.post(
        f"{API}/students/me/resume",
        files={"file": ("resume.exe", b"MZ", "application/octet-stream")},
        headers=auth_headers(student),
    )

    assert response.status_code == 400


# ==================== Admin ====================

async def test_admin_moderation(client, make_user, make_company, make_job, auth_headers):
    admin = await make_user("admin")
    company, profile = await make_company(company_name="Acme Corp")
    pending = await make_job(company, profile, title="Awaiting review", is_active=False)

    response = await client.get(f"{API}/admin/jobs/pending", headers=auth_headers(admin))
    assert response.status_code == 200
    assert [(j["title"], j["company_name"]) for j in response.json()] == [("Awaiting review", "Acme Corp")]

    response = await client.post(f"{API}/admin/jobs/{pending.id}/activate", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = await client.get(f"{API}/admin/dashboard", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["stats"]["active_jobs"] == 1

    response = await client.delete(f"{API}/admin/jobs/{pending.id}", headers=auth_headers(admin))
    assert response.status_code == 200

    response = await client.delete(f"{API}/admin/jobs/{pending.id}", headers=auth_headers(admin))
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"
