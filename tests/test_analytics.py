from datetime import date, datetime, timedelta

import pytest

from portal.services.analytics_service import (
    AnalyticsService,
    conversion_rate,
    daily_series,
    interview_to_hire_rate,
)


def test_rates_are_zero_without_denominator():
    assert conversion_rate(0, 0) == 0
    assert interview_to_hire_rate(3, 0) == 0


def test_rates_round_to_whole_percent():
    assert conversion_rate(1, 3) == 33
    assert conversion_rate(2, 3) == 67
    assert interview_to_hire_rate(1, 2) == 50


def test_daily_series_fills_missing_days_oldest_first():
    series = daily_series({"2026-10-17": 2, "2026-10-19": 1}, days=4, today=date(2026, 10, 19))

    assert series == [
        {"date": "2026-10-16", "count": 0},
        {"date": "2026-10-17", "count": 2},
        {"date": "2026-10-18", "count": 0},
        {"date": "2026-10-19", "count": 1},
    ]


@pytest.fixture
async def hiring_history(make_company, make_job, make_student, make_application):
    """Two jobs for one company with applicants spread over statuses and dates."""
    company, profile = await make_company(company_name="Acme Corp")
    backend = await make_job(company, profile, title="Backend Engineer", salary="8 LPA")
    design = await make_job(company, profile, title="Product Designer", salary="80k per month")
    await make_job(company, profile, title="Paused Role", is_active=False, salary="Competitive")

    now = datetime.utcnow()
    asha, _ = await make_student(college="IIT Madras", skills=["Python", "SQL"])
    vik, _ = await make_student(college="IIT Madras", skills=["Python"])
    meera, _ = await make_student(college="", skills=["Figma"])

    await make_application(asha, backend, status="accepted", applied_at=now - timedelta(days=2))
    await make_application(vik, backend, status="interview", applied_at=now)
    await make_application(meera, backend, status="applied", applied_at=now - timedelta(days=45))
    await make_application(meera, design, status="interview", applied_at=now - timedelta(hours=2))
    return company, backend, design, (asha, vik, meera)


async def test_company_analytics(db, hiring_history):
    company, backend, design, _ = hiring_history

    analytics = await AnalyticsService(db).company_analytics(company.id, days=30)
    overview = analytics["overview"]

    assert overview["total_jobs"] == 3
    assert overview["active_jobs"] == 2
    assert overview["pending_jobs"] == 1
    assert overview["total_applications"] == 4
    assert overview["recent_applications"] == 2
    assert overview["interviews"] == 2
    assert overview["hired"] == 1
    assert overview["conversion_rate"] == 25
    assert overview["interview_to_hire_rate"] == 50

    assert analytics["applications_by_status"] == {
        "applied": 1,
        "under_review": 0,
        "shortlisted": 0,
        "interview": 2,
        "rejected": 0,
        "accepted": 1,
    }

    daily = analytics["daily_applications"]
    assert len(daily) == 30
    assert daily[-1]["date"] == datetime.utcnow().date().isoformat()
    # The 45-day-old application falls outside the window
    assert sum(point["count"] for point in daily) == 3

    assert [(j["title"], j["count"]) for j in analytics["top_jobs"]] == [
        ("Backend Engineer", 3),
        ("Product Designer", 1),
    ]
    assert analytics["top_colleges"] == [{"label": "IIT Madras", "count": 2}]
    assert {"label": "Python", "count": 2} in analytics["top_skills"]
    assert {"label": "SQL", "count": 1} in analytics["top_skills"]
    assert {"label": "Figma", "count": 2} in analytics["top_skills"]


async def test_company_analytics_without_applications(db, make_company):
    company, _ = await make_company()

    analytics = await AnalyticsService(db).company_analytics(company.id, days=7)

    assert analytics["overview"]["total_applications"] == 0
    assert analytics["overview"]["conversion_rate"] == 0
    assert analytics["overview"]["interview_to_hire_rate"] == 0
    assert [p["count"] for p in analytics["daily_applications"]] == [0] * 7
    assert analytics["top_jobs"] == []
    assert analytics["top_skills"] == []


async def test_company_dashboard(db, hiring_history):
    company, backend, design, _ = hiring_history

    dashboard = await AnalyticsService(db).company_dashboard(company.id)

    assert dashboard["total_jobs"] == 3
    assert dashboard["total_applications"] == 4
    assert dashboard["new_applications"] == 2
    assert dashboard["interviews"] == 2
    assert len(dashboard["recent_applications"]) == 4
    assert dashboard["recent_applications"][0]["job_title"] == "Backend Engineer"
    counts = {job["id"]: job["application_count"] for job in dashboard["recent_jobs"]}
    assert counts == {backend.id: 3, design.id: 1}


async def test_student_dashboard(db, hiring_history):
    _, _, _, (asha, vik, meera) = hiring_history

    dashboard = await AnalyticsService(db).student_dashboard(meera.id)

    assert dashboard["active_jobs"] == 2
    assert dashboard["total_applications"] == 2
    assert dashboard["pending_applications"] == 1
    assert dashboard["interviews"] == 1
    assert dashboard["recent_applications"][0]["job_title"] == "Product Designer"
    assert 0 <= dashboard["profile_completion"] <= 100


async def test_admin_dashboard(db, make_user, hiring_history):
    await make_user("admin")

    dashboard = await AnalyticsService(db).admin_dashboard()
    stats = dashboard["stats"]

    assert stats["total_students"] == 3
    assert stats["total_companies"] == 1
    assert stats["active_jobs"] == 2
    assert stats["pending_jobs"] == 1
    assert stats["total_jobs"] == 3
    assert stats["total_applications"] == 4
    assert stats["placed_students"] == 1
    # (8 + 9.6) / 2, "Competitive" is skipped
    assert stats["average_package"] == 8.8
    assert [job.title for job in dashboard["pending_jobs"]] == ["Paused Role"]
    assert len(dashboard["recent_students"]) == 3
    assert len(dashboard["recent_companies"]) == 1
