"""Integration tests for posting, saving, applying and live updates against PostgreSQL."""

import pytest

from applications import ApplicationService
from auth import AuthService, UserService
from jobs import JobService, SavedJobService
from shared import AlreadyApplied, ChangeFeed, NotAuthorized
from shared.change_feed import JOB_APPLICATIONS_CHANNEL
from user_settings import ProfileService

pytestmark = pytest.mark.integration


@pytest.fixture
def sessions(database):
    """Register an employer and a seeker and return their sessions."""
    auth_service = AuthService(user_service=UserService(database=database))
    _, employer = auth_service.register_user(
        "hr@shopco.example", "password123", "ShopCo HR", "employer"
    )
    _, seeker = auth_service.register_user("asha@example.com", "password123", "Asha", "seeker")
    return employer, seeker


@pytest.fixture
def cashier_job(database, sessions):
    employer, _ = sessions
    return JobService(database=database).post_job(
        employer,
        {
            "title": "Cashier",
            "company": "ShopCo",
            "location": "Pune",
            "type": "Part-time",
            "salary": "₹8,000",
            "description": "Handle the till",
            "accessibility": ["Wheelchair Accessible"],
            "distance": 1.5,
        },
    )


def test_posted_job_is_listed_first(database, sessions, cashier_job):
    """Test that a new posting appears at the top of the list."""
    jobs = JobService(database=database).list_jobs()

    assert jobs[0]["job_id"] == cashier_job["job_id"]
    assert jobs[0]["poster_id"] == sessions[0].user_id
    assert jobs[0]["accessibility"] == ["Wheelchair Accessible"]


def test_non_owner_cannot_update(database, sessions, cashier_job):
    """Test that the stored job is unchanged after a rejected update."""
    _, seeker = sessions
    job_service = JobService(database=database)

    with pytest.raises(NotAuthorized):
        job_service.update_job(seeker, cashier_job["job_id"], {"title": "Hacked"})

    assert job_service.get_job(cashier_job["job_id"])["title"] == "Cashier"


def test_toggle_saved_twice(database, sessions, cashier_job):
    """Test that saving twice returns to the unsaved state."""
    _, seeker = sessions
    saved_job_service = SavedJobService(database=database)

    assert saved_job_service.toggle_saved(seeker, cashier_job["job_id"]) is True
    assert saved_job_service.get_saved_job_ids(seeker) == {cashier_job["job_id"]}
    assert saved_job_service.toggle_saved(seeker, cashier_job["job_id"]) is False
    assert saved_job_service.get_saved_job_ids(seeker) == set()


def test_apply_once_only(database, sessions, cashier_job):
    """Test that a second application by the same user is rejected."""
    employer, seeker = sessions
    application_service = ApplicationService(database=database)

    application_service.apply_for_job(seeker, cashier_job["job_id"], {"phone": "98200 00000"})
    with pytest.raises(AlreadyApplied):
        application_service.apply_for_job(seeker, cashier_job["job_id"], {})

    applications = application_service.get_applications_for_job(employer, cashier_job["job_id"])
    assert len(applications) == 1
    assert applications[0]["status"] == "pending"


def test_application_stream_sees_new_application(database, sessions, cashier_job):
    """Test that an application triggers a fresh snapshot for the poster."""
    employer, seeker = sessions
    application_service = ApplicationService(database=database)
    job_id = cashier_job["job_id"]

    with ChangeFeed(database=database).subscribe(
        JOB_APPLICATIONS_CHANNEL,
        lambda: application_service.load_applications_for_job(job_id),
        key=job_id,
    ) as subscription:
        assert subscription.next_snapshot(timeout=1) == []

        application_service.apply_for_job(seeker, job_id, {})

        snapshot = subscription.next_snapshot(timeout=5)
        assert [app["applicant_id"] for app in snapshot] == [seeker.user_id]


def test_profile_updates_merge(database, sessions):
    """Test that saving one profile field keeps the others."""
    _, seeker = sessions
    profile_service = ProfileService(database=database)

    profile_service.update_profile(seeker, {"bio": "Cashier", "skills": "Billing, Tally"})
    profile = profile_service.update_profile(seeker, {"location": "Pune"})

    assert profile["bio"] == "Cashier"
    assert profile["skills"] == ["Billing", "Tally"]
    assert profile_service.get_profile(seeker)["location"] == "Pune"
