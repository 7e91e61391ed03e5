"""Unit tests for JobBoard."""

from unittest.mock import Mock

import pytest

from applications.application_service import ApplicationService
from jobs.job_board import JobBoard
from jobs.job_filters import FilterState
from jobs.job_service import JobService
from jobs.saved_job_service import SavedJobService
from shared.errors import AlreadyApplied, BackendUnavailable, NotFound


@pytest.fixture
def mock_job_service(sample_jobs):
    """Create a mock JobService returning the sample jobs."""
    service = Mock(spec=JobService)
    service.list_jobs.return_value = sample_jobs
    return service


@pytest.fixture
def mock_saved_job_service():
    """Create a mock SavedJobService."""
    service = Mock(spec=SavedJobService)
    service.get_saved_job_ids.return_value = {2}
    return service


@pytest.fixture
def mock_application_service():
    """Create a mock ApplicationService."""
    return Mock(spec=ApplicationService)


@pytest.fixture
def board(mock_job_service, mock_saved_job_service, mock_application_service, seeker_session):
    """Create a JobBoard for a signed-in seeker."""
    return JobBoard(
        job_service=mock_job_service,
        saved_job_service=mock_saved_job_service,
        application_service=mock_application_service,
        session=seeker_session,
    )


class TestJobBoard:
    """Test cases for JobBoard."""

    def test_init_requires_services(self, mock_saved_job_service):
        """Test that JobBoard requires its services."""
        with pytest.raises(ValueError, match="JobService is required"):
            JobBoard(job_service=None, saved_job_service=mock_saved_job_service)

    def test_refresh_loads_jobs_and_saved_ids(self, board, sample_jobs):
        """Test that refresh fills jobs and saved ids."""
        assert board.refresh() is True
        assert board.loaded is True
        assert board.jobs == sample_jobs
        assert board.saved_job_ids == {2}
        assert board.error is None

    def test_refresh_failure_keeps_previous_jobs(self, board, mock_job_service, sample_jobs):
        """Test that a backend failure sets a retryable error without clearing jobs."""
        board.refresh()
        mock_job_service.list_jobs.side_effect = BackendUnavailable("down")

        assert board.refresh() is False
        assert board.error == "Failed to fetch jobs. Please try again."
        assert board.retryable is True
        assert board.jobs == sample_jobs

    def test_visible_jobs_marks_saved(self, board):
        """Test that visible jobs carry an is_saved flag."""
        board.refresh()

        jobs = board.visible_jobs()

        assert {job["job_id"]: job["is_saved"] for job in jobs} == {3: False, 2: True, 1: False}

    def test_visible_jobs_search_and_filters(self, board):
        """Test that search and filters are applied together."""
        board.refresh()

        jobs = board.visible_jobs(query="pune", filters=FilterState({"jobType": ["Contract"]}))

        assert [job["job_id"] for job in jobs] == [1]

    def test_visible_jobs_hides_closed(self, board, sample_jobs):
        """Test that closed postings are hidden unless requested."""
        sample_jobs[0]["status"] = "closed"
        board.refresh()

        assert 3 not in [job["job_id"] for job in board.visible_jobs()]
        assert 3 in [job["job_id"] for job in board.visible_jobs(include_closed=True)]

    def test_toggle_saved_records_confirmed_state(self, board, mock_saved_job_service):
        """Test that local saved state follows the service result."""
        board.refresh()
        mock_saved_job_service.toggle_saved.return_value = True

        assert board.toggle_saved(3) is True
        assert board.is_saved(3)

        mock_saved_job_service.toggle_saved.return_value = False
        assert board.toggle_saved(3) is False
        assert not board.is_saved(3)

    def test_toggle_saved_failure_leaves_state(self, board, mock_saved_job_service):
        """Test that a failed toggle does not change local state."""
        board.refresh()
        mock_saved_job_service.toggle_saved.side_effect = NotFound("Job 3 not found")

        with pytest.raises(NotFound):
            board.toggle_saved(3)
        assert not board.is_saved(3)

    def test_apply_records_job(self, board, mock_application_service):
        """Test that a stored application marks the job as applied."""
        mock_application_service.apply_for_job.return_value = {"application_id": 11}

        board.apply(3, {})

        assert 3 in board.applied_job_ids

    def test_apply_failure_not_recorded(self, board, mock_application_service):
        """Test that a rejected application is not recorded locally."""
        mock_application_service.apply_for_job.side_effect = AlreadyApplied()

        with pytest.raises(AlreadyApplied):
            board.apply(3, {})
        assert 3 not in board.applied_job_ids

    def test_apply_without_application_service(self, mock_job_service, mock_saved_job_service):
        """Test that applying needs an application service."""
        board = JobBoard(job_service=mock_job_service, saved_job_service=mock_saved_job_service)
        with pytest.raises(ValueError, match="ApplicationService is required"):
            board.apply(3, {})
