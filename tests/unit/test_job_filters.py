"""Unit tests for job search and filtering."""

import pytest
from werkzeug.datastructures import MultiDict

from jobs.job_filters import (
    DISTANCE,
    JOB_TYPE,
    SALARY_RANGE,
    FilterState,
    canonical_bucket,
    filter_jobs,
    parse_amount,
    search_jobs,
)
from shared.errors import ValidationFailed


def _ids(jobs):
    return [job["job_id"] for job in jobs]


class TestSearchJobs:
    """Test cases for free-text search."""

    def test_empty_query_returns_all(self, sample_jobs):
        """Test that an empty or blank query keeps every job."""
        assert _ids(search_jobs(sample_jobs, "")) == [3, 2, 1]
        assert _ids(search_jobs(sample_jobs, "   ")) == [3, 2, 1]
        assert _ids(search_jobs(sample_jobs, None)) == [3, 2, 1]

    def test_matches_title_case_insensitive(self, sample_jobs):
        """Test that search is a case-insensitive substring match."""
        assert _ids(search_jobs(sample_jobs, "CASH")) == [3]

    def test_matches_company_location_and_description(self, sample_jobs):
        """Test that company, location and description are searched."""
        assert _ids(search_jobs(sample_jobs, "infoworks")) == [2]
        assert _ids(search_jobs(sample_jobs, "pune")) == [3, 1]
        assert _ids(search_jobs(sample_jobs, "parcels")) == [1]

    def test_result_is_subset_in_original_order(self, sample_jobs):
        """Test that search never adds or reorders jobs."""
        result = search_jobs(sample_jobs, "e")
        assert all(job in sample_jobs for job in result)
        assert _ids(result) == sorted(_ids(result), reverse=True)

    def test_missing_fields_do_not_fail(self):
        """Test that jobs without searchable fields are skipped safely."""
        assert search_jobs([{"job_id": 1, "title": None}], "x") == []


class TestParseAmount:
    """Test cases for parsing free-text amounts."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("₹12,000", 12000.0),
            ("8000/month", 8000.0),
            ("3.5 km", 3.5),
            (15000, 15000.0),
            (2.0, 2.0),
        ],
    )
    def test_parses_numbers(self, value, expected):
        """Test that the first number is extracted."""
        assert parse_amount(value) == expected

    @pytest.mark.parametrize("value", [None, "", "Negotiable", True, float("nan"), float("inf")])
    def test_unparseable_values_return_none(self, value):
        """Test that non-numeric values give None instead of raising."""
        assert parse_amount(value) is None


class TestFilterState:
    """Test cases for FilterState."""

    def test_toggle_adds_then_removes(self):
        """Test that toggling the same option twice clears it."""
        filters = FilterState()
        assert filters.toggle(JOB_TYPE, "Full-time") is True
        assert filters.selected(JOB_TYPE) == frozenset({"Full-time"})
        assert filters.toggle(JOB_TYPE, "Full-time") is False
        assert filters.is_empty()

    def test_clear(self):
        """Test that clear empties every category."""
        filters = FilterState({JOB_TYPE: ["Contract"], DISTANCE: ["2-5 km"]})
        filters.clear()
        assert filters.is_empty()

    def test_unknown_category_rejected(self):
        """Test that an unknown category raises ValidationFailed."""
        with pytest.raises(ValidationFailed) as exc_info:
            FilterState().toggle("colour", "red")
        assert exc_info.value.fields == ["colour"]

    def test_unknown_bucket_rejected(self):
        """Test that an unknown salary bucket raises ValidationFailed."""
        with pytest.raises(ValidationFailed, match="Unknown salaryRange option"):
            FilterState({SALARY_RANGE: ["a lot"]})

    @pytest.mark.parametrize(
        "alias,canonical",
        [
            ("≤2km", "Within 2 km"),
            ("<= 2 km", "Within 2 km"),
            (">10km", "Above 10 km"),
            ("5–10 km", "5-10 km"),
        ],
    )
    def test_distance_aliases(self, alias, canonical):
        """Test that alternative distance labels map to the canonical bucket."""
        assert canonical_bucket(DISTANCE, alias) == canonical

    def test_salary_alias_with_en_dash(self):
        """Test that an en dash in a salary label is accepted."""
        assert canonical_bucket(SALARY_RANGE, "₹10,000–₹20,000") == "₹10,000 - ₹20,000"

    def test_from_mapping_reads_repeated_keys(self):
        """Test that repeated query parameters select several options."""
        args = MultiDict(
            [("jobType", "Full-time"), ("jobType", "Contract"), ("q", "ignored"), ("distance", "")]
        )
        filters = FilterState.from_mapping(args)
        assert filters.selected(JOB_TYPE) == frozenset({"Full-time", "Contract"})
        assert filters.selected(DISTANCE) == frozenset()

    def test_from_mapping_plain_dict(self):
        """Test that a plain mapping of single values is accepted."""
        filters = FilterState.from_mapping({"salaryRange": "Under ₹10,000"})
        assert filters.selected(SALARY_RANGE) == frozenset({"Under ₹10,000"})

    def test_to_dict_lists_every_category(self):
        """Test that to_dict includes empty categories."""
        result = FilterState({JOB_TYPE: ["Internship"]}).to_dict()
        assert result["jobType"] == ["Internship"]
        assert result["distance"] == []
        assert len(result) == 5


class TestFilterJobs:
    """Test cases for faceted filtering."""

    def test_no_filters_returns_all(self, sample_jobs):
        """Test that empty or missing filters keep every job."""
        assert _ids(filter_jobs(sample_jobs, None)) == [3, 2, 1]
        assert _ids(filter_jobs(sample_jobs, FilterState())) == [3, 2, 1]

    def test_salary_bucket(self, sample_jobs):
        """Test that ₹8,000 is under ₹10,000 and ₹15,000 falls in the next bucket."""
        under = filter_jobs(sample_jobs, FilterState({SALARY_RANGE: ["Under ₹10,000"]}))
        middle = filter_jobs(sample_jobs, FilterState({SALARY_RANGE: ["₹10,000 - ₹20,000"]}))
        assert _ids(under) == [3]
        assert _ids(middle) == [2]

    def test_unparseable_salary_never_matches_a_bucket(self, sample_jobs):
        """Test that a 'Negotiable' salary is excluded whenever a salary bucket is set."""
        every_bucket = FilterState(
            {
                SALARY_RANGE: [
                    "Under ₹10,000",
                    "₹10,000 - ₹20,000",
                    "₹20,000 - ₹30,000",
                    "Above ₹30,000",
                ]
            }
        )
        assert 1 not in _ids(filter_jobs(sample_jobs, every_bucket))

    def test_distance_buckets(self, sample_jobs):
        """Test distance bucket boundaries."""
        assert _ids(filter_jobs(sample_jobs, FilterState({DISTANCE: ["Within 2 km"]}))) == [3]
        assert _ids(filter_jobs(sample_jobs, FilterState({DISTANCE: ["2-5 km"]}))) == [2]
        assert _ids(filter_jobs(sample_jobs, FilterState({DISTANCE: ["Above 10 km"]}))) == [1]

    def test_distance_boundary_is_inclusive_of_upper_bound(self):
        """Test that exactly 2 km is 'Within 2 km' and exactly 5 km is '2-5 km'."""
        jobs = [{"job_id": 1, "distance_km": 2}, {"job_id": 2, "distance": "5"}]
        assert _ids(filter_jobs(jobs, FilterState({DISTANCE: ["Within 2 km"]}))) == [1]
        assert _ids(filter_jobs(jobs, FilterState({DISTANCE: ["2-5 km"]}))) == [2]

    def test_or_within_category(self, sample_jobs):
        """Test that options in one category are combined with OR."""
        filters = FilterState({JOB_TYPE: ["Part-time", "Contract"]})
        assert _ids(filter_jobs(sample_jobs, filters)) == [3, 1]

    def test_and_across_categories(self, sample_jobs):
        """Test that categories are combined with AND."""
        filters = FilterState(
            {"accessibility": ["Wheelchair Accessible"], "suitableFor": ["Women"]}
        )
        assert _ids(filter_jobs(sample_jobs, filters)) == [2]

    def test_job_type_case_insensitive(self):
        """Test that job type matching ignores case and reads the 'type' key."""
        jobs = [{"job_id": 1, "type": "full-time"}]
        assert _ids(filter_jobs(jobs, FilterState({JOB_TYPE: ["Full-time"]}))) == [1]

    def test_filter_is_subset_in_original_order(self, sample_jobs):
        """Test that filtering never adds or reorders jobs."""
        filters = FilterState({"suitableFor": ["All", "Women"]})
        result = filter_jobs(sample_jobs, filters)
        assert _ids(result) == [3, 2, 1]
