"""Search and faceted filtering over lists of job postings.

Filtering is AND across categories and OR within a category. Salary and
distance are free-form on postings, so they are parsed into numbers and
tested against named buckets; anything that does not parse simply does not
match a bucket.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from shared.errors import ValidationFailed

JOB_TYPES = ("Full-time", "Part-time", "Contract", "Internship", "Freelance")

JOB_TYPE = "jobType"
SALARY_RANGE = "salaryRange"
ACCESSIBILITY = "accessibility"
SUITABLE_FOR = "suitableFor"
DISTANCE = "distance"

FILTER_CATEGORIES = (JOB_TYPE, SALARY_RANGE, ACCESSIBILITY, SUITABLE_FOR, DISTANCE)

SALARY_BUCKETS: dict[str, Callable[[float], bool]] = {
    "Under ₹10,000": lambda amount: amount < 10000,
    "₹10,000 - ₹20,000": lambda amount: 10000 <= amount <= 20000,
    "₹20,000 - ₹30,000": lambda amount: 20000 <= amount <= 30000,
    "Above ₹30,000": lambda amount: amount > 30000,
}

DISTANCE_BUCKETS: dict[str, Callable[[float], bool]] = {
    "Within 2 km": lambda km: km <= 2,
    "2-5 km": lambda km: 2 < km <= 5,
    "5-10 km": lambda km: 5 < km <= 10,
    "Above 10 km": lambda km: km > 10,
}

ACCESSIBILITY_OPTIONS = ("Wheelchair Accessible", "Work from Home Option", "Outdoor Work")
SUITABLE_FOR_OPTIONS = ("Women", "People with Disabilities", "All")

FILTER_OPTIONS = {
    JOB_TYPE: list(JOB_TYPES),
    SALARY_RANGE: list(SALARY_BUCKETS),
    ACCESSIBILITY: list(ACCESSIBILITY_OPTIONS),
    SUITABLE_FOR: list(SUITABLE_FOR_OPTIONS),
    DISTANCE: list(DISTANCE_BUCKETS),
}

SEARCH_FIELDS = ("title", "company", "description", "location")

_NUMBER_PATTERN = re.compile(r"\d[\d,]*(?:\.\d+)?")


def _normalize_label(label: str) -> str:
    """Fold the spellings a bucket label may arrive in to one key.

    "₹10,000–₹20,000", "≤2km" and ">10km" normalise to the same keys as
    "₹10,000 - ₹20,000", "Within 2 km" and "Above 10 km".
    """
    key = label.strip().lower().replace("–", "-").replace("—", "-")
    if key.startswith("≤") or key.startswith("<="):
        key = "within" + key.lstrip("≤<=")
    elif key.startswith(">"):
        key = "above" + key.lstrip(">")
    return re.sub(r"\s+", "", key)


_SALARY_KEYS = {_normalize_label(label): label for label in SALARY_BUCKETS}
_DISTANCE_KEYS = {_normalize_label(label): label for label in DISTANCE_BUCKETS}


def canonical_bucket(category: str, label: str) -> str:
    """Return the canonical label for a salary or distance bucket.

    Raises:
        ValidationFailed: If the label names no known bucket
    """
    keys = _SALARY_KEYS if category == SALARY_RANGE else _DISTANCE_KEYS
    canonical = keys.get(_normalize_label(label))
    if canonical is None:
        raise ValidationFailed(f"Unknown {category} option '{label}'", fields=[category])
    return canonical


def parse_amount(value: Any) -> float | None:
    """Parse the first number out of a free-text amount.

    "₹12,000" -> 12000.0, "8000/month" -> 8000.0, "3.5 km" -> 3.5.
    Returns None for missing, empty or non-numeric values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_PATTERN.search(str(value))
        if not match:
            return None
        try:
            number = float(match.group(0).replace(",", ""))
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class FilterState:
    """Selected options per filter category."""

    def __init__(self, selections: Mapping[str, Iterable[str]] | None = None):
        self._selected: dict[str, set[str]] = {category: set() for category in FILTER_CATEGORIES}
        for category, values in (selections or {}).items():
            if isinstance(values, str):
                values = [values]
            for value in values:
                self.select(category, value)

    @classmethod
    def from_mapping(cls, args: Any) -> FilterState:
        """Build a state from request arguments.

        Accepts a werkzeug MultiDict (repeated keys) or a plain mapping of
        category to a value or list of values. Keys that are not filter
        categories are ignored.
        """
        selections = {}
        for category in FILTER_CATEGORIES:
            if hasattr(args, "getlist"):
                values = args.getlist(category)
            else:
                values = args.get(category) or []
            if isinstance(values, str):
                values = [values]
            values = [value for value in values if value and value.strip()]
            if values:
                selections[category] = values
        return cls(selections)

    def _check_category(self, category: str) -> None:
        if category not in self._selected:
            raise ValidationFailed(
                f"Unknown filter category '{category}'. Must be one of: {', '.join(FILTER_CATEGORIES)}",
                fields=[category],
            )

    def _canonical(self, category: str, value: str) -> str:
        if category in (SALARY_RANGE, DISTANCE):
            return canonical_bucket(category, value)
        return value.strip()

    def select(self, category: str, value: str) -> None:
        self._check_category(category)
        self._selected[category].add(self._canonical(category, value))

    def toggle(self, category: str, value: str) -> bool:
        """Add the option if absent, remove it if present.

        Returns:
            True if the option is selected afterwards
        """
        self._check_category(category)
        value = self._canonical(category, value)
        if value in self._selected[category]:
            self._selected[category].discard(value)
            return False
        self._selected[category].add(value)
        return True

    def clear(self) -> None:
        for values in self._selected.values():
            values.clear()

    def selected(self, category: str) -> frozenset[str]:
        self._check_category(category)
        return frozenset(self._selected[category])

    def is_empty(self) -> bool:
        return not any(self._selected.values())

    def to_dict(self) -> dict[str, list[str]]:
        return {category: sorted(values) for category, values in self._selected.items()}

    def __repr__(self) -> str:
        active = {k: sorted(v) for k, v in self._selected.items() if v}
        return f"FilterState({active})"


def search_jobs(jobs: list[dict[str, Any]], query: str | None) -> list[dict[str, Any]]:
    """Keep jobs whose title, company, description or location contains the query.

    Matching is a case-insensitive substring test. An empty query returns
    the list unchanged.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(jobs)
    return [
        job
        for job in jobs
        if any(needle in str(job.get(field) or "").lower() for field in SEARCH_FIELDS)
    ]


def _tags(job: dict[str, Any], field: str) -> set[str]:
    return {str(tag) for tag in (job.get(field) or [])}


def _matches_job_type(job: dict[str, Any], options: frozenset[str]) -> bool:
    job_type = str(job.get("job_type") or job.get("type") or "").lower()
    return job_type in {option.lower() for option in options}


def _matches_buckets(
    amount: float | None, options: frozenset[str], buckets: dict[str, Callable[[float], bool]]
) -> bool:
    if amount is None:
        return False
    return any(buckets[option](amount) for option in options)


def job_matches(job: dict[str, Any], filters: FilterState) -> bool:
    """Check one job against every non-empty category of a filter state."""
    job_types = filters.selected(JOB_TYPE)
    if job_types and not _matches_job_type(job, job_types):
        return False

    salary_ranges = filters.selected(SALARY_RANGE)
    if salary_ranges:
        salary = parse_amount(job.get("salary") or job.get("price"))
        if not _matches_buckets(salary, salary_ranges, SALARY_BUCKETS):
            return False

    accessibility = filters.selected(ACCESSIBILITY)
    if accessibility and not _tags(job, "accessibility") & accessibility:
        return False

    suitable_for = filters.selected(SUITABLE_FOR)
    if suitable_for and not _tags(job, "suitable_for") & suitable_for:
        return False

    distances = filters.selected(DISTANCE)
    if distances:
        distance = parse_amount(job.get("distance_km", job.get("distance")))
        if not _matches_buckets(distance, distances, DISTANCE_BUCKETS):
            return False

    return True


def filter_jobs(jobs: list[dict[str, Any]], filters: FilterState | None) -> list[dict[str, Any]]:
    """Keep jobs matching all selected categories, preserving order."""
    if filters is None or filters.is_empty():
        return list(jobs)
    return [job for job in jobs if job_matches(job, filters)]
