"""
Pytest configuration and fixtures for unit tests.

Unit tests are fast, isolated tests that don't require external dependencies.
"""

from unittest.mock import Mock

import pytest


@pytest.fixture
def mock_cursor():
    """Cursor shared by get_cursor() and get_transaction()."""
    return Mock()


@pytest.fixture
def mock_database(mock_cursor):
    """Mock database whose cursor and transaction both yield mock_cursor."""
    db = Mock()
    db.get_cursor.return_value.__enter__ = Mock(return_value=mock_cursor)
    db.get_cursor.return_value.__exit__ = Mock(return_value=False)
    db.get_transaction.return_value.__enter__ = Mock(return_value=mock_cursor)
    db.get_transaction.return_value.__exit__ = Mock(return_value=False)
    return db


@pytest.fixture
def sample_jobs():
    """Postings as returned by JobService.list_jobs, newest first."""
    return [
        {
            "job_id": 3,
            "poster_id": 2,
            "title": "Cashier",
            "company": "ShopCo",
            "location": "Pune",
            "job_type": "Part-time",
            "salary": "₹8,000",
            "description": "Handle the till at our flagship store",
            "accessibility": ["Wheelchair Accessible"],
            "suitable_for": ["All"],
            "distance_km": 1.5,
            "status": "active",
        },
        {
            "job_id": 2,
            "poster_id": 2,
            "title": "Data Entry Operator",
            "company": "InfoWorks",
            "location": "Mumbai",
            "job_type": "Full-time",
            "salary": "₹15,000 per month",
            "description": "Type records into our CRM",
            "accessibility": ["Work from Home Option", "Wheelchair Accessible"],
            "suitable_for": ["Women", "People with Disabilities"],
            "distance_km": 4,
            "status": "active",
        },
        {
            "job_id": 1,
            "poster_id": 5,
            "title": "Delivery Partner",
            "company": "QuickShip",
            "location": "Pune",
            "job_type": "Contract",
            "salary": "Negotiable",
            "description": "Deliver parcels across the city",
            "accessibility": ["Outdoor Work"],
            "suitable_for": ["All"],
            "distance_km": 12,
            "status": "active",
        },
    ]
