"""
Root pytest configuration and shared fixtures.

This file contains configuration and fixtures shared across all test types.
Directory-specific conftest.py files can override or extend these fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add services and backend directories to Python path for tests
# This allows imports like "from shared import Database" and "from app import create_app"
project_root = Path(__file__).parent.parent
for path in (project_root / "backend", project_root / "services"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from shared.session import Session  # noqa: E402


@pytest.fixture
def seeker_session():
    """Session of a signed-in job seeker."""
    return Session(user_id=1, email="asha@example.com", display_name="Asha", role="seeker")


@pytest.fixture
def employer_session():
    """Session of a signed-in employer."""
    return Session(user_id=2, email="hr@shopco.example", display_name="ShopCo HR", role="employer")
