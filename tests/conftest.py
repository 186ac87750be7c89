# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.config.settings import DEFAULT_CATALOG_PATH, SubscriptionSettings
from src.domains.catalog.service import CategoryCatalog, load_catalog


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_environment() -> dict[str, str]:
    """Provide test environment variables.

    Returns:
        Dictionary of environment variables for testing.
    """
    return {
        "ENVIRONMENT": "test",
        "DEBUG": "true",
        "LOG_LEVEL": "DEBUG",
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
    }


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def catalog() -> CategoryCatalog:
    """Provide the catalog shipped in config/catalog.yaml."""
    return load_catalog(DEFAULT_CATALOG_PATH)


@pytest.fixture
def subscription_settings() -> SubscriptionSettings:
    """Provide default subscription settings."""
    return SubscriptionSettings()


@pytest.fixture
def fixed_now() -> datetime:
    """Provide a fixed reference time."""
    return datetime(2025, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.execute = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def sample_student_id() -> str:
    """Provide a sample student ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def sample_teacher_id() -> str:
    """Provide a sample teacher ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440002"


@pytest.fixture
def sample_admin_id() -> str:
    """Provide a sample admin ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440003"


@pytest.fixture
def sample_subject_data() -> dict[str, Any]:
    """Provide sample subject data for testing."""
    return {
        "name": "النحو",
        "stage": "secondary",
        "grade": "second",
        "section": "literary",
        "category": "arabic",
    }
