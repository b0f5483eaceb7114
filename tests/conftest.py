"""Shared test fixtures for ghstars."""

from unittest.mock import MagicMock

import pytest

from ghstars.infrastructure.database import DatabaseRepository


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "data.ghstars")


@pytest.fixture
def database(db_path):
    """Migrated SQLite store in a temporary directory."""
    repository = DatabaseRepository(db_path)
    repository.connect()
    repository.initialize_schema()
    yield repository
    repository.close()


@pytest.fixture
def session():
    """Stand-in for requests.Session."""
    fake = MagicMock()
    fake.headers = {}
    return fake
