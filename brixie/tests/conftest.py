"""
Pytest fixtures for catalog tests.
"""

import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from brixie.database import Database
from brixie.repositories import build_repositories
from brixie.server import create_app
from brixie.tests.fakes import FakeCatalog


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        yield Path(f.name)
    # Cleanup
    if os.path.exists(f.name):
        os.unlink(f.name)


@pytest.fixture
def test_db(temp_db_path):
    """Create a test database instance."""
    db = Database(temp_db_path)
    yield db


@pytest.fixture
def remote():
    """Remote catalog with no data; tests fill it in."""
    return FakeCatalog()


@pytest.fixture
def repositories(test_db, remote):
    """(SetRepository, ThemeRepository) sharing the test database and fake remote."""
    return build_repositories(remote, test_db)


@pytest.fixture
def set_repo(repositories):
    return repositories[0]


@pytest.fixture
def theme_repo(repositories):
    return repositories[1]


@pytest.fixture
def client(test_db, remote):
    """Create a test client wired to the test database and fake remote."""
    app = create_app(db=test_db, remote=remote)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
