"""Shared test fixtures."""

import pytest

from studyadmin.app import App
from studyadmin.auth import SubjectAuth
from studyadmin.db import init_db

PASSWORDS = {"Math": "matthew123", "Physics": "philip123"}


@pytest.fixture
def tmp_data_dir(tmp_path):
    """Create a temporary data directory."""
    data_dir = tmp_path / "data_dir"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def db_conn():
    """In-memory SQLite database with schema applied."""
    conn = init_db(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def auth():
    """Subject auth with fixed passwords and an in-memory session."""
    return SubjectAuth(PASSWORDS)


@pytest.fixture
def app(tmp_data_dir):
    """App instance with tmp data_dir, fixed passwords and in-memory DB."""
    a = App(data_dir=tmp_data_dir, passwords=PASSWORDS)
    a.init_db(":memory:")
    yield a
    a.close()
