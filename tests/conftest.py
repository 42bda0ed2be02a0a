from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

_DB_PATH = Path(tempfile.gettempdir()) / f"eventhub_test_{os.getpid()}.db"

# Ensure config is set before app import
os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_DB_PATH}")
os.environ.setdefault("DATABASE_AUTO_CREATE", "true")
os.environ.setdefault("JWT_SECRET", "test_jwt_secret_32_chars_minimum")
os.environ.setdefault("ACCESS_TOKEN_TTL_SECONDS", "900")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from eventhub.main import app  # noqa: E402
from eventhub.models import Base  # noqa: E402


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        database = app.state.database
        with database.engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(table.delete())
        yield test_client


@pytest.fixture
def db_session(client):
    db = app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def pytest_sessionfinish(session, exitstatus):
    if _DB_PATH.exists():
        _DB_PATH.unlink()
