import sys
from pathlib import Path

import pytest
import requests


# Add the root directory to the Python path to ensure imports work correctly
@pytest.fixture(scope="session", autouse=True)
def add_root_to_path():
    """Add the project root directory to Python path."""
    root_dir = Path(__file__).parent.parent
    if str(root_dir) not in sys.path:
        sys.path.insert(0, str(root_dir))
    yield


# Keep tests independent of any secrets.toml or env on the machine
@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    import streamlit as st

    monkeypatch.setattr(st, "secrets", {}, raising=False)
    for name in ("CHANNEL_PROBE_TIMEOUT", "CHANNEL_DATABASE_URL", "CHANNEL_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    yield


def make_response(status_code: int, body=b"") -> requests.Response:
    """Build a real requests.Response carrying `body` (bytes or str)."""
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    # no underlying connection to release on close()
    response._content_consumed = True
    return response


class FakeSession:
    """Stands in for requests.Session, recording each GET."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def channel_db(monkeypatch):
    """In-memory SQLite database with the channel tables, wired into orm.functions."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool

    import orm.functions
    from orm.models import init_db

    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(bind=engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    monkeypatch.setattr(orm.functions, "SessionLocal", session_factory)
    yield session_factory
    engine.dispose()


@pytest.fixture
def fixed_clock(monkeypatch):
    """Pin the timestamps the persister writes."""
    monkeypatch.setattr("orm.functions.now_epoch", lambda: 1_700_000_000)
    monkeypatch.setattr("orm.functions.now_iso", lambda: "2023-11-14T22:13:20Z")
    return {"test_time": 1_700_000_000, "updated_at": "2023-11-14T22:13:20Z"}
