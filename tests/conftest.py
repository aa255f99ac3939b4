"""Pytest configuration and fixtures."""

import json
import os
import sqlite3
import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any project module reads them
os.environ["CLIENT_SECRET"] = "test-client-secret"
os.environ["ADMIN_SECRET"] = "test-admin-secret"
os.environ["NONCE_SECRET"] = "test-nonce-secret"
os.environ["ENCRYPTION_KEY"] = "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY="
os.environ["BOXTAL_API_URL"] = "https://api.boxtal.test"

CLIENT_HEADERS = {"X-Boxtal-Secret": "test-client-secret"}
ADMIN_HEADERS = {"X-Boxtal-Admin-Secret": "test-admin-secret"}


class FakeBoxtalApi:
    """Stands in for BoxtalApiClient; records calls and returns a canned response."""

    def __init__(self):
        from boxtal_api import ApiResponse

        self.calls = []
        self.keys = None
        self.response = ApiResponse(status_code=200, body="{}")

    def __call__(self, access_key=None, secret_key=None):
        self.keys = (access_key, secret_key)
        return self

    def api_url(self, path: str) -> str:
        return f"https://api.boxtal.test{path}"

    async def request(self, method, url, params=None):
        self.calls.append((method, url, params))
        return self.response


@pytest.fixture
def db_path(tmp_path, monkeypatch) -> Path:
    """Point the database at a fresh file for each test."""
    import database

    path = tmp_path / "boxtal_connect.db"
    monkeypatch.setattr(database, "DATABASE_PATH", str(path))
    return path


@pytest_asyncio.fixture
async def store(db_path):
    from database import OptionStore, get_db

    db = await get_db()
    try:
        yield OptionStore(db)
    finally:
        await db.close()


@pytest.fixture
def fake_api() -> FakeBoxtalApi:
    return FakeBoxtalApi()


@pytest.fixture
def client(db_path, fake_api):
    from fastapi.testclient import TestClient

    from boxtal_api import api_client_factory
    from limiter import limiter
    from main import app

    limiter.enabled = False
    app.dependency_overrides[api_client_factory] = lambda: fake_api
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    limiter.enabled = True


def read_option(db_path: Path, name: str, default=None):
    """Read a committed option straight from the database file."""
    conn = sqlite3.connect(db_path)
    try:
        row = conn.execute("SELECT value FROM options WHERE name = ?", (name,)).fetchone()
    finally:
        conn.close()
    return default if row is None else json.loads(row[0])


def write_option(db_path: Path, name: str, value) -> None:
    conn = sqlite3.connect(db_path)
    try:
        conn.execute(
            "INSERT OR REPLACE INTO options (name, value, updated_at) VALUES (?, ?, '')",
            (name, json.dumps(value)),
        )
        conn.commit()
    finally:
        conn.close()
