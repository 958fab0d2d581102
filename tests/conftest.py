"""Shared fixtures: an API client bound to a throwaway sqlite database."""

from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from backend import db
from backend.settings import reset_settings
from momentum.days import today_in

BACKEND_TOKEN = "test-backend-secret"
USER_EMAIL = "ana@example.com"


@pytest.fixture
def settings_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'momentum.db'}")
    monkeypatch.setenv("BACKEND_SESSION_SECRET", BACKEND_TOKEN)
    monkeypatch.setenv("ALLOWED_EMAILS", "")
    monkeypatch.setenv("DAY_TIMEZONE", "UTC")
    monkeypatch.delenv("WEEK_STARTS_ON", raising=False)
    reset_settings()
    db._engine = None
    db._session_factory = None
    yield
    reset_settings()
    db._engine = None
    db._session_factory = None


@pytest.fixture
def api_client(settings_env):
    from backend.main import create_app

    with TestClient(create_app()) as client:
        client.headers.update({"X-Backend-Token": BACKEND_TOKEN, "X-User-Email": USER_EMAIL})
        yield client


@pytest.fixture
def today():
    return today_in("UTC")


@pytest.fixture
def days_ago(today):
    def _days_ago(n: int):
        return today - timedelta(days=n)

    return _days_ago
