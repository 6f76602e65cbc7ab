"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime

import pytest

from jobtracker.models import Job
from jobtracker.storage.repository import JobTrackerStore


@pytest.fixture()
def tmp_settings_yaml(tmp_path):
    """Write a minimal settings.yaml and return its path."""
    content = """\
db_path: "{db}"
host: "127.0.0.1"
port: 8123
allowed_origins:
  - "http://localhost:3000"
  - "https://tracker.example.com"
follow_up_days: 10
log_level: "debug"
""".format(db=str(tmp_path / ".state" / "jobs.db"))
    p = tmp_path / "settings.yaml"
    p.write_text(content)
    return p


@pytest.fixture()
def store(tmp_path):
    s = JobTrackerStore(tmp_path / "jobs.db")
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def make_job():
    """Factory for jobs with sensible defaults."""

    def _make(
        company: str = "Acme",
        status: str = "Applied",
        applied: str = "2025-01-10",
        last_activity: str | None = None,
        responded: bool = False,
        resume: str = "default",
        position: str = "Engineer",
    ) -> Job:
        applied_dt = datetime.fromisoformat(applied)
        return Job(
            company=company,
            position=position,
            status=status,
            applied_date=applied_dt,
            last_activity=datetime.fromisoformat(last_activity) if last_activity else None,
            response_received=responded,
            resume_version=resume,
        )

    return _make
