"""SQLite-backed storage for jobs and interviews."""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import fields
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from jobtracker.exceptions import InvalidRecordError, RecordNotFoundError, StorageError
from jobtracker.models import (
    Interview,
    Job,
    format_datetime,
    interview_updates,
    job_updates,
    parse_datetime,
    utcnow,
)

logger = logging.getLogger(__name__)

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS jobs (
    id                  TEXT PRIMARY KEY,
    company             TEXT NOT NULL,
    position            TEXT NOT NULL,
    location            TEXT DEFAULT '',
    job_url             TEXT DEFAULT '',
    description         TEXT DEFAULT '',
    salary              TEXT DEFAULT '',
    status              TEXT NOT NULL DEFAULT 'Applied',
    applied_date        TEXT NOT NULL,
    last_activity       TEXT,
    resume_version      TEXT NOT NULL DEFAULT 'default',
    notes               TEXT DEFAULT '',
    contact_name        TEXT DEFAULT '',
    contact_email       TEXT DEFAULT '',
    contact_phone       TEXT DEFAULT '',
    follow_up_date      TEXT,
    response_received   INTEGER DEFAULT 0,
    created_at          TEXT NOT NULL,
    updated_at          TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS interviews (
    id                  TEXT PRIMARY KEY,
    job_id              TEXT NOT NULL REFERENCES jobs(id),
    type                TEXT NOT NULL,
    scheduled_date      TEXT NOT NULL,
    duration            INTEGER DEFAULT 60,
    interviewer_name    TEXT DEFAULT '',
    interviewer_title   TEXT DEFAULT '',
    interviewer_email   TEXT DEFAULT '',
    location            TEXT DEFAULT 'Remote',
    meeting_link        TEXT DEFAULT '',
    questions           TEXT DEFAULT '[]',
    notes               TEXT DEFAULT '',
    feedback            TEXT DEFAULT '',
    result              TEXT NOT NULL DEFAULT 'Pending',
    prep_notes          TEXT DEFAULT '',
    created_at          TEXT NOT NULL,
    updated_at          TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status);
CREATE INDEX IF NOT EXISTS idx_jobs_company ON jobs(company);
CREATE INDEX IF NOT EXISTS idx_jobs_applied ON jobs(applied_date DESC);
CREATE INDEX IF NOT EXISTS idx_interviews_job ON interviews(job_id);
CREATE INDEX IF NOT EXISTS idx_interviews_scheduled ON interviews(scheduled_date);
"""

_JOB_COLUMNS = [f.name for f in fields(Job)]
_INTERVIEW_COLUMNS = [f.name for f in fields(Interview)]
_JOB_DATES = ("applied_date", "last_activity", "follow_up_date", "created_at", "updated_at")
_INTERVIEW_DATES = ("scheduled_date", "created_at", "updated_at")


def _to_db(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, list):
        return json.dumps(value)
    return value


def _row_to_job(row: sqlite3.Row) -> Job:
    data = {col: row[col] for col in _JOB_COLUMNS}
    for col in _JOB_DATES:
        data[col] = parse_datetime(data[col])
    data["response_received"] = bool(data["response_received"])
    return Job(**data)


def _row_to_interview(row: sqlite3.Row) -> Interview:
    data = {col: row[col] for col in _INTERVIEW_COLUMNS}
    for col in _INTERVIEW_DATES:
        data[col] = parse_datetime(data[col])
    data["questions"] = json.loads(data["questions"] or "[]")
    return Interview(**data)


class JobTrackerStore:
    """Persistent job and interview records stored in SQLite."""

    def __init__(self, db_path: str | Path) -> None:
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database {db_path}: {exc}") from exc
        logger.info("Job database ready at %s.", db_path)

    def _execute(self, sql: str, params: tuple | list = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc

    def _commit(self) -> None:
        try:
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc

    def _insert(self, table: str, columns: list[str], record: Any) -> None:
        placeholders = ", ".join("?" for _ in columns)
        self._execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
            [_to_db(getattr(record, col)) for col in columns],
        )

    def _update(self, table: str, record_id: str, updates: dict[str, Any]) -> int:
        updates = {**updates, "updated_at": utcnow()}
        assignments = ", ".join(f"{col}=?" for col in updates)
        cur = self._execute(
            f"UPDATE {table} SET {assignments} WHERE id=?",
            [_to_db(v) for v in updates.values()] + [record_id],
        )
        self._commit()
        return cur.rowcount

    # ---- jobs ----

    def create_job(self, data: dict[str, Any]) -> Job:
        job = Job.from_record(data)
        self.add_job(job)
        return job

    def add_job(self, job: Job, commit: bool = True) -> None:
        """Insert an already-built job, keeping its id."""
        self._insert("jobs", _JOB_COLUMNS, job)
        if commit:
            self._commit()
            logger.info("Created job %s (%s @ %s).", job.id, job.position, job.company)

    def list_jobs(
        self,
        status: str = "",
        company: str = "",
        resume_version: str = "",
    ) -> list[Job]:
        """Jobs matching the filters, newest application first.

        *company* matches as a case-insensitive substring.
        """
        query = "SELECT * FROM jobs"
        clauses: list[str] = []
        params: list[str] = []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if company:
            clauses.append("instr(lower(company), lower(?)) > 0")
            params.append(company)
        if resume_version:
            clauses.append("resume_version = ?")
            params.append(resume_version)
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY applied_date DESC"
        return [_row_to_job(r) for r in self._execute(query, params).fetchall()]

    def get_job(self, job_id: str) -> Job:
        row = self._execute("SELECT * FROM jobs WHERE id=?", (job_id,)).fetchone()
        if row is None:
            raise RecordNotFoundError("Job", job_id)
        return _row_to_job(row)

    def update_job(self, job_id: str, data: dict[str, Any]) -> Job:
        updates = job_updates(data)
        if not updates:
            return self.get_job(job_id)
        if self._update("jobs", job_id, updates) == 0:
            raise RecordNotFoundError("Job", job_id)
        logger.info("Updated job %s: %s.", job_id, ", ".join(sorted(updates)))
        return self.get_job(job_id)

    def delete_job(self, job_id: str) -> None:
        """Delete a job together with its interviews."""
        self._execute("DELETE FROM interviews WHERE job_id=?", (job_id,))
        cur = self._execute("DELETE FROM jobs WHERE id=?", (job_id,))
        if cur.rowcount == 0:
            self._conn.rollback()
            raise RecordNotFoundError("Job", job_id)
        self._commit()
        logger.info("Deleted job %s.", job_id)

    def jobs_needing_follow_up(self, today: datetime, days: int = 7) -> list[Job]:
        cutoff = format_datetime(today - timedelta(days=days))
        cur = self._execute(
            "SELECT * FROM jobs WHERE status='Applied' AND response_received=0 "
            "AND applied_date <= ? ORDER BY applied_date ASC",
            (cutoff,),
        )
        return [_row_to_job(r) for r in cur.fetchall()]

    # ---- interviews ----

    def create_interview(self, data: dict[str, Any]) -> Interview:
        interview = Interview.from_record(data)
        self.add_interview(interview)
        return interview

    def add_interview(self, interview: Interview, commit: bool = True) -> None:
        exists = self._execute(
            "SELECT 1 FROM jobs WHERE id=?", (interview.job_id,)
        ).fetchone()
        if exists is None:
            raise InvalidRecordError(f"Unknown job id: {interview.job_id}")
        self._insert("interviews", _INTERVIEW_COLUMNS, interview)
        if commit:
            self._commit()
            logger.info("Created %s interview %s for job %s.", interview.type, interview.id, interview.job_id)

    def list_interviews(
        self,
        job_id: str = "",
        kind: str = "",
        result: str = "",
    ) -> list[Interview]:
        query = "SELECT * FROM interviews"
        clauses: list[str] = []
        params: list[str] = []
        if job_id:
            clauses.append("job_id = ?")
            params.append(job_id)
        if kind:
            clauses.append("type = ?")
            params.append(kind)
        if result:
            clauses.append("result = ?")
            params.append(result)
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY scheduled_date ASC"
        return [_row_to_interview(r) for r in self._execute(query, params).fetchall()]

    def interviews_for_job(self, job_id: str) -> list[Interview]:
        return self.list_interviews(job_id=job_id)

    def get_interview(self, interview_id: str) -> Interview:
        row = self._execute(
            "SELECT * FROM interviews WHERE id=?", (interview_id,)
        ).fetchone()
        if row is None:
            raise RecordNotFoundError("Interview", interview_id)
        return _row_to_interview(row)

    def update_interview(self, interview_id: str, data: dict[str, Any]) -> Interview:
        updates = interview_updates(data)
        if not updates:
            return self.get_interview(interview_id)
        if self._update("interviews", interview_id, updates) == 0:
            raise RecordNotFoundError("Interview", interview_id)
        logger.info("Updated interview %s: %s.", interview_id, ", ".join(sorted(updates)))
        return self.get_interview(interview_id)

    def delete_interview(self, interview_id: str) -> None:
        cur = self._execute("DELETE FROM interviews WHERE id=?", (interview_id,))
        if cur.rowcount == 0:
            raise RecordNotFoundError("Interview", interview_id)
        self._commit()
        logger.info("Deleted interview %s.", interview_id)

    def upcoming_interviews(
        self, now: datetime, days: int = 7
    ) -> list[tuple[Interview, Job]]:
        """Pending interviews in ``[now, now + days]`` paired with their job."""
        cur = self._execute(
            "SELECT i.* FROM interviews i JOIN jobs j ON j.id = i.job_id "
            "WHERE i.result='Pending' AND i.scheduled_date >= ? AND i.scheduled_date <= ? "
            "ORDER BY i.scheduled_date ASC",
            (format_datetime(now), format_datetime(now + timedelta(days=days))),
        )
        interviews = [_row_to_interview(r) for r in cur.fetchall()]
        return [(iv, self.get_job(iv.job_id)) for iv in interviews]

    # ---- maintenance ----

    def clear(self) -> None:
        """Remove every interview and job."""
        self._execute("DELETE FROM interviews")
        self._execute("DELETE FROM jobs")
        self._commit()
        logger.info("Cleared all jobs and interviews.")

    def commit(self) -> None:
        self._commit()

    def close(self) -> None:
        self._conn.close()
