"""Tests for the SQLite job store."""

from __future__ import annotations

from datetime import datetime

import pytest

from jobtracker.exceptions import InvalidRecordError, RecordNotFoundError


def _job(store, **overrides):
    data = {"company": "Acme", "position": "Engineer", "appliedDate": "2025-01-10"}
    data.update(overrides)
    return store.create_job(data)


def test_create_and_get_job(store):
    job = _job(store, resumeVersion="backend", responseReceived=True)
    fetched = store.get_job(job.id)
    assert fetched == job
    assert fetched.resume_version == "backend"
    assert fetched.response_received is True


def test_list_jobs_filters_and_order(store):
    _job(store, company="Globex", appliedDate="2025-01-01")
    _job(store, company="ACME Corp", appliedDate="2025-01-03", status="Offer")
    _job(store, company="Initech", appliedDate="2025-01-02", resumeVersion="python")

    assert [j.company for j in store.list_jobs()] == ["ACME Corp", "Initech", "Globex"]
    assert [j.company for j in store.list_jobs(company="acme")] == ["ACME Corp"]
    assert [j.company for j in store.list_jobs(status="Offer")] == ["ACME Corp"]
    assert [j.company for j in store.list_jobs(resume_version="python")] == ["Initech"]


def test_update_job(store):
    job = _job(store)
    updated = store.update_job(job.id, {"status": "Technical", "responseReceived": True})
    assert updated.status == "Technical"
    assert updated.response_received is True
    assert updated.updated_at >= job.updated_at


def test_update_missing_job(store):
    with pytest.raises(RecordNotFoundError):
        store.update_job("nope", {"status": "Offer"})


def test_delete_job_cascades_interviews(store):
    job = _job(store)
    store.create_interview({"jobId": job.id, "type": "Phone", "scheduledDate": "2025-02-01"})
    store.delete_job(job.id)
    with pytest.raises(RecordNotFoundError):
        store.get_job(job.id)
    assert store.list_interviews() == []
    with pytest.raises(RecordNotFoundError):
        store.delete_job(job.id)


def test_follow_up(store):
    old = _job(store, appliedDate="2025-01-01")
    _job(store, appliedDate="2025-01-28")
    _job(store, appliedDate="2025-01-01", responseReceived=True)
    result = store.jobs_needing_follow_up(datetime(2025, 2, 1), days=7)
    assert [j.id for j in result] == [old.id]


def test_interview_crud(store):
    job = _job(store)
    iv = store.create_interview(
        {
            "jobId": job.id,
            "type": "Technical",
            "scheduledDate": "2025-02-03T15:00:00",
            "questions": ["Reverse a linked list"],
        }
    )
    assert store.get_interview(iv.id).questions == ["Reverse a linked list"]
    assert [i.id for i in store.interviews_for_job(job.id)] == [iv.id]
    assert store.list_interviews(kind="Phone") == []

    updated = store.update_interview(iv.id, {"result": "Passed", "duration": "45"})
    assert updated.result == "Passed"
    assert updated.duration == 45

    store.delete_interview(iv.id)
    with pytest.raises(RecordNotFoundError):
        store.get_interview(iv.id)


def test_interview_for_unknown_job(store):
    with pytest.raises(InvalidRecordError):
        store.create_interview({"jobId": "missing", "type": "Phone", "scheduledDate": "2025-02-01"})


def test_upcoming_interviews(store):
    job = _job(store)
    now = datetime(2025, 2, 1, 12)
    soon = store.create_interview({"jobId": job.id, "type": "Phone", "scheduledDate": "2025-02-03"})
    store.create_interview({"jobId": job.id, "type": "Onsite", "scheduledDate": "2025-02-20"})
    store.create_interview({"jobId": job.id, "type": "Phone", "scheduledDate": "2025-01-20"})
    store.create_interview(
        {"jobId": job.id, "type": "Final", "scheduledDate": "2025-02-04", "result": "Passed"}
    )
    upcoming = store.upcoming_interviews(now, days=7)
    assert [(iv.id, j.id) for iv, j in upcoming] == [(soon.id, job.id)]


def test_clear(store):
    job = _job(store)
    store.create_interview({"jobId": job.id, "type": "Phone", "scheduledDate": "2025-02-01"})
    store.clear()
    assert store.list_jobs() == []
    assert store.list_interviews() == []
