"""Domain models for JobTracker."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from jobtracker.exceptions import InvalidRecordError

# ---- vocabularies ----

STATUSES: tuple[str, ...] = (
    "Applied",
    "Phone Screen",
    "Technical",
    "Onsite",
    "Offer",
    "Rejected",
)
DEFAULT_STATUS = "Applied"
DEFAULT_RESUME_VERSION = "default"

INTERVIEW_TYPES: tuple[str, ...] = ("Phone", "Technical", "Onsite", "Final")
INTERVIEW_RESULTS: tuple[str, ...] = ("Pending", "Passed", "Failed")
DEFAULT_INTERVIEW_RESULT = "Pending"

# snake_case attribute -> camelCase wire key
_JOB_WIRE_KEYS: dict[str, str] = {
    "company": "company",
    "position": "position",
    "location": "location",
    "job_url": "jobUrl",
    "description": "description",
    "salary": "salary",
    "status": "status",
    "applied_date": "appliedDate",
    "last_activity": "lastActivity",
    "resume_version": "resumeVersion",
    "notes": "notes",
    "contact_name": "contactName",
    "contact_email": "contactEmail",
    "contact_phone": "contactPhone",
    "follow_up_date": "followUpDate",
    "response_received": "responseReceived",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}

_INTERVIEW_WIRE_KEYS: dict[str, str] = {
    "job_id": "jobId",
    "type": "type",
    "scheduled_date": "scheduledDate",
    "duration": "duration",
    "interviewer_name": "interviewerName",
    "interviewer_title": "interviewerTitle",
    "interviewer_email": "interviewerEmail",
    "location": "location",
    "meeting_link": "meetingLink",
    "questions": "questions",
    "notes": "notes",
    "feedback": "feedback",
    "result": "result",
    "prep_notes": "prepNotes",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


def new_id() -> str:
    """Return a fresh opaque record identifier."""
    return uuid.uuid4().hex[:24]


def utcnow() -> datetime:
    """Naive UTC timestamp; every stored datetime uses this convention."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value: Any) -> datetime | None:
    """Coerce *value* into a naive UTC ``datetime``.

    Accepts ``datetime``, ``date`` and ISO-8601 strings (a trailing ``Z`` is
    allowed). Empty values give ``None``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidRecordError(f"Invalid date: {value!r}") from exc
    else:
        raise InvalidRecordError(f"Invalid date: {value!r}")
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _pick(data: dict[str, Any], attr: str, wire: str) -> Any:
    """Read *attr* from *data* under either its wire or attribute name."""
    if wire in data:
        return data[wire]
    return data.get(attr)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass
class Job:
    """A tracked job application."""

    company: str
    position: str
    location: str = ""
    job_url: str = ""
    description: str = ""
    salary: str = ""
    status: str = DEFAULT_STATUS
    applied_date: datetime = field(default_factory=utcnow)
    last_activity: datetime | None = None
    resume_version: str = DEFAULT_RESUME_VERSION
    notes: str = ""
    contact_name: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    follow_up_date: datetime | None = None
    response_received: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if self.last_activity is None:
            self.last_activity = self.applied_date

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "Job":
        """Build a Job from a loosely-shaped record, applying defaults once.

        Keys may be camelCase (wire format) or snake_case. ``company`` and
        ``position`` must be present and non-empty.
        """
        company = _text(data.get("company")).strip()
        position = _text(data.get("position")).strip()
        if not company or not position:
            raise InvalidRecordError("Job requires 'company' and 'position'.")

        now = utcnow()
        applied = parse_datetime(_pick(data, "applied_date", "appliedDate")) or now
        last_activity = parse_datetime(_pick(data, "last_activity", "lastActivity")) or applied

        kwargs: dict[str, Any] = {
            "company": company,
            "position": position,
            "location": _text(data.get("location")),
            "job_url": _text(_pick(data, "job_url", "jobUrl")),
            "description": _text(data.get("description")),
            "salary": _text(data.get("salary")),
            "status": _text(data.get("status")) or DEFAULT_STATUS,
            "applied_date": applied,
            "last_activity": last_activity,
            "resume_version": _text(_pick(data, "resume_version", "resumeVersion"))
            or DEFAULT_RESUME_VERSION,
            "notes": _text(data.get("notes")),
            "contact_name": _text(_pick(data, "contact_name", "contactName")),
            "contact_email": _text(_pick(data, "contact_email", "contactEmail")),
            "contact_phone": _text(_pick(data, "contact_phone", "contactPhone")),
            "follow_up_date": parse_datetime(_pick(data, "follow_up_date", "followUpDate")),
            "response_received": _as_bool(
                _pick(data, "response_received", "responseReceived")
            ),
            "created_at": parse_datetime(_pick(data, "created_at", "createdAt")) or now,
            "updated_at": parse_datetime(_pick(data, "updated_at", "updatedAt")) or now,
        }
        record_id = data.get("_id") or data.get("id")
        if record_id:
            kwargs["id"] = str(record_id)
        return cls(**kwargs)

    def to_record(self) -> dict[str, Any]:
        """Return the camelCase, JSON-ready representation."""
        record: dict[str, Any] = {"_id": self.id}
        for attr, wire in _JOB_WIRE_KEYS.items():
            value = getattr(self, attr)
            record[wire] = format_datetime(value) if isinstance(value, datetime) else value
        return record


def job_updates(data: dict[str, Any]) -> dict[str, Any]:
    """Translate a partial wire-format update into attribute values.

    Unknown keys are ignored. Empty ``status`` / ``resumeVersion`` fall back
    to their defaults so stored jobs stay normalised.
    """
    updates: dict[str, Any] = {}
    for attr, wire in _JOB_WIRE_KEYS.items():
        if attr in ("created_at", "updated_at"):
            continue
        if wire not in data and attr not in data:
            continue
        value = _pick(data, attr, wire)
        if attr in ("applied_date", "last_activity", "follow_up_date"):
            value = parse_datetime(value)
            if value is None and attr == "applied_date":
                raise InvalidRecordError("'appliedDate' cannot be cleared.")
        elif attr == "response_received":
            value = _as_bool(value)
        elif attr == "status":
            value = _text(value) or DEFAULT_STATUS
        elif attr == "resume_version":
            value = _text(value) or DEFAULT_RESUME_VERSION
        else:
            value = _text(value)
            if attr in ("company", "position") and not value.strip():
                raise InvalidRecordError(f"'{wire}' cannot be empty.")
        updates[attr] = value
    return updates


@dataclass
class Interview:
    """A scheduled interview belonging to a Job."""

    job_id: str
    type: str
    scheduled_date: datetime
    duration: int = 60  # minutes
    interviewer_name: str = ""
    interviewer_title: str = ""
    interviewer_email: str = ""
    location: str = "Remote"
    meeting_link: str = ""
    questions: list[str] = field(default_factory=list)
    notes: str = ""
    feedback: str = ""
    result: str = DEFAULT_INTERVIEW_RESULT
    prep_notes: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=new_id)

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "Interview":
        job_id = _text(_pick(data, "job_id", "jobId")).strip()
        kind = _text(data.get("type")).strip()
        scheduled = parse_datetime(_pick(data, "scheduled_date", "scheduledDate"))
        if not job_id or not kind or scheduled is None:
            raise InvalidRecordError(
                "Interview requires 'jobId', 'type' and 'scheduledDate'."
            )
        now = utcnow()
        kwargs: dict[str, Any] = {
            "job_id": job_id,
            "type": kind,
            "scheduled_date": scheduled,
            "duration": _duration(data.get("duration")),
            "interviewer_name": _text(_pick(data, "interviewer_name", "interviewerName")),
            "interviewer_title": _text(_pick(data, "interviewer_title", "interviewerTitle")),
            "interviewer_email": _text(_pick(data, "interviewer_email", "interviewerEmail")),
            "location": _text(data.get("location")) or "Remote",
            "meeting_link": _text(_pick(data, "meeting_link", "meetingLink")),
            "questions": _questions(data.get("questions")),
            "notes": _text(data.get("notes")),
            "feedback": _text(data.get("feedback")),
            "result": _text(data.get("result")) or DEFAULT_INTERVIEW_RESULT,
            "prep_notes": _text(_pick(data, "prep_notes", "prepNotes")),
            "created_at": parse_datetime(_pick(data, "created_at", "createdAt")) or now,
            "updated_at": parse_datetime(_pick(data, "updated_at", "updatedAt")) or now,
        }
        record_id = data.get("_id") or data.get("id")
        if record_id:
            kwargs["id"] = str(record_id)
        return cls(**kwargs)

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {"_id": self.id}
        for attr, wire in _INTERVIEW_WIRE_KEYS.items():
            value = getattr(self, attr)
            if isinstance(value, datetime):
                value = format_datetime(value)
            elif isinstance(value, list):
                value = list(value)
            record[wire] = value
        return record


def interview_updates(data: dict[str, Any]) -> dict[str, Any]:
    """Translate a partial wire-format interview update into attribute values."""
    updates: dict[str, Any] = {}
    for attr, wire in _INTERVIEW_WIRE_KEYS.items():
        if attr in ("created_at", "updated_at", "job_id"):
            continue
        if wire not in data and attr not in data:
            continue
        value = _pick(data, attr, wire)
        if attr == "scheduled_date":
            value = parse_datetime(value)
            if value is None:
                raise InvalidRecordError("'scheduledDate' cannot be cleared.")
        elif attr == "duration":
            value = _duration(value)
        elif attr == "questions":
            value = _questions(value)
        elif attr == "result":
            value = _text(value) or DEFAULT_INTERVIEW_RESULT
        else:
            value = _text(value)
        updates[attr] = value
    return updates


def _duration(value: Any) -> int:
    if value is None or value == "":
        return 60
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRecordError(f"Invalid duration: {value!r}") from exc


def _questions(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidRecordError("'questions' must be a list of strings.")
    return [str(q) for q in value]
