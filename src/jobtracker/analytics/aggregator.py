"""Derived metrics over a job collection.

Everything here is a pure function of its input: no I/O, no caching, no
shared state. Callers recompute in full whenever their collection changes.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable, Sequence

from jobtracker.models import DEFAULT_RESUME_VERSION, STATUSES, Interview, Job

MONTHLY_BUCKETS = 6
TOP_COMPANIES = 5
RECENT_ACTIVITY = 5
FOLLOW_UP_DAYS = 7

_SECONDS_PER_DAY = 24 * 60 * 60
_ACTIVE_STATUSES = ("Phone Screen", "Technical", "Onsite")


# ---- result types ----


@dataclass(frozen=True)
class ResumeStats:
    """Performance of one resume version."""

    version: str
    total: int
    response_rate: int
    offer_rate: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "total": self.total,
            "responseRate": self.response_rate,
            "offerRate": self.offer_rate,
        }


@dataclass(frozen=True)
class MonthBucket:
    month: str  # YYYY-MM
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"month": self.month, "count": self.count}


@dataclass(frozen=True)
class CompanyCount:
    company: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"company": self.company, "count": self.count}


def _empty_distribution() -> dict[str, int]:
    return {status: 0 for status in STATUSES}


@dataclass(frozen=True)
class DerivedMetrics:
    """Aggregate values computed from a job collection at a point in time."""

    total: int = 0
    response_rate: int = 0
    avg_time_to_response: int = 0
    success_rate: int = 0
    rejection_rate: int = 0
    resume_performance: tuple[ResumeStats, ...] = ()
    monthly_applications: tuple[MonthBucket, ...] = ()
    top_companies: tuple[CompanyCount, ...] = ()
    status_distribution: dict[str, int] = field(default_factory=_empty_distribution)

    def to_dict(self) -> dict[str, Any]:
        """JSON shape served by the API."""
        return {
            "total": self.total,
            "responseRate": self.response_rate,
            "avgTimeToResponse": self.avg_time_to_response,
            "successRate": self.success_rate,
            "rejectionRate": self.rejection_rate,
            "resumePerformance": [r.to_dict() for r in self.resume_performance],
            "monthlyApplications": [m.to_dict() for m in self.monthly_applications],
            "topCompanies": [c.to_dict() for c in self.top_companies],
            "statusDistribution": dict(self.status_distribution),
        }


# ---- helpers ----


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2).

    ``round()`` rounds halves to even, so 12.5 would become 12.
    """
    return math.floor(value + 0.5)


def percentage(part: int, whole: int) -> int:
    """Integer percentage of *part* in *whole*; 0 when *whole* is 0."""
    if whole == 0:
        return 0
    return round_half_up(part / whole * 100)


def elapsed_days(start: datetime, end: datetime) -> int:
    """Whole days from *start* to *end*, rounded up. Negative when reversed."""
    return math.ceil((end - start).total_seconds() / _SECONDS_PER_DAY)


def month_key(moment: datetime) -> str:
    return f"{moment.year:04d}-{moment.month:02d}"


# ---- core metrics ----


def average_time_to_response(jobs: Iterable[Job]) -> int:
    """Mean elapsed days between application and last activity for responded jobs.

    Jobs whose last activity precedes their application date contribute a
    negative value; they are not clamped or excluded.
    """
    times = [
        elapsed_days(job.applied_date, job.last_activity)
        for job in jobs
        if job.response_received and job.last_activity is not None
    ]
    if not times:
        return 0
    return round_half_up(sum(times) / len(times))


def resume_performance(jobs: Iterable[Job]) -> tuple[ResumeStats, ...]:
    """Per resume version totals and rates, in first-seen order."""
    groups: dict[str, list[int]] = {}  # version -> [total, responses, offers]
    for job in jobs:
        version = job.resume_version or DEFAULT_RESUME_VERSION
        counts = groups.setdefault(version, [0, 0, 0])
        counts[0] += 1
        if job.response_received:
            counts[1] += 1
        if job.status == "Offer":
            counts[2] += 1
    return tuple(
        ResumeStats(
            version=version,
            total=total,
            response_rate=percentage(responses, total),
            offer_rate=percentage(offers, total),
        )
        for version, (total, responses, offers) in groups.items()
    )


def monthly_applications(
    jobs: Iterable[Job], limit: int = MONTHLY_BUCKETS
) -> tuple[MonthBucket, ...]:
    """Application counts per ``YYYY-MM``, ascending, keeping the latest *limit*."""
    counts = Counter(month_key(job.applied_date) for job in jobs)
    ordered = sorted(counts.items())
    ordered = ordered[-limit:] if limit > 0 else []
    return tuple(MonthBucket(month, count) for month, count in ordered)


def top_companies(jobs: Iterable[Job], limit: int = TOP_COMPANIES) -> tuple[CompanyCount, ...]:
    """Most applied-to companies by exact name.

    ``sorted`` is stable and ``Counter`` keeps insertion order, so equal
    counts stay in the order companies were first encountered.
    """
    counts = Counter(job.company for job in jobs)
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return tuple(CompanyCount(company, count) for company, count in ordered[:limit])


def status_distribution(jobs: Iterable[Job]) -> dict[str, int]:
    """Counts for the six known statuses; unknown statuses are dropped."""
    distribution = _empty_distribution()
    for job in jobs:
        if job.status in distribution:
            distribution[job.status] += 1
    return distribution


def compute_analytics(jobs: Sequence[Job]) -> DerivedMetrics:
    """Compute the full :class:`DerivedMetrics` for *jobs*.

    Total over any input; an empty collection yields all-zero metrics.
    """
    total = len(jobs)
    if total == 0:
        return DerivedMetrics()

    responded = sum(1 for job in jobs if job.response_received)
    offers = sum(1 for job in jobs if job.status == "Offer")
    rejections = sum(1 for job in jobs if job.status == "Rejected")

    return DerivedMetrics(
        total=total,
        response_rate=percentage(responded, total),
        avg_time_to_response=average_time_to_response(jobs),
        success_rate=percentage(offers, total),
        rejection_rate=percentage(rejections, total),
        resume_performance=resume_performance(jobs),
        monthly_applications=monthly_applications(jobs),
        top_companies=top_companies(jobs),
        status_distribution=status_distribution(jobs),
    )


# ---- overview / dashboard ----


def status_overview(jobs: Iterable[Job]) -> dict[str, list[dict[str, Any]]]:
    """Raw status counts plus resume stats over responded jobs only."""
    jobs = list(jobs)
    by_status = Counter(job.status for job in jobs)
    resume_stats: dict[str, dict[str, Any]] = {}
    for job in jobs:
        if not job.response_received:
            continue
        entry = resume_stats.setdefault(
            job.resume_version, {"_id": job.resume_version, "total": 0, "responses": 0}
        )
        entry["total"] += 1
        entry["responses"] += 1
    return {
        "statusStats": [{"_id": s, "count": c} for s, c in by_status.items()],
        "resumeStats": list(resume_stats.values()),
    }


def needs_follow_up(
    jobs: Iterable[Job], today: datetime, days: int = FOLLOW_UP_DAYS
) -> list[Job]:
    """Applied jobs without a response that are at least *days* old."""
    cutoff = today - timedelta(days=days)
    return [
        job
        for job in jobs
        if job.status == "Applied"
        and not job.response_received
        and job.applied_date <= cutoff
    ]


def recent_activity(jobs: Iterable[Job], limit: int = RECENT_ACTIVITY) -> list[Job]:
    return sorted(
        jobs,
        key=lambda job: job.last_activity or job.applied_date,
        reverse=True,
    )[:limit]


def dashboard_summary(
    jobs: Sequence[Job], today: datetime, follow_up_days: int = FOLLOW_UP_DAYS
) -> dict[str, Any]:
    """Headline counters, recent activity and follow-up reminders."""
    distribution = status_distribution(jobs)
    return {
        "total": len(jobs),
        "statusCounts": distribution,
        "activePipeline": sum(distribution[s] for s in _ACTIVE_STATUSES),
        "offers": distribution["Offer"],
        "rejected": distribution["Rejected"],
        "recentActivity": [job.to_record() for job in recent_activity(jobs)],
        "needsFollowUp": [
            job.to_record() for job in needs_follow_up(jobs, today, follow_up_days)
        ],
    }


# ---- interviews ----


def interview_stats(interviews: Iterable[Interview]) -> dict[str, Any]:
    """Interview counts grouped by ``(type, result)``, type and result."""
    interviews = list(interviews)
    pairs = Counter((iv.type, iv.result) for iv in interviews)
    return {
        "groups": [
            {"_id": {"type": kind, "result": result}, "count": count}
            for (kind, result), count in pairs.items()
        ],
        "byType": dict(Counter(iv.type for iv in interviews)),
        "byResult": dict(Counter(iv.result for iv in interviews)),
    }


# ---- listing helpers ----


def filter_jobs(
    jobs: Iterable[Job],
    status: str = "",
    company: str = "",
    resume_version: str = "",
    search: str = "",
) -> list[Job]:
    """In-memory equivalent of the store's list filters plus free-text search."""
    company_lower = company.lower()
    search_lower = search.lower()
    result = []
    for job in jobs:
        if status and job.status != status:
            continue
        if company_lower and company_lower not in job.company.lower():
            continue
        if resume_version and job.resume_version != resume_version:
            continue
        if search_lower and not any(
            search_lower in text.lower()
            for text in (job.company, job.position, job.location)
        ):
            continue
        result.append(job)
    return result


_SORT_KEYS = {
    "date-desc": (lambda job: job.applied_date, True),
    "date-asc": (lambda job: job.applied_date, False),
    "company": (lambda job: job.company.lower(), False),
    "status": (lambda job: job.status.lower(), False),
}


def sort_jobs(jobs: Iterable[Job], order: str = "date-desc") -> list[Job]:
    """Sort for display; unknown orders leave the input order unchanged."""
    if order not in _SORT_KEYS:
        return list(jobs)
    key, reverse = _SORT_KEYS[order]
    return sorted(jobs, key=key, reverse=reverse)
