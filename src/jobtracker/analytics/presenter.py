"""Display-ready structures derived from :class:`DerivedMetrics`."""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from jobtracker.analytics.aggregator import DerivedMetrics, percentage

# ---- insight thresholds (strict comparisons) ----

EXCELLENT_RESPONSE_RATE = 40
LOW_RESPONSE_RATE = 20
SLOW_RESPONSE_DAYS = 14
ABOVE_AVERAGE_RESPONSE_RATE = 30
QUICK_RESPONSE_DAYS = 7
FUNNEL_LABEL_MIN_PERCENT = 5

INSIGHT_EXCELLENT = "excellent"
INSIGHT_LOW = "low"
INSIGHT_SLOW_RESPONDER = "slow_responder"
INSIGHT_COMPARE_RESUMES = "compare_resumes"

INSIGHT_MESSAGES: dict[str, tuple[str, str]] = {
    # flag -> (level, message)
    INSIGHT_EXCELLENT: (
        "positive",
        "Your response rate is excellent! Your resume is catching attention.",
    ),
    INSIGHT_LOW: (
        "warning",
        "Low response rate. Consider tailoring your resume for each application.",
    ),
    INSIGHT_SLOW_RESPONDER: (
        "info",
        "Companies are taking time to respond. Follow up after 7-10 days.",
    ),
    INSIGHT_COMPARE_RESUMES: (
        "info",
        "Try analyzing which resume version performs best for different roles.",
    ),
}

_STATUS_COLORS: dict[str, str] = {
    "Applied": "#3498db",
    "Phone Screen": "#9b59b6",
    "Technical": "#e67e22",
    "Onsite": "#f39c12",
    "Offer": "#27ae60",
    "Rejected": "#e74c3c",
}
_FALLBACK_COLOR = "#95a5a6"


def status_color(status: str) -> str:
    return _STATUS_COLORS.get(status, _FALLBACK_COLOR)


def bar_heights(values: Sequence[int]) -> list[float]:
    """Scale *values* to percentages of their maximum (0 when the max is 0)."""
    if not values:
        return []
    peak = max(values)
    if peak <= 0:
        return [0.0 for _ in values]
    return [value / peak * 100 for value in values]


def month_label(bucket: str) -> str:
    """``"2025-01"`` -> ``"Jan 25"``."""
    year, month = bucket.split("-")
    return date(int(year), int(month), 1).strftime("%b %y")


def insight_flags(metrics: DerivedMetrics) -> list[str]:
    flags: list[str] = []
    if metrics.response_rate > EXCELLENT_RESPONSE_RATE:
        flags.append(INSIGHT_EXCELLENT)
    if metrics.response_rate < LOW_RESPONSE_RATE:
        flags.append(INSIGHT_LOW)
    if metrics.avg_time_to_response > SLOW_RESPONSE_DAYS:
        flags.append(INSIGHT_SLOW_RESPONDER)
    if len(metrics.resume_performance) > 1:
        flags.append(INSIGHT_COMPARE_RESUMES)
    return flags


def metric_captions(metrics: DerivedMetrics) -> dict[str, str]:
    return {
        "responseRate": (
            "Above average!"
            if metrics.response_rate > ABOVE_AVERAGE_RESPONSE_RATE
            else "Keep applying!"
        ),
        "avgTimeToResponse": (
            "Quick responses!"
            if metrics.avg_time_to_response < QUICK_RESPONSE_DAYS
            else "Patience is key"
        ),
        "successRate": "Offer conversion rate",
        "rejectionRate": "Learning opportunities",
    }


def funnel(metrics: DerivedMetrics) -> list[dict[str, Any]]:
    """One stage per known status, as a share of all jobs."""
    total = metrics.total or 1
    stages = []
    for status, count in metrics.status_distribution.items():
        pct = percentage(count, total)
        stages.append(
            {
                "status": status,
                "count": count,
                "percentage": pct,
                "showLabel": pct > FUNNEL_LABEL_MIN_PERCENT,
                "color": status_color(status),
            }
        )
    return stages


def monthly_trend(metrics: DerivedMetrics) -> list[dict[str, Any]]:
    buckets = metrics.monthly_applications
    heights = bar_heights([b.count for b in buckets])
    return [
        {
            "month": b.month,
            "label": month_label(b.month),
            "count": b.count,
            "height": height,
        }
        for b, height in zip(buckets, heights)
    ]


def present(metrics: DerivedMetrics) -> dict[str, Any]:
    """Everything a dashboard needs to render *metrics*."""
    flags = insight_flags(metrics)
    return {
        "captions": metric_captions(metrics),
        "resumePerformance": [
            {**r.to_dict(), "barWidth": r.response_rate}
            for r in metrics.resume_performance
        ],
        "funnel": funnel(metrics),
        "monthlyTrend": monthly_trend(metrics),
        "topCompanies": [
            {"rank": rank, **c.to_dict()}
            for rank, c in enumerate(metrics.top_companies, start=1)
        ],
        "insights": [
            {"flag": flag, "level": INSIGHT_MESSAGES[flag][0], "message": INSIGHT_MESSAGES[flag][1]}
            for flag in flags
        ],
    }
