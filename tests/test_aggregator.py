"""Tests for the analytics aggregator."""

from __future__ import annotations

from datetime import datetime

from jobtracker.analytics.aggregator import (
    compute_analytics,
    dashboard_summary,
    elapsed_days,
    filter_jobs,
    interview_stats,
    needs_follow_up,
    percentage,
    round_half_up,
    sort_jobs,
    status_overview,
)
from jobtracker.models import STATUSES, Interview, Job


def test_empty_collection():
    m = compute_analytics([])
    assert m.total == 0
    assert m.response_rate == 0
    assert m.success_rate == 0
    assert m.rejection_rate == 0
    assert m.avg_time_to_response == 0
    assert m.resume_performance == ()
    assert m.monthly_applications == ()
    assert m.top_companies == ()
    assert m.status_distribution == {s: 0 for s in STATUSES}


def test_all_applied_no_responses(make_job):
    jobs = [make_job(company=f"Co{i}") for i in range(10)]
    m = compute_analytics(jobs)
    assert m.response_rate == 0
    assert m.success_rate == 0
    assert m.status_distribution["Applied"] == 10
    assert all(v == 0 for s, v in m.status_distribution.items() if s != "Applied")


def test_success_and_rejection_rates(make_job):
    jobs = [make_job(status=s) for s in ("Applied", "Offer", "Rejected", "Offer")]
    m = compute_analytics(jobs)
    assert m.success_rate == 50
    assert m.rejection_rate == 25


def test_monthly_buckets(make_job):
    jobs = [make_job(applied="2025-02-03") for _ in range(2)]
    jobs += [make_job(applied="2025-01-15") for _ in range(3)]
    m = compute_analytics(jobs)
    assert [b.to_dict() for b in m.monthly_applications] == [
        {"month": "2025-01", "count": 3},
        {"month": "2025-02", "count": 2},
    ]


def test_monthly_keeps_latest_six_sorted(make_job):
    months = ["2024-12", "2024-03", "2025-01", "2024-07", "2024-09", "2024-10", "2024-11"]
    jobs = [make_job(applied=f"{m}-05") for m in months]
    buckets = [b.month for b in compute_analytics(jobs).monthly_applications]
    assert buckets == ["2024-07", "2024-09", "2024-10", "2024-11", "2024-12", "2025-01"]


def test_top_companies(make_job):
    names = ["A", "B", "A", "C", "B", "A"]
    m = compute_analytics([make_job(company=n) for n in names])
    assert [c.to_dict() for c in m.top_companies] == [
        {"company": "A", "count": 3},
        {"company": "B", "count": 2},
        {"company": "C", "count": 1},
    ]


def test_top_companies_ties_keep_first_seen_order(make_job):
    names = ["Zeta", "Alpha", "Beta", "Gamma", "Delta", "Epsilon", "Alpha"]
    top = compute_analytics([make_job(company=n) for n in names]).top_companies
    assert [c.company for c in top] == ["Alpha", "Zeta", "Beta", "Gamma", "Delta"]


def test_company_grouping_is_case_sensitive(make_job):
    top = compute_analytics([make_job(company="acme"), make_job(company="Acme")]).top_companies
    assert {c.company for c in top} == {"acme", "Acme"}


def test_avg_time_to_response_single(make_job):
    job = make_job(applied="2025-01-01", last_activity="2025-01-08", responded=True)
    assert compute_analytics([job]).avg_time_to_response == 7


def test_avg_time_to_response_rounds_up_partial_days(make_job):
    job = make_job(
        applied="2025-01-01T09:00:00", last_activity="2025-01-03T10:00:00", responded=True
    )
    assert compute_analytics([job]).avg_time_to_response == 3


def test_avg_time_to_response_ignores_unresponded(make_job):
    jobs = [
        make_job(applied="2025-01-01", last_activity="2025-01-05", responded=True),
        make_job(applied="2025-01-01", last_activity="2025-03-01", responded=False),
    ]
    assert compute_analytics(jobs).avg_time_to_response == 4


def test_avg_time_to_response_includes_negative_elapsed(make_job):
    jobs = [
        make_job(applied="2025-01-10", last_activity="2025-01-20", responded=True),
        make_job(applied="2025-01-10", last_activity="2025-01-06", responded=True),
    ]
    # (10 + -4) / 2
    assert compute_analytics(jobs).avg_time_to_response == 3


def test_resume_performance_groups_in_first_seen_order(make_job):
    jobs = [
        make_job(resume="backend", responded=True, status="Offer"),
        make_job(resume="default"),
        make_job(resume="backend"),
        make_job(resume="default", responded=True),
        make_job(resume="backend", responded=True),
    ]
    perf = compute_analytics(jobs).resume_performance
    assert [r.version for r in perf] == ["backend", "default"]
    backend, default = perf
    assert (backend.total, backend.response_rate, backend.offer_rate) == (3, 67, 33)
    assert (default.total, default.response_rate, default.offer_rate) == (2, 50, 0)


def test_unknown_status_excluded_from_distribution_but_counted(make_job):
    jobs = [make_job(status="Ghosted"), make_job(status="Offer"), make_job()]
    m = compute_analytics(jobs)
    assert m.total == 3
    assert sum(m.status_distribution.values()) == 2
    assert "Ghosted" not in m.status_distribution
    assert m.success_rate == 33


def test_rates_within_bounds(make_job):
    jobs = [
        make_job(status=s, responded=i % 2 == 0, resume=f"r{i % 3}")
        for i, s in enumerate(STATUSES * 3)
    ]
    m = compute_analytics(jobs)
    for rate in (m.response_rate, m.success_rate, m.rejection_rate):
        assert 0 <= rate <= 100
    for r in m.resume_performance:
        assert 0 <= r.response_rate <= 100
        assert 0 <= r.offer_rate <= 100
    assert len(m.top_companies) <= 5
    counts = [c.count for c in m.top_companies]
    assert counts == sorted(counts, reverse=True)


def test_round_half_up():
    assert round_half_up(12.5) == 13
    assert round_half_up(2.4) == 2
    assert round_half_up(-2.5) == -2
    assert percentage(1, 8) == 13
    assert percentage(3, 0) == 0


def test_elapsed_days_negative():
    assert elapsed_days(datetime(2025, 1, 8), datetime(2025, 1, 1)) == -7


def test_to_dict_uses_wire_keys(make_job):
    d = compute_analytics([make_job(responded=True)]).to_dict()
    assert d["responseRate"] == 100
    assert d["statusDistribution"]["Applied"] == 1
    assert d["resumePerformance"][0]["version"] == "default"


def test_status_overview(make_job):
    jobs = [
        make_job(status="Offer", responded=True, resume="a"),
        make_job(status="Offer", responded=False, resume="a"),
        make_job(status="Odd", responded=True, resume="b"),
    ]
    overview = status_overview(jobs)
    assert {"_id": "Offer", "count": 2} in overview["statusStats"]
    assert {"_id": "Odd", "count": 1} in overview["statusStats"]
    assert overview["resumeStats"] == [
        {"_id": "a", "total": 1, "responses": 1},
        {"_id": "b", "total": 1, "responses": 1},
    ]


def test_needs_follow_up(make_job):
    today = datetime(2025, 2, 1)
    old = make_job(applied="2025-01-20")
    fresh = make_job(applied="2025-01-30")
    responded = make_job(applied="2025-01-01", responded=True)
    moved_on = make_job(applied="2025-01-01", status="Technical")
    result = needs_follow_up([old, fresh, responded, moved_on], today)
    assert result == [old]


def test_dashboard_summary(make_job):
    jobs = [
        make_job(status="Phone Screen", applied="2025-01-02"),
        make_job(status="Technical", applied="2025-01-03"),
        make_job(status="Offer", applied="2025-01-04", last_activity="2025-01-30"),
        make_job(status="Applied", applied="2025-01-05"),
    ]
    summary = dashboard_summary(jobs, datetime(2025, 2, 1))
    assert summary["total"] == 4
    assert summary["activePipeline"] == 2
    assert summary["offers"] == 1
    assert summary["recentActivity"][0]["status"] == "Offer"
    assert [j["status"] for j in summary["needsFollowUp"]] == ["Applied"]


def test_interview_stats():
    when = datetime(2025, 1, 1)
    interviews = [
        Interview(job_id="j1", type="Phone", scheduled_date=when, result="Passed"),
        Interview(job_id="j1", type="Technical", scheduled_date=when),
        Interview(job_id="j2", type="Phone", scheduled_date=when, result="Passed"),
    ]
    stats = interview_stats(interviews)
    assert stats["groups"][0] == {"_id": {"type": "Phone", "result": "Passed"}, "count": 2}
    assert stats["byType"] == {"Phone": 2, "Technical": 1}
    assert stats["byResult"] == {"Passed": 2, "Pending": 1}


def test_filter_and_sort(make_job):
    jobs = [
        make_job(company="Globex", applied="2025-01-03", position="Data Scientist"),
        make_job(company="acme corp", applied="2025-01-01", status="Offer"),
        make_job(company="Initech", applied="2025-01-02", resume="python"),
    ]
    assert [j.company for j in filter_jobs(jobs, company="ACME")] == ["acme corp"]
    assert [j.company for j in filter_jobs(jobs, status="Offer")] == ["acme corp"]
    assert [j.company for j in filter_jobs(jobs, resume_version="python")] == ["Initech"]
    assert [j.company for j in filter_jobs(jobs, search="scientist")] == ["Globex"]

    assert [j.company for j in sort_jobs(jobs)] == ["Globex", "Initech", "acme corp"]
    assert [j.company for j in sort_jobs(jobs, "date-asc")] == ["acme corp", "Initech", "Globex"]
    assert [j.company for j in sort_jobs(jobs, "company")] == ["acme corp", "Globex", "Initech"]


def test_missing_resume_version_normalised_at_ingestion():
    job = Job.from_record({"company": "A", "position": "B", "resumeVersion": ""})
    perf = compute_analytics([job]).resume_performance
    assert perf[0].version == "default"
