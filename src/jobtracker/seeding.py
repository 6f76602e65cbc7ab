"""Synthetic sample data for demos and local development."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta

from jobtracker.models import (
    INTERVIEW_RESULTS,
    INTERVIEW_TYPES,
    STATUSES,
    Interview,
    Job,
    utcnow,
)
from jobtracker.storage.repository import JobTrackerStore

logger = logging.getLogger(__name__)

COMPANIES = [
    "Google", "Microsoft", "Amazon", "Apple", "Meta", "Netflix", "Tesla", "Uber",
    "Airbnb", "Spotify", "Salesforce", "Adobe", "Oracle", "IBM", "Intel", "Nvidia",
    "PayPal", "Square", "Stripe", "Twilio", "Slack", "Zoom", "Dropbox", "Pinterest",
    "Reddit", "GitHub", "GitLab",
]

POSITIONS = [
    "Software Engineer", "Senior Software Engineer", "Frontend Developer",
    "Backend Developer", "Full Stack Developer", "DevOps Engineer", "Data Scientist",
    "Machine Learning Engineer", "Product Manager", "QA Engineer", "Mobile Developer",
    "Cloud Architect", "Security Engineer", "Site Reliability Engineer",
]

LOCATIONS = [
    "San Francisco, CA", "New York, NY", "Seattle, WA", "Austin, TX", "Boston, MA",
    "Los Angeles, CA", "Chicago, IL", "Denver, CO", "Portland, OR", "Remote",
]

RESUME_VERSIONS = [
    "default", "frontend-focused", "backend-focused", "fullstack", "python-heavy", "java-heavy",
]

SAMPLE_QUESTIONS = [
    "Tell me about yourself",
    "Why do you want to work here?",
    "Describe a challenging project",
    "How do you handle conflicts?",
    "Reverse a linked list",
    "Implement a binary search",
    "Design a URL shortener",
    "Explain REST vs GraphQL",
    "How would you optimize a slow database query?",
    "Implement an LRU cache",
]

_INTERVIEW_SHARE = 0.3


def _days_back(rng: random.Random, now: datetime, days: int) -> datetime:
    return now - timedelta(days=rng.randrange(days))


def generate_jobs(count: int, rng: random.Random, now: datetime) -> list[Job]:
    jobs = []
    for i in range(count):
        applied = _days_back(rng, now, 90)
        status = rng.choice(STATUSES)
        responded = status != "Applied" or rng.random() > 0.7
        last_activity = applied + timedelta(days=rng.randrange(30)) if responded else applied
        jobs.append(
            Job(
                company=rng.choice(COMPANIES),
                position=rng.choice(POSITIONS),
                location=rng.choice(LOCATIONS),
                job_url=f"https://example.com/jobs/{i}",
                salary=f"${80 + rng.randrange(120)}k - ${150 + rng.randrange(150)}k",
                status=status,
                applied_date=applied,
                last_activity=min(last_activity, now),
                resume_version=rng.choice(RESUME_VERSIONS),
                notes="Great company culture, interesting tech stack" if rng.random() > 0.5 else "",
                contact_name=f"Recruiter {i}" if rng.random() > 0.3 else "",
                contact_email=f"recruiter{i}@example.com" if rng.random() > 0.3 else "",
                follow_up_date=_days_back(rng, now, 30) if rng.random() > 0.6 else None,
                response_received=responded,
                created_at=applied,
                updated_at=now,
            )
        )
    return jobs


def generate_interviews(jobs: list[Job], rng: random.Random, now: datetime) -> list[Interview]:
    """1-4 interviews for the first 30% of *jobs*, escalating through the types."""
    interviews = []
    for job in jobs[: int(len(jobs) * _INTERVIEW_SHARE)]:
        for round_no in range(rng.randint(1, 4)):
            scheduled = now + timedelta(days=rng.randint(-60, 14), hours=rng.randint(9, 17))
            interviews.append(
                Interview(
                    job_id=job.id,
                    type=INTERVIEW_TYPES[min(round_no, len(INTERVIEW_TYPES) - 1)],
                    scheduled_date=scheduled,
                    duration=rng.choice([30, 45, 60, 90, 120]),
                    interviewer_name=f"Interviewer {rng.randrange(1000)}",
                    location="Remote" if rng.random() > 0.5 else rng.choice(LOCATIONS),
                    questions=rng.sample(SAMPLE_QUESTIONS, rng.randint(1, 4)),
                    result=rng.choice(INTERVIEW_RESULTS) if scheduled < now else "Pending",
                    created_at=min(scheduled, now),
                    updated_at=now,
                )
            )
    return interviews


def seed_store(
    store: JobTrackerStore,
    job_count: int = 100,
    seed: int | None = None,
    now: datetime | None = None,
) -> tuple[int, int]:
    """Replace the store contents with synthetic data.

    Returns ``(jobs_inserted, interviews_inserted)``.
    """
    rng = random.Random(seed)
    now = now or utcnow()
    jobs = generate_jobs(job_count, rng, now)
    interviews = generate_interviews(jobs, rng, now)

    store.clear()
    for job in jobs:
        store.add_job(job, commit=False)
    for interview in interviews:
        store.add_interview(interview, commit=False)
    store.commit()
    logger.info("Seeded %d job(s) and %d interview(s).", len(jobs), len(interviews))
    return len(jobs), len(interviews)
