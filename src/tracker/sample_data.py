"""Sample application generator for trying out pagination and charts."""

from __future__ import annotations

import random
import re
from datetime import date, timedelta

from src.tracker.models import ApplicationDraft, ApplicationStatus

COMPANIES = [
    "Google",
    "Microsoft",
    "Apple",
    "Amazon",
    "Meta",
    "Netflix",
    "Spotify",
    "Stripe",
    "Figma",
    "Notion",
    "Shopify",
    "Atlassian",
    "Cloudflare",
    "Datadog",
    "GitHub",
    "GitLab",
    "Elastic",
    "Twilio",
    "MongoDB",
    "Databricks",
]

JOB_TITLES = [
    "Software Engineer",
    "Senior Software Engineer",
    "Frontend Developer",
    "Backend Developer",
    "Full Stack Developer",
    "Data Engineer",
    "Data Scientist",
    "DevOps Engineer",
    "Site Reliability Engineer",
    "Product Manager",
    "Engineering Manager",
    "Machine Learning Engineer",
]

LOCATIONS = [
    "San Francisco, CA",
    "New York, NY",
    "Seattle, WA",
    "Austin, TX",
    "Boston, MA",
    "Chicago, IL",
    "Denver, CO",
    "Remote",
    "London, UK",
    "Toronto, ON",
]

SALARY_RANGES = [
    "$80k - $100k",
    "$100k - $130k",
    "$120k - $160k",
    "$150k - $200k",
    "$180k - $250k",
]

SAMPLE_STATUSES = [
    ApplicationStatus.APPLIED,
    ApplicationStatus.INTERVIEW,
    ApplicationStatus.OFFER,
    ApplicationStatus.REJECTED,
    ApplicationStatus.FOLLOW_UP,
]

# Applications are spread over roughly the last six months
HISTORY_DAYS = 182


def _slug(value: str) -> str:
    return re.sub(r"\s+", "-", value.strip().lower())


def generate_sample_drafts(
    count: int = 500,
    seed: int | None = None,
    today: date | None = None,
) -> list[ApplicationDraft]:
    """Generate random application drafts.

    Args:
        count: Number of drafts to generate.
        seed: Seed for reproducible output.
        today: Latest possible application date (defaults to today).

    Returns:
        A list of valid ApplicationDraft instances.
    """
    if count < 0:
        raise ValueError("count must be >= 0")

    rng = random.Random(seed)
    end = today or date.today()

    drafts: list[ApplicationDraft] = []
    for n in range(1, count + 1):
        company = rng.choice(COMPANIES)
        title = rng.choice(JOB_TITLES)

        has_url = rng.random() > 0.2
        job_url = (
            f"https://{company.lower().replace(' ', '')}.com/careers/{_slug(title)}-{n}"
            if has_url
            else None
        )

        drafts.append(
            ApplicationDraft(
                company=company,
                position=title,
                location=rng.choice(LOCATIONS),
                status=rng.choice(SAMPLE_STATUSES),
                date_applied=end - timedelta(days=rng.randint(0, HISTORY_DAYS)),
                salary=rng.choice(SALARY_RANGES) if rng.random() > 0.3 else None,
                job_url=job_url,
                posting_online=has_url and rng.random() > 0.3,
            )
        )

    return drafts
