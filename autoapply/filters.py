"""Pure helpers over job listings: dedup, recency filter, sort."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable

from autoapply.models import JobListing

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def dedup_jobs(jobs: Iterable[JobListing]) -> list[JobListing]:
    """Keep the first listing for each case-insensitive (title, company) pair."""
    seen: set[str] = set()
    unique: list[JobListing] = []
    for job in jobs:
        key = job.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(job)
    return unique


def filter_by_recency(
    jobs: Iterable[JobListing],
    max_age_hours: float | None,
    *,
    now: datetime | None = None,
) -> list[JobListing]:
    """Drop listings published before now - max_age_hours.

    Listings with no publish time are kept.
    """
    jobs = list(jobs)
    if not max_age_hours:
        return jobs
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(hours=max_age_hours)
    return [j for j in jobs if j.published_at is None or j.published_at >= cutoff]


def sort_by_recency(jobs: Iterable[JobListing]) -> list[JobListing]:
    """Newest first; listings with no publish time sink to the end."""
    return sorted(jobs, key=lambda j: j.published_at or _OLDEST, reverse=True)
