"""
Job discovery across all portals.

Runs: fan out to every source in parallel → concatenate in source order →
dedup → recency filter → newest first.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Sequence

from autoapply.filters import dedup_jobs, filter_by_recency, sort_by_recency
from autoapply.log import get_logger
from autoapply.models import JobListing, SearchQuery
from autoapply.sources import JobSearchBase, get_sources

log = get_logger(__name__)


def _search_source(source: JobSearchBase, query: SearchQuery) -> list[JobListing]:
    """Wrapper for parallel source searching; a failing source yields []."""
    name = getattr(source, "name", source.__class__.__name__)
    try:
        results = source.search(query)
        log.info("[%s] returned %d jobs", name, len(results))
        return results
    except Exception as exc:
        log.error("[%s] FAILED: %s", name, exc)
        return []


def search_all_portals(
    query: SearchQuery,
    sources: Sequence[JobSearchBase] | None = None,
    *,
    now: datetime | None = None,
) -> list[JobListing]:
    """Search every source concurrently and merge the results.

    Each source owns its browser session for the duration of its own search,
    so every session is closed by the time this returns, whatever happened.
    """
    if sources is None:
        sources = get_sources()
    if not sources:
        return []

    log.info("Searching %d source(s) in parallel for %r", len(sources), query.keywords)
    with ThreadPoolExecutor(max_workers=len(sources)) as pool:
        futures = [pool.submit(_search_source, src, query) for src in sources]
        # Collect in submission order so dedup precedence does not depend on timing
        batches = [f.result() for f in futures]

    all_jobs = [job for batch in batches for job in batch]
    unique = dedup_jobs(all_jobs)
    recent = filter_by_recency(unique, query.max_age_hours, now=now)
    merged = sort_by_recency(recent)
    log.info(
        "Search complete: raw=%d, unique=%d, recent=%d",
        len(all_jobs), len(unique), len(merged),
    )
    return merged
