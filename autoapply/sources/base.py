"""Shared flow for browser-driven job search sources."""
from __future__ import annotations

import dataclasses
import hashlib
import re
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

from bs4 import BeautifulSoup

from autoapply.browser import BrowserSession, SessionFactory, navigate, scroll_to_bottom
from autoapply.config import Settings, load_settings
from autoapply.filters import filter_by_recency
from autoapply.log import get_logger
from autoapply.models import JobListing, JobSource, Salary, SearchQuery

log = get_logger(__name__)

_SALARY_RE = re.compile(r"\$\s*([\d,]+(?:\.\d+)?)\s*(k)?(?:\s*/\s*[a-z]+)?\s*[-–to]+\s*\$\s*([\d,]+(?:\.\d+)?)\s*(k)?", re.I)
_AGE_RE = re.compile(
    r"(\d+)\s*\+?\s*(minutes?|mins?|hours?|hrs?|h|days?|d|weeks?|w|months?|mo)\b", re.I
)
_AGE_UNITS = {
    "min": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "mo": timedelta(days=30),
}


def stable_id(*parts: str) -> str:
    """Short deterministic id for cards that carry no id of their own."""
    return hashlib.sha256("|".join(parts).encode()).hexdigest()[:12]


def text_of(node) -> str:
    return node.get_text(" ", strip=True) if node is not None else ""


def parse_salary(text: str) -> Salary | None:
    """'$120,000 - $150,000' / '$90K-$110K' -> Salary(USD); None when no range is present."""
    match = _SALARY_RE.search(text or "")
    if not match:
        return None
    low, low_k, high, high_k = match.groups()

    def _amount(raw: str, k: str | None) -> int:
        value = float(raw.replace(",", ""))
        return int(value * 1000) if k else int(value)

    return Salary(min=_amount(low, low_k), max=_amount(high, high_k), currency="USD")


def parse_relative_age(text: str, *, now: datetime | None = None) -> datetime | None:
    """Turn 'Posted 3 days ago', '5h', '30d+', 'Just posted' into a timestamp."""
    now = now or datetime.now(timezone.utc)
    lowered = (text or "").strip().lower()
    if not lowered:
        return None
    if "just posted" in lowered or "today" in lowered or "just now" in lowered:
        return now
    match = _AGE_RE.search(lowered)
    if not match:
        return None
    count, unit = int(match.group(1)), match.group(2)
    if unit.startswith("mo"):
        step = _AGE_UNITS["mo"]
    elif unit.startswith("mi"):
        step = _AGE_UNITS["min"]
    else:
        step = _AGE_UNITS[unit[0]]
    return now - count * step


class JobSearchBase(ABC):
    """One job board. Subclasses supply URL building and HTML parsing."""

    source: JobSource
    name: str = "source"

    def __init__(self, settings: Settings | None = None, session_factory: SessionFactory | None = None) -> None:
        self.settings = settings or load_settings()
        self._session_factory = session_factory or (lambda: BrowserSession(self.settings))

    @abstractmethod
    def build_search_url(self, query: SearchQuery) -> str:
        pass

    @abstractmethod
    def parse_listings(self, html: str) -> list[JobListing]:
        pass

    @abstractmethod
    def parse_details(self, html: str, job: JobListing) -> JobListing:
        pass

    def is_blocked(self, page) -> bool:
        """True when the page is an auth wall or bot challenge instead of results."""
        return False

    def prepare(self, page) -> None:
        """Dismiss overlays before reading the page."""

    def fallback(self, query: SearchQuery) -> list[JobListing]:
        log.warning("[%s] blocked and no unauthenticated endpoint; returning no results", self.name)
        return []

    def search(self, query: SearchQuery) -> list[JobListing]:
        try:
            with self._session_factory() as session:
                return self._search(session.page, query)
        except Exception as exc:
            log.error("[%s] FAILED: %s", self.name, exc)
            return []

    def _search(self, page, query: SearchQuery) -> list[JobListing]:
        url = self.build_search_url(query)
        log.debug("[%s] loading %s", self.name, url)
        navigate(page, url, timeout_ms=self.settings.navigation_timeout_ms)
        if self.is_blocked(page):
            log.info("[%s] auth wall detected, trying fallback", self.name)
            return filter_by_recency(self.fallback(query), query.max_age_hours)

        self.prepare(page)
        scroll_to_bottom(page)
        listings = filter_by_recency(self.parse_listings(page.content()), query.max_age_hours)
        log.info("[%s] %d listing(s) on results page", self.name, len(listings))
        return [self._with_details(page, job) for job in listings]

    def _with_details(self, page, job: JobListing) -> JobListing:
        if not job.application_url:
            return job
        try:
            navigate(page, job.application_url, timeout_ms=self.settings.navigation_timeout_ms)
            if self.is_blocked(page):
                log.debug("[%s] detail page for %s is walled, keeping basic info", self.name, job.id)
                return job
            self.prepare(page)
            return self.parse_details(page.content(), job)
        except Exception as exc:
            log.warning("[%s] details for %s failed: %s", self.name, job.id, exc)
            return job

    @staticmethod
    def soup(html: str) -> BeautifulSoup:
        return BeautifulSoup(html or "", "html.parser")

    @staticmethod
    def enrich(job: JobListing, **changes) -> JobListing:
        """Copy of job with the non-empty changes applied."""
        return dataclasses.replace(job, **{k: v for k, v in changes.items() if v not in (None, "")})


def has_element(page, selector: str) -> bool:
    try:
        return page.locator(selector).count() > 0
    except Exception:
        return False
