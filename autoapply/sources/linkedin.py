"""LinkedIn public job search.

Logged-out visitors often hit an auth wall on /jobs/search; the guest
endpoint serves the same result cards as an HTML fragment, so we fall back to
it over plain HTTP.
"""
from __future__ import annotations

import dataclasses
from urllib.parse import urlencode

import requests

from autoapply.log import get_logger
from autoapply.models import Company, JobListing, JobSource, SearchQuery, parse_timestamp
from autoapply.retry import retry
from autoapply.sources.base import JobSearchBase, has_element, parse_salary, stable_id, text_of

log = get_logger(__name__)

SEARCH_URL = "https://www.linkedin.com/jobs/search/"
GUEST_URL = "https://www.linkedin.com/jobs-guest/jobs/api/seeMoreJobPostings/search"
AUTH_WALL = ".authwall-join-form, .authwall-join-form__form-toggle--bottom"


def _params(query: SearchQuery) -> dict[str, str]:
    params = {"keywords": query.keywords}
    if query.location:
        params["location"] = query.location
    if query.remote_only:
        params["f_WT"] = "2"
    if query.max_age_hours:
        params["f_TPR"] = f"r{int(query.max_age_hours * 3600)}"
    return params


class LinkedInSource(JobSearchBase):
    source = JobSource.LINKEDIN
    name = "LinkedIn"

    def build_search_url(self, query: SearchQuery) -> str:
        return f"{SEARCH_URL}?{urlencode(_params(query))}"

    def is_blocked(self, page) -> bool:
        return has_element(page, AUTH_WALL)

    @retry(max_attempts=2, base_delay=1.5, retryable=(requests.RequestException, OSError))
    def _fetch_guest(self, query: SearchQuery) -> str:
        params = {**_params(query), "start": "0"}
        r = requests.get(
            GUEST_URL,
            params=params,
            headers={"User-Agent": self.settings.user_agent},
            timeout=self.settings.navigation_timeout_ms / 1000,
        )
        r.raise_for_status()
        return r.text

    def fallback(self, query: SearchQuery) -> list[JobListing]:
        jobs = self.parse_listings(self._fetch_guest(query))
        log.info("[%s] guest endpoint returned %d listing(s)", self.name, len(jobs))
        return jobs

    def parse_listings(self, html: str) -> list[JobListing]:
        jobs: list[JobListing] = []
        for card in self.soup(html).select(".job-search-card, .base-search-card"):
            title = text_of(card.select_one(".base-search-card__title, .job-search-card__title"))
            if not title:
                continue
            company = text_of(card.select_one(".base-search-card__subtitle, .job-search-card__subtitle"))
            location = text_of(card.select_one(".job-search-card__location"))
            link = card.select_one("a.base-card__full-link, a.job-search-card__title-link, a")
            url = (link.get("href") or "").split("?")[0] if link else ""
            time_el = card.select_one("time")
            urn = card.get("data-entity-urn") or ""
            jobs.append(
                JobListing(
                    id=urn.split(":")[-1] if urn else stable_id(title, company, location),
                    title=title,
                    company=Company(name=company),
                    location=location,
                    application_url=url,
                    source=self.source,
                    published_at=parse_timestamp(time_el.get("datetime", "")) if time_el else None,
                    is_remote="remote" in location.lower(),
                )
            )
        return jobs

    def parse_details(self, html: str, job: JobListing) -> JobListing:
        soup = self.soup(html)
        description = soup.select_one(".description__text, .show-more-less-html__markup")
        logo = soup.select_one("img.artdeco-entity-image, .top-card-layout__entity-image")
        job_type = None
        for item in soup.select(".description__job-criteria-item"):
            if "employment type" in text_of(item.select_one(".description__job-criteria-subheader")).lower():
                job_type = text_of(item.select_one(".description__job-criteria-text"))
        logo_src = (logo.get("src") or logo.get("data-delayed-url")) if logo else None
        return self.enrich(
            job,
            description=description.decode_contents().strip() if description else None,
            company=dataclasses.replace(job.company, logo=logo_src) if logo_src else None,
            job_type=job_type,
            salary=parse_salary(text_of(soup.select_one(".compensation__salary"))),
        )
