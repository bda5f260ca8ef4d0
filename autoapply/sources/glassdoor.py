"""Glassdoor job search."""
from __future__ import annotations

import math
from urllib.parse import urlencode, urljoin

from autoapply.log import get_logger
from autoapply.models import Company, JobListing, JobSource, SearchQuery
from autoapply.sources.base import (
    JobSearchBase,
    has_element,
    parse_relative_age,
    parse_salary,
    stable_id,
    text_of,
)

log = get_logger(__name__)

BASE_URL = "https://www.glassdoor.com"
FROM_AGE_DAYS = (1, 3, 7, 14, 30)
CLOSE_MODAL = '[alt="Close"], button.CloseButton, .modal_closeIcon'
HARD_WALL = "#HardsellOverlay"


def from_age_days(hours: float) -> int | None:
    """Smallest Glassdoor day bucket covering the window; None means no filter."""
    days = math.ceil(hours / 24)
    return next((b for b in FROM_AGE_DAYS if b >= days), None)


class GlassdoorSource(JobSearchBase):
    source = JobSource.GLASSDOOR
    name = "Glassdoor"

    def build_search_url(self, query: SearchQuery) -> str:
        params = {"sc.keyword": query.keywords}
        if query.location:
            params["locKeyword"] = query.location
        if query.remote_only:
            params["remoteWorkType"] = "1"
        if query.max_age_hours:
            days = from_age_days(query.max_age_hours)
            if days:
                params["fromAge"] = str(days)
        return f"{BASE_URL}/Job/jobs.htm?{urlencode(params)}"

    def prepare(self, page) -> None:
        close = page.locator(CLOSE_MODAL).first
        try:
            if close.is_visible(timeout=self.settings.element_timeout_ms):
                close.click()
                page.wait_for_timeout(1000)
        except Exception as exc:
            log.debug("[%s] no sign-in modal to close (%s)", self.name, exc)

    def is_blocked(self, page) -> bool:
        return has_element(page, HARD_WALL)

    def parse_listings(self, html: str) -> list[JobListing]:
        jobs: list[JobListing] = []
        for card in self.soup(html).select('li[data-test="jobListing"], .react-job-listing'):
            title = text_of(card.select_one('[data-test="job-title"], .job-title'))
            if not title:
                continue
            company = text_of(card.select_one('[class*="EmployerProfile_employerName"], .employer-name'))
            location = text_of(card.select_one('[data-test="emp-location"], .location'))
            link = card.select_one('a[data-test="job-title"], a.jobLink')
            path = (link.get("href") if link else None) or card.get("data-job-url") or ""
            logo = card.select_one("img.employer-logo, [class*='EmployerLogo'] img")
            jobs.append(
                JobListing(
                    id=card.get("data-jobid") or card.get("data-id") or stable_id(title, company, location),
                    title=title,
                    company=Company(name=company, logo=logo.get("src") if logo else None),
                    location=location,
                    application_url=urljoin(BASE_URL, path) if path else "",
                    source=self.source,
                    published_at=parse_relative_age(text_of(card.select_one('[data-test="job-age"], .job-age'))),
                    is_remote="remote" in location.lower(),
                )
            )
        return jobs

    def parse_details(self, html: str, job: JobListing) -> JobListing:
        soup = self.soup(html)
        description = soup.select_one(".jobDescriptionContent, [class*='JobDetails_jobDescription']")
        salary_text = text_of(soup.select_one('[data-test="detailSalary"], .salary'))
        return self.enrich(
            job,
            description=description.decode_contents().strip() if description else None,
            salary=parse_salary(salary_text),
        )
