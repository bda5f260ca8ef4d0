"""Indeed job search.

Indeed puts a bot challenge in front of automated sessions from time to
time; there is no public fallback endpoint, so a challenged search yields an
empty list.
"""
from __future__ import annotations

import dataclasses
from urllib.parse import parse_qs, urlencode, urljoin, urlparse

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

BASE_URL = "https://www.indeed.com"
REMOTE_FILTER = "032b3046-06a3-4876-8dfd-474eb5e7ed11"
CHALLENGE = "#challenge-form, #challenge-running, .cf-turnstile"


def fromage_days(hours: float) -> int:
    """Indeed only filters by whole days: 1, 3 or 7."""
    if hours <= 24:
        return 1
    if hours <= 72:
        return 3
    return 7


class IndeedSource(JobSearchBase):
    source = JobSource.INDEED
    name = "Indeed"

    def build_search_url(self, query: SearchQuery) -> str:
        params = {"q": query.keywords}
        if query.location:
            params["l"] = query.location
        if query.remote_only:
            params["remotejob"] = REMOTE_FILTER
        if query.max_age_hours:
            params["fromage"] = str(fromage_days(query.max_age_hours))
        return f"{BASE_URL}/jobs?{urlencode(params)}"

    def is_blocked(self, page) -> bool:
        return has_element(page, CHALLENGE)

    def parse_listings(self, html: str) -> list[JobListing]:
        jobs: list[JobListing] = []
        for card in self.soup(html).select(".job_seen_beacon"):
            title_el = card.select_one(".jobTitle span[title], .jobTitle span")
            title = (title_el.get("title") or text_of(title_el)) if title_el else ""
            if not title:
                continue
            company = text_of(card.select_one('[data-testid="company-name"], .companyName'))
            location = text_of(card.select_one('[data-testid="text-location"], .companyLocation'))
            link = card.select_one("a.jcs-JobTitle, h2.jobTitle a")
            href = urljoin(BASE_URL, link.get("href", "")) if link else ""
            job_key = (link.get("data-jk") if link else None) or parse_qs(urlparse(href).query).get("jk", [""])[0]
            age = text_of(card.select_one('[data-testid="myJobsStateDate"], .date'))
            jobs.append(
                JobListing(
                    id=job_key or stable_id(title, company, location),
                    title=title,
                    company=Company(name=company),
                    location=location,
                    application_url=href,
                    source=self.source,
                    published_at=parse_relative_age(age),
                    is_remote="remote" in location.lower(),
                )
            )
        return jobs

    def parse_details(self, html: str, job: JobListing) -> JobListing:
        soup = self.soup(html)
        description = soup.select_one("#jobDescriptionText")
        logo = soup.select_one(".jobsearch-CompanyAvatar-image, img[class*='CompanyAvatar']")
        job_type = None
        for item in soup.select(".jobsearch-JobDescriptionSection-sectionItem"):
            if "job type" in text_of(item.select_one(".jobsearch-JobDescriptionSection-sectionItemKey")).lower():
                job_type = text_of(item.select_one(".jobsearch-JobDescriptionSection-sectionItemValue"))
        salary_text = text_of(
            soup.select_one('#salaryInfoAndJobType, [data-testid="attribute_snippet_compensation"]')
        )
        logo_src = logo.get("src") if logo else None
        return self.enrich(
            job,
            description=description.decode_contents().strip() if description else None,
            company=dataclasses.replace(job.company, logo=logo_src) if logo_src else None,
            job_type=job_type,
            salary=parse_salary(salary_text),
        )
