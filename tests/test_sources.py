from datetime import datetime, timedelta, timezone

import pytest

from autoapply.models import JobSource, SearchQuery
from autoapply.sources import GlassdoorSource, IndeedSource, LinkedInSource, get_sources
from autoapply.sources.base import parse_relative_age, parse_salary
from autoapply.sources.indeed import fromage_days
from autoapply.sources.linkedin import AUTH_WALL
from conftest import FakePage, FakeSession

LINKEDIN_CARDS = """
<ul>
  <li>
    <div class="base-card base-search-card job-search-card" data-entity-urn="urn:li:jobPosting:3901">
      <a class="base-card__full-link" href="https://www.linkedin.com/jobs/view/data-engineer-3901?refId=abc"></a>
      <h3 class="base-search-card__title">Data Engineer</h3>
      <h4 class="base-search-card__subtitle"><a>Acme Corp</a></h4>
      <span class="job-search-card__location">Remote</span>
      <time class="job-search-card__listdate" datetime="2026-10-16">1 hour ago</time>
    </div>
  </li>
  <li>
    <div class="base-card base-search-card job-search-card">
      <a class="base-card__full-link" href="https://www.linkedin.com/jobs/view/analyst-77"></a>
      <h3 class="base-search-card__title">Analyst</h3>
      <h4 class="base-search-card__subtitle">Initech</h4>
      <span class="job-search-card__location">Austin, TX</span>
    </div>
  </li>
  <li><div class="base-search-card"><h3 class="base-search-card__title"></h3></div></li>
</ul>
"""

LINKEDIN_DETAIL = """
<img class="artdeco-entity-image" src="https://media.example/acme.png">
<div class="description__text"><p>Build <b>pipelines</b>.</p></div>
<ul>
  <li class="description__job-criteria-item">
    <h3 class="description__job-criteria-subheader">Seniority level</h3>
    <span class="description__job-criteria-text">Mid-Senior level</span>
  </li>
  <li class="description__job-criteria-item">
    <h3 class="description__job-criteria-subheader">Employment type</h3>
    <span class="description__job-criteria-text">Contract</span>
  </li>
</ul>
<div class="compensation__salary">$120,000.00/yr - $150,000.00/yr</div>
"""

INDEED_CARDS = """
<div class="job_seen_beacon">
  <h2 class="jobTitle"><a class="jcs-JobTitle" data-jk="ab12cd" href="/rc/clk?jk=ab12cd&amp;from=serp">
    <span title="Senior Data Engineer">Senior Data Engineer</span></a></h2>
  <span data-testid="company-name">Globex</span>
  <div data-testid="text-location">Remote in Denver, CO</div>
  <span data-testid="myJobsStateDate">Posted 3 days ago</span>
</div>
<div class="job_seen_beacon">
  <h2 class="jobTitle"><a class="jcs-JobTitle" href="/viewjob?jk=zz99"><span>Platform Engineer</span></a></h2>
  <span data-testid="company-name">Hooli</span>
  <div data-testid="text-location">Seattle, WA</div>
</div>
"""

GLASSDOOR_CARDS = """
<ul>
  <li data-test="jobListing" data-jobid="gd-1">
    <img class="employer-logo" src="https://gd.example/logo.png">
    <span class="employer-name">Umbrella</span>
    <a data-test="job-title" href="/job-listing/ml-engineer-gd-1.htm">ML Engineer</a>
    <div data-test="emp-location">Remote</div>
    <div data-test="job-age">5h</div>
  </li>
</ul>
"""


@pytest.fixture
def linkedin(settings):
    return LinkedInSource(settings)


def test_linkedin_search_url_carries_filters(linkedin):
    url = linkedin.build_search_url(SearchQuery("data engineer", "Berlin", remote_only=True, max_age_hours=2))
    assert url.startswith("https://www.linkedin.com/jobs/search/?")
    assert "keywords=data+engineer" in url
    assert "location=Berlin" in url
    assert "f_WT=2" in url
    assert "f_TPR=r7200" in url


def test_linkedin_cards(linkedin):
    jobs = linkedin.parse_listings(LINKEDIN_CARDS)
    assert [j.title for j in jobs] == ["Data Engineer", "Analyst"]
    first = jobs[0]
    assert first.id == "3901"
    assert first.company.name == "Acme Corp"
    assert first.application_url == "https://www.linkedin.com/jobs/view/data-engineer-3901"
    assert first.published_at == datetime(2026, 10, 16, tzinfo=timezone.utc)
    assert first.is_remote and first.source is JobSource.LINKEDIN
    assert jobs[1].published_at is None
    assert len(jobs[1].id) == 12


def test_linkedin_details(linkedin):
    job = linkedin.parse_listings(LINKEDIN_CARDS)[0]
    detailed = linkedin.parse_details(LINKEDIN_DETAIL, job)
    assert "<b>pipelines</b>" in detailed.description
    assert detailed.company.logo == "https://media.example/acme.png"
    assert detailed.company.name == "Acme Corp"
    assert detailed.job_type == "Contract"
    assert (detailed.salary.min, detailed.salary.max) == (120000, 150000)


def test_linkedin_details_keep_partial_listing_when_page_is_empty(linkedin):
    job = linkedin.parse_listings(LINKEDIN_CARDS)[0]
    assert linkedin.parse_details("<html></html>", job) == job


class FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise RuntimeError(f"HTTP {self.status}")


def test_linkedin_auth_wall_falls_back_to_guest_endpoint(settings, monkeypatch):
    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append((url, params))
        return FakeResponse(LINKEDIN_CARDS)

    monkeypatch.setattr("autoapply.sources.linkedin.requests.get", fake_get)
    page = FakePage("<html>sign in to see jobs</html>")
    page.add(AUTH_WALL)
    source = LinkedInSource(settings, session_factory=lambda: FakeSession(page))

    jobs = source.search(SearchQuery("data engineer"))

    assert [j.id for j in jobs][:1] == ["3901"]
    assert calls and calls[0][0].endswith("/seeMoreJobPostings/search")
    assert calls[0][1]["keywords"] == "data engineer"


def test_search_parses_rendered_page(settings):
    page = FakePage(LINKEDIN_CARDS)
    session = FakeSession(page)
    source = LinkedInSource(settings, session_factory=lambda: session)
    jobs = source.search(SearchQuery("data engineer"))
    assert [j.title for j in jobs] == ["Data Engineer", "Analyst"]
    assert page.visited[0].startswith("https://www.linkedin.com/jobs/search/")
    assert session.closed


def test_search_failure_yields_empty_list(settings):
    def broken():
        raise RuntimeError("chromium missing")

    assert IndeedSource(settings, session_factory=broken).search(SearchQuery("x")) == []


@pytest.mark.parametrize("hours, days", [(2, 1), (24, 1), (48, 3), (72, 3), (200, 7)])
def test_indeed_fromage(hours, days):
    assert fromage_days(hours) == days


@pytest.mark.parametrize("hours, fragment", [
    (12, "fromAge=1"), (36, "fromAge=3"), (60, "fromAge=3"), (73, "fromAge=7"), (400, "fromAge=30"),
])
def test_glassdoor_from_age_covers_the_window(settings, hours, fragment):
    url = GlassdoorSource(settings).build_search_url(SearchQuery("x", max_age_hours=hours))
    assert url.endswith(fragment)


def test_glassdoor_window_beyond_a_month_is_unfiltered(settings):
    url = GlassdoorSource(settings).build_search_url(SearchQuery("x", max_age_hours=24 * 45))
    assert "fromAge" not in url


def test_indeed_cards(settings):
    source = IndeedSource(settings)
    url = source.build_search_url(SearchQuery("data", remote_only=True, max_age_hours=30))
    assert "fromage=3" in url and "remotejob=" in url

    jobs = source.parse_listings(INDEED_CARDS)
    assert [j.id for j in jobs] == ["ab12cd", "zz99"]
    assert jobs[0].application_url == "https://www.indeed.com/rc/clk?jk=ab12cd&from=serp"
    assert jobs[0].is_remote and not jobs[1].is_remote
    age = datetime.now(timezone.utc) - jobs[0].published_at
    assert timedelta(days=3) <= age < timedelta(days=3, minutes=5)
    assert jobs[1].published_at is None


def test_glassdoor_cards(settings):
    jobs = GlassdoorSource(settings).parse_listings(GLASSDOOR_CARDS)
    assert len(jobs) == 1
    job = jobs[0]
    assert job.id == "gd-1"
    assert job.title == "ML Engineer"
    assert job.company.name == "Umbrella"
    assert job.company.logo == "https://gd.example/logo.png"
    assert job.application_url == "https://www.glassdoor.com/job-listing/ml-engineer-gd-1.htm"
    assert job.source is JobSource.GLASSDOOR


def test_relative_age(now):
    assert parse_relative_age("5h", now=now) == now - timedelta(hours=5)
    assert parse_relative_age("30d+", now=now) == now - timedelta(days=30)
    assert parse_relative_age("Just posted", now=now) == now
    assert parse_relative_age("Posted 2 weeks ago", now=now) == now - timedelta(weeks=2)
    assert parse_relative_age("", now=now) is None


def test_salary_ranges():
    assert parse_salary("$90K - $110K a year").max == 110000
    assert parse_salary("$120,000 - $150,000").min == 120000
    assert parse_salary("Competitive") is None


def test_registered_sources(settings):
    assert [s.source for s in get_sources(settings)] == [JobSource.LINKEDIN, JobSource.INDEED, JobSource.GLASSDOOR]
