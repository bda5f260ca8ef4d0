"""Shared fixtures: a tiny stand-in for a Playwright page, profiles and jobs."""
from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from autoapply.config import Settings
from autoapply.models import (
    Address, ApplicantProfile, Company, Education, JobListing, JobSource, WorkExperience,
)

TEST_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"


class FakeElement:
    def __init__(self, page, *, visible=True, text="", attrs=None, options=(), on_click=None):
        self.page = page
        self.visible = visible
        self.text = text
        self.attrs = dict(attrs or {})
        self.options = tuple(options)
        self.on_click = on_click
        self.children: dict[str, list[FakeElement]] = {}
        self.filled: str | None = None
        self.files: str | None = None
        self.selected: str | None = None
        self.checked = False
        self.clicks = 0
        self.pressed: list[str] = []

    def add(self, selector: str, **kwargs) -> "FakeElement":
        child = FakeElement(self.page, **kwargs)
        self.children.setdefault(selector, []).append(child)
        return child


class FakeLocator:
    """Playwright-like locator over a fixed list of elements."""

    def __init__(self, elements):
        self.elements = list(elements)

    def _one(self) -> FakeElement:
        if not self.elements:
            raise TimeoutError("element not found")
        return self.elements[0]

    def count(self) -> int:
        return len(self.elements)

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.elements[:1])

    @property
    def last(self) -> "FakeLocator":
        return FakeLocator(self.elements[-1:])

    def nth(self, i: int) -> "FakeLocator":
        return FakeLocator(self.elements[i:i + 1])

    def all(self) -> list["FakeLocator"]:
        return [FakeLocator([e]) for e in self.elements]

    def locator(self, selector: str) -> "FakeLocator":
        return FakeLocator([c for e in self.elements for c in e.children.get(selector, [])])

    def is_visible(self, timeout=None) -> bool:
        return bool(self.elements) and self.elements[0].visible

    def click(self) -> None:
        el = self._one()
        el.clicks += 1
        if el.on_click:
            el.on_click(el.page)

    def fill(self, value: str) -> None:
        self._one().filled = value

    def press(self, key: str) -> None:
        self._one().pressed.append(key)

    def check(self) -> None:
        self._one().checked = True

    def set_input_files(self, path: str) -> None:
        self._one().files = path

    def inner_text(self) -> str:
        return self._one().text

    def get_attribute(self, name: str):
        return self._one().attrs.get(name)

    def select_option(self, label=None, value=None, timeout=None) -> None:
        el = self._one()
        wanted = label if label is not None else value
        if wanted not in el.options:
            raise ValueError(f"no option {wanted!r}")
        el.selected = wanted


class FakePage:
    """Elements are registered under the exact selector strings adapters query."""

    def __init__(self, html: str = ""):
        self.html = html
        self.elements: dict[str, list[FakeElement]] = {}
        self.visited: list[str] = []

    def add(self, selector: str, **kwargs) -> FakeElement:
        el = FakeElement(self, **kwargs)
        self.elements.setdefault(selector, []).append(el)
        return el

    def remove(self, selector: str) -> None:
        self.elements.pop(selector, None)

    def el(self, selector: str) -> FakeElement:
        return self.elements[selector][0]

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self.elements.get(selector, []))

    def content(self) -> str:
        return self.html

    def goto(self, url, wait_until=None, timeout=None) -> None:
        self.visited.append(url)

    def wait_for_load_state(self, state=None, timeout=None) -> None:
        pass

    def wait_for_timeout(self, ms) -> None:
        pass

    def evaluate(self, script):
        return 0


class FakeSession:
    def __init__(self, page=None):
        self.page = page if page is not None else FakePage()
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        encryption_key=TEST_KEY,
        batch_delay_seconds=0,
        secrets_path=tmp_path / "credentials.json",
        applications_csv=tmp_path / "applications.csv",
        jobs_path=tmp_path / "jobs.json",
        users_path=tmp_path / "users.yaml",
    )


@pytest.fixture
def resume(tmp_path):
    path = tmp_path / "resume.pdf"
    path.write_bytes(b"%PDF-1.4 resume")
    return str(path)


@pytest.fixture
def profile(resume) -> ApplicantProfile:
    return ApplicantProfile(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        password="s3cret",
        phone="555-0100",
        address=Address(street="1 Analytical Way", city="London", state="LDN", zip_code="N1"),
        resume_path=resume,
        cover_letter_template="Dear team at [Company Name], I want the [Job Title] job. [Your Name]",
        linkedin_url="https://linkedin.com/in/ada",
        website_url="https://ada.dev",
        current_company="Babbage & Co",
        work_history=(
            WorkExperience(title="Engineer", company="Babbage & Co", start=date(2020, 1, 1), end=date(2023, 1, 1)),
        ),
        education=(Education(school="Cambridge", degree="Master of Mathematics"),),
        skills=("Python", "SQL", "Spark", "Airflow"),
        willing_to_relocate=True,
        work_authorization=True,
        salary_expectation=150000,
        years_of_experience=3,
        highest_education="Master",
        available_start_date="2026-11-01",
        cover_letter_summary="I am a professional with 3 years of experience.",
    )


def make_job(
    job_id="j1",
    title="Data Engineer",
    company="Acme",
    url="https://boards.greenhouse.io/acme/jobs/1",
    source=JobSource.LINKEDIN,
    published_at=None,
) -> JobListing:
    return JobListing(
        id=job_id,
        title=title,
        company=Company(name=company),
        location="Remote",
        application_url=url,
        source=source,
        published_at=published_at,
    )


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)
