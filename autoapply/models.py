"""Data models for job listings, applicant profiles and application outcomes."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from autoapply.errors import ValidationError


class JobSource(str, Enum):
    LINKEDIN = "linkedin"
    INDEED = "indeed"
    GLASSDOOR = "glassdoor"


@dataclass(frozen=True)
class Company:
    name: str
    logo: str | None = None
    website: str | None = None


@dataclass(frozen=True)
class Salary:
    min: int
    max: int
    currency: str = "USD"


@dataclass(frozen=True)
class JobListing:
    id: str
    title: str
    company: Company
    location: str
    application_url: str
    source: JobSource
    published_at: datetime | None = None
    is_remote: bool = False
    description: str = ""
    job_type: str = "Full-time"
    salary: Salary | None = None
    skills: tuple[str, ...] = ()

    @property
    def dedup_key(self) -> str:
        return f"{self.title.lower()}-{self.company.name.lower()}"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value
        data["published_at"] = self.published_at.isoformat() if self.published_at else None
        data["skills"] = list(self.skills)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobListing":
        company = data.get("company") or {}
        if isinstance(company, str):
            company = {"name": company}
        salary = data.get("salary")
        published = data.get("published_at")
        if isinstance(published, str):
            published = parse_timestamp(published)
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            company=Company(**company),
            location=data.get("location", ""),
            application_url=data.get("application_url", ""),
            source=JobSource(data.get("source", JobSource.LINKEDIN.value)),
            published_at=published,
            is_remote=bool(data.get("is_remote", False)),
            description=data.get("description", ""),
            job_type=data.get("job_type") or "Full-time",
            salary=Salary(**salary) if salary else None,
            skills=tuple(data.get("skills") or ()),
        )


@dataclass(frozen=True)
class SearchQuery:
    keywords: str
    location: str | None = None
    remote_only: bool = False
    max_age_hours: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchQuery":
        keywords = str(data.get("keywords") or "").strip()
        if not keywords:
            raise ValidationError("Search query needs non-empty keywords")
        max_age = data.get("max_age_hours")
        if max_age is not None:
            try:
                max_age = float(max_age)
            except (TypeError, ValueError):
                raise ValidationError(f"max_age_hours must be a number, got {max_age!r}") from None
            if max_age <= 0:
                raise ValidationError("max_age_hours must be positive")
        return cls(
            keywords=keywords,
            location=(data.get("location") or None),
            remote_only=bool(data.get("remote_only", False)),
            max_age_hours=max_age,
        )


@dataclass(frozen=True)
class Address:
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""


@dataclass(frozen=True)
class WorkExperience:
    title: str
    company: str
    start: date
    end: date | None = None
    current: bool = False
    location: str = ""
    description: str = ""


@dataclass(frozen=True)
class Education:
    school: str
    degree: str
    field_of_study: str = ""
    graduation_date: str = ""


@dataclass(frozen=True)
class ApplicantProfile:
    """Everything an apply adapter may type into a form. Read-only during a flow."""

    first_name: str
    last_name: str
    email: str
    password: str = ""
    phone: str = ""
    address: Address = field(default_factory=Address)
    resume_path: str = ""
    cover_letter_template: str = ""
    linkedin_url: str = ""
    website_url: str = ""
    current_company: str = ""
    work_history: tuple[WorkExperience, ...] = ()
    education: tuple[Education, ...] = ()
    skills: tuple[str, ...] = ()
    willing_to_relocate: bool = False
    work_authorization: bool = False
    salary_expectation: int | None = None
    years_of_experience: int = 0
    highest_education: str = "High School"
    available_start_date: str = ""
    referral_source: str = "Job Search Website"
    cover_letter_summary: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class ApplicationResult:
    job_id: str
    success: bool
    company: str = ""
    title: str = ""
    application_url: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error: str | None = None

    @classmethod
    def failed(cls, job_id: str, error: str, job: JobListing | None = None) -> "ApplicationResult":
        if job is None:
            return cls(job_id=job_id, success=False, error=error)
        return cls(
            job_id=job_id,
            success=False,
            company=job.company.name,
            title=job.title,
            application_url=job.application_url,
            error=error,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class BatchStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class BatchState:
    batch_id: str
    user_id: str
    job_ids: list[str]
    status: BatchStatus = BatchStatus.PROCESSING
    progress: int = 0
    results: list[ApplicationResult] = field(default_factory=list)
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    end_time: datetime | None = None
    error: str | None = None

    @property
    def finished(self) -> bool:
        return self.status is not BatchStatus.PROCESSING

    def to_dict(self) -> dict[str, Any]:
        return {
            "batch_id": self.batch_id,
            "user_id": self.user_id,
            "job_ids": list(self.job_ids),
            "status": self.status.value,
            "progress": self.progress,
            "results": [r.to_dict() for r in self.results],
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "error": self.error,
        }


def parse_timestamp(value: str) -> datetime | None:
    """ISO-8601 date or datetime -> aware UTC datetime; None when unparseable."""
    text = (value or "").strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text[:10]), datetime.min.time())
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
