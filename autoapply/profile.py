"""Build an ApplicantProfile from a stored user record and decrypted portal credentials."""
from __future__ import annotations

from datetime import date
from typing import Any

from autoapply.cover_letter import cover_letter_summary, highest_education, years_of_experience
from autoapply.errors import ValidationError
from autoapply.models import Address, ApplicantProfile, Education, WorkExperience


def _to_date(value: Any, field_name: str) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{field_name}: expected YYYY-MM-DD, got {value!r}") from None


def _work_history(entries: list[dict[str, Any]]) -> tuple[WorkExperience, ...]:
    history = []
    for entry in entries or []:
        start = _to_date(entry.get("start_date") or entry.get("start"), "work_experience.start_date")
        if start is None:
            raise ValidationError(f"Work experience at {entry.get('company', '?')} has no start date")
        history.append(
            WorkExperience(
                title=entry.get("title", ""),
                company=entry.get("company", ""),
                location=entry.get("location", ""),
                start=start,
                end=_to_date(entry.get("end_date") or entry.get("end"), "work_experience.end_date"),
                current=bool(entry.get("current", False)),
                description=entry.get("description", ""),
            )
        )
    return tuple(history)


def _education(entries: list[dict[str, Any]]) -> tuple[Education, ...]:
    return tuple(
        Education(
            school=e.get("school", ""),
            degree=e.get("degree", ""),
            field_of_study=e.get("field_of_study", ""),
            graduation_date=str(e.get("graduation_date", "") or ""),
        )
        for e in entries or []
    )


def build_profile(user: dict[str, Any], credentials: dict[str, Any], *, today: date | None = None) -> ApplicantProfile:
    """Merge the user record with portal credentials; portal email wins over account email."""
    work = _work_history(user.get("work_experience", []))
    education = _education(user.get("education", []))
    skills = tuple(user.get("skills", []) or ())
    years = years_of_experience(work, today=today)
    address = user.get("address") or {}
    salary = user.get("salary_expectation")

    return ApplicantProfile(
        first_name=user.get("first_name", ""),
        last_name=user.get("last_name", ""),
        email=credentials.get("email") or user.get("email", ""),
        password=credentials.get("password", ""),
        phone=user.get("phone", ""),
        address=Address(
            street=address.get("street", ""),
            city=address.get("city", ""),
            state=address.get("state", ""),
            zip_code=str(address.get("zip_code", "") or ""),
        ),
        resume_path=user.get("resume_path", ""),
        cover_letter_template=user.get("cover_letter_template", ""),
        linkedin_url=user.get("linkedin_url", ""),
        website_url=user.get("website_url", ""),
        current_company=user.get("current_company", ""),
        work_history=work,
        education=education,
        skills=skills,
        willing_to_relocate=bool(user.get("willing_to_relocate", False)),
        work_authorization=bool(user.get("work_authorization", False)),
        salary_expectation=int(salary) if salary not in (None, "") else None,
        years_of_experience=years,
        highest_education=highest_education(education),
        available_start_date=str(user.get("available_start_date", "") or ""),
        referral_source=user.get("referral_source") or "Job Search Website",
        cover_letter_summary=cover_letter_summary(years, skills),
    )
