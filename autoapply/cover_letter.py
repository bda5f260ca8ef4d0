"""Fill cover-letter templates and derive profile fields used by the apply flows."""
from __future__ import annotations

import math
from datetime import date
from typing import Iterable

from autoapply.log import get_logger
from autoapply.models import ApplicantProfile, Education, JobListing, WorkExperience

log = get_logger(__name__)

DEFAULT_TEMPLATE = """[Your Name]
[Your Address]
[City, State ZIP]
[Your Email]
[Your Phone]

[Date]

Dear [Hiring Manager's Name],

I am writing to apply for the [Job Title] position at [Company Name].

My experience aligns with your requirements, and I would welcome the opportunity to discuss how my background can contribute to your team.

Best regards,
[Your Name]"""

# Ranked low -> high; each level lists the lowercase fragments that identify it.
EDUCATION_LEVELS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("High School", ("high school",)),
    ("Associate", ("associate",)),
    ("Bachelor", ("bachelor",)),
    ("Master", ("master", "mba")),
    ("PhD", ("phd", "ph.d", "doctor")),
)


def _format_date(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


def generate_cover_letter(
    template: str,
    profile: ApplicantProfile,
    job: JobListing,
    *,
    today: date | None = None,
) -> str:
    """Replace the known bracketed placeholders; anything else stays verbatim."""
    addr = profile.address
    city_line = f"{addr.city}, {addr.state} {addr.zip_code}".strip()
    replacements = {
        "[Your Name]": profile.full_name,
        "[Your Address]": addr.street,
        "[City, State ZIP]": city_line if city_line != "," else "",
        "[Your Email]": profile.email,
        "[Your Phone]": profile.phone,
        "[Date]": _format_date(today or date.today()),
        "[Hiring Manager's Name]": "Hiring Manager",
        "[Company Name]": job.company.name,
        "[Company Address]": "",
        "[Job Title]": job.title,
    }
    letter = template or DEFAULT_TEMPLATE
    for placeholder, value in replacements.items():
        letter = letter.replace(placeholder, value)
    return letter


def _months_between(start: date, end: date) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month)


def years_of_experience(history: Iterable[WorkExperience], *, today: date | None = None) -> int:
    """Whole months summed across all roles, rounded half-up to years."""
    today = today or date.today()
    total = 0
    for role in history:
        end = today if role.current or role.end is None else role.end
        total += max(_months_between(role.start, end), 0)
    return int(math.floor(total / 12 + 0.5))


def highest_education(education: Iterable[Education]) -> str:
    best_rank, best_label = 0, EDUCATION_LEVELS[0][0]
    for entry in education:
        degree = (entry.degree or "").lower()
        for rank, (label, fragments) in enumerate(EDUCATION_LEVELS):
            if rank > best_rank and any(f in degree for f in fragments):
                best_rank, best_label = rank, label
    return best_label


def cover_letter_summary(years: int, skills: Iterable[str]) -> str:
    top = ", ".join(list(skills)[:3])
    background = f" My background includes working with {top} and other relevant technologies." if top else ""
    return (
        f"I am a professional with {years} years of experience.{background} "
        "I am excited about this opportunity and believe my skills and experience "
        "make me a strong candidate for this position."
    )
