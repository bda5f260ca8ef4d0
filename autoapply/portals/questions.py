"""Keyword rules for screening questions.

Rules are evaluated top to bottom against the lowercased question label; the
first rule whose keywords appear wins. New questions are handled by adding a
rule, not by adding branches to the adapters.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from autoapply.models import ApplicantProfile

NOTICE_PERIOD = "2 weeks"

# Labels shaped like a yes/no question get "Yes" when no rule matches.
YES_NO_MARKERS: tuple[str, ...] = (
    "are you", "do you", "can you", "will you", "have you", "would you",
    "willing", "able to",
)


@dataclass(frozen=True)
class Answer:
    """What to put in a field. `yes` drives radios/checkboxes, `text` drives inputs."""

    yes: bool | None = None
    text: str | None = None

    @classmethod
    def yes_no(cls, value: bool) -> "Answer":
        return cls(yes=value, text="Yes" if value else "No")

    @classmethod
    def of(cls, text: object) -> "Answer | None":
        if text is None or text == "":
            return None
        return cls(text=str(text))


@dataclass(frozen=True)
class QuestionRule:
    intent: str
    keywords: tuple[str, ...]
    answer: Callable[[ApplicantProfile], Answer | None]

    def matches(self, label: str) -> bool:
        return any(k in label for k in self.keywords)


RULES: tuple[QuestionRule, ...] = (
    QuestionRule("sponsorship", ("sponsor",), lambda p: Answer.yes_no(not p.work_authorization)),
    QuestionRule("relocation", ("relocat",), lambda p: Answer.yes_no(p.willing_to_relocate)),
    QuestionRule(
        "work_authorization",
        ("visa", "legally", "authorized", "authorised", "eligible to work", "right to work"),
        lambda p: Answer.yes_no(p.work_authorization),
    ),
    QuestionRule("salary", ("salary", "compensation", "pay expectation"), lambda p: Answer.of(p.salary_expectation)),
    QuestionRule("notice_period", ("notice",), lambda p: Answer.of(NOTICE_PERIOD)),
    QuestionRule("start_date", ("start", "available"), lambda p: Answer.of(p.available_start_date)),
    QuestionRule("referral", ("referral", "referred", "hear about"), lambda p: Answer.of(p.referral_source)),
    QuestionRule("years_of_experience", ("years", "experience"), lambda p: Answer.of(p.years_of_experience)),
    QuestionRule("education", ("education", "degree"), lambda p: Answer.of(p.highest_education)),
    QuestionRule("linkedin", ("linkedin",), lambda p: Answer.of(p.linkedin_url)),
    QuestionRule("website", ("website", "portfolio"), lambda p: Answer.of(p.website_url)),
    QuestionRule("cover_letter", ("cover letter", "introduction"), lambda p: Answer.of(p.cover_letter_summary)),
)


def normalize(label: str) -> str:
    return " ".join((label or "").lower().split())


def match_rule(label: str, rules: tuple[QuestionRule, ...] = RULES) -> QuestionRule | None:
    text = normalize(label)
    for rule in rules:
        if rule.matches(text):
            return rule
    return None


def is_yes_no_question(label: str) -> bool:
    text = normalize(label)
    return any(text.startswith(m) or f" {m}" in text for m in YES_NO_MARKERS)


def answer_for(label: str, profile: ApplicantProfile, rules: tuple[QuestionRule, ...] = RULES) -> Answer | None:
    """Rule answer for a label, else "Yes" for yes/no-shaped labels, else None (leave default)."""
    rule = match_rule(label, rules)
    if rule is not None:
        answer = rule.answer(profile)
        if answer is not None:
            return answer
    if is_yes_no_question(label):
        return Answer.yes_no(True)
    return None
