"""Fallback for career pages we have no specific knowledge of."""
from __future__ import annotations

from autoapply.models import JobListing
from autoapply.portals.base import PortalAdapter, Step
from autoapply.portals.classify import PortalKind
from autoapply.portals.form import answer_questions, click_first_visible, fill_first, present, upload_first

APPLY_LABELS = ["Apply", "Apply Now", "Apply for this job", "Submit Application"]
FIRST_NAME = ['input[name*="first" i]', 'input[id*="first" i]']
LAST_NAME = ['input[name*="last" i]', 'input[id*="last" i]']
FULL_NAME = ['input[name="name"]', 'input[id="name"]', 'input[placeholder*="full name" i]']
EMAIL = ['input[type="email"]', 'input[name*="email" i]', 'input[id*="email" i]']
PHONE = ['input[type="tel"]', 'input[name*="phone" i]', 'input[id*="phone" i]']
RESUME = ['input[type="file"][name*="resume" i]', 'input[type="file"][id*="resume" i]', 'input[type="file"]']
COVER = ['textarea[name*="cover" i]', 'textarea[id*="cover" i]']
QUESTIONS = "form fieldset"
SUBMIT = ['button[type="submit"]', 'input[type="submit"]', 'button:has-text("Submit")']


class GenericAdapter(PortalAdapter):
    kind = PortalKind.GENERIC
    confirmation_phrases = ("thank you", "application received", "successfully", "submitted")

    def run(self, job: JobListing) -> bool:
        if not present(self.page, EMAIL):
            self.step("open application", self._open)
        self.run_steps([
            Step("personal info", tuple(EMAIL + FULL_NAME + FIRST_NAME), self._personal_info),
            Step("resume", tuple(RESUME), self._resume),
            Step("cover letter", tuple(COVER), self._cover_letter),
            Step("questions", (QUESTIONS,), self._questions),
        ])
        return self.submit(SUBMIT)

    def _open(self) -> None:
        selectors = [f'button:has-text("{label}")' for label in APPLY_LABELS]
        selectors += [f'a:has-text("{label}")' for label in APPLY_LABELS]
        if click_first_visible(self.page, selectors):
            self.settle(3000)

    def _personal_info(self) -> None:
        p = self.page
        if not fill_first(p, FULL_NAME, self.profile.full_name):
            fill_first(p, FIRST_NAME, self.profile.first_name)
            fill_first(p, LAST_NAME, self.profile.last_name)
        fill_first(p, EMAIL, self.profile.email)
        fill_first(p, PHONE, self.profile.phone)

    def _resume(self) -> None:
        upload_first(self.page, RESUME, self.profile.resume_path)

    def _cover_letter(self) -> None:
        fill_first(self.page, COVER, self.cover_letter)

    def _questions(self) -> None:
        answer_questions(self.page, QUESTIONS, ("legend", "label"), self.profile)
