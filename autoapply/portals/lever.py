"""Lever: posting page with an "Apply" link in front of a single form."""
from __future__ import annotations

from autoapply.models import JobListing
from autoapply.portals.base import PortalAdapter, Step
from autoapply.portals.classify import PortalKind
from autoapply.portals.form import answer_questions, click_first_visible, fill_first, present, upload_first

APPLY_LINK = ["a.postings-btn", 'a:has-text("Apply for this job")']
NAME = ['input[name="name"]']
RESUME = ['input[name="resume"]', 'input[type="file"]']
LINKEDIN_URL = ['input[name="urls[LinkedIn]"]']
WEBSITE_URL = ['input[name="urls[Portfolio]"]', 'input[name="urls[Other]"]']
QUESTIONS = ".application-question"
SUBMIT = ["#btn-submit", 'button[type="submit"]', 'button:has-text("Submit application")']


class LeverAdapter(PortalAdapter):
    kind = PortalKind.LEVER
    confirmation_selectors = (".confirmation-heading", ".application-confirmation")
    confirmation_phrases = ("application submitted", "thanks for applying")

    def run(self, job: JobListing) -> bool:
        if not present(self.page, NAME):
            self.step("open application", self._open)
        self.run_steps([
            Step("personal info", tuple(NAME), self._personal_info),
            Step("resume", tuple(RESUME), self._resume),
            Step("links", tuple(LINKEDIN_URL + WEBSITE_URL), self._links),
            Step("cover letter", ('textarea[name="comments"]',), self._cover_letter),
            Step("questions", (QUESTIONS,), self._questions),
        ])
        return self.submit(SUBMIT)

    def _open(self) -> None:
        if click_first_visible(self.page, APPLY_LINK):
            self.settle()

    def _personal_info(self) -> None:
        p = self.page
        fill_first(p, NAME, self.profile.full_name)
        fill_first(p, ['input[name="email"]'], self.profile.email)
        fill_first(p, ['input[name="phone"]'], self.profile.phone)
        fill_first(p, ['input[name="org"]'], self.profile.current_company)

    def _resume(self) -> None:
        upload_first(self.page, RESUME, self.profile.resume_path)

    def _links(self) -> None:
        fill_first(self.page, LINKEDIN_URL, self.profile.linkedin_url)
        fill_first(self.page, WEBSITE_URL, self.profile.website_url)

    def _cover_letter(self) -> None:
        fill_first(self.page, ['textarea[name="comments"]'], self.cover_letter)

    def _questions(self) -> None:
        answer_questions(self.page, QUESTIONS, (".application-label", ".text"), self.profile)
