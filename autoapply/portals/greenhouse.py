"""Greenhouse: one long form with optional custom questions."""
from __future__ import annotations

from autoapply.models import JobListing
from autoapply.portals.base import PortalAdapter, Step
from autoapply.portals.classify import PortalKind
from autoapply.portals.form import answer_questions, click_first_visible, fill_first, upload_first

FIRST_NAME = ["#first_name", 'input[name="job_application[first_name]"]']
LAST_NAME = ["#last_name", 'input[name="job_application[last_name]"]']
EMAIL = ["#email", 'input[name="job_application[email]"]', 'input[type="email"]']
PHONE = ["#phone", 'input[name="job_application[phone]"]']
RESUME = ["input#resume", '#resume_fieldset input[type="file"]', 'input[type="file"][name*="resume"]']
COVER_TEXT = ["#cover_letter_text", 'textarea[name*="cover_letter"]']
QUESTIONS = "#custom_fields .field"
SUBMIT = ["#submit_app", 'button[type="submit"]', 'input[type="submit"]']


class GreenhouseAdapter(PortalAdapter):
    kind = PortalKind.GREENHOUSE
    confirmation_selectors = (".application-confirmation", "#application_confirmation")
    confirmation_phrases = ("thank you for applying", "application has been received")

    def run(self, job: JobListing) -> bool:
        self.run_steps([
            Step("personal info", tuple(FIRST_NAME + EMAIL), self._personal_info),
            Step("resume", tuple(RESUME), self._resume),
            Step("cover letter", ("#cover_letter_fieldset",) + tuple(COVER_TEXT), self._cover_letter),
            Step("questions", (QUESTIONS,), self._questions),
        ])
        return self.submit(SUBMIT)

    def _personal_info(self) -> None:
        fill_first(self.page, FIRST_NAME, self.profile.first_name)
        fill_first(self.page, LAST_NAME, self.profile.last_name)
        fill_first(self.page, EMAIL, self.profile.email)
        fill_first(self.page, PHONE, self.profile.phone)

    def _resume(self) -> None:
        upload_first(self.page, RESUME, self.profile.resume_path)

    def _cover_letter(self) -> None:
        # The textarea stays hidden until "enter manually" is chosen
        click_first_visible(self.page, ['#cover_letter_fieldset button[data-source="paste"]'])
        fill_first(self.page, COVER_TEXT, self.cover_letter)

    def _questions(self) -> None:
        answer_questions(self.page, QUESTIONS, ("label",), self.profile)
