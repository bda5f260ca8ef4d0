"""LinkedIn Easy Apply: modal wizard of up to five pages."""
from __future__ import annotations

from autoapply.models import JobListing
from autoapply.portals.base import PortalAdapter, Step
from autoapply.portals.classify import PortalKind
from autoapply.portals.form import answer_questions, click_first_visible, fill_first, upload_first

SIGN_IN_SUBMIT = [".sign-in-form__submit-button", 'form.login__form button[type="submit"]']
EASY_APPLY = [".jobs-apply-button", 'button:has-text("Easy Apply")']
PHONE = ['input[name="phoneNumber"]', 'input[id*="phoneNumber"]']
RESUME = ['input[type="file"]']
QUESTIONS = ".jobs-easy-apply-form-element"
NEXT = [
    'button[aria-label="Continue to next step"]',
    'button[aria-label="Review your application"]',
    'button:has-text("Next")',
    'button:has-text("Review")',
]
SUBMIT = ['button[aria-label="Submit application"]', 'button:has-text("Submit application")']


class LinkedInAdapter(PortalAdapter):
    kind = PortalKind.LINKEDIN
    max_steps = 5
    confirmation_phrases = ("your application was sent", "application submitted")

    def run(self, job: JobListing) -> bool:
        self.run_steps([
            Step("sign in", tuple(SIGN_IN_SUBMIT), self._sign_in),
            Step("open easy apply", tuple(EASY_APPLY), self._open),
        ])
        return self.walk(
            [
                Step("contact info", tuple(PHONE), self._contact),
                Step("resume", (".jobs-document-upload-redesign-container",) + tuple(RESUME), self._resume),
                Step("questions", (QUESTIONS,), self._questions, repeat=True),
            ],
            next_selectors=NEXT,
            submit_selectors=SUBMIT,
        )

    def _sign_in(self) -> None:
        self.sign_in(
            email_selectors=["#username", 'input[name="session_key"]'],
            password_selectors=["#password", 'input[name="session_password"]'],
            submit_selectors=SIGN_IN_SUBMIT,
        )

    def _open(self) -> None:
        if not click_first_visible(self.page, EASY_APPLY):
            raise RuntimeError("Easy Apply button not found")
        self.settle()

    def _contact(self) -> None:
        fill_first(self.page, PHONE, self.profile.phone)
        fill_first(self.page, ['input[name="email"]'], self.profile.email)

    def _resume(self) -> None:
        upload_first(self.page, RESUME, self.profile.resume_path)

    def _questions(self) -> None:
        answer_questions(self.page, QUESTIONS, ("label", "legend", ".artdeco-text-input--label"), self.profile)
