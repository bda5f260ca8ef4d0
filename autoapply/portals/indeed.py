"""Indeed Apply: optional sign-in, then a continue-driven wizard."""
from __future__ import annotations

from autoapply.models import JobListing
from autoapply.portals.base import PortalAdapter, Step
from autoapply.portals.classify import PortalKind
from autoapply.portals.form import answer_questions, click_first_visible, fill_first, upload_first

SIGN_IN_SUBMIT = ["#login-submit-button"]
APPLY = ["#indeedApplyButton", 'button[id*="indeedApplyButton"]', 'button:has-text("Apply now")']
NAME = ['input[id="input-applicant.name"]', 'input[name="fullName"]']
EMAIL = ['input[id="input-applicant.email"]', 'input[name="email"]']
PHONE = ['input[id="input-applicant.phone"]', 'input[name="phone"]', 'input[type="tel"]']
RESUME = ['input[type="file"]']
QUESTIONS = ".ia-Questions-item"
NEXT = ["#form-action-continue", 'button:has-text("Continue")']
SUBMIT = ["#form-action-submit", 'button:has-text("Submit your application")']


class IndeedAdapter(PortalAdapter):
    kind = PortalKind.INDEED
    max_steps = 6
    confirmation_selectors = (".ia-ApplyFormConfirmation", ".ia-PostApply")
    confirmation_phrases = ("your application has been submitted",)

    def run(self, job: JobListing) -> bool:
        self.run_steps([
            Step("sign in", tuple(SIGN_IN_SUBMIT), self._sign_in),
            Step("open application", tuple(APPLY), self._open),
        ])
        return self.walk(
            [
                Step("contact info", tuple(NAME + EMAIL + PHONE + ['input[name="firstName"]']), self._contact),
                Step("resume", ("#resume-upload-button",) + tuple(RESUME), self._resume),
                Step("questions", (QUESTIONS,), self._questions, repeat=True),
            ],
            next_selectors=NEXT,
            submit_selectors=SUBMIT,
        )

    def _sign_in(self) -> None:
        self.sign_in(
            email_selectors=["#login-email-input", 'input[type="email"]'],
            password_selectors=["#login-password-input", 'input[type="password"]'],
            submit_selectors=SIGN_IN_SUBMIT,
        )

    def _open(self) -> None:
        if click_first_visible(self.page, APPLY):
            self.settle()

    def _contact(self) -> None:
        p = self.page
        if not fill_first(p, NAME, self.profile.full_name):
            fill_first(p, ['input[name="firstName"]'], self.profile.first_name)
            fill_first(p, ['input[name="lastName"]'], self.profile.last_name)
        fill_first(p, EMAIL, self.profile.email)
        fill_first(p, PHONE, self.profile.phone)

    def _resume(self) -> None:
        upload_first(self.page, RESUME, self.profile.resume_path)

    def _questions(self) -> None:
        answer_questions(self.page, QUESTIONS, (".ia-Questions-item-label", "label", "legend"), self.profile)
