"""Workday: account gate, then a wizard of data-automation-id tagged pages."""
from __future__ import annotations

from autoapply.log import get_logger
from autoapply.models import JobListing
from autoapply.portals.base import PortalAdapter, Step
from autoapply.portals.classify import PortalKind
from autoapply.portals.form import answer_questions, click_first_visible, fill_first, present, quoted, upload_first

log = get_logger(__name__)

APPLY_BUTTONS = [
    'a[data-automation-id="applyNowButton"]',
    'button[data-automation-id="applyNowButton"]',
    'a[data-automation-id="jobPostingApplyButton"]',
    'button[data-automation-id="jobPostingApplyButton"]',
]
APPLY_MANUALLY = ['a[data-automation-id="applyManually"]', 'button[data-automation-id="applyManually"]']
CREATE_ACCOUNT = ['button[data-automation-id="createAccountButton"]', 'button[data-automation-id="createAccountSubmitButton"]']
SIGN_IN = ['button[data-automation-id="signInSubmitButton"]', 'div[data-automation-id="click_filter"]']
EMAIL = ['input[data-automation-id="email"]', 'input[type="email"]']
PASSWORD = ['input[data-automation-id="password"]', 'input[type="password"]']
VERIFY_PASSWORD = ['input[data-automation-id="verifyPassword"]', 'input[data-automation-id="confirmPassword"]']
NEXT = [
    'button[data-automation-id="bottom-navigation-next-button"]',
    'button[data-automation-id="bottomNavigationNext"]',
]
SUBMIT = ['button[data-automation-id="bottomNavigationSubmit"]']


def _fill_last(page, selector: str, value: str | None) -> bool:
    """Fill the newest instance of a repeated field (the block just added)."""
    if not value:
        return False
    loc = page.locator(selector)
    if loc.count() == 0:
        return False
    loc.last.fill(value)
    return True


class WorkdayAdapter(PortalAdapter):
    kind = PortalKind.WORKDAY
    max_steps = 8
    confirmation_selectors = (
        'div[data-automation-id="applicationConfirmationMessage"]',
        'div[data-automation-id="congratulationsPopup"]',
    )
    confirmation_phrases = ("application submitted", "thank you for applying")

    def run(self, job: JobListing) -> bool:
        self.run_steps([
            Step("open application", tuple(APPLY_BUTTONS), self._open),
            Step("account", tuple(CREATE_ACCOUNT + PASSWORD), self._account),
        ])
        return self.walk(
            [
                Step("personal info", ('input[data-automation-id="legalNameSection_firstName"]',
                                       'input[data-automation-id="firstName"]'), self._personal_info),
                Step("resume", ('input[data-automation-id="file-upload-input-ref"]', 'input[type="file"]'),
                     self._resume),
                Step("work history", ('button[data-automation-id="addExperienceButton"]',
                                      'div[data-automation-id="workExperienceSection"]'), self._work_history),
                Step("education", ('button[data-automation-id="addEducationButton"]',
                                   'div[data-automation-id="educationSection"]'), self._education),
                Step("skills", ('input[data-automation-id="skill"]',
                                'div[data-automation-id="skillsSection"]'), self._skills),
                Step("questions", ('div[data-automation-id^="formField"]',), self._questions, repeat=True),
            ],
            next_selectors=NEXT,
            submit_selectors=SUBMIT,
        )

    def _open(self) -> None:
        click_first_visible(self.page, APPLY_BUTTONS)
        self.settle()
        if click_first_visible(self.page, APPLY_MANUALLY):
            self.settle()

    def _account(self) -> None:
        if present(self.page, CREATE_ACCOUNT) and present(self.page, VERIFY_PASSWORD):
            fill_first(self.page, EMAIL, self.profile.email)
            fill_first(self.page, PASSWORD, self.profile.password)
            fill_first(self.page, VERIFY_PASSWORD, self.profile.password)
            click_first_visible(self.page, CREATE_ACCOUNT)
            self.settle(2000)
            return
        self.sign_in(email_selectors=EMAIL, password_selectors=PASSWORD, submit_selectors=SIGN_IN)

    def _personal_info(self) -> None:
        p, addr = self.page, self.profile.address
        fill_first(p, ['input[data-automation-id="legalNameSection_firstName"]',
                       'input[data-automation-id="firstName"]'], self.profile.first_name)
        fill_first(p, ['input[data-automation-id="legalNameSection_lastName"]',
                       'input[data-automation-id="lastName"]'], self.profile.last_name)
        fill_first(p, ['input[data-automation-id="addressSection_addressLine1"]',
                       'input[data-automation-id="addressLine1"]'], addr.street)
        fill_first(p, ['input[data-automation-id="addressSection_city"]',
                       'input[data-automation-id="city"]'], addr.city)
        fill_first(p, ['input[data-automation-id="addressSection_postalCode"]',
                       'input[data-automation-id="postalCode"]'], addr.zip_code)
        fill_first(p, ['input[data-automation-id="phone-number"]',
                       'input[data-automation-id="phone"]'], self.profile.phone)
        if addr.state and click_first_visible(p, ['button[data-automation-id="addressSection_countryRegion"]',
                                                  'button[data-automation-id="stateDropdown"]']):
            click_first_visible(p, [f'div[role="option"]:has-text({quoted(addr.state)})',
                                    f'li[data-automation-id={quoted("stateOption-" + addr.state)}]'])

    def _resume(self) -> None:
        upload_first(self.page, ['input[data-automation-id="file-upload-input-ref"]', 'input[type="file"]'],
                     self.profile.resume_path)

    def _work_history(self) -> None:
        p = self.page
        for role in self.profile.work_history:
            if not click_first_visible(p, ['button[data-automation-id="addExperienceButton"]',
                                           'button[data-automation-id="add-button"]']):
                break
            _fill_last(p, 'input[data-automation-id="jobTitle"]', role.title)
            _fill_last(p, 'input[data-automation-id="company"]', role.company)
            _fill_last(p, 'input[data-automation-id="location"]', role.location)
            _fill_last(p, 'input[data-automation-id="startDate"]', role.start.strftime("%m/%Y"))
            if role.current:
                current = p.locator('input[data-automation-id="currentlyWorkHere"]')
                if current.count() > 0:
                    current.last.check()
            elif role.end:
                _fill_last(p, 'input[data-automation-id="endDate"]', role.end.strftime("%m/%Y"))
            _fill_last(p, 'textarea[data-automation-id="description"]', role.description)
            click_first_visible(p, ['button[data-automation-id="saveExperience"]'])

    def _education(self) -> None:
        p = self.page
        for entry in self.profile.education:
            if not click_first_visible(p, ['button[data-automation-id="addEducationButton"]']):
                break
            _fill_last(p, 'input[data-automation-id="school"]', entry.school)
            _fill_last(p, 'input[data-automation-id="degree"]', entry.degree)
            _fill_last(p, 'input[data-automation-id="fieldOfStudy"]', entry.field_of_study)
            _fill_last(p, 'input[data-automation-id="graduationDate"]', entry.graduation_date)
            click_first_visible(p, ['button[data-automation-id="saveEducation"]'])

    def _skills(self) -> None:
        field = self.page.locator('input[data-automation-id="skill"]')
        if field.count() == 0:
            return
        for skill in self.profile.skills:
            field.first.fill(skill)
            field.first.press("Enter")

    def _questions(self) -> None:
        answered = answer_questions(self.page, 'div[data-automation-id^="formField"]', ("label", "legend"), self.profile)
        log.debug("[workday] answered %d question(s)", answered)
