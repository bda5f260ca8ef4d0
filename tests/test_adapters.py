from dataclasses import replace

import pytest

from autoapply.models import Address, ApplicationResult
from autoapply.portals import (
    GenericAdapter, GreenhouseAdapter, IndeedAdapter, LeverAdapter, LinkedInAdapter, PortalAdapter, PortalKind, Step,
    WorkdayAdapter, adapter_for, apply_to_job,
)
from conftest import FakePage, FakeSession, make_job

WD = 'data-automation-id'


def test_greenhouse_single_page(settings, profile, resume):
    page = FakePage()
    first = page.add("#first_name")
    last = page.add("#last_name")
    email = page.add("#email")
    phone = page.add("#phone")
    upload = page.add("input#resume", visible=False)
    page.add("#cover_letter_fieldset")
    paste = page.add('#cover_letter_fieldset button[data-source="paste"]')
    cover = page.add("#cover_letter_text")
    question = page.add("#custom_fields .field")
    question.add("label", text="Will you require visa sponsorship?")
    q_yes = question.add('input[type="radio"]', attrs={"value": "Yes"})
    q_no = question.add('input[type="radio"]', attrs={"value": "No"})
    page.add("#submit_app", on_click=lambda p: p.add(".application-confirmation"))

    result = GreenhouseAdapter(page, profile, settings).apply(make_job(company="Acme"))

    assert result.success and result.error is None
    assert page.visited == ["https://boards.greenhouse.io/acme/jobs/1"]
    assert (first.filled, last.filled, email.filled, phone.filled) == ("Ada", "Lovelace", "ada@example.com", "555-0100")
    assert upload.files == resume
    assert paste.clicks == 1
    assert cover.filled == "Dear team at Acme, I want the Data Engineer job. Ada Lovelace"
    assert q_no.checked and not q_yes.checked


def test_missing_confirmation_is_a_failed_result(settings, profile):
    page = FakePage()
    page.add("#first_name")
    page.add("#submit_app")
    result = GreenhouseAdapter(page, profile, settings).apply(make_job())
    assert not result.success
    assert result.error == "No greenhouse confirmation after submission"
    assert result.company == "Acme" and result.title == "Data Engineer"


def test_workday_account_then_wizard(settings, profile, resume):
    page = FakePage()
    seen = {}

    def confirm(p):
        p.add(f'div[{WD}="applicationConfirmationMessage"]')

    def page3(p):
        p.elements.clear()
        field = p.add(f'div[{WD}^="formField"]')
        field.add("label", text="Are you legally authorized to work in this country?")
        seen["auth_yes"] = field.add('input[type="radio"]', attrs={"value": "Yes"})
        field.add('input[type="radio"]', attrs={"value": "No"})
        p.add(f'button[{WD}="bottomNavigationSubmit"]', on_click=confirm)

    def add_experience(p):
        seen["title"] = p.add(f'input[{WD}="jobTitle"]')
        seen["company"] = p.add(f'input[{WD}="company"]')
        seen["start"] = p.add(f'input[{WD}="startDate"]')
        seen["end"] = p.add(f'input[{WD}="endDate"]')

    def page2(p):
        p.elements.clear()
        seen["file"] = p.add('input[type="file"]', visible=False)
        p.add(f'button[{WD}="addExperienceButton"]', on_click=add_experience)
        p.add(f'button[{WD}="bottom-navigation-next-button"]', on_click=page3)

    def page1(p):
        p.elements.clear()
        seen["first"] = p.add(f'input[{WD}="legalNameSection_firstName"]')
        seen["phone"] = p.add(f'input[{WD}="phone-number"]')
        p.add(f'button[{WD}="bottom-navigation-next-button"]', on_click=page2)

    apply_button = page.add(f'a[{WD}="applyNowButton"]')
    account_email = page.add(f'input[{WD}="email"]')
    account_password = page.add(f'input[{WD}="password"]')
    verify = page.add(f'input[{WD}="verifyPassword"]')
    page.add(f'button[{WD}="createAccountButton"]', on_click=page1)

    adapter = WorkdayAdapter(page, profile, settings)
    result = adapter.apply(make_job(url="https://acme.wd5.myworkdayjobs.com/careers/job/1"))

    assert result.success
    assert apply_button.clicks == 1
    assert account_email.filled == "ada@example.com"
    assert account_password.filled == verify.filled == "s3cret"
    assert seen["first"].filled == "Ada" and seen["phone"].filled == "555-0100"
    assert seen["file"].files == resume
    assert seen["title"].filled == "Engineer"
    assert seen["company"].filled == "Babbage & Co"
    assert (seen["start"].filled, seen["end"].filled) == ("01/2020", "01/2023")
    assert seen["auth_yes"].checked
    assert adapter.completed[:2] == ["open application", "account"]


def test_workday_state_with_a_quote_is_still_selected(settings, profile):
    profile = replace(profile, address=Address(city="Rancagua", state='O"Higgins'))
    page = FakePage()
    page.add(f'input[{WD}="legalNameSection_firstName"]')
    page.add(f'button[{WD}="stateDropdown"]')
    option = page.add('div[role="option"]:has-text("O\\"Higgins")')

    adapter = WorkdayAdapter(page, profile, settings)
    adapter.apply(make_job(url="https://acme.wd5.myworkdayjobs.com/careers/job/1"))

    assert option.clicks == 1
    assert "personal info" in adapter.completed


def test_linkedin_easy_apply_modal(settings, profile, resume):
    page = FakePage()
    seen = {}

    def sent(p):
        p.html = "<div class='artdeco-modal__content'>Your application was sent to Acme</div>"

    def review(p):
        p.elements.clear()
        p.add('button[aria-label="Submit application"]', on_click=sent)

    def step2(p):
        p.elements.clear()
        seen["file"] = p.add('input[type="file"]', visible=False)
        q = p.add(".jobs-easy-apply-form-element")
        q.add("label", text="How many years of experience do you have with Python?")
        seen["years"] = q.add('input[type="text"]')
        p.add('button[aria-label="Review your application"]', on_click=review)

    def step1(p):
        seen["phone"] = p.add('input[name="phoneNumber"]')
        p.add('button[aria-label="Continue to next step"]', on_click=step2)

    easy_apply = page.add(".jobs-apply-button", on_click=step1)

    result = LinkedInAdapter(page, profile, settings).apply(make_job(url="https://www.linkedin.com/jobs/view/9"))

    assert result.success
    assert easy_apply.clicks == 1
    assert seen["phone"].filled == "555-0100"
    assert seen["file"].files == resume
    assert seen["years"].filled == "3"


def test_linkedin_sign_in_uses_portal_credentials(settings, profile):
    page = FakePage()
    username = page.add("#username")
    password = page.add("#password")
    submit = page.add(".sign-in-form__submit-button")
    LinkedInAdapter(page, profile, settings).apply(make_job(url="https://www.linkedin.com/jobs/view/9"))
    assert (username.filled, password.filled, submit.clicks) == ("ada@example.com", "s3cret", 1)


def test_indeed_wizard_is_capped(settings, profile):
    page = FakePage()
    next_button = page.add("#form-action-continue")
    adapter = IndeedAdapter(page, profile, settings)
    result = adapter.apply(make_job(url="https://www.indeed.com/viewjob?jk=1"))
    assert not result.success
    assert next_button.clicks == adapter.max_steps


def test_indeed_contact_and_submit(settings, profile):
    page = FakePage()
    name = page.add('input[id="input-applicant.name"]')
    email = page.add('input[id="input-applicant.email"]')
    page.add("#form-action-submit", on_click=lambda p: p.add(".ia-ApplyFormConfirmation"))
    result = IndeedAdapter(page, profile, settings).apply(make_job(url="https://www.indeed.com/viewjob?jk=1"))
    assert result.success
    assert name.filled == "Ada Lovelace" and email.filled == "ada@example.com"


def test_lever_opens_form_then_submits(settings, profile):
    page = FakePage()
    fields = {}

    def open_form(p):
        for name in ("name", "email", "phone", "org", "urls[LinkedIn]"):
            fields[name] = p.add(f'input[name="{name}"]')
        fields["comments"] = p.add('textarea[name="comments"]')
        p.add("#btn-submit", on_click=lambda q: q.add(".confirmation-heading"))

    page.add("a.postings-btn", on_click=open_form)
    result = LeverAdapter(page, profile, settings).apply(make_job(url="https://jobs.lever.co/acme/1"))

    assert result.success
    assert fields["name"].filled == "Ada Lovelace"
    assert fields["org"].filled == "Babbage & Co"
    assert fields["urls[LinkedIn]"].filled == "https://linkedin.com/in/ada"
    assert fields["comments"].filled.startswith("Dear team at Acme")


def test_generic_form_uses_phrase_confirmation(settings, profile):
    page = FakePage()
    email = page.add('input[type="email"]')
    name = page.add('input[name="name"]')

    def done(p):
        p.html = "<p>Thank you! We received your details.</p>"

    page.add('button[type="submit"]', on_click=done)
    result = GenericAdapter(page, profile, settings).apply(make_job(url="https://careers.example.com/1"))
    assert result.success
    assert email.filled == "ada@example.com" and name.filled == "Ada Lovelace"


def test_thank_you_text_without_a_submit_is_not_an_application(settings, profile):
    page = FakePage(html="<p>Thank you for your interest in Acme careers.</p>")
    session = FakeSession(page)
    result = apply_to_job(profile, make_job(url="https://careers.example.com/1"),
                          settings=settings, session_factory=lambda: session)
    assert not result.success
    assert result.error == "No generic submit control found"


def test_wizard_ignores_confirmation_already_on_the_first_page(settings, profile):
    page = FakePage(html="<p>Your application was sent</p>")
    page.add("#username")
    result = LinkedInAdapter(page, profile, settings).apply(make_job(url="https://www.linkedin.com/jobs/view/9"))
    assert not result.success
    assert result.error == "No linkedin submit control found"


class _Recording(PortalAdapter):
    kind = PortalKind.GENERIC

    def run(self, job):
        return False


def test_failing_step_does_not_stop_the_rest(settings, profile):
    page = FakePage()
    page.add("#a")
    page.add("#b")
    ran = []

    def boom():
        raise RuntimeError("selector vanished")

    adapter = _Recording(page, profile, settings)
    adapter.run_steps([
        Step("broken", ("#a",), boom),
        Step("absent", ("#zzz",), lambda: ran.append("absent")),
        Step("fine", ("#b",), lambda: ran.append("fine")),
    ])
    assert ran == ["fine"]
    assert adapter.completed == ["fine"]


def test_apply_to_job_dispatches_and_closes_the_session(settings, profile):
    page = FakePage()
    page.add("#submit_app", on_click=lambda p: p.add(".application-confirmation"))
    session = FakeSession(page)
    result = apply_to_job(profile, make_job(), settings=settings, session_factory=lambda: session)
    assert result.success
    assert session.closed


def test_apply_to_job_never_raises(settings, profile):
    def no_browser():
        raise RuntimeError("Executable doesn't exist\nrun playwright install")

    result = apply_to_job(profile, make_job(), settings=settings, session_factory=no_browser)
    assert isinstance(result, ApplicationResult)
    assert not result.success
    assert result.error == "Executable doesn't exist"


def test_apply_to_job_without_url(settings, profile):
    result = apply_to_job(profile, make_job(url=""), settings=settings, session_factory=FakeSession)
    assert not result.success and "No application URL" in result.error


@pytest.mark.parametrize("url, cls", [
    ("https://x.myworkdayjobs.com/1", WorkdayAdapter),
    ("https://jobs.lever.co/x/1", LeverAdapter),
    ("https://careers.example.com", GenericAdapter),
])
def test_adapter_kinds(url, cls):
    assert adapter_for(url) is cls
