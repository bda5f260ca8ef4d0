import pytest

from autoapply.portals import ADAPTERS, PortalKind, adapter_for, classify_portal


@pytest.mark.parametrize("url, kind", [
    ("https://acme.wd5.myworkdayjobs.com/en-US/careers/job/123", PortalKind.WORKDAY),
    ("https://wd3.myworkdaysite.com/recruiting/acme/job/1", PortalKind.WORKDAY),
    ("https://boards.greenhouse.io/acme/jobs/42", PortalKind.GREENHOUSE),
    ("https://jobs.lever.co/acme/abc-123", PortalKind.LEVER),
    ("https://www.indeed.com/viewjob?jk=abc", PortalKind.INDEED),
    ("https://www.linkedin.com/jobs/view/123", PortalKind.LINKEDIN),
    ("HTTPS://BOARDS.GREENHOUSE.IO/ACME", PortalKind.GREENHOUSE),
    ("https://careers.example.com/apply", PortalKind.GENERIC),
    ("", PortalKind.GENERIC),
])
def test_classify(url, kind):
    assert classify_portal(url) is kind


def test_first_matching_rule_wins():
    # A LinkedIn redirect to a Workday page is driven as Workday
    assert classify_portal("https://acme.myworkdayjobs.com/job?src=linkedin.com") is PortalKind.WORKDAY


def test_every_kind_has_an_adapter():
    assert set(ADAPTERS) == set(PortalKind)
    assert adapter_for("https://jobs.lever.co/x").kind is PortalKind.LEVER


def test_generic_credentials_live_under_other():
    assert PortalKind.GENERIC.credential_portal == "other"
    assert PortalKind.WORKDAY.credential_portal == "workday"
