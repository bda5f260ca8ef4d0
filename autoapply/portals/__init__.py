from .base import PortalAdapter, Step
from .classify import PortalKind, classify_portal
from .generic import GenericAdapter
from .greenhouse import GreenhouseAdapter
from .indeed import IndeedAdapter
from .lever import LeverAdapter
from .linkedin import LinkedInAdapter
from .workday import WorkdayAdapter

from autoapply.browser import BrowserSession, SessionFactory
from autoapply.config import Settings, load_settings
from autoapply.log import get_logger
from autoapply.models import ApplicantProfile, ApplicationResult, JobListing

log = get_logger(__name__)

__all__ = [
    "ADAPTERS", "PortalAdapter", "PortalKind", "Step",
    "WorkdayAdapter", "GreenhouseAdapter", "LeverAdapter", "IndeedAdapter", "LinkedInAdapter", "GenericAdapter",
    "adapter_for", "apply_to_job", "classify_portal",
]

ADAPTERS: dict[PortalKind, type[PortalAdapter]] = {
    PortalKind.WORKDAY: WorkdayAdapter,
    PortalKind.GREENHOUSE: GreenhouseAdapter,
    PortalKind.LEVER: LeverAdapter,
    PortalKind.INDEED: IndeedAdapter,
    PortalKind.LINKEDIN: LinkedInAdapter,
    PortalKind.GENERIC: GenericAdapter,
}


def adapter_for(url: str) -> type[PortalAdapter]:
    return ADAPTERS[classify_portal(url)]


def apply_to_job(
    profile: ApplicantProfile,
    job: JobListing,
    *,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
) -> ApplicationResult:
    """Submit one application in its own browser session.

    Never raises: anything that goes wrong, including the browser failing to
    start, comes back as a failed result carrying the first line of the error.
    """
    if not job.application_url:
        return ApplicationResult.failed(job.id, "No application URL for this job", job)

    settings = settings or load_settings()
    factory = session_factory or (lambda: BrowserSession(settings))
    adapter_cls = adapter_for(job.application_url)
    try:
        with factory() as session:
            return adapter_cls(session.page, profile, settings).apply(job)
    except Exception as exc:
        err = str(exc).split("\n")[0][:200] or type(exc).__name__
        log.error("[%s] ✗ %s: %s", adapter_cls.kind.value, job.id, err)
        return ApplicationResult.failed(job.id, err, job)
