from .base import JobSearchBase
from .glassdoor import GlassdoorSource
from .indeed import IndeedSource
from .linkedin import LinkedInSource

from autoapply.browser import SessionFactory
from autoapply.config import Settings
from autoapply.log import get_logger

log = get_logger(__name__)

__all__ = [
    "JobSearchBase", "LinkedInSource", "IndeedSource", "GlassdoorSource",
    "get_sources",
]


def get_sources(settings: Settings | None = None, session_factory: SessionFactory | None = None) -> list[JobSearchBase]:
    """All discovery sources, in merge-precedence order."""
    sources: list[JobSearchBase] = [
        LinkedInSource(settings, session_factory),
        IndeedSource(settings, session_factory),
        GlassdoorSource(settings, session_factory),
    ]
    log.debug("Registered sources: %s", ", ".join(s.name for s in sources))
    return sources
