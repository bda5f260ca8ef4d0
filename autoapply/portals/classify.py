"""Map an application URL to the portal kind that knows how to drive it."""
from __future__ import annotations

from enum import Enum


class PortalKind(str, Enum):
    WORKDAY = "workday"
    GREENHOUSE = "greenhouse"
    LEVER = "lever"
    INDEED = "indeed"
    LINKEDIN = "linkedin"
    GENERIC = "generic"

    @property
    def credential_portal(self) -> str:
        """Vault portal id holding the login for this kind."""
        return "other" if self is PortalKind.GENERIC else self.value


# Checked in order; the first kind with a matching fragment wins.
PORTAL_RULES: tuple[tuple[PortalKind, tuple[str, ...]], ...] = (
    (PortalKind.WORKDAY, ("myworkdayjobs.com", "myworkdaysite.com", "workday.com")),
    (PortalKind.GREENHOUSE, ("greenhouse.io",)),
    (PortalKind.LEVER, ("lever.co",)),
    (PortalKind.INDEED, ("indeed.com",)),
    (PortalKind.LINKEDIN, ("linkedin.com",)),
)


def classify_portal(url: str) -> PortalKind:
    """Always returns exactly one kind; unknown or empty URLs are GENERIC."""
    u = (url or "").lower()
    for kind, fragments in PORTAL_RULES:
        if any(fragment in u for fragment in fragments):
            return kind
    return PortalKind.GENERIC
