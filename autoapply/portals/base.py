"""Base class for portal apply adapters.

An adapter drives one page through one portal's submission flow. Flows are
expressed as named steps, each guarded by a probe selector: a step whose
section is not on the page is skipped, and a step that blows up is logged and
skipped so the rest of the flow still runs.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable

from autoapply.browser import navigate
from autoapply.config import Settings, load_settings
from autoapply.cover_letter import generate_cover_letter
from autoapply.log import get_logger
from autoapply.models import ApplicantProfile, ApplicationResult, JobListing
from autoapply.portals.classify import PortalKind
from autoapply.portals.form import click_first_visible, fill_first, present

log = get_logger(__name__)

SETTLE_MS = 1500


@dataclass(frozen=True)
class Step:
    name: str
    probe: tuple[str, ...]
    fill: Callable[[], None]
    # Question pages differ per page, so those steps run again on every page
    repeat: bool = False


class PortalAdapter(ABC):
    kind: PortalKind
    max_steps: int = 1
    confirmation_selectors: tuple[str, ...] = ()
    confirmation_phrases: tuple[str, ...] = ()

    def __init__(self, page, profile: ApplicantProfile, settings: Settings | None = None) -> None:
        self.page = page
        self.profile = profile
        self.settings = settings or load_settings()
        self.cover_letter = ""
        self.completed: list[str] = []

    @abstractmethod
    def run(self, job: JobListing) -> bool:
        """Drive the portal from the landing page up to (and including) submission.

        Returns whether a submit control was actually clicked.
        """

    def apply(self, job: JobListing) -> ApplicationResult:
        log.info("[%s] applying: %s @ %s", self.kind.value, job.title, job.company.name)
        self.cover_letter = generate_cover_letter(self.profile.cover_letter_template, self.profile, job)
        navigate(self.page, job.application_url, timeout_ms=self.settings.navigation_timeout_ms)
        submitted = self.run(job)
        success = bool(submitted) and self.is_confirmed()
        if success:
            log.info("[%s] ✓ confirmation found for %s", self.kind.value, job.id)
            error = None
        elif not submitted:
            log.warning("[%s] ✗ never submitted %s (steps done: %s)",
                        self.kind.value, job.id, ", ".join(self.completed) or "none")
            error = f"No {self.kind.value} submit control found"
        else:
            log.warning("[%s] ✗ no confirmation for %s (steps done: %s)",
                        self.kind.value, job.id, ", ".join(self.completed) or "none")
            error = f"No {self.kind.value} confirmation after submission"
        return ApplicationResult(
            job_id=job.id,
            success=success,
            company=job.company.name,
            title=job.title,
            application_url=job.application_url,
            error=error,
        )

    # -- step plumbing ------------------------------------------------------

    def step(self, name: str, fn: Callable[[], None]) -> bool:
        """Run one sub-step; failures are logged and reported as False."""
        try:
            fn()
        except Exception as exc:
            log.warning("[%s] step %r failed: %s", self.kind.value, name, str(exc).split("\n")[0][:150])
            return False
        self.completed.append(name)
        return True

    def run_steps(self, steps: Iterable[Step]) -> None:
        """Single pass over the steps, each only if its section is on the page."""
        for s in steps:
            if present(self.page, s.probe):
                self.step(s.name, s.fill)
            else:
                log.debug("[%s] %s section absent, skipping", self.kind.value, s.name)

    def walk(
        self,
        steps: Iterable[Step],
        *,
        next_selectors: Iterable[str],
        submit_selectors: Iterable[str],
    ) -> bool:
        """Multi-page flow: fill what is present, then submit or advance, at most max_steps pages.

        Returns True once a submit control was clicked, or a confirmation shows
        up after advancing past the first page.
        """
        steps = tuple(steps)
        next_selectors, submit_selectors = tuple(next_selectors), tuple(submit_selectors)
        done: set[str] = set()
        for page_no in range(1, self.max_steps + 1):
            for s in steps:
                if s.name in done and not s.repeat:
                    continue
                if not present(self.page, s.probe):
                    continue
                if self.step(s.name, s.fill):
                    done.add(s.name)
            if page_no > 1 and self.is_confirmed():
                return True
            if click_first_visible(self.page, submit_selectors):
                log.debug("[%s] submitted on page %d", self.kind.value, page_no)
                self.settle()
                return True
            if not click_first_visible(self.page, next_selectors):
                log.info("[%s] no next/submit control on page %d, stopping", self.kind.value, page_no)
                return False
            self.settle()
        log.warning("[%s] gave up after %d pages without reaching submit", self.kind.value, self.max_steps)
        return False

    def settle(self, ms: int = SETTLE_MS) -> None:
        try:
            self.page.wait_for_load_state("domcontentloaded", timeout=self.settings.navigation_timeout_ms)
        except Exception as exc:
            log.debug("[%s] load state wait ended: %s", self.kind.value, exc)
        self.page.wait_for_timeout(ms)

    def submit(self, selectors: Iterable[str]) -> bool:
        if click_first_visible(self.page, selectors):
            self.settle()
            return True
        log.info("[%s] submit control not found", self.kind.value)
        return False

    def is_confirmed(self) -> bool:
        if present(self.page, self.confirmation_selectors):
            return True
        if not self.confirmation_phrases:
            return False
        try:
            content = self.page.content().lower()
        except Exception:
            return False
        return any(p in content for p in self.confirmation_phrases)

    def sign_in(
        self,
        *,
        email_selectors: Iterable[str],
        password_selectors: Iterable[str],
        submit_selectors: Iterable[str],
    ) -> None:
        """Fill a login form with the portal credentials; raises if they are missing."""
        if not self.profile.email or not self.profile.password:
            raise RuntimeError(f"{self.kind.value} credentials have no email/password")
        fill_first(self.page, email_selectors, self.profile.email)
        fill_first(self.page, password_selectors, self.profile.password)
        if click_first_visible(self.page, submit_selectors):
            self.settle(2000)
