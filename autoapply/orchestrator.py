"""
Application orchestrator.

Resolves a job to its portal, loads the user's credentials and profile, runs
the adapter and records the outcome. Batches run strictly one job at a time
with a pause after every job, on a background thread, and publish their
progress through a BatchStore that pollers read via BatchTracker.
"""
from __future__ import annotations

import math
import random
import threading
import uuid
from datetime import datetime, timezone
from functools import partial
from typing import Callable, Iterable, Protocol

from autoapply.config import Settings, load_settings
from autoapply.errors import NotFoundError, ValidationError
from autoapply.log import get_logger
from autoapply.models import ApplicantProfile, ApplicationResult, BatchState, BatchStatus, JobListing
from autoapply.portals import apply_to_job, classify_portal
from autoapply.profile import build_profile
from autoapply.stores import ApplicationStore, BatchStore, InMemoryBatchStore, JobStore, UserStore
from autoapply.vault import CredentialVault

log = get_logger(__name__)

ApplyFn = Callable[[ApplicantProfile, JobListing], ApplicationResult]


class DelayPolicy(Protocol):
    def next_delay(self) -> float: ...


class FixedDelay:
    def __init__(self, seconds: float) -> None:
        self.seconds = max(0.0, float(seconds))

    def next_delay(self) -> float:
        return self.seconds


class JitteredDelay:
    """Base delay plus or minus a uniform jitter, never below zero."""

    def __init__(self, base: float, jitter: float, rng: random.Random | None = None) -> None:
        self.base = float(base)
        self.jitter = abs(float(jitter))
        self._rng = rng or random.Random()

    def next_delay(self) -> float:
        return max(0.0, self.base + self._rng.uniform(-self.jitter, self.jitter))


def progress_percent(done: int, total: int) -> int:
    """Integer percentage, rounding halves up (1 of 8 -> 13)."""
    if total <= 0:
        return 100
    return int(math.floor(100 * done / total + 0.5))


class Orchestrator:
    def __init__(
        self,
        vault: CredentialVault,
        users: UserStore,
        jobs: JobStore,
        *,
        applications: ApplicationStore | None = None,
        batches: BatchStore | None = None,
        apply_fn: ApplyFn | None = None,
        delay: DelayPolicy | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.vault = vault
        self.users = users
        self.jobs = jobs
        self.applications = applications
        self.batches: BatchStore = batches if batches is not None else InMemoryBatchStore()
        self.apply_fn: ApplyFn = apply_fn or partial(apply_to_job, settings=self.settings)
        self.delay: DelayPolicy = delay or FixedDelay(self.settings.batch_delay_seconds)
        self._cancel: dict[str, threading.Event] = {}
        self._threads: dict[str, threading.Thread] = {}

    # -- single job ---------------------------------------------------------

    def _job(self, job_id: str) -> JobListing:
        job = self.jobs.get_job(job_id)
        if job is None:
            raise NotFoundError(f"Job {job_id} not found")
        return job

    def _profile(self, user_id: str, job: JobListing) -> ApplicantProfile:
        user = self.users.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        portal = classify_portal(job.application_url).credential_portal
        credentials = self.vault.get(user_id, portal)
        if credentials is None:
            raise NotFoundError(f"No {portal} credentials stored for user {user_id}")
        return build_profile(user, credentials)

    def _record(self, user_id: str, result: ApplicationResult) -> None:
        if self.applications is None:
            return
        try:
            self.applications.record(user_id, result)
        except OSError as exc:
            log.error("Could not record application %s: %s", result.job_id, exc)

    def apply_single(self, user_id: str, job_id: str) -> ApplicationResult:
        """Apply to one job.

        Raises NotFoundError when the job, the user or the portal credentials
        are missing; everything after that comes back inside the result.
        """
        job = self._job(job_id)
        profile = self._profile(user_id, job)
        result = self.apply_fn(profile, job)
        self._record(user_id, result)
        return result

    def _attempt(self, user_id: str, job_id: str) -> ApplicationResult:
        try:
            return self.apply_single(user_id, job_id)
        except Exception as exc:
            log.error("Error applying to job %s: %s", job_id, exc)
            result = ApplicationResult.failed(job_id, str(exc) or type(exc).__name__)
            self._record(user_id, result)
            return result

    # -- batches ------------------------------------------------------------

    def apply_batch(self, user_id: str, job_ids: Iterable[str], *, background: bool = True) -> str:
        """Create a batch and start it; returns the batch id immediately when backgrounded."""
        job_ids = [str(j) for j in job_ids]
        if not job_ids:
            raise ValidationError("A batch needs at least one job id")
        state = BatchState(batch_id=uuid.uuid4().hex, user_id=user_id, job_ids=job_ids)
        cancel = threading.Event()
        self._cancel[state.batch_id] = cancel
        self.batches.put(state)
        log.info("Batch %s: %d job(s) for user %s", state.batch_id, len(job_ids), user_id)

        if background:
            thread = threading.Thread(
                target=self.run_batch, args=(state, cancel),
                name=f"batch-{state.batch_id[:8]}", daemon=True,
            )
            self._threads[state.batch_id] = thread
            thread.start()
        else:
            self.run_batch(state, cancel)
        return state.batch_id

    def run_batch(self, state: BatchState, cancel: threading.Event | None = None) -> BatchState:
        """Work through the batch; the stored state always ends in a terminal status."""
        cancel = cancel or threading.Event()
        total = len(state.job_ids)
        try:
            for i, job_id in enumerate(state.job_ids, 1):
                if cancel.is_set():
                    break
                result = self._attempt(state.user_id, job_id)
                state.results.append(result)
                state.progress = progress_percent(i, total)
                self.batches.put(state)
                log.info("Batch %s: %d/%d %s %s", state.batch_id, i, total, "✓" if result.success else "✗", job_id)
                pause = self.delay.next_delay()
                if pause > 0 and cancel.wait(pause):
                    log.debug("Batch %s: pause interrupted by cancel", state.batch_id)
        except Exception as exc:
            log.exception("Batch %s aborted", state.batch_id)
            state.error = str(exc).split("\n")[0][:200] or type(exc).__name__
        finally:
            if state.error:
                state.status = BatchStatus.FAILED
            elif cancel.is_set() and len(state.results) < total:
                state.status = BatchStatus.CANCELLED
            else:
                state.status = BatchStatus.COMPLETED
            state.end_time = datetime.now(timezone.utc)
            try:
                self.batches.put(state)
            except Exception as exc:
                log.error("Batch %s: could not store final state: %s", state.batch_id, exc)
            self._cancel.pop(state.batch_id, None)
            self._threads.pop(state.batch_id, None)
        log.info("Batch %s %s: %d/%d succeeded", state.batch_id, state.status.value,
                 sum(r.success for r in state.results), total)
        return state

    def cancel_batch(self, batch_id: str) -> bool:
        """Stop a running batch after the job in flight; False if it is not running."""
        event = self._cancel.get(batch_id)
        if event is None:
            return False
        event.set()
        log.info("Batch %s: cancel requested", batch_id)
        return True

    def wait(self, batch_id: str, timeout: float | None = None) -> bool:
        """Join a background batch thread; True once it has finished."""
        thread = self._threads.get(batch_id)
        if thread is None:
            return True
        thread.join(timeout)
        if thread.is_alive():
            return False
        self._threads.pop(batch_id, None)
        return True


class BatchTracker:
    """Read-only view of batch progress for pollers."""

    def __init__(self, store: BatchStore) -> None:
        self.store = store

    def get(self, batch_id: str) -> BatchState | None:
        return self.store.get(batch_id)
