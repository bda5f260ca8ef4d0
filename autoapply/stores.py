"""Collaborator stores: users, jobs, application records and batch state.

The orchestrator only depends on the small protocols below. In-memory
implementations back tests and embedding; the file-backed ones back the CLI.
"""
from __future__ import annotations

import copy
import json
import os
import threading
from pathlib import Path
from typing import Any, Iterable, Protocol

import yaml

from autoapply.log import get_logger
from autoapply.models import ApplicationResult, BatchState, JobListing

log = get_logger(__name__)


class UserStore(Protocol):
    def get_user(self, user_id: str) -> dict[str, Any] | None: ...


class JobStore(Protocol):
    def get_job(self, job_id: str) -> JobListing | None: ...


class ApplicationStore(Protocol):
    def record(self, user_id: str, result: ApplicationResult) -> None: ...


class BatchStore(Protocol):
    def get(self, batch_id: str) -> BatchState | None: ...

    def put(self, state: BatchState) -> None: ...


class InMemoryUserStore:
    def __init__(self, users: dict[str, dict[str, Any]] | None = None) -> None:
        self._users = dict(users or {})

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user is not None else None

    def upsert_user(self, user_id: str, user: dict[str, Any]) -> None:
        self._users[user_id] = copy.deepcopy(user)


class YamlUserStore:
    """Users keyed by id in a YAML mapping (config/users.yaml)."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return data if isinstance(data, dict) else {}

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        user = self._load().get(user_id)
        return user if isinstance(user, dict) else None


class InMemoryJobStore:
    def __init__(self, jobs: Iterable[JobListing] = ()) -> None:
        self._jobs: dict[str, JobListing] = {}
        self.add(jobs)

    def add(self, jobs: Iterable[JobListing]) -> None:
        for job in jobs:
            self._jobs[job.id] = job

    def get_job(self, job_id: str) -> JobListing | None:
        return self._jobs.get(job_id)


class JsonJobStore:
    """Last search results, saved so later commands can refer to jobs by id."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def save(self, jobs: Iterable[JobListing]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump([j.to_dict() for j in jobs], f, indent=2)
        os.replace(tmp, self.path)

    def all(self) -> list[JobListing]:
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            return [JobListing.from_dict(d) for d in json.load(f)]

    def get_job(self, job_id: str) -> JobListing | None:
        for job in self.all():
            if job.id == job_id:
                return job
        return None


class InMemoryApplicationStore:
    def __init__(self) -> None:
        self.records: list[tuple[str, ApplicationResult]] = []
        self._lock = threading.Lock()

    def record(self, user_id: str, result: ApplicationResult) -> None:
        with self._lock:
            self.records.append((user_id, result))


class InMemoryBatchStore:
    """Batch states live for the process lifetime; pollers get copies."""

    def __init__(self) -> None:
        self._states: dict[str, BatchState] = {}
        self._lock = threading.Lock()

    def get(self, batch_id: str) -> BatchState | None:
        with self._lock:
            state = self._states.get(batch_id)
            return copy.deepcopy(state) if state is not None else None

    def put(self, state: BatchState) -> None:
        with self._lock:
            self._states[state.batch_id] = copy.deepcopy(state)
        log.debug("Batch %s: %s %d%%", state.batch_id, state.status.value, state.progress)
