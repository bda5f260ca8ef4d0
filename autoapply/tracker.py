"""Append-only application records (CSV) with file locking."""
from __future__ import annotations

import csv
import fcntl
from pathlib import Path

from autoapply.log import get_logger
from autoapply.models import ApplicationResult

log = get_logger(__name__)

HEADERS: list[str] = [
    "user_id", "job_id", "title", "company", "url", "applied_at", "status", "error",
]


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class CsvApplicationStore:
    """Every attempt becomes one row; status is ``applied`` or ``failed``."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def ensure(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            with open(self.path, "w", newline="", encoding="utf-8") as f:
                _lock(f)
                csv.writer(f).writerow(HEADERS)
                _unlock(f)
            log.info("Created application tracker → %s", self.path.name)

    def record(self, user_id: str, result: ApplicationResult) -> None:
        self.ensure()
        row = {
            "user_id": user_id,
            "job_id": result.job_id,
            "title": result.title,
            "company": result.company,
            "url": result.application_url,
            "applied_at": result.timestamp.strftime("%Y-%m-%d %H:%M"),
            "status": "applied" if result.success else "failed",
            "error": result.error or "",
        }
        with open(self.path, "a", newline="", encoding="utf-8") as f:
            _lock(f)
            csv.DictWriter(f, fieldnames=HEADERS).writerow(row)
            _unlock(f)
        log.debug("Tracked: %s @ %s [%s]", result.title, result.company, row["status"])

    def rows(self) -> list[dict[str, str]]:
        self.ensure()
        with open(self.path, "r", encoding="utf-8") as f:
            _lock(f, exclusive=False)
            rows = list(csv.DictReader(f))
            _unlock(f)
        return rows

    def applied_job_ids(self, user_id: str) -> set[str]:
        return {r["job_id"] for r in self.rows() if r.get("user_id") == user_id and r.get("status") == "applied"}
