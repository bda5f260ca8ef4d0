"""Load runtime settings from .env and config/settings.yaml."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from autoapply.log import get_logger

log = get_logger(__name__)

load_dotenv()

PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = PROJECT_ROOT / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
DATA_DIR: Path = PROJECT_ROOT / "data"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class Settings:
    encryption_key: str = ""
    headless: bool = True
    navigation_timeout_ms: int = 30_000
    element_timeout_ms: int = 3_000
    batch_delay_seconds: float = 5.0
    user_agent: str = DEFAULT_USER_AGENT
    secrets_path: Path = DATA_DIR / "credentials.json"
    applications_csv: Path = DATA_DIR / "applications.csv"
    jobs_path: Path = DATA_DIR / "jobs.json"
    users_path: Path = CONFIG_DIR / "users.yaml"


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        log.warning("Ignoring %s: expected a mapping, got %s", path.name, type(data).__name__)
        return {}
    return data


def load_settings(path: Path | None = None) -> Settings:
    """Build Settings from YAML file values, overridden by environment variables."""
    raw = _load_yaml(path or SETTINGS_PATH)
    settings = Settings()

    for key, value in raw.items():
        if not hasattr(settings, key):
            log.warning("Unknown setting %r in settings file", key)
            continue
        setattr(settings, key, value)

    env_map = {
        "CREDENTIAL_ENCRYPTION_KEY": "encryption_key",
        "RUN_HEADLESS": "headless",
        "NAVIGATION_TIMEOUT_MS": "navigation_timeout_ms",
        "ELEMENT_TIMEOUT_MS": "element_timeout_ms",
        "BATCH_DELAY_SECONDS": "batch_delay_seconds",
        "BROWSER_USER_AGENT": "user_agent",
        "SECRETS_PATH": "secrets_path",
        "APPLICATIONS_CSV": "applications_csv",
        "JOBS_PATH": "jobs_path",
        "USERS_PATH": "users_path",
    }
    for env_key, attr in env_map.items():
        value = get_env(env_key)
        if value:
            setattr(settings, attr, value)

    return _coerce(settings)


def _coerce(settings: Settings) -> Settings:
    if isinstance(settings.headless, str):
        settings.headless = settings.headless.lower() in _TRUTHY
    settings.navigation_timeout_ms = int(settings.navigation_timeout_ms)
    settings.element_timeout_ms = int(settings.element_timeout_ms)
    settings.batch_delay_seconds = float(settings.batch_delay_seconds)
    settings.encryption_key = str(settings.encryption_key or "").strip()
    for attr in ("secrets_path", "applications_csv", "jobs_path", "users_path"):
        path = Path(getattr(settings, attr))
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        setattr(settings, attr, path)
    return settings


def ensure_dirs() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
