"""Encrypted per-user, per-portal credential storage.

Every string field of a secret bag is encrypted on its own with AES-256
(GCM mode, fresh 128-bit IV per value) and stored as ``iv_hex:ciphertext_hex``.
Non-string fields are stored as-is. The key is 32 bytes, supplied as 64 hex
characters through ``CREDENTIAL_ENCRYPTION_KEY`` or passed in directly.
"""
from __future__ import annotations

import copy
import fcntl
import json
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from autoapply.config import get_env
from autoapply.errors import ConfigurationError, DecryptionError, ValidationError
from autoapply.log import get_logger

log = get_logger(__name__)

KEY_BYTES = 32
IV_BYTES = 16
SEPARATOR = ":"

PORTALS: tuple[str, ...] = (
    "linkedin", "indeed", "glassdoor", "workday", "greenhouse", "lever", "other",
)

SecretBag = dict[str, Any]


class SecretStore(Protocol):
    def upsert(self, user_id: str, portal: str, bag: SecretBag) -> None: ...

    def fetch(self, user_id: str, portal: str) -> SecretBag | None: ...

    def remove(self, user_id: str, portal: str) -> bool: ...

    def portals(self, user_id: str) -> list[str]: ...


class InMemorySecretStore:
    """Process-local store. One record per (user, portal); upserts hold a lock."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], SecretBag] = {}
        self._lock = threading.Lock()

    def upsert(self, user_id: str, portal: str, bag: SecretBag) -> None:
        with self._lock:
            self._records[(user_id, portal)] = copy.deepcopy(bag)

    def fetch(self, user_id: str, portal: str) -> SecretBag | None:
        with self._lock:
            bag = self._records.get((user_id, portal))
            return copy.deepcopy(bag) if bag is not None else None

    def remove(self, user_id: str, portal: str) -> bool:
        with self._lock:
            return self._records.pop((user_id, portal), None) is not None

    def portals(self, user_id: str) -> list[str]:
        with self._lock:
            return [p for (u, p) in self._records if u == user_id]

    def __len__(self) -> int:
        return len(self._records)


class JsonFileSecretStore:
    """JSON file keyed by user then portal, guarded by an advisory file lock.

    Read-modify-write happens under an exclusive lock and the file is replaced
    atomically, so concurrent upserts for the same pair never lose an update.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock_path = self.path.with_suffix(self.path.suffix + ".lock")
        self._thread_lock = threading.Lock()

    def _locked(self, exclusive: bool = True):
        return _FileLock(self._lock_path, self._thread_lock, exclusive)

    def _read(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        return json.loads(text) if text.strip() else {}

    def _write(self, data: dict[str, dict[str, Any]]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def upsert(self, user_id: str, portal: str, bag: SecretBag) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._locked():
            data = self._read()
            portals = data.setdefault(user_id, {})
            existing = portals.get(portal)
            portals[portal] = {
                "credentials": bag,
                "created_at": existing["created_at"] if existing else now,
                "updated_at": now,
            }
            self._write(data)

    def fetch(self, user_id: str, portal: str) -> SecretBag | None:
        with self._locked(exclusive=False):
            record = self._read().get(user_id, {}).get(portal)
        return record["credentials"] if record else None

    def remove(self, user_id: str, portal: str) -> bool:
        with self._locked():
            data = self._read()
            portals = data.get(user_id, {})
            if portal not in portals:
                return False
            del portals[portal]
            if not portals:
                data.pop(user_id, None)
            self._write(data)
            return True

    def portals(self, user_id: str) -> list[str]:
        with self._locked(exclusive=False):
            return list(self._read().get(user_id, {}))


class _FileLock:
    def __init__(self, path: Path, thread_lock: threading.Lock, exclusive: bool) -> None:
        self.path = path
        self.thread_lock = thread_lock
        self.exclusive = exclusive
        self._fh = None

    def __enter__(self) -> "_FileLock":
        self.thread_lock.acquire()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(self.path, "a+")
            fcntl.flock(self._fh.fileno(), fcntl.LOCK_EX if self.exclusive else fcntl.LOCK_SH)
        except BaseException:
            if self._fh is not None:
                self._fh.close()
            self.thread_lock.release()
            raise
        return self

    def __exit__(self, *exc: object) -> None:
        try:
            fcntl.flock(self._fh.fileno(), fcntl.LOCK_UN)
            self._fh.close()
        finally:
            self.thread_lock.release()


def _parse_key(key: str | bytes | None) -> bytes:
    if key is None or key == "" or key == b"":
        raise ConfigurationError("CREDENTIAL_ENCRYPTION_KEY is not set")
    if isinstance(key, str):
        try:
            raw = bytes.fromhex(key.strip())
        except ValueError:
            raise ConfigurationError("Encryption key must be 64 hex characters (32 bytes)") from None
    else:
        raw = bytes(key)
    if len(raw) != KEY_BYTES:
        raise ConfigurationError(
            f"Encryption key must be {KEY_BYTES} bytes, got {len(raw)}"
        )
    return raw


class CredentialVault:
    def __init__(self, key: str | bytes | None = None, store: SecretStore | None = None) -> None:
        if key is None:
            key = get_env("CREDENTIAL_ENCRYPTION_KEY")
        self._cipher = AESGCM(_parse_key(key))
        self._store: SecretStore = store if store is not None else InMemorySecretStore()

    # -- field cipher -------------------------------------------------------

    def encrypt(self, value: str) -> str:
        iv = os.urandom(IV_BYTES)
        ciphertext = self._cipher.encrypt(iv, value.encode("utf-8"), None)
        return f"{iv.hex()}{SEPARATOR}{ciphertext.hex()}"

    def decrypt(self, token: str) -> str:
        iv_hex, sep, ct_hex = token.partition(SEPARATOR)
        if not sep or SEPARATOR in ct_hex:
            raise DecryptionError("Invalid encrypted data format")
        try:
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ct_hex)
        except ValueError:
            raise DecryptionError("Invalid encrypted data format") from None
        if len(iv) != IV_BYTES:
            raise DecryptionError("Invalid initialization vector")
        try:
            return self._cipher.decrypt(iv, ciphertext, None).decode("utf-8")
        except InvalidTag:
            raise DecryptionError("Ciphertext failed authentication") from None

    # -- public API ---------------------------------------------------------

    def store(self, user_id: str, portal: str, secrets: SecretBag) -> None:
        _validate(user_id, portal)
        if not isinstance(secrets, dict) or not secrets:
            raise ValidationError("Credentials must be a non-empty mapping")
        encrypted: SecretBag = {}
        for name, value in secrets.items():
            if not isinstance(name, str) or not name:
                raise ValidationError("Credential field names must be non-empty strings")
            encrypted[name] = self.encrypt(value) if isinstance(value, str) else value
        self._store.upsert(user_id, portal, encrypted)
        log.info("Stored %d credential field(s) for user=%s portal=%s", len(encrypted), user_id, portal)

    def get(self, user_id: str, portal: str) -> SecretBag | None:
        _validate(user_id, portal)
        stored = self._store.fetch(user_id, portal)
        if stored is None:
            return None
        decrypted: SecretBag = {}
        for name, value in stored.items():
            if isinstance(value, str) and SEPARATOR in value:
                decrypted[name] = self.decrypt(value)
            else:
                decrypted[name] = value
        return decrypted

    def has(self, user_id: str, portal: str) -> bool:
        _validate(user_id, portal)
        return self._store.fetch(user_id, portal) is not None

    def delete(self, user_id: str, portal: str) -> bool:
        _validate(user_id, portal)
        removed = self._store.remove(user_id, portal)
        if removed:
            log.info("Deleted credentials for user=%s portal=%s", user_id, portal)
        return removed

    def list_portals(self, user_id: str) -> list[str]:
        if not user_id:
            raise ValidationError("user_id is required")
        return self._store.portals(user_id)


def _validate(user_id: str, portal: str) -> None:
    if not user_id:
        raise ValidationError("user_id is required")
    if portal not in PORTALS:
        raise ValidationError(f"Unknown portal {portal!r}; expected one of {', '.join(PORTALS)}")
