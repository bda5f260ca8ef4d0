"""Exception types raised by autoapply."""
from __future__ import annotations


class AutoApplyError(Exception):
    """Base class for all autoapply errors."""


class ConfigurationError(AutoApplyError):
    """Bad or missing configuration; raised before any work is served."""


class NotFoundError(AutoApplyError):
    """A job, user or credential bag does not exist."""


class ValidationError(AutoApplyError):
    """Malformed search query or credential payload."""


class TransientNavigationError(AutoApplyError):
    """Timeout or missing element while driving a remote page."""


class UnclassifiedPortalError(AutoApplyError):
    """No portal rule matched a URL.

    The classifier falls back to the generic portal instead of raising this.
    """


class DecryptionError(AutoApplyError):
    """Stored ciphertext is malformed or has been tampered with."""
