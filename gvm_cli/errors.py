"""
Exception hierarchy for gvm.

Every error is terminal for the current invocation: the CLI prints the
message (and the remediation, when there is one) and exits non-zero.
"""

from __future__ import annotations


class GvmError(Exception):
    """
    Base exception for gvm errors.

    Attributes:
        message: Human-readable error message
        remediation: Suggested fix for the error
    """
    def __init__(self, message: str, remediation: str | None = None):
        self.message = message
        self.remediation = remediation
        super().__init__(message)


class NetworkError(GvmError):
    """Raised when an HTTP request fails."""
    pass


class InvalidVersionError(GvmError):
    """Raised when no release archive exists for the requested version."""
    pass


class NotFoundError(GvmError):
    """Raised when the remote catalog has no versions to offer."""
    pass


class NotInstalledError(GvmError):
    """Raised when an operation targets a version that is not installed."""
    pass


class CorruptInstallError(GvmError):
    """Raised when a version directory still carries the install lock marker."""
    pass


class ActiveVersionError(GvmError):
    """Raised when removing the currently active version."""
    pass


class ArchiveError(GvmError):
    """Raised when a downloaded archive cannot be extracted."""
    pass


class ConfigurationError(GvmError):
    """Raised when the environment or configuration is unusable."""
    pass


class UserAbort(GvmError):
    """Raised when the user declines a prompt (or cannot be prompted)."""
    pass
