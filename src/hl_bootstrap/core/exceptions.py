# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Custom exception hierarchy for hl-bootstrap.

Every fatal condition of a bootstrap run maps to one of these types. None of
them are retried; the CLI logs the error and exits non-zero before any child
process is started.
"""

from __future__ import annotations


class BootstrapException(Exception):  # noqa: N818 - mirrors the other top-level names
    """Base exception for all hl-bootstrap errors.

    All hl-bootstrap specific exceptions should inherit from this class.
    """

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(BootstrapException):
    """Exception for missing or contradictory settings.

    Raised when:
    - No chain is configured and no visor configuration can be read
    - A setting value cannot be parsed (duration, chain, address list)
    """

    def __init__(self, message: str, setting: str | None = None):
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)
        self.setting = setting


class SourceError(BootstrapException):
    """Exception for remote sources (seed peers, binaries).

    Raised when:
    - The source is unreachable or answers with a non-success status
    - The response body cannot be parsed
    - A mainnet seed source returns no peers
    - The binary location does not expose an ETag
    """

    def __init__(self, message: str, source: str | None = None):
        details = {}
        if source:
            details["source"] = source
        super().__init__(message, details)
        self.source = source


class VerificationError(BootstrapException):
    """Exception for a failed detached-signature check.

    The installed binary is never replaced when this is raised.
    """

    def __init__(self, message: str, returncode: int | None = None, output: str = ""):
        details: dict = {}
        if returncode is not None:
            details["returncode"] = returncode
        if output:
            details["output"] = output
        super().__init__(message, details)
        self.returncode = returncode
        self.output = output


class ArtifactIOError(BootstrapException):
    """Exception for filesystem failures on owned artifacts.

    "Not found" cases that the pipeline expects (first run, no stored ETag)
    are handled in place and never raised as this type.
    """

    def __init__(self, message: str, path: str | None = None):
        details = {}
        if path:
            details["path"] = path
        super().__init__(message, details)
        self.path = path


class ThresholdError(BootstrapException):
    """Exception raised when no seed peer passed the latency threshold."""

    def __init__(self, message: str, threshold: str | None = None):
        details = {}
        if threshold:
            details["threshold"] = threshold
        super().__init__(message, details)
        self.threshold = threshold


class ProcessLaunchError(BootstrapException):
    """Exception for failures to exec or spawn the supervised process."""

    def __init__(self, message: str, command: list[str] | None = None):
        details = {}
        if command:
            details["command"] = command
        super().__init__(message, details)
        self.command = command or []
