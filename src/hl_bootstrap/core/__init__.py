# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""hl-bootstrap core - settings, errors, logging and file primitives."""

from .atomic import StagedFile, atomic_write_text
from .durations import format_duration, parse_duration
from .exceptions import (
    ArtifactIOError,
    BootstrapException,
    ConfigurationError,
    ProcessLaunchError,
    SourceError,
    ThresholdError,
    VerificationError,
)
from .logging import (
    configure_logging,
    get_run_id,
    run_context,
)

__all__ = [
    # Files
    "StagedFile",
    "atomic_write_text",
    # Durations
    "format_duration",
    "parse_duration",
    # Exceptions
    "ArtifactIOError",
    "BootstrapException",
    "ConfigurationError",
    "ProcessLaunchError",
    "SourceError",
    "ThresholdError",
    "VerificationError",
    # Logging
    "configure_logging",
    "get_run_id",
    "run_context",
]
