# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Detached signature verification for downloaded binaries.

The trusted Hyperliquid public key lives in the gpg keyring of the user
running hl-bootstrap; this module only runs the check.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of one signature check."""

    ok: bool
    returncode: int
    output: str = ""


@runtime_checkable
class SignatureVerifier(Protocol):
    """Checks ``data`` against its detached ``signature``."""

    async def verify(self, signature: Path, data: Path) -> VerificationResult: ...


class GpgVerifier:
    """Runs ``gpg --verify <signature> <data>``."""

    def __init__(self, executable: str = "gpg"):
        self.executable = executable

    async def verify(self, signature: Path, data: Path) -> VerificationResult:
        """Verify the signature; a missing gpg executable is a failed check."""
        command = [self.executable, "--verify", str(signature), str(data)]
        logger.debug(f"Running {' '.join(command)}")
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            return VerificationResult(ok=False, returncode=127, output=f"{self.executable}: command not found")

        stdout, stderr = await proc.communicate()
        output = (stderr or b"").decode("utf-8", errors="replace")
        if stdout:
            output = stdout.decode("utf-8", errors="replace") + output
        returncode = proc.returncode if proc.returncode is not None else -1
        return VerificationResult(ok=returncode == 0, returncode=returncode, output=output)
