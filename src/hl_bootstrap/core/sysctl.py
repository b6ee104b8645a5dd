# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Kernel parameter reads via /proc/sys."""

from __future__ import annotations

from pathlib import Path

PROC_SYS = Path("/proc/sys")


def read_sysctl(key: str, root: Path = PROC_SYS) -> str:
    """Return the value of a sysctl key such as ``net.ipv6.conf.all.disable_ipv6``.

    Raises:
        OSError: If the key does not exist or cannot be read.
    """
    return (root / key.replace(".", "/")).read_text().strip()
