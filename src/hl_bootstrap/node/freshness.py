# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Freshness gate for override_gossip_config.json.

A recently written gossip configuration means the seed peers were picked a
short while ago (typically a container restart loop), so fetching and probing
them again is skipped.
"""

from __future__ import annotations

import logging
import os
import stat
import time
from enum import Enum
from pathlib import Path

from ..core.durations import format_duration

logger = logging.getLogger(__name__)


class Freshness(Enum):
    FRESH = "fresh"
    STALE = "stale"


def config_age(path: str | Path, now: float | None = None) -> float | None:
    """Seconds since ``path`` was last modified, or None if it is not a readable regular file.

    A modification time in the future counts as age zero.
    """
    path = Path(path)
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning(f"Failed to stat gossip config {path}: {e}")
        return None

    if not stat.S_ISREG(st.st_mode):
        logger.warning(f"Gossip config {path} is not a regular file")
        return None

    now = time.time() if now is None else now
    return max(0.0, now - st.st_mtime)


def check_config_freshness(path: str | Path, max_age: float, now: float | None = None) -> Freshness:
    """Return FRESH if ``path`` was modified at most ``max_age`` seconds ago, STALE otherwise."""
    age = config_age(path, now)
    if age is None:
        logger.debug(f"Gossip config {path} not present, treating as stale")
        return Freshness.STALE

    logger.debug(
        f"Gossip config {path} last modified {format_duration(age)} ago (max age {format_duration(max_age)})"
    )
    if age <= max_age:
        return Freshness.FRESH
    return Freshness.STALE
