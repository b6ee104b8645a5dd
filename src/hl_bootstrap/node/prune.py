# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Data directory pruning worker.

hl-node writes hourly data files (trades, fills, replica commands, ...) under
sub-directories of its working directory and never deletes them. The worker
removes files older than a retention age from those sub-directories. Files
directly in the data directory are bootstrap artifacts (gossip config,
visor.json) and are never touched.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from ..core.durations import format_duration
from ..core.exceptions import ArtifactIOError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PruneResult:
    """Result from one pruning sweep."""

    removed_files: int = 0
    removed_directories: int = 0
    freed_bytes: int = 0
    errors: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"removed {self.removed_files} files, {self.removed_directories} directories, "
            f"freed {self.freed_bytes} bytes, {len(self.errors)} errors"
        )


def prune_directory(directory: str | Path, older_than: float, now: float | None = None) -> PruneResult:
    """Delete stale files below the sub-directories of ``directory``.

    Args:
        directory: Data directory; its own top-level files are kept
        older_than: Minimum age in seconds of files to delete
        now: Reference time (defaults to the current time)

    Returns:
        PruneResult with counts; per-entry failures are collected, not raised
    """
    directory = Path(directory)
    now = time.time() if now is None else now
    cutoff = now - older_than
    result = PruneResult()

    for child in sorted(directory.iterdir()):
        if not child.is_dir() or child.is_symlink():
            continue
        for root, dirs, files in os.walk(child, topdown=False):
            root_path = Path(root)
            for name in files:
                path = root_path / name
                try:
                    st = path.lstat()
                    if st.st_mtime >= cutoff:
                        continue
                    path.unlink()
                except FileNotFoundError:
                    continue
                except OSError as e:
                    result.errors.append(f"{path}: {e}")
                    logger.warning(f"Failed to prune {path}: {e}")
                    continue
                result.removed_files += 1
                result.freed_bytes += st.st_size

            for name in dirs:
                path = root_path / name
                if path.is_symlink():
                    continue
                try:
                    path.rmdir()
                except OSError:
                    # Not empty (or already gone)
                    continue
                result.removed_directories += 1

    return result


def _resolve(future: asyncio.Future, result: object, error: BaseException | None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


async def run_in_daemon_thread(func: Callable[..., T], *args: object) -> T:
    """Run ``func(*args)`` on a daemon thread and await its result.

    Unlike ``asyncio.to_thread`` the thread is not joined when the event loop
    shuts down, so a sweep still in progress never delays process exit.
    Cancelling the await abandons the thread.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def run() -> None:
        result: object = None
        error: BaseException | None = None
        try:
            result = func(*args)
        except BaseException as e:  # noqa: BLE001 - handed to the awaiting task
            error = e
        # A closed loop means the awaiting task is gone along with it
        with contextlib.suppress(RuntimeError):
            loop.call_soon_threadsafe(_resolve, future, result, error)

    threading.Thread(target=run, name="prune-sweep", daemon=True).start()
    return await future


async def prune_worker(directory: str | Path, interval: float, older_than: float) -> None:
    """Prune ``directory`` every ``interval`` seconds until cancelled.

    A failed sweep is logged and the worker keeps ticking.

    Raises:
        ArtifactIOError: If ``directory`` is not a directory at start
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ArtifactIOError(f"data directory {directory} does not exist", path=str(directory))

    logger.info(
        f"Pruning data older than {format_duration(older_than)} in {directory} "
        f"every {format_duration(interval)}"
    )

    while True:
        try:
            result = await run_in_daemon_thread(prune_directory, directory, older_than)
        except OSError as e:
            logger.error(f"Pruning sweep of {directory} failed: {e}")
        else:
            if result.removed_files or result.errors:
                logger.info(f"Pruned {directory}: {result}")
            else:
                logger.debug(f"Nothing to prune in {directory}")
        await asyncio.sleep(interval)
