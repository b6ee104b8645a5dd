# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""hl-visor supervision.

Without a pruning interval hl-bootstrap execs into hl-visor and disappears.
With one, hl-visor runs as a child next to the pruning worker and its exit
status becomes ours. The worker is never awaited or cancelled; it ends with
the process.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn, Protocol, runtime_checkable

from ..core.config import BootstrapSettings
from ..core.exceptions import ArtifactIOError, ProcessLaunchError
from .prepare import BootstrapStage
from .prune import prune_worker

logger = logging.getLogger(__name__)

VISOR_COMMAND = "hl-visor"

_background_tasks: set[asyncio.Task] = set()


@runtime_checkable
class ProcessLauncher(Protocol):
    """Starts the supervised process."""

    def replace(self, name: str, args: Sequence[str]) -> NoReturn:
        """Replace the current process image; never returns on success."""
        ...

    async def spawn(self, name: str, args: Sequence[str]) -> int:
        """Run ``name`` as a child and return its exit status."""
        ...


def exit_status(returncode: int) -> int:
    """Shell-style exit status: signal deaths become 128 + signal number."""
    if returncode < 0:
        return 128 - returncode
    return returncode


class OsProcessLauncher:
    """Launches processes found on PATH."""

    def replace(self, name: str, args: Sequence[str]) -> NoReturn:
        command = [name, *args]
        # exec does not run atexit hooks; push out buffered log records first
        for handler in logging.getLogger().handlers:
            handler.flush()
        try:
            os.execvp(name, command)
        except OSError as e:
            raise ProcessLaunchError(f"failed to exec {name}: {e}", command=command) from e

    async def spawn(self, name: str, args: Sequence[str]) -> int:
        command = [name, *args]
        try:
            proc = await asyncio.create_subprocess_exec(*command)
        except OSError as e:
            raise ProcessLaunchError(f"failed to spawn child: {e}", command=command) from e

        logger.debug(f"Spawned {name} (pid {proc.pid})")
        returncode = await proc.wait()
        logger.info(f"{name} exited with status {returncode}")
        return exit_status(returncode)


async def _run_prune_worker(directory: Path, interval: float, older_than: float) -> None:
    try:
        await prune_worker(directory, interval, older_than)
    except ArtifactIOError as e:
        logger.error(f"Failed to start pruning task: {e.message}")
    except Exception:
        logger.exception("Pruning task failed")


async def supervise_node(
    args: Sequence[str],
    launcher: ProcessLauncher,
    data_directory: Path,
    prune_interval: float,
    prune_older_than: float,
) -> int:
    """Spawn hl-visor next to the pruning worker and wait for hl-visor to exit.

    Returns:
        hl-visor's exit status
    """
    prune_task = asyncio.create_task(
        _run_prune_worker(data_directory, prune_interval, prune_older_than),
        name="prune-worker",
    )
    # The event loop only keeps weak references to tasks
    _background_tasks.add(prune_task)
    prune_task.add_done_callback(_background_tasks.discard)

    return await launcher.spawn(VISOR_COMMAND, args)


def run_node(
    settings: BootstrapSettings,
    args: Sequence[str],
    launcher: ProcessLauncher | None = None,
    data_directory: Path | None = None,
) -> int:
    """Hand control to hl-visor.

    Returns:
        hl-visor's exit status when it ran as a child. When exec'ing, this
        function does not return.

    Raises:
        ProcessLaunchError: If hl-visor cannot be started
        ArtifactIOError: If the working directory cannot be determined
    """
    launcher = launcher or OsProcessLauncher()
    args = list(args)
    logger.info(f"Setup done, executing hl-visor {' '.join(args)}")

    if settings.prune_data_interval is None:
        logger.debug(f"Entering stage {BootstrapStage.EXEC_REPLACE.value}")
        launcher.replace(VISOR_COMMAND, args)
        raise ProcessLaunchError(f"exec of {VISOR_COMMAND} returned", command=[VISOR_COMMAND, *args])

    logger.debug(f"Entering stage {BootstrapStage.SPAWN_AND_SUPERVISE.value}")
    if data_directory is None:
        try:
            data_directory = Path.cwd()
        except OSError as e:
            raise ArtifactIOError(f"failed to get current working directory: {e}") from e

    return asyncio.run(
        supervise_node(
            args,
            launcher,
            data_directory,
            settings.prune_data_interval,
            settings.prune_data_older_than,
        )
    )
