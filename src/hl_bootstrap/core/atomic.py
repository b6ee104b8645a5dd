# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Stage-then-rename file installation.

Files owned by hl-bootstrap (the visor binary, its ETag, the gossip and visor
configuration) are written to a temporary file in the destination directory
and renamed over the final path, so readers never observe a partial write.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)


class StagedFile:
    """A temporary file next to its final destination.

    Use as a context manager; the staged file is removed on exit unless
    :meth:`persist` moved it into place.

    Example:
        with StagedFile(install_dir, prefix=".hl-visor.") as staged:
            staged.path.write_bytes(data)
            staged.persist(install_dir / "hl-visor", mode=0o755)
    """

    def __init__(self, directory: str | os.PathLike[str], prefix: str = ".staged."):
        self.directory = Path(directory)
        fd, name = tempfile.mkstemp(dir=self.directory, prefix=prefix, suffix=".tmp")
        os.close(fd)
        self.path = Path(name)
        self.persisted = False

    def __enter__(self) -> StagedFile:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if not self.persisted:
            self.discard()

    def persist(self, target: str | os.PathLike[str], mode: int | None = None) -> Path:
        """Flush the staged file to disk and atomically rename it to ``target``.

        Args:
            target: Final path; must be on the same filesystem as the staging directory
            mode: Optional permission bits applied before the rename

        Returns:
            The final path.
        """
        target = Path(target)
        if mode is not None:
            os.chmod(self.path, mode)
        with open(self.path, "rb+") as fh:
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(self.path, target)
        self.persisted = True
        logger.debug(f"Installed {target}")
        return target

    def discard(self) -> None:
        """Remove the staged file if it still exists."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


def atomic_write_text(path: str | os.PathLike[str], text: str, mode: int | None = None) -> Path:
    """Write ``text`` to ``path`` via a staged file and an atomic rename."""
    path = Path(path)
    with StagedFile(path.parent, prefix=f".{path.name}.") as staged:
        staged.path.write_text(text, encoding="utf-8")
        return staged.persist(path, mode=mode)
