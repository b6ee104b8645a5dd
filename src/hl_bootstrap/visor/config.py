# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""visor.json - the chain selection hl-visor reads on startup."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from ..core.atomic import atomic_write_text
from ..core.exceptions import ArtifactIOError, ConfigurationError
from ..network.chain import Chain

logger = logging.getLogger(__name__)

DEFAULT_VISOR_CONFIG_PATH = Path.home() / "visor.json"


class VisorConfig(BaseModel):
    """hl-visor configuration; only the chain matters here."""

    model_config = ConfigDict(extra="allow")

    chain: Chain


def read_visor_config(path: str | Path | None = None) -> VisorConfig:
    """Read visor.json.

    Args:
        path: Location of visor.json (defaults to ~/visor.json)

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid.
    """
    path = Path(path) if path is not None else DEFAULT_VISOR_CONFIG_PATH
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"no network specified and hl-visor configuration not found at {path}",
            setting="network",
        ) from e
    except OSError as e:
        raise ConfigurationError(f"failed to read hl-visor configuration {path}: {e}", setting="visor_config_path") from e

    try:
        return VisorConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationError(f"invalid hl-visor configuration {path}: {e}", setting="visor_config_path") from e


def write_visor_config(path: str | Path, chain: Chain) -> Path:
    """Atomically write visor.json for ``chain``.

    Raises:
        ArtifactIOError: If the file cannot be written.
    """
    path = Path(path)
    try:
        written = atomic_write_text(path, VisorConfig(chain=chain).model_dump_json(), mode=0o644)
    except OSError as e:
        raise ArtifactIOError(f"failed to write hl-visor config: {e}", path=str(path)) from e
    logger.debug(f"Wrote hl-visor config for {chain} to {path}")
    return written
