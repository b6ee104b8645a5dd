# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""override_gossip_config.json model.

hl-node reads this file to find its root peers. The node may add keys this
package does not know about; those are carried through reads and writes
untouched.

Wire format::

    {
        "root_node_ips": [{"Ip": "1.2.3.4"}],
        "try_new_peers": true,
        "chain": "Mainnet",
        "n_gossip_peers": 12
    }
"""

from __future__ import annotations

import json
import logging
from ipaddress import IPv4Address
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from ..core.atomic import atomic_write_text
from ..core.exceptions import ArtifactIOError
from .chain import Chain

logger = logging.getLogger(__name__)

# hl-node accepts n_gossip_peers in [1, 100]; the default is 8.
DEFAULT_GOSSIP_PEERS = 8
MAX_GOSSIP_PEERS = 100


def _require_address_text(value: Any) -> Any:
    # Lax IPv4Address validation would also accept integers and bytes
    if not isinstance(value, (str, IPv4Address)):
        raise ValueError(f"expected an IPv4 address string, got {type(value).__name__}")
    return value


IPv4AddressText = Annotated[IPv4Address, BeforeValidator(_require_address_text)]


class NodeIp(BaseModel):
    """One root peer entry."""

    model_config = ConfigDict(populate_by_name=True)

    ip: IPv4AddressText = Field(alias="Ip")


class GossipConfig(BaseModel):
    """Gossip configuration consumed by hl-node.

    Unknown top-level keys are kept in ``model_extra`` and written back
    unchanged by :meth:`to_json_dict`.
    """

    # No populate_by_name: a key spelled like a field name (root_peers) is an
    # unknown key and must pass through, not be consumed
    model_config = ConfigDict(extra="allow")

    root_peers: list[NodeIp] = Field(default_factory=list, alias="root_node_ips")
    try_new_peers: bool = False
    chain: Chain
    gossip_peer_count: int | None = Field(default=None, alias="n_gossip_peers", ge=0, le=65535)

    @classmethod
    def new(cls, chain: Chain) -> GossipConfig:
        """A fresh configuration with no peers that lets the node try new peers."""
        return cls(chain=chain, try_new_peers=True)

    @property
    def unrecognized_fields(self) -> dict[str, Any]:
        """Keys present on input that this model does not describe."""
        return dict(self.model_extra or {})

    @property
    def peer_addresses(self) -> list[IPv4Address]:
        return [node.ip for node in self.root_peers]

    def set_peers(self, addresses: list[IPv4Address]) -> None:
        """Replace the root peers and derive n_gossip_peers from their count.

        With more than the node's default of 8 peers, n_gossip_peers is raised
        to the peer count (capped at 100); otherwise it is left unset.
        """
        self.root_peers = [NodeIp(ip=address) for address in addresses]
        count = len(self.root_peers)
        if count > DEFAULT_GOSSIP_PEERS:
            self.gossip_peer_count = min(count, MAX_GOSSIP_PEERS)
        else:
            self.gossip_peer_count = None

    def with_unrecognized_fields(self, fields: dict[str, Any]) -> GossipConfig:
        """Return a copy carrying ``fields`` as passthrough keys."""
        known = {"root_node_ips", "try_new_peers", "chain", "n_gossip_peers"}
        data = self.to_json_dict()
        for key, value in fields.items():
            if key not in known:
                data[key] = value
        return GossipConfig.model_validate(data)

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk JSON shape."""
        data = self.model_dump(mode="json", by_alias=True)
        if data.get("n_gossip_peers") is None:
            data.pop("n_gossip_peers", None)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_json_dict(), separators=(",", ":"))


def read_gossip_config(path: str | Path) -> GossipConfig | None:
    """Read an existing gossip configuration.

    Returns:
        The parsed configuration, or None if the file does not exist.

    Raises:
        ArtifactIOError: If the file exists but cannot be read or parsed.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        raise ArtifactIOError(f"failed to read gossip config: {e}", path=str(path)) from e

    try:
        return GossipConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ArtifactIOError(f"failed to parse gossip config: {e}", path=str(path)) from e


def write_gossip_config(path: str | Path, config: GossipConfig) -> Path:
    """Atomically replace ``path`` with ``config``.

    Raises:
        ArtifactIOError: If the file cannot be written.
    """
    path = Path(path)
    try:
        written = atomic_write_text(path, config.to_json(), mode=0o644)
    except OSError as e:
        raise ArtifactIOError(f"failed to write new configuration: {e}", path=str(path)) from e
    logger.debug(f"Wrote gossip config with {len(config.root_peers)} peers to {path}")
    return written
