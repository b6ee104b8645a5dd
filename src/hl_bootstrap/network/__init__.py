# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""
hl-bootstrap network - chains, seed peers and latency ranking.

This package decides which root peers end up in override_gossip_config.json.
"""

from hl_bootstrap.network.chain import Chain
from hl_bootstrap.network.gossip_config import (
    GossipConfig,
    NodeIp,
    read_gossip_config,
    write_gossip_config,
)
from hl_bootstrap.network.latency import (
    GOSSIP_PORT,
    MAX_CONCURRENT_PROBES,
    LatencyMeasurement,
    LatencyProber,
    LatencyReport,
    RankedPeer,
    rank_peers,
)
from hl_bootstrap.network.seed_sources import (
    MainnetApiSource,
    MainnetDocumentSource,
    PeerSource,
    SeedPeer,
    SeedSourceMethod,
    TestnetPeersSource,
    fetch_seed_peers,
    get_seed_source,
    parse_seed_document,
)

__all__ = [
    # Chain
    "Chain",
    # Gossip configuration
    "GossipConfig",
    "NodeIp",
    "read_gossip_config",
    "write_gossip_config",
    # Seed sources
    "SeedPeer",
    "SeedSourceMethod",
    "PeerSource",
    "MainnetApiSource",
    "MainnetDocumentSource",
    "TestnetPeersSource",
    "fetch_seed_peers",
    "get_seed_source",
    "parse_seed_document",
    # Latency
    "GOSSIP_PORT",
    "MAX_CONCURRENT_PROBES",
    "LatencyMeasurement",
    "LatencyProber",
    "LatencyReport",
    "RankedPeer",
    "rank_peers",
]
