# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""hl-bootstrap - launch preparation for Hyperliquid nodes.

hl-bootstrap runs in front of ``hl-visor`` and makes sure the node starts from
a known-good state:

  Freshness gate (is override_gossip_config.json recent enough?)
    → Seed peer source (per-chain, per-method strategy)
    → Latency prober (TCP connect time, bounded concurrency)
    → override_gossip_config.json (atomic write)
  Visor provisioner (ETag check → download → gpg verify → atomic install)
  Supervisor (exec into hl-visor, or spawn it next to the pruning worker)

CLI entry point: ``hl-bootstrap``
"""

__version__ = "0.3.0"

from . import (
    core as core,
)
