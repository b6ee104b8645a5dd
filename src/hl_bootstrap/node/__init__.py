# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""
hl-bootstrap node - preparation pipeline and hl-visor supervision.
"""

from hl_bootstrap.node.freshness import Freshness, check_config_freshness, config_age
from hl_bootstrap.node.prepare import (
    IPV6_SYSCTL_KEY,
    BootstrapStage,
    PreparationResult,
    acquire_gossip_config,
    check_ipv6_advisory,
    prepare_node,
    resolve_chain,
)
from hl_bootstrap.node.prune import PruneResult, prune_directory, prune_worker
from hl_bootstrap.node.supervisor import (
    VISOR_COMMAND,
    OsProcessLauncher,
    ProcessLauncher,
    exit_status,
    run_node,
    supervise_node,
)

__all__ = [
    # Freshness
    "Freshness",
    "check_config_freshness",
    "config_age",
    # Preparation
    "IPV6_SYSCTL_KEY",
    "BootstrapStage",
    "PreparationResult",
    "acquire_gossip_config",
    "check_ipv6_advisory",
    "prepare_node",
    "resolve_chain",
    # Pruning
    "PruneResult",
    "prune_directory",
    "prune_worker",
    # Supervision
    "VISOR_COMMAND",
    "OsProcessLauncher",
    "ProcessLauncher",
    "exit_status",
    "run_node",
    "supervise_node",
]
