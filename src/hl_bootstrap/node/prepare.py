# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Bootstrap orchestrator - everything that happens before hl-visor starts.

Stages, in order:

    CHECK_IPV6_ADVISORY  warn if IPv6 is enabled (hl-node misbehaves with it)
    RESOLVE_CHAIN        settings, else visor.json
    CHECK_FRESHNESS      recent override_gossip_config.json?
      SKIP               yes: keep the existing configuration
      ACQUIRE            no: seed source -> latency ranking -> config write
    PROVISION            make sure a verified hl-visor is installed

Every failure is fatal for the run and surfaces as a BootstrapException.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from ..core.config import BootstrapSettings
from ..core.exceptions import ArtifactIOError, ThresholdError
from ..core.sysctl import read_sysctl
from ..network.chain import Chain
from ..network.gossip_config import GossipConfig, read_gossip_config, write_gossip_config
from ..network.latency import LatencyProber, LatencyReport
from ..network.seed_sources import SeedSourceMethod, fetch_seed_peers
from ..visor.config import read_visor_config, write_visor_config
from ..visor.download import VisorProvisioner
from .freshness import Freshness, check_config_freshness

logger = logging.getLogger(__name__)

IPV6_SYSCTL_KEY = "net.ipv6.conf.all.disable_ipv6"


class BootstrapStage(Enum):
    CHECK_IPV6_ADVISORY = "check_ipv6_advisory"
    RESOLVE_CHAIN = "resolve_chain"
    CHECK_FRESHNESS = "check_freshness"
    SKIP = "skip"
    ACQUIRE = "acquire"
    PROVISION = "provision"
    EXEC_REPLACE = "exec_replace"
    SPAWN_AND_SUPERVISE = "spawn_and_supervise"


@dataclass
class PreparationResult:
    """What one preparation run did."""

    chain: Chain
    freshness: Freshness
    config: GossipConfig | None = None  # None when acquisition was skipped
    report: LatencyReport | None = None  # None when no candidates were probed
    visor_updated: bool = False
    stages: list[BootstrapStage] = field(default_factory=list)


def _enter(result_stages: list[BootstrapStage], stage: BootstrapStage) -> None:
    result_stages.append(stage)
    logger.debug(f"Entering stage {stage.value}")


def check_ipv6_advisory(settings: BootstrapSettings, reader: Callable[[str], str] = read_sysctl) -> bool:
    """Warn when IPv6 appears to be enabled.

    Returns:
        True if the warning was emitted. Never raises.
    """
    if settings.ignore_ipv6_enabled:
        return False
    try:
        value = reader(IPV6_SYSCTL_KEY)
    except OSError as e:
        logger.debug(f"Could not read {IPV6_SYSCTL_KEY}: {e}")
        return False
    if value == "0":
        logger.warning(f"IPv6 appears to be enabled ({IPV6_SYSCTL_KEY}={value}), node might not start up properly")
        return True
    return False


def resolve_chain(settings: BootstrapSettings) -> Chain:
    """Chain from settings, falling back to visor.json.

    Raises:
        ConfigurationError: If neither is available.
    """
    if settings.network is not None:
        logger.debug(f"Network {settings.network} specified via settings")
        if settings.write_visor_config:
            write_visor_config(settings.visor_config_path, settings.network)
        return settings.network

    logger.debug(f"No network specified, reading hl-visor configuration {settings.visor_config_path}")
    config = read_visor_config(settings.visor_config_path)
    logger.debug(f"Read hl-visor configuration, network {config.chain}")
    return config.chain


def _base_gossip_config(settings: BootstrapSettings, chain: Chain) -> GossipConfig:
    """A fresh configuration that keeps unknown keys of the existing file."""
    config = GossipConfig.new(chain)
    try:
        existing = read_gossip_config(settings.override_gossip_config_path)
    except ArtifactIOError as e:
        logger.warning(f"Ignoring existing gossip config: {e.message}")
        return config

    if existing is not None and existing.unrecognized_fields:
        config = config.with_unrecognized_fields(existing.unrecognized_fields)
    return config


async def acquire_gossip_config(
    settings: BootstrapSettings,
    chain: Chain,
    prober: LatencyProber | None = None,
    source_method: SeedSourceMethod | None = None,
) -> tuple[GossipConfig, LatencyReport | None]:
    """Fetch, rank and persist seed peers.

    Raises:
        SourceError: If the seed source fails
        ThresholdError: If candidates existed but none answered within the latency threshold
        ArtifactIOError: If the configuration cannot be written
    """
    prober = prober or LatencyProber()
    method = source_method or SeedSourceMethod(settings.seed_peers_source)
    ignored = settings.ignored_seed_peers

    config = _base_gossip_config(settings, chain)

    logger.info(f"Fetching {chain} seed nodes (ignored: {sorted(str(ip) for ip in ignored)})")
    seeds = await fetch_seed_peers(chain, ignored, method=method, request_timeout=settings.http_timeout)
    logger.info(f"Got {len(seeds)} {chain} seed nodes")

    report = None
    if seeds:
        report = await prober.rank(seeds, settings.seed_peers_amount, settings.seed_peers_max_latency)
        if not report.successful:
            raise ThresholdError(
                "no seed nodes passed latency threshold, try increasing threshold "
                f"(current: {settings.seed_peers_max_latency_display})",
                threshold=settings.seed_peers_max_latency_display,
            )
        config.set_peers([ranked.peer.address for ranked in report.best])
    else:
        config.set_peers([])

    write_gossip_config(settings.override_gossip_config_path, config)
    logger.info(
        f"Wrote {settings.override_gossip_config_path} with {len(config.root_peers)} root peers"
        + (f" (n_gossip_peers={config.gossip_peer_count})" if config.gossip_peer_count else "")
    )
    return config, report


async def prepare_node(
    settings: BootstrapSettings,
    *,
    prober: LatencyProber | None = None,
    provisioner: VisorProvisioner | None = None,
    source_method: SeedSourceMethod | None = None,
    sysctl_reader: Callable[[str], str] = read_sysctl,
    now: float | None = None,
) -> PreparationResult:
    """Run every preparation stage.

    Args:
        settings: Run settings
        prober: Latency prober (defaults to real TCP probes on the gossip port)
        provisioner: hl-visor provisioner (defaults to HTTPS download + gpg)
        source_method: Seed source method override (defaults to the setting)
        sysctl_reader: Reads one sysctl value
        now: Reference time for the freshness gate

    Returns:
        PreparationResult describing the run

    Raises:
        BootstrapException: On any fatal condition
    """
    stages: list[BootstrapStage] = []

    _enter(stages, BootstrapStage.CHECK_IPV6_ADVISORY)
    check_ipv6_advisory(settings, sysctl_reader)

    _enter(stages, BootstrapStage.RESOLVE_CHAIN)
    chain = resolve_chain(settings)
    logger.info(f"Preparing hl-node configuration for {chain}")

    _enter(stages, BootstrapStage.CHECK_FRESHNESS)
    freshness = check_config_freshness(
        settings.override_gossip_config_path,
        settings.override_gossip_config_max_age,
        now=now,
    )
    result = PreparationResult(chain=chain, freshness=freshness, stages=stages)

    if freshness is Freshness.FRESH:
        _enter(stages, BootstrapStage.SKIP)
        logger.info(
            f"Gossip config {settings.override_gossip_config_path} modified recently, not updating seed peers"
        )
    else:
        _enter(stages, BootstrapStage.ACQUIRE)
        result.config, result.report = await acquire_gossip_config(
            settings, chain, prober=prober, source_method=source_method
        )

    _enter(stages, BootstrapStage.PROVISION)
    provisioner = provisioner or VisorProvisioner(request_timeout=settings.http_timeout)
    result.visor_updated = await provisioner.ensure_current(settings.visor_binary_directory, chain)

    return result
