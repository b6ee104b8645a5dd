#!/usr/bin/env python3
"""
hl-bootstrap - prepare a Hyperliquid node and start hl-visor.

Usage:
  hl-bootstrap [options]                  Prepare configuration and hl-visor, then exit
  hl-bootstrap [options] -- <visor args>  Prepare, then run hl-visor with <visor args>

Every option can also be set with an HL_BOOTSTRAP_* environment variable.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from ..core.config import SEED_SOURCE_METHODS, load_settings, set_config
from ..core.exceptions import BootstrapException
from ..core.logging import configure_logging, run_context
from ..node.prepare import prepare_node
from ..node.supervisor import run_node

logger = logging.getLogger(__name__)

# Flags that map one-to-one onto BootstrapSettings fields
SETTINGS_FLAGS = (
    "network",
    "visor_config_path",
    "write_visor_config",
    "override_gossip_config_path",
    "override_gossip_config_max_age",
    "seed_peers_amount",
    "seed_peers_max_latency",
    "seed_peers_ignored",
    "seed_peers_source",
    "visor_binary_directory",
    "ignore_ipv6_enabled",
    "http_timeout",
    "prune_data_interval",
    "prune_data_older_than",
    "log_level",
    "log_format",
    "log_file",
)


def app() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog='hl-bootstrap',
        description='Prepare a Hyperliquid node and start hl-visor',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hl-bootstrap --network Mainnet                     Write gossip config, install hl-visor
  hl-bootstrap -- run-non-validator                  Prepare, then exec hl-visor
  hl-bootstrap --prune-data-interval 1h -- run-non-validator
                                                     Run hl-visor as a child and prune data hourly

Durations accept ms, s, m, h and d units (e.g. 80ms, 15m, 1h30m).
        """
    )

    # Unset flags stay None so the environment (and defaults) apply
    chain = parser.add_argument_group('chain')
    chain.add_argument('--network', help='Chain to set up configuration for (Mainnet or Testnet)')
    chain.add_argument('--visor-config-path', help='visor.json path, used to determine the network to use')
    chain.add_argument('--write-visor-config', action='store_true', default=None,
                       help='Write visor.json when --network is given')

    gossip = parser.add_argument_group('gossip configuration')
    gossip.add_argument('--override-gossip-config-path', help='override_gossip_config.json path')
    gossip.add_argument('--override-gossip-config-max-age',
                        help='Max age of override_gossip_config.json before new peers are set up (default: 15m)')

    seeds = parser.add_argument_group('seed peers')
    seeds.add_argument('--seed-peers-amount', type=int, help='How many seed peers to keep (default: 5)')
    seeds.add_argument('--seed-peers-max-latency',
                       help='Maximum latency of seed peers to consider (default: 80ms)')
    seeds.add_argument('--seed-peers-ignored', help='Comma-separated seed peer IPs to ignore')
    seeds.add_argument('--seed-peers-source', choices=SEED_SOURCE_METHODS,
                       help='Mainnet seed peer retrieval method (default: api)')

    node = parser.add_argument_group('node')
    node.add_argument('--visor-binary-directory', help='Directory hl-visor is installed into (default: .)')
    node.add_argument('--ignore-ipv6-enabled', action='store_true', default=None,
                      help='Do not warn when net.ipv6.conf.all.disable_ipv6 is 0')
    node.add_argument('--http-timeout', help='Timeout for each HTTP request (default: none)')
    node.add_argument('--prune-data-interval',
                      help='Run hl-visor as a child and prune its data directory at this interval')
    node.add_argument('--prune-data-older-than', help='Prune data older than this (default: 4h)')

    logs = parser.add_argument_group('logging')
    logs.add_argument('--log-level', help='Log level (DEBUG, INFO, WARNING, ERROR)')
    logs.add_argument('--log-format', choices=['json', 'text'], help='Log format (default: auto-detect)')
    logs.add_argument('--log-file', help='Also write logs to this file')

    parser.add_argument('args', nargs='*', help='Arguments for hl-visor (after --)')

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = app()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(**{name: getattr(args, name) for name in SETTINGS_FLAGS})
    except BootstrapException as e:
        print(f"hl-bootstrap: {e.message}", file=sys.stderr)
        return 2

    set_config(settings)
    configure_logging(settings.log_level, log_file=settings.log_file)

    with run_context() as run_id:
        logger.debug(f"Starting run {run_id}")
        try:
            asyncio.run(prepare_node(settings))

            if not args.args:
                logger.info("Setup done")
                return 0

            return run_node(settings, args.args)
        except BootstrapException as e:
            logger.error(f"{type(e).__name__}: {e.message}", extra={"extra_data": e.to_dict()})
            return 1


if __name__ == '__main__':
    sys.exit(main())
