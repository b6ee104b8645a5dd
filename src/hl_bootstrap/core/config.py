# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Core configuration - centralized settings for hl-bootstrap.

All environment-based configuration flows through this module. CLI flags are
applied on top by passing them as keyword overrides.

Usage:
    from hl_bootstrap.core.config import get_config
    config = get_config()

    max_age = config.override_gossip_config_max_age  # seconds
    ignored = config.ignored_seed_peers               # set[IPv4Address]
"""

from __future__ import annotations

from ipaddress import IPv4Address
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..network.chain import Chain
from .durations import format_duration, parse_duration
from .exceptions import ConfigurationError

SEED_SOURCE_METHODS = ("api", "document")


class BootstrapSettings(BaseSettings):
    """Settings for one hl-bootstrap run.

    Settings can be configured via HL_BOOTSTRAP_* environment variables or
    an optional .env file. Durations are stored as seconds.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # CHAIN SELECTION
    # ==========================================================================

    network: Chain | None = Field(
        default=None,
        description="Chain to set up configuration for (Mainnet or Testnet)",
        validation_alias="HL_BOOTSTRAP_NETWORK",
    )
    visor_config_path: Path = Field(
        default_factory=lambda: Path.home() / "visor.json",
        description="visor.json path, used to determine the network when none is given",
        validation_alias="HL_BOOTSTRAP_VISOR_CONFIG_PATH",
    )
    write_visor_config: bool = Field(
        default=False,
        description="Write visor.json for hl-visor when the network is given explicitly",
        validation_alias="HL_BOOTSTRAP_WRITE_VISOR_CONFIG",
    )

    # ==========================================================================
    # GOSSIP CONFIGURATION
    # ==========================================================================

    override_gossip_config_path: Path = Field(
        default=Path("./override_gossip_config.json"),
        description="override_gossip_config.json path",
        validation_alias="HL_BOOTSTRAP_OVERRIDE_GOSSIP_CONFIG_PATH",
    )
    override_gossip_config_max_age: float = Field(
        default=15 * 60.0,
        description="Max age of override_gossip_config.json before seed peers are fetched again",
        validation_alias="HL_BOOTSTRAP_OVERRIDE_GOSSIP_CONFIG_MAX_AGE",
    )

    # ==========================================================================
    # SEED PEER SETTINGS
    # ==========================================================================

    seed_peers_amount: int = Field(
        default=5,
        ge=0,
        description="How many seed peers to keep in the configuration",
        validation_alias="HL_BOOTSTRAP_SEED_PEERS_AMOUNT",
    )
    seed_peers_max_latency: float = Field(
        default=0.080,
        description="Maximum latency of seed peers to consider (80ms keeps peers on the same continent)",
        validation_alias="HL_BOOTSTRAP_SEED_PEERS_MAX_LATENCY",
    )
    seed_peers_ignored: str | None = Field(
        default=None,
        description="Comma-separated list of seed peer IPs to ignore",
        validation_alias="HL_BOOTSTRAP_SEED_PEERS_IGNORED",
    )
    seed_peers_source: str = Field(
        default="api",
        description="Seed peer retrieval method: 'api' or 'document'",
        validation_alias="HL_BOOTSTRAP_SEED_PEERS_SOURCE",
    )

    # ==========================================================================
    # NODE & BINARY SETTINGS
    # ==========================================================================

    visor_binary_directory: Path = Field(
        default=Path("."),
        description="Directory hl-visor is installed into",
        validation_alias="HL_BOOTSTRAP_VISOR_BINARY_DIRECTORY",
    )
    ignore_ipv6_enabled: bool = Field(
        default=False,
        description="Skip the net.ipv6.conf.all.disable_ipv6 advisory (IPv6 breaks hl-node)",
        validation_alias="HL_BOOTSTRAP_IGNORE_IPV6_ENABLED",
    )
    http_timeout: float | None = Field(
        default=None,
        description="Total timeout for each HTTP request (unset means no timeout)",
        validation_alias="HL_BOOTSTRAP_HTTP_TIMEOUT",
    )

    # ==========================================================================
    # PRUNING SETTINGS
    # ==========================================================================

    prune_data_interval: float | None = Field(
        default=None,
        description="Run the data pruning worker at this interval next to a spawned hl-visor",
        validation_alias="HL_BOOTSTRAP_PRUNE_DATA_INTERVAL",
    )
    prune_data_older_than: float = Field(
        default=4 * 3600.0,
        description="Prune data older than this",
        validation_alias="HL_BOOTSTRAP_PRUNE_DATA_OLDER_THAN",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="HL_BOOTSTRAP_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="HL_BOOTSTRAP_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="HL_BOOTSTRAP_LOG_FILE",
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator(
        "override_gossip_config_max_age",
        "seed_peers_max_latency",
        "prune_data_older_than",
        mode="before",
    )
    @classmethod
    def _parse_duration(cls, value: Any) -> float:
        return parse_duration(value)

    @field_validator("prune_data_interval", "http_timeout", mode="before")
    @classmethod
    def _parse_optional_duration(cls, value: Any) -> float | None:
        if value is None or value == "":
            return None
        return parse_duration(value)

    @field_validator("network", mode="before")
    @classmethod
    def _parse_network(cls, value: Any) -> Chain | None:
        if value is None or value == "":
            return None
        if isinstance(value, Chain):
            return value
        return Chain.parse(str(value))

    @field_validator("seed_peers_ignored")
    @classmethod
    def _check_ignored(cls, value: str | None) -> str | None:
        if value:
            _parse_address_list(value)
        return value

    @field_validator("seed_peers_source")
    @classmethod
    def _check_source(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in SEED_SOURCE_METHODS:
            raise ValueError(f"seed peer source must be one of {', '.join(SEED_SOURCE_METHODS)}")
        return value

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def ignored_seed_peers(self) -> set[IPv4Address]:
        """Ignored seed peer addresses as a set."""
        if not self.seed_peers_ignored:
            return set()
        return set(_parse_address_list(self.seed_peers_ignored))

    @property
    def seed_peers_max_latency_display(self) -> str:
        """The latency threshold as the operator would write it."""
        return format_duration(self.seed_peers_max_latency)


def _parse_address_list(value: str) -> list[IPv4Address]:
    addresses = []
    for item in value.split(","):
        item = item.strip()
        if item:
            addresses.append(IPv4Address(item))
    return addresses


def load_settings(**overrides: Any) -> BootstrapSettings:
    """Build settings from the environment plus explicit overrides.

    Overrides with a value of None are ignored so unset CLI flags fall back
    to the environment.

    Raises:
        ConfigurationError: If any setting is invalid.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return BootstrapSettings(**values)
    except ValidationError as e:
        first = e.errors()[0]
        setting = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigurationError(f"invalid configuration: {first.get('msg')}", setting=setting or None) from e


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: BootstrapSettings | None = None


def get_config() -> BootstrapSettings:
    """Get the global configuration instance.

    Returns:
        The singleton BootstrapSettings instance.
    """
    global _config
    if _config is None:
        _config = load_settings()
    return _config


def set_config(config: BootstrapSettings) -> None:
    """Set the global configuration (called by the CLI after parsing flags)."""
    global _config
    _config = config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
