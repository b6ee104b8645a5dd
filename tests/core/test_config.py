"""Tests for hl_bootstrap.core.config module."""

from __future__ import annotations

from ipaddress import IPv4Address
from pathlib import Path

import pytest

from hl_bootstrap.core.config import (
    BootstrapSettings,
    clear_config_cache,
    get_config,
    load_settings,
    set_config,
)
from hl_bootstrap.core.exceptions import ConfigurationError
from hl_bootstrap.network.chain import Chain

# ============================================================================
# Defaults
# ============================================================================


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self):
        settings = BootstrapSettings()

        assert settings.network is None
        assert settings.visor_config_path == Path.home() / "visor.json"
        assert settings.write_visor_config is False
        assert settings.override_gossip_config_path == Path("./override_gossip_config.json")
        assert settings.override_gossip_config_max_age == 900.0
        assert settings.seed_peers_amount == 5
        assert settings.seed_peers_max_latency == pytest.approx(0.08)
        assert settings.ignored_seed_peers == set()
        assert settings.seed_peers_source == "api"
        assert settings.visor_binary_directory == Path(".")
        assert settings.ignore_ipv6_enabled is False
        assert settings.http_timeout is None
        assert settings.prune_data_interval is None
        assert settings.prune_data_older_than == 14400.0
        assert settings.log_level == "INFO"

    def test_max_latency_display(self):
        assert BootstrapSettings().seed_peers_max_latency_display == "80ms"


# ============================================================================
# Environment
# ============================================================================


class TestEnvironment:
    """Tests for HL_BOOTSTRAP_* environment variables."""

    def test_network_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("HL_BOOTSTRAP_NETWORK", "testnet")
        assert BootstrapSettings().network is Chain.TESTNET

    def test_durations(self, monkeypatch):
        monkeypatch.setenv("HL_BOOTSTRAP_OVERRIDE_GOSSIP_CONFIG_MAX_AGE", "30m")
        monkeypatch.setenv("HL_BOOTSTRAP_SEED_PEERS_MAX_LATENCY", "120ms")
        monkeypatch.setenv("HL_BOOTSTRAP_PRUNE_DATA_INTERVAL", "1h")

        settings = BootstrapSettings()

        assert settings.override_gossip_config_max_age == 1800.0
        assert settings.seed_peers_max_latency == pytest.approx(0.12)
        assert settings.prune_data_interval == 3600.0

    def test_ignored_peers(self, monkeypatch):
        monkeypatch.setenv("HL_BOOTSTRAP_SEED_PEERS_IGNORED", "1.2.3.4, 5.6.7.8,")
        assert BootstrapSettings().ignored_seed_peers == {IPv4Address("1.2.3.4"), IPv4Address("5.6.7.8")}

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("HL_BOOTSTRAP_SEED_PEERS_AMOUNT=9\n")
        assert BootstrapSettings().seed_peers_amount == 9

    def test_empty_interval_is_unset(self, monkeypatch):
        monkeypatch.setenv("HL_BOOTSTRAP_PRUNE_DATA_INTERVAL", "")
        assert BootstrapSettings().prune_data_interval is None


# ============================================================================
# load_settings
# ============================================================================


class TestLoadSettings:
    """Tests for load_settings."""

    def test_overrides_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("HL_BOOTSTRAP_SEED_PEERS_AMOUNT", "3")
        assert load_settings(seed_peers_amount=7).seed_peers_amount == 7

    def test_none_overrides_ignored(self, monkeypatch):
        monkeypatch.setenv("HL_BOOTSTRAP_SEED_PEERS_AMOUNT", "3")
        assert load_settings(seed_peers_amount=None).seed_peers_amount == 3

    def test_unsupported_network(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(network="Devnet")
        assert "unsupported chain" in exc_info.value.message

    @pytest.mark.parametrize(
        "overrides",
        [
            {"seed_peers_max_latency": "soon"},
            {"seed_peers_ignored": "1.2.3.4,not-an-ip"},
            {"seed_peers_source": "carrier-pigeon"},
            {"seed_peers_amount": -1},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigurationError):
            load_settings(**overrides)

    def test_source_method_normalized(self):
        assert load_settings(seed_peers_source=" Document ").seed_peers_source == "document"


# ============================================================================
# Global Instance
# ============================================================================


class TestGlobalConfig:
    """Tests for get_config / set_config."""

    def test_get_config_cached(self):
        assert get_config() is get_config()

    def test_set_config(self):
        custom = load_settings(seed_peers_amount=11)
        set_config(custom)
        assert get_config() is custom

    def test_clear_cache(self):
        first = get_config()
        clear_config_cache()
        assert get_config() is not first
