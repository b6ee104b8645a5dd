"""Global test fixtures for the hl-bootstrap test suite."""

from __future__ import annotations

import os
from collections.abc import Callable
from ipaddress import IPv4Address
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from hl_bootstrap.core.config import BootstrapSettings, clear_config_cache
from hl_bootstrap.network.seed_sources import SeedPeer

# ============================================================================
# Environment Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run every test without HL_BOOTSTRAP_* variables, inside an empty directory.

    Settings read ``.env`` from the working directory, so changing into
    ``tmp_path`` keeps a developer's .env out of the tests.
    """
    for key in list(os.environ):
        if key.upper().startswith("HL_BOOTSTRAP_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_config_cache()
    yield
    clear_config_cache()


# ============================================================================
# Settings
# ============================================================================


@pytest.fixture
def make_settings(tmp_path) -> Callable[..., BootstrapSettings]:
    """Factory for settings whose artifacts all live under ``tmp_path``."""

    def _make(**overrides: Any) -> BootstrapSettings:
        values: dict[str, Any] = {
            "visor_config_path": tmp_path / "visor.json",
            "override_gossip_config_path": tmp_path / "override_gossip_config.json",
            "visor_binary_directory": tmp_path / "bin",
            "ignore_ipv6_enabled": True,
        }
        values.update(overrides)
        return BootstrapSettings(**values)

    return _make


@pytest.fixture
def settings(make_settings) -> BootstrapSettings:
    """Mainnet settings with defaults for everything else."""
    return make_settings(network="Mainnet")


# ============================================================================
# Peers
# ============================================================================


def _peer(last_octet: int, label: str | None = None) -> SeedPeer:
    return SeedPeer(address=IPv4Address(f"10.0.0.{last_octet}"), label=label)


@pytest.fixture
def make_peer() -> Callable[..., SeedPeer]:
    """Factory for a candidate peer 10.0.0.<last_octet>."""
    return _peer


@pytest.fixture
def peers() -> list[SeedPeer]:
    """Twelve distinct candidate peers 10.0.0.1 .. 10.0.0.12."""
    return [_peer(i) for i in range(1, 13)]


# ============================================================================
# aiohttp Mocks
# ============================================================================


def _response(status: int = 200, json_data: Any = None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status = status
    resp.json = AsyncMock(return_value=json_data)
    resp.text = AsyncMock(return_value=text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=None)
    return resp


def _session(**methods: Any) -> MagicMock:
    session = MagicMock()
    for name, value in methods.items():
        setattr(session, name, value)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """Factory for a response usable as ``async with session.get(...) as resp``."""
    return _response


@pytest.fixture
def make_session() -> Callable[..., MagicMock]:
    """Factory for a ClientSession replacement; keyword args become request methods."""
    return _session
