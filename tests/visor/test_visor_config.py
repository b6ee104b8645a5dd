"""Tests for hl_bootstrap.visor.config module."""

from __future__ import annotations

import json

import pytest

from hl_bootstrap.core.exceptions import ArtifactIOError, ConfigurationError
from hl_bootstrap.network.chain import Chain
from hl_bootstrap.visor.config import read_visor_config, write_visor_config


class TestReadVisorConfig:
    """Tests for read_visor_config."""

    def test_reads_chain(self, tmp_path):
        path = tmp_path / "visor.json"
        path.write_text('{"chain": "Testnet"}')

        assert read_visor_config(path).chain is Chain.TESTNET

    def test_chain_case_insensitive(self, tmp_path):
        path = tmp_path / "visor.json"
        path.write_text('{"chain": "mainnet"}')

        assert read_visor_config(path).chain is Chain.MAINNET

    def test_extra_keys_allowed(self, tmp_path):
        path = tmp_path / "visor.json"
        path.write_text('{"chain": "Mainnet", "other": 1}')

        assert read_visor_config(path).chain is Chain.MAINNET

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            read_visor_config(tmp_path / "visor.json")

        assert exc_info.value.setting == "network"
        assert "no network specified" in exc_info.value.message

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "visor.json"
        path.write_text("{")

        with pytest.raises(ConfigurationError):
            read_visor_config(path)

    def test_unsupported_chain(self, tmp_path):
        path = tmp_path / "visor.json"
        path.write_text('{"chain": "Devnet"}')

        with pytest.raises(ConfigurationError):
            read_visor_config(path)


class TestWriteVisorConfig:
    """Tests for write_visor_config."""

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "visor.json"

        write_visor_config(path, Chain.TESTNET)

        assert json.loads(path.read_text()) == {"chain": "Testnet"}
        assert read_visor_config(path).chain is Chain.TESTNET

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ArtifactIOError):
            write_visor_config(tmp_path / "missing" / "visor.json", Chain.MAINNET)
