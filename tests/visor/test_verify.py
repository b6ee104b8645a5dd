"""Tests for hl_bootstrap.visor.verify module."""

from __future__ import annotations

import pytest

from hl_bootstrap.visor.verify import GpgVerifier, SignatureVerifier, VerificationResult


@pytest.fixture
def fake_gpg(tmp_path):
    """Write an executable standing in for gpg that exits with ``status``."""

    def _make(status: int):
        script = tmp_path / f"gpg-{status}"
        script.write_text(
            "#!/bin/sh\n"
            'echo "args: $*"\n'
            'echo "gpg: status ' + str(status) + '" >&2\n'
            f"exit {status}\n"
        )
        script.chmod(0o755)
        return str(script)

    return _make


@pytest.fixture
def files(tmp_path):
    signature = tmp_path / "hl-visor.asc"
    data = tmp_path / "hl-visor"
    signature.write_text("sig")
    data.write_text("data")
    return signature, data


class TestGpgVerifier:
    """Tests for GpgVerifier."""

    def test_satisfies_protocol(self):
        assert isinstance(GpgVerifier(), SignatureVerifier)

    async def test_success(self, fake_gpg, files):
        signature, data = files

        result = await GpgVerifier(fake_gpg(0)).verify(signature, data)

        assert result.ok is True
        assert result.returncode == 0
        assert f"--verify {signature} {data}" in result.output
        assert "gpg: status 0" in result.output

    async def test_failure(self, fake_gpg, files):
        result = await GpgVerifier(fake_gpg(1)).verify(*files)

        assert result.ok is False
        assert result.returncode == 1
        assert "gpg: status 1" in result.output

    async def test_missing_executable(self, files, tmp_path):
        result = await GpgVerifier(str(tmp_path / "no-such-gpg")).verify(*files)

        assert result == VerificationResult(ok=False, returncode=127, output=f"{tmp_path / 'no-such-gpg'}: command not found")
