"""Tests for hl_bootstrap.core.exceptions module."""

from __future__ import annotations

import pytest

from hl_bootstrap.core.exceptions import (
    ArtifactIOError,
    BootstrapException,
    ConfigurationError,
    ProcessLaunchError,
    SourceError,
    ThresholdError,
    VerificationError,
)

# ============================================================================
# BootstrapException Tests
# ============================================================================


class TestBootstrapException:
    """Tests for base BootstrapException."""

    def test_create_with_message(self):
        exc = BootstrapException("Something went wrong")
        assert str(exc) == "Something went wrong"
        assert exc.message == "Something went wrong"
        assert exc.details == {}

    def test_create_with_details(self):
        exc = BootstrapException("Error occurred", details={"key": "value"})
        assert exc.details == {"key": "value"}

    def test_to_dict(self):
        exc = BootstrapException("Test error", details={"foo": "bar"})
        assert exc.to_dict() == {
            "error": "BootstrapException",
            "message": "Test error",
            "details": {"foo": "bar"},
        }


# ============================================================================
# Subclass Tests
# ============================================================================


class TestSubclasses:
    """Every specific error is a BootstrapException carrying its context."""

    @pytest.mark.parametrize(
        "exc_cls",
        [ConfigurationError, SourceError, VerificationError, ArtifactIOError, ThresholdError, ProcessLaunchError],
    )
    def test_inherits_base(self, exc_cls):
        exc = exc_cls("boom")
        assert isinstance(exc, BootstrapException)
        assert exc.to_dict()["error"] == exc_cls.__name__

    def test_configuration_error_setting(self):
        exc = ConfigurationError("bad network", setting="network")
        assert exc.setting == "network"
        assert exc.details == {"setting": "network"}

    def test_source_error_source(self):
        exc = SourceError("unreachable", source="https://example.invalid")
        assert exc.details["source"] == "https://example.invalid"

    def test_verification_error_output(self):
        exc = VerificationError("bad signature", returncode=1, output="BAD signature")
        assert exc.returncode == 1
        assert exc.details == {"returncode": 1, "output": "BAD signature"}

    def test_verification_error_without_details(self):
        assert VerificationError("failed").details == {}

    def test_artifact_io_error_path(self):
        exc = ArtifactIOError("cannot write", path="/tmp/x")
        assert exc.path == "/tmp/x"
        assert exc.details == {"path": "/tmp/x"}

    def test_threshold_error_threshold(self):
        exc = ThresholdError("no peers", threshold="80ms")
        assert exc.details == {"threshold": "80ms"}

    def test_process_launch_error_command(self):
        exc = ProcessLaunchError("failed to exec", command=["hl-visor", "run-non-validator"])
        assert exc.command == ["hl-visor", "run-non-validator"]
        assert exc.details["command"] == ["hl-visor", "run-non-validator"]

    def test_process_launch_error_default_command(self):
        assert ProcessLaunchError("failed").command == []
