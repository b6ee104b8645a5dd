# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""hl-visor artifacts: visor.json and the verified binary install."""

from hl_bootstrap.visor.config import (
    DEFAULT_VISOR_CONFIG_PATH,
    VisorConfig,
    read_visor_config,
    write_visor_config,
)
from hl_bootstrap.visor.download import (
    VISOR_BINARY_MODE,
    VISOR_BINARY_NAME,
    VISOR_BINARY_URLS,
    VISOR_ETAG_FILE_NAME,
    VisorProvisioner,
    read_stored_etag,
)
from hl_bootstrap.visor.verify import GpgVerifier, SignatureVerifier, VerificationResult

__all__ = [
    "DEFAULT_VISOR_CONFIG_PATH",
    "VisorConfig",
    "read_visor_config",
    "write_visor_config",
    "VISOR_BINARY_MODE",
    "VISOR_BINARY_NAME",
    "VISOR_BINARY_URLS",
    "VISOR_ETAG_FILE_NAME",
    "VisorProvisioner",
    "read_stored_etag",
    "GpgVerifier",
    "SignatureVerifier",
    "VerificationResult",
]
