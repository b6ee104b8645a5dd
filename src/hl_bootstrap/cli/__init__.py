# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""hl-bootstrap CLI - prepare a Hyperliquid node and start hl-visor."""

from .main import app, main

__all__ = ["main", "app"]
