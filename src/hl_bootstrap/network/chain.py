# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Hyperliquid chain selector.

The chain decides the seed peer source and the binary distribution endpoint.
It is a closed set: every call site maps both members explicitly.
"""

from __future__ import annotations

from enum import Enum


class Chain(str, Enum):
    """Hyperliquid network.

    Values are the fixed-case names the node itself writes ("Mainnet",
    "Testnet"); lookup by value is case-insensitive.
    """

    MAINNET = "Mainnet"
    TESTNET = "Testnet"

    @classmethod
    def _missing_(cls, value: object) -> Chain | None:
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None

    @classmethod
    def parse(cls, value: str) -> Chain:
        """Parse a chain name, ignoring case.

        Raises:
            ValueError: If the name is not a supported chain.
        """
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unsupported chain '{value}'") from None

    def __str__(self) -> str:
        return self.value
