# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""
Seed peer sources - where candidate root peers come from.

Each (chain, method) pair has its own source. Sources are untrusted and
independent of each other:

- Mainnet / api:      POST {"type": "gossipRootIps"} to the Hyperliquid info API
- Mainnet / document: scrape the "operator_name,root_ips" block of the node README
- Testnet / api:      GET a community-maintained override_gossip_config.json

Any pair without a source is unsupported and yields no candidates; the caller
then writes a configuration without root peers.

All sources drop addresses from the caller's ignore set before returning.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from ipaddress import AddressValueError, IPv4Address
from typing import Dict, List, Optional, Set, Tuple, Type

import aiohttp
from pydantic import TypeAdapter, ValidationError

from ..core.exceptions import SourceError
from .chain import Chain
from .gossip_config import GossipConfig, IPv4AddressText

logger = logging.getLogger(__name__)


MAINNET_INFO_API_URL = "https://api.hyperliquid.xyz/info"
MAINNET_SEED_DOCUMENT_URL = "https://raw.githubusercontent.com/hyperliquid-dex/node/main/README.md"
MAINNET_SEED_DOCUMENT_HEADER = "operator_name"
TESTNET_PEERS_URL = "https://hyperliquid-testnet.imperator.co/peers.json"

_IPV4_LIST = TypeAdapter(List[IPv4AddressText])


class SeedSourceMethod(str, Enum):
    """How seed peers are retrieved for a chain."""

    API = "api"
    DOCUMENT = "document"


# =============================================================================
# DATA MODELS
# =============================================================================


@dataclass(frozen=True)
class SeedPeer:
    """A candidate root peer offered by a seed source."""

    address: IPv4Address
    label: Optional[str] = None

    def __str__(self) -> str:
        if self.label:
            return f"{self.label} ({self.address})"
        return str(self.address)


# =============================================================================
# SOURCES
# =============================================================================


class PeerSource(ABC):
    """
    Base class for seed peer sources.

    Subclasses fetch the raw candidate list; :meth:`fetch` applies the
    ignore set so no source can leak an ignored address.
    """

    name: str = "seed source"

    def __init__(self, url: str, request_timeout: Optional[float] = None):
        self.url = url
        self.request_timeout = request_timeout

    async def fetch(self, ignored: Optional[Set[IPv4Address]] = None) -> List[SeedPeer]:
        """
        Fetch candidate peers, dropping ignored addresses.

        Args:
            ignored: Addresses that must not be returned

        Returns:
            Candidate peers in source order

        Raises:
            SourceError: If the source is unreachable or returns bad data
        """
        ignored = ignored or set()
        candidates = await self._fetch_candidates()

        seeds = []
        for peer in candidates:
            if peer.address in ignored:
                logger.debug(f"Skipping ignored seed node {peer.address}")
                continue
            seeds.append(peer)
        return seeds

    @abstractmethod
    async def _fetch_candidates(self) -> List[SeedPeer]:
        """Retrieve the unfiltered candidate list."""

    def _session(self) -> aiohttp.ClientSession:
        timeout = aiohttp.ClientTimeout(total=self.request_timeout)
        return aiohttp.ClientSession(timeout=timeout)


class MainnetApiSource(PeerSource):
    """Mainnet root peers from the Hyperliquid info API."""

    name = "mainnet info API"

    def __init__(self, url: str = MAINNET_INFO_API_URL, request_timeout: Optional[float] = None):
        super().__init__(url, request_timeout)

    async def _fetch_candidates(self) -> List[SeedPeer]:
        try:
            async with self._session() as session:
                async with session.post(self.url, json={"type": "gossipRootIps"}) as resp:
                    if not 200 <= resp.status < 300:
                        raise SourceError(
                            f"failed to get mainnet seed nodes: HTTP {resp.status}", source=self.url
                        )
                    data = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise SourceError(f"failed to get mainnet seed nodes: {e}", source=self.url) from e
        except asyncio.TimeoutError as e:
            raise SourceError("failed to get mainnet seed nodes: request timeout", source=self.url) from e
        except ValueError as e:
            raise SourceError(f"failed to parse mainnet seed nodes: {e}", source=self.url) from e

        try:
            addresses = _IPV4_LIST.validate_python(data)
        except ValidationError as e:
            raise SourceError(f"failed to parse mainnet seed nodes: {e}", source=self.url) from e

        if not addresses:
            raise SourceError("No seed peers were given from Hyperliquid API", source=self.url)

        return [SeedPeer(address=address) for address in addresses]


class MainnetDocumentSource(PeerSource):
    """
    Mainnet root peers scraped from a markdown document.

    The document contains a fenced block like::

        ```
        operator_name,root_ips
        Hypurrscan,1.2.3.4
        ```

    Every entry line is ``label,address``; one malformed line fails the fetch.
    """

    name = "mainnet seed document"

    def __init__(
        self,
        url: str = MAINNET_SEED_DOCUMENT_URL,
        request_timeout: Optional[float] = None,
        header: str = MAINNET_SEED_DOCUMENT_HEADER,
    ):
        super().__init__(url, request_timeout)
        self.header = header

    async def _fetch_candidates(self) -> List[SeedPeer]:
        try:
            async with self._session() as session:
                async with session.get(self.url) as resp:
                    if not 200 <= resp.status < 300:
                        raise SourceError(
                            f"failed to get mainnet seed document: HTTP {resp.status}", source=self.url
                        )
                    document = await resp.text()
        except aiohttp.ClientError as e:
            raise SourceError(f"failed to get mainnet seed document: {e}", source=self.url) from e
        except asyncio.TimeoutError as e:
            raise SourceError("failed to get mainnet seed document: request timeout", source=self.url) from e
        except UnicodeDecodeError as e:
            raise SourceError(f"failed to decode mainnet seed document: {e}", source=self.url) from e

        peers = parse_seed_document(document, self.header, source=self.url)
        if not peers:
            raise SourceError("No seed peers were found in the seed document", source=self.url)
        return peers


class TestnetPeersSource(PeerSource):
    """Testnet root peers from a published override_gossip_config.json."""

    __test__ = False  # not a pytest test class despite the name

    name = "testnet peers.json"

    def __init__(self, url: str = TESTNET_PEERS_URL, request_timeout: Optional[float] = None):
        super().__init__(url, request_timeout)

    async def _fetch_candidates(self) -> List[SeedPeer]:
        try:
            async with self._session() as session:
                async with session.get(self.url) as resp:
                    if not 200 <= resp.status < 300:
                        raise SourceError(
                            f"failed to get testnet seed nodes: HTTP {resp.status}", source=self.url
                        )
                    data = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise SourceError(f"failed to get testnet seed nodes: {e}", source=self.url) from e
        except asyncio.TimeoutError as e:
            raise SourceError("failed to get testnet seed nodes: request timeout", source=self.url) from e
        except ValueError as e:
            raise SourceError(f"failed to parse testnet override_gossip_config: {e}", source=self.url) from e

        try:
            config = GossipConfig.model_validate(data)
        except ValidationError as e:
            raise SourceError(f"failed to parse testnet override_gossip_config: {e}", source=self.url) from e

        return [SeedPeer(address=address) for address in config.peer_addresses]


# =============================================================================
# DOCUMENT PARSING
# =============================================================================


def parse_seed_document(document: str, header: str, source: Optional[str] = None) -> List[SeedPeer]:
    """
    Extract ``label,address`` entries from the first fenced block starting with ``header``.

    Returns an empty list if no such block exists.

    Raises:
        SourceError: If an entry line is malformed
    """
    lines = document.splitlines()
    index = 0
    while index < len(lines):
        if not lines[index].strip().startswith("```"):
            index += 1
            continue

        # Opening fence; the block's first non-blank line decides whether it is ours
        index += 1
        while index < len(lines) and not lines[index].strip():
            index += 1
        if index >= len(lines):
            break
        if lines[index].strip().startswith("```"):
            index += 1
            continue
        if not lines[index].strip().startswith(header):
            # Skip to the closing fence of this foreign block
            while index < len(lines) and not lines[index].strip().startswith("```"):
                index += 1
            index += 1
            continue

        peers = []
        for line in lines[index + 1 :]:
            stripped = line.strip()
            if stripped.startswith("```"):
                break
            if not stripped:
                continue
            peers.append(_parse_seed_line(stripped, source))
        return peers

    return []


def _parse_seed_line(line: str, source: Optional[str]) -> SeedPeer:
    label, sep, address = line.partition(",")
    label = label.strip()
    address = address.strip()
    if not sep or not label or not address:
        raise SourceError(f"malformed seed entry {line!r}", source=source)
    try:
        return SeedPeer(address=IPv4Address(address), label=label)
    except AddressValueError as e:
        raise SourceError(f"invalid seed address in {line!r}: {e}", source=source) from e


# =============================================================================
# DISPATCH
# =============================================================================


SEED_SOURCES: Dict[Tuple[Chain, SeedSourceMethod], Type[PeerSource]] = {
    (Chain.MAINNET, SeedSourceMethod.API): MainnetApiSource,
    (Chain.MAINNET, SeedSourceMethod.DOCUMENT): MainnetDocumentSource,
    (Chain.TESTNET, SeedSourceMethod.API): TestnetPeersSource,
}


def get_seed_source(
    chain: Chain,
    method: SeedSourceMethod = SeedSourceMethod.API,
    request_timeout: Optional[float] = None,
) -> Optional[PeerSource]:
    """Return the source for ``(chain, method)``, or None if unsupported."""
    source_cls = SEED_SOURCES.get((chain, method))
    if source_cls is None:
        return None
    return source_cls(request_timeout=request_timeout)


async def fetch_seed_peers(
    chain: Chain,
    ignored: Optional[Set[IPv4Address]] = None,
    method: SeedSourceMethod = SeedSourceMethod.API,
    request_timeout: Optional[float] = None,
) -> List[SeedPeer]:
    """
    Fetch candidate seed peers for a chain.

    Args:
        chain: Chain to fetch peers for
        ignored: Addresses to drop from the result
        method: Retrieval method
        request_timeout: Total HTTP timeout in seconds (None for no timeout)

    Returns:
        Candidate peers; empty if the (chain, method) pair is unsupported

    Raises:
        SourceError: If the selected source fails
    """
    source = get_seed_source(chain, method, request_timeout)
    if source is None:
        logger.warning(f"No {method.value} seed source for {chain}, continuing without seed peers")
        return []

    logger.info(f"Fetching {chain} seed nodes from {source.name}")
    return await source.fetch(ignored)
