# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""
Latency prober - ranks seed peers by TCP connect time.

Every candidate is dialed on the gossip port, at most ``concurrency`` at a
time. The call waits for every probe before sorting, so the ranking is taken
over a complete snapshot. Failed and timed out dials are kept as measurements
without a latency; only successful ones are ranked.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from ipaddress import IPv4Address
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from ..core.durations import format_duration
from .seed_sources import SeedPeer

logger = logging.getLogger(__name__)

# Gossip port as of 2025-07-23; could change in the future
GOSSIP_PORT = 4001
MAX_CONCURRENT_PROBES = 64

# (latency, error) -> exactly one of them is set
ProbeResult = Tuple[Optional[float], Optional[str]]
ProbeFunc = Callable[[SeedPeer, float], Awaitable[ProbeResult]]


@dataclass(frozen=True)
class LatencyMeasurement:
    """Outcome of probing one candidate."""

    peer: SeedPeer
    latency: Optional[float] = None  # seconds
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.latency is not None


@dataclass(frozen=True)
class RankedPeer:
    """A candidate with its measured connect latency."""

    peer: SeedPeer
    latency: float  # seconds


@dataclass
class LatencyReport:
    """All measurements of one ranking run plus the picked peers."""

    measurements: List[LatencyMeasurement] = field(default_factory=list)
    best: List[RankedPeer] = field(default_factory=list)

    @property
    def successful(self) -> List[LatencyMeasurement]:
        return [m for m in self.measurements if m.ok]

    @property
    def failed(self) -> List[LatencyMeasurement]:
        return [m for m in self.measurements if not m.ok]

    @property
    def peers(self) -> List[SeedPeer]:
        return [ranked.peer for ranked in self.best]


async def measure_connect_latency(address: IPv4Address, port: int, timeout: float) -> ProbeResult:
    """
    Dial ``address:port`` and return how long the TCP handshake took.

    Returns:
        ``(latency, None)`` on success, ``(None, reason)`` on failure or timeout
    """
    start = time.monotonic()
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(str(address), port), timeout)
    except asyncio.TimeoutError:
        return None, "timed out"
    except OSError as e:
        return None, str(e) or e.__class__.__name__
    latency = time.monotonic() - start

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return latency, None


class LatencyProber:
    """
    Measures and ranks seed peers by connect latency.

    Example:
        prober = LatencyProber()
        report = await prober.rank(candidates, want_count=5, timeout=0.08)
        for ranked in report.best:
            print(ranked.peer, ranked.latency)
    """

    def __init__(
        self,
        port: int = GOSSIP_PORT,
        concurrency: int = MAX_CONCURRENT_PROBES,
        probe: Optional[ProbeFunc] = None,
    ):
        """
        Args:
            port: TCP port dialed on every candidate
            concurrency: Maximum number of probes in flight
            probe: Replacement probe ``(peer, timeout) -> (latency, error)``,
                used by tests; defaults to a real TCP dial
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.port = port
        self.concurrency = concurrency
        self._probe = probe or self._dial

    async def _dial(self, peer: SeedPeer, timeout: float) -> ProbeResult:
        return await measure_connect_latency(peer.address, self.port, timeout)

    async def measure(self, candidates: Sequence[SeedPeer], timeout: float) -> List[LatencyMeasurement]:
        """
        Probe every candidate and return measurements in candidate order.

        Does not return until every probe has resolved.
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def probe_one(peer: SeedPeer) -> LatencyMeasurement:
            async with semaphore:
                latency, error = await self._probe(peer, timeout)
            if latency is None:
                logger.debug(f"Latency test to {peer} failed: {error}")
            else:
                logger.debug(f"Latency test to {peer} ok: {format_duration(latency)}")
            return LatencyMeasurement(peer=peer, latency=latency, error=error)

        return list(await asyncio.gather(*(probe_one(peer) for peer in candidates)))

    async def rank(self, candidates: Sequence[SeedPeer], want_count: int, timeout: float) -> LatencyReport:
        """
        Rank candidates by connect latency.

        Args:
            candidates: Peers to probe
            want_count: Maximum number of peers to return
            timeout: Per-probe timeout in seconds; slower peers count as failed

        Returns:
            LatencyReport whose ``best`` holds at most ``want_count`` peers in
            ascending latency order (ties keep candidate order)
        """
        logger.info(
            f"Testing latency to {len(candidates)} seed nodes (concurrency {self.concurrency})"
        )

        measurements = await self.measure(candidates, timeout)
        successful = [m for m in measurements if m.ok]
        logger.info(
            f"Latency test complete: {len(successful)} successful, "
            f"{len(measurements) - len(successful)} failed"
        )

        # list.sort is stable, so equal latencies keep candidate order
        successful.sort(key=lambda m: m.latency)
        ranked = [RankedPeer(peer=m.peer, latency=m.latency) for m in successful]

        for idx, entry in enumerate(ranked):
            logger.debug(f"Seed node measurement #{idx}: {entry.peer} {format_duration(entry.latency)}")

        best = ranked[: max(want_count, 0)]
        for idx, entry in enumerate(best):
            logger.info(
                f"Picked seed node #{idx}: {entry.peer} ({format_duration(entry.latency)})",
                extra={
                    "extra_data": {
                        "address": str(entry.peer.address),
                        "latency_ms": round(entry.latency * 1000, 3),
                    }
                },
            )

        return LatencyReport(measurements=measurements, best=best)


async def rank_peers(
    candidates: Sequence[SeedPeer],
    want_count: int,
    timeout: float,
    port: int = GOSSIP_PORT,
) -> List[SeedPeer]:
    """Convenience wrapper returning only the picked peers."""
    report = await LatencyProber(port=port).rank(candidates, want_count, timeout)
    return report.peers
