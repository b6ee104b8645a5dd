# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""
hl-visor provisioning - keep a verified hl-visor binary installed.

Steps on every boot:

1. HEAD the chain's binary URL for its ETag
2. Compare with the ETag stored next to the installed binary
3. On mismatch, download binary and ``.asc`` signature side by side into
   staged files in the install directory
4. Verify the signature (gpg by default)
5. chmod 0755 and atomically rename the binary into place, then the ETag

The installed binary and the stored ETag are only ever replaced by a rename
after a successful verification, so a failure at any step leaves the previous
install untouched.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiohttp
from aiohttp import hdrs

from ..core.atomic import StagedFile, atomic_write_text
from ..core.exceptions import ArtifactIOError, SourceError, VerificationError
from ..network.chain import Chain
from .verify import GpgVerifier, SignatureVerifier

logger = logging.getLogger(__name__)

VISOR_BINARY_NAME = "hl-visor"
VISOR_ETAG_FILE_NAME = ".hl-visor.etag"
VISOR_BINARY_MODE = 0o755

VISOR_BINARY_URLS: dict[Chain, str] = {
    Chain.MAINNET: "https://binaries.hyperliquid.xyz/Mainnet/hl-visor",
    Chain.TESTNET: "https://binaries.hyperliquid-testnet.xyz/Testnet/hl-visor",
}

_DOWNLOAD_CHUNK_SIZE = 1024 * 1024


def read_stored_etag(path: Path) -> str | None:
    """Return the stored ETag, or None if there is none.

    Read errors other than "not found" are logged and treated as no ETag,
    which forces a fresh download instead of failing the run.
    """
    try:
        value = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read last stored etag {path}: {e}")
        return None
    return value or None


class VisorProvisioner:
    """
    Downloads, verifies and installs hl-visor.

    Example:
        provisioner = VisorProvisioner()
        updated = await provisioner.ensure_current("/opt/hl/bin", Chain.MAINNET)
    """

    def __init__(
        self,
        verifier: SignatureVerifier | None = None,
        binary_urls: dict[Chain, str] | None = None,
        request_timeout: float | None = None,
    ):
        self.verifier = verifier or GpgVerifier()
        self.binary_urls = dict(binary_urls or VISOR_BINARY_URLS)
        self.request_timeout = request_timeout

    async def ensure_current(self, install_dir: str | Path, chain: Chain) -> bool:
        """
        Make sure ``install_dir`` holds the current hl-visor for ``chain``.

        Returns:
            True if a new binary was installed, False if it was already current

        Raises:
            SourceError: If the ETag or a download cannot be obtained
            VerificationError: If the signature check fails
            ArtifactIOError: If staging or installing files fails
        """
        install_dir = Path(install_dir)
        binary_url = self.binary_urls[chain]
        binary_path = install_dir / VISOR_BINARY_NAME
        etag_path = install_dir / VISOR_ETAG_FILE_NAME

        logger.debug(f"Checking for hl-visor updates ({chain})")

        timeout = aiohttp.ClientTimeout(total=self.request_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            new_etag = await self.fetch_etag(session, binary_url)
            current_etag = read_stored_etag(etag_path)

            logger.debug(f"Comparing hl-visor etag values: new={new_etag!r} current={current_etag!r}")
            if current_etag == new_etag:
                logger.debug(f"hl-visor appears up to date ({chain}, etag {current_etag})")
                return False

            logger.info(f"Downloading new hl-visor binary ({chain}, etag {new_etag})")

            try:
                install_dir.mkdir(parents=True, exist_ok=True)
                with (
                    StagedFile(install_dir, prefix=f".{VISOR_BINARY_NAME}.") as staged_binary,
                    StagedFile(install_dir, prefix=f".{VISOR_BINARY_NAME}.asc.") as staged_signature,
                ):
                    await self._download_pair(
                        session,
                        (binary_url, staged_binary.path),
                        (f"{binary_url}.asc", staged_signature.path),
                    )

                    result = await self.verifier.verify(staged_signature.path, staged_binary.path)
                    if not result.ok:
                        raise VerificationError(
                            f"gpg verification for hl-visor failed with status {result.returncode}:\n{result.output}",
                            returncode=result.returncode,
                            output=result.output,
                        )
                    logger.debug("hl-visor signature verified")

                    staged_binary.persist(binary_path, mode=VISOR_BINARY_MODE)

                # Store etag for future comparisons
                atomic_write_text(etag_path, f"{new_etag}\n", mode=0o644)
            except OSError as e:
                raise ArtifactIOError(f"failed to install hl-visor: {e}", path=str(install_dir)) from e

        logger.info(f"Installed hl-visor to {binary_path}")
        return True

    async def fetch_etag(self, session: aiohttp.ClientSession, url: str) -> str:
        """HEAD ``url`` and return its ETag.

        Raises:
            SourceError: On network errors, non-success status or a missing ETag
        """
        logger.debug(f"Fetching etag for {url}")
        try:
            async with session.head(url, allow_redirects=True) as resp:
                if not 200 <= resp.status < 300:
                    raise SourceError(f"failed to send HEAD request to {url}: HTTP {resp.status}", source=url)
                etag = resp.headers.get(hdrs.ETAG)
        except aiohttp.ClientError as e:
            raise SourceError(f"failed to send HEAD request to {url}: {e}", source=url) from e
        except asyncio.TimeoutError as e:
            raise SourceError(f"HEAD request to {url} timed out", source=url) from e

        if etag is None or not etag.strip():
            raise SourceError(f"no etag header available in HEAD {url} request", source=url)
        return etag.strip()

    async def _download_pair(
        self,
        session: aiohttp.ClientSession,
        first: tuple[str, Path],
        second: tuple[str, Path],
    ) -> None:
        """Download two files concurrently; both finish before any failure is raised."""
        results = await asyncio.gather(
            self._download_logged(session, *first),
            self._download_logged(session, *second),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def _download_logged(self, session: aiohttp.ClientSession, url: str, target: Path) -> None:
        try:
            await self.download_file(session, url, target)
        except Exception as e:
            logger.error(f"Download of {url} failed: {e}")
            raise

    async def download_file(self, session: aiohttp.ClientSession, url: str, target: Path) -> None:
        """Stream ``url`` into ``target``.

        Raises:
            SourceError: On network errors or a non-success status
            OSError: If ``target`` cannot be written
        """
        try:
            async with session.get(url) as resp:
                if not 200 <= resp.status < 300:
                    raise SourceError(f"failed to send GET request to {url}: HTTP {resp.status}", source=url)
                # Blocking file I/O stays off the event loop thread
                fh = await asyncio.to_thread(open, target, "wb")
                try:
                    async for chunk in resp.content.iter_chunked(_DOWNLOAD_CHUNK_SIZE):
                        await asyncio.to_thread(fh.write, chunk)
                finally:
                    await asyncio.to_thread(fh.close)
        except aiohttp.ClientError as e:
            raise SourceError(f"failed to download {url}: {e}", source=url) from e
        except asyncio.TimeoutError as e:
            raise SourceError(f"download of {url} timed out", source=url) from e
