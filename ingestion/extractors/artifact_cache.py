"""
Remote artifact cache with size-based freshness validation.

Each logical dataset is cached as one file under the cache directory and
reused across runs. Before a cached file is served, a HEAD request reads the
remote Content-Length:

- no local file: download the whole artifact and write it verbatim
- local size differs from remote size: delete and download again
- sizes match: serve the local file untouched

The size is the only fingerprint. A same-size upstream change, or a
same-size corrupt local file, is not detected. A download interrupted
mid-write leaves a truncated file; it is replaced on the next run only
because its size differs from the remote one.
"""

import asyncio
import httpx
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Dict, Optional, Union
from core.config import settings
from core.exceptions import ArtifactFetchError, CacheError, FreshnessProbeError
from schemas.cache import CacheEntry
import logging

logger = logging.getLogger(__name__)


class RemoteArtifactCache:
    """
    Resolve logical dataset names to local byte streams.

    Attributes:
        cache_dir: Directory holding one file per logical dataset
        timeout: Request timeout in seconds, shared by GET and HEAD
    """

    def __init__(
        self,
        cache_dir: Union[str, Path, None] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None
    ):
        self.cache_dir = Path(cache_dir or settings.CACHE_DIR)
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._client = client
        self._locks: Dict[Path, asyncio.Lock] = {}

    def path_for(self, logical_name: str) -> Path:
        """Cache file path for a logical dataset."""
        return self.cache_dir / f"{logical_name}.parquet"

    async def resolve(
        self,
        logical_name: str,
        remote_url: str,
        local_path: Union[str, Path, None] = None
    ) -> BinaryIO:
        """
        Return an open binary stream over the fresh local copy.

        Raises:
            ArtifactFetchError: If the download fails
            FreshnessProbeError: If the HEAD probe fails
            CacheError: For filesystem errors other than a missing file
        """
        entry = await self.resolve_entry(logical_name, remote_url, local_path)
        return self.open(entry)

    async def resolve_entry(
        self,
        logical_name: str,
        remote_url: str,
        local_path: Union[str, Path, None] = None
    ) -> CacheEntry:
        """Make the local copy fresh and describe it."""
        path = Path(local_path) if local_path else self.path_for(logical_name)
        lock = self._locks.setdefault(path, asyncio.Lock())

        async with lock:
            async with self._client_context() as client:
                local_size = self._local_size(logical_name, path)

                if local_size is None:
                    logger.info(f"Download: {remote_url}")
                    size = await self._download(client, logical_name, remote_url, path)
                else:
                    remote_size = await self._probe_size(client, logical_name, remote_url)
                    if remote_size != local_size:
                        logger.info(
                            f"Cached copy outdated ({local_size} != {remote_size} bytes), "
                            f"re-downloading: {remote_url}"
                        )
                        self._remove(logical_name, path)
                        size = await self._download(client, logical_name, remote_url, path)
                    else:
                        logger.info(f"From cache: {path} ({local_size} bytes)")
                        size = local_size

        return CacheEntry(logical_name=logical_name, local_path=path, size_bytes=size)

    def open(self, entry: CacheEntry) -> BinaryIO:
        """Open a cached artifact for reading from its first byte."""
        try:
            return open(entry.local_path, "rb")
        except OSError as e:
            raise CacheError(
                f"Failed to open cached artifact {entry.local_path}",
                context={
                    "logical_name": entry.logical_name,
                    "local_path": str(entry.local_path),
                    "operation": "open"
                },
                original_exception=e
            )

    @asynccontextmanager
    async def _client_context(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            yield client

    def _local_size(self, logical_name: str, path: Path) -> Optional[int]:
        try:
            return path.stat().st_size
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CacheError(
                f"Failed to inspect cached artifact {path}",
                context={
                    "logical_name": logical_name,
                    "local_path": str(path),
                    "operation": "stat"
                },
                original_exception=e
            )

    def _remove(self, logical_name: str, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise CacheError(
                f"Failed to remove outdated artifact {path}",
                context={
                    "logical_name": logical_name,
                    "local_path": str(path),
                    "operation": "unlink"
                },
                original_exception=e
            )

    async def _probe_size(self, client: httpx.AsyncClient, logical_name: str, url: str) -> int:
        """Read the remote Content-Length with a metadata-only request."""
        try:
            response = await client.head(url, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FreshnessProbeError(
                f"Freshness probe rejected for {url}",
                context={
                    "logical_name": logical_name,
                    "url": url,
                    "status_code": e.response.status_code
                },
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise FreshnessProbeError(
                f"Freshness probe failed for {url}",
                context={"logical_name": logical_name, "url": url},
                original_exception=e
            )

        content_length = response.headers.get("content-length")
        try:
            return int(content_length)
        except (TypeError, ValueError) as e:
            raise FreshnessProbeError(
                f"Missing or unreadable Content-Length for {url}",
                context={
                    "logical_name": logical_name,
                    "url": url,
                    "content_length": content_length
                },
                original_exception=e
            )

    async def _download(
        self,
        client: httpx.AsyncClient,
        logical_name: str,
        url: str,
        path: Path
    ) -> int:
        """Fetch the full artifact body and write it verbatim to ``path``."""
        try:
            response = await client.get(url, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ArtifactFetchError(
                f"Download rejected for {url}",
                context={
                    "logical_name": logical_name,
                    "url": url,
                    "status_code": e.response.status_code
                },
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise ArtifactFetchError(
                f"Download failed for {url}",
                context={"logical_name": logical_name, "url": url},
                original_exception=e
            )

        content = response.content
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise CacheError(
                f"Failed to write artifact to {path}",
                context={
                    "logical_name": logical_name,
                    "local_path": str(path),
                    "operation": "write"
                },
                original_exception=e
            )

        logger.info(f"Cached {len(content)} bytes at {path}")
        return len(content)
