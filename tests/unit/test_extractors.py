"""
Unit tests for the remote artifact cache
"""

import httpx
import pytest
from core.exceptions import ArtifactFetchError, FreshnessProbeError
from ingestion.extractors.artifact_cache import RemoteArtifactCache
from tests.fakes import BASE_URL, FakeArtifactServer

NAME = "lookup_item"
URL = f"{BASE_URL}/{NAME}.parquet"
FILE = f"{NAME}.parquet"


@pytest.fixture
def body():
    return b"PAR1" + bytes(range(256)) * 4 + b"PAR1"


@pytest.fixture
def server(body):
    return FakeArtifactServer({FILE: body})


@pytest.mark.asyncio
async def test_downloads_when_no_local_copy(server, body, cache_dir):
    """Test a missing cache file is fetched without a probe"""
    async with server.client() as client:
        cache = RemoteArtifactCache(cache_dir=cache_dir, client=client)
        entry = await cache.resolve_entry(NAME, URL)

    assert entry.local_path == cache_dir / FILE
    assert entry.size_bytes == len(body)
    assert entry.local_path.read_bytes() == body
    assert server.count("GET") == 1
    assert server.count("HEAD") == 0


@pytest.mark.asyncio
async def test_reuses_local_copy_when_sizes_match(server, body, cache_dir):
    """Test a matching size serves the cached file with no body transfer"""
    cache_dir.mkdir()
    (cache_dir / FILE).write_bytes(body)

    async with server.client() as client:
        cache = RemoteArtifactCache(cache_dir=cache_dir, client=client)
        stream = await cache.resolve(NAME, URL)

    with stream:
        assert stream.read() == body
    assert server.count("HEAD") == 1
    assert server.count("GET") == 0


@pytest.mark.asyncio
async def test_refetches_when_remote_size_changes(server, body, cache_dir):
    """Test a size mismatch replaces the cached file"""
    cache_dir.mkdir()
    (cache_dir / FILE).write_bytes(b"old revision")

    async with server.client() as client:
        cache = RemoteArtifactCache(cache_dir=cache_dir, client=client)
        entry = await cache.resolve_entry(NAME, URL)

    assert entry.size_bytes == len(body)
    assert (cache_dir / FILE).read_bytes() == body
    assert server.requests == [("HEAD", FILE), ("GET", FILE)]


@pytest.mark.asyncio
async def test_recovers_truncated_download(server, body, cache_dir):
    """Test an interrupted earlier download is replaced on the next run"""
    cache_dir.mkdir()
    (cache_dir / FILE).write_bytes(body[:100])

    async with server.client() as client:
        cache = RemoteArtifactCache(cache_dir=cache_dir, client=client)
        await cache.resolve_entry(NAME, URL)

    assert (cache_dir / FILE).read_bytes() == body
    assert server.count("GET") == 1


@pytest.mark.asyncio
async def test_same_size_change_is_not_detected(server, body, cache_dir):
    """Test the size-only fingerprint keeps serving a same-size stale copy"""
    stale = b"x" * len(body)
    cache_dir.mkdir()
    (cache_dir / FILE).write_bytes(stale)

    async with server.client() as client:
        cache = RemoteArtifactCache(cache_dir=cache_dir, client=client)
        stream = await cache.resolve(NAME, URL)

    with stream:
        assert stream.read() == stale
    assert server.count("GET") == 0


@pytest.mark.asyncio
async def test_probe_failure_is_fatal(server, cache_dir):
    """Test a failed HEAD aborts instead of serving the cached copy"""
    cache_dir.mkdir()
    (cache_dir / FILE).write_bytes(b"cached")
    server.fail["HEAD"] = 503

    async with server.client() as client:
        cache = RemoteArtifactCache(cache_dir=cache_dir, client=client)
        with pytest.raises(FreshnessProbeError) as exc_info:
            await cache.resolve_entry(NAME, URL)

    assert exc_info.value.context["status_code"] == 503
    assert exc_info.value.context["url"] == URL
    assert (cache_dir / FILE).read_bytes() == b"cached"


@pytest.mark.asyncio
async def test_probe_without_content_length_is_fatal(cache_dir):
    """Test a HEAD response lacking Content-Length cannot validate the cache"""
    cache_dir.mkdir()
    (cache_dir / FILE).write_bytes(b"cached")

    def handler(request):
        return httpx.Response(200)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        cache = RemoteArtifactCache(cache_dir=cache_dir, client=client)
        with pytest.raises(FreshnessProbeError):
            await cache.resolve_entry(NAME, URL)


@pytest.mark.asyncio
async def test_download_rejected(cache_dir):
    """Test a 404 on download raises ArtifactFetchError with the URL"""
    server = FakeArtifactServer({})

    async with server.client() as client:
        cache = RemoteArtifactCache(cache_dir=cache_dir, client=client)
        with pytest.raises(ArtifactFetchError) as exc_info:
            await cache.resolve_entry(NAME, URL)

    assert exc_info.value.context["status_code"] == 404
    assert exc_info.value.context["logical_name"] == NAME
    assert not (cache_dir / FILE).exists()


@pytest.mark.asyncio
async def test_network_error_on_download(cache_dir):
    """Test transport errors are reported as ArtifactFetchError"""

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        cache = RemoteArtifactCache(cache_dir=cache_dir, client=client)
        with pytest.raises(ArtifactFetchError):
            await cache.resolve_entry(NAME, URL)


@pytest.mark.asyncio
async def test_explicit_local_path(server, body, tmp_path):
    """Test the cache honours a caller-supplied local path"""
    target = tmp_path / "elsewhere" / "items.parquet"

    async with server.client() as client:
        cache = RemoteArtifactCache(cache_dir=tmp_path / "unused", client=client)
        entry = await cache.resolve_entry(NAME, URL, local_path=target)

    assert entry.local_path == target
    assert target.read_bytes() == body
