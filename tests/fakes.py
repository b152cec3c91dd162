"""
Test doubles shared by the unit, integration and API tests
"""

from typing import Dict, List, Optional, Tuple
import httpx
import pyarrow as pa
import pyarrow.parquet as pq

BASE_URL = "https://storage.example.test/pricecatcher"
PERIOD = "2024-03"


def parquet_bytes(columns: Dict[str, list]) -> bytes:
    """Encode columns as an in-memory Parquet file."""
    sink = pa.BufferOutputStream()
    pq.write_table(pa.table(columns), sink)
    return sink.getvalue().to_pybytes()


class FakeArtifactServer:
    """
    Serve artifacts by file name through httpx.MockTransport.

    HEAD answers with the Content-Length of the current body, GET with the
    body itself. Every request is recorded as (method, file name).
    """

    def __init__(self, artifacts: Dict[str, bytes]):
        self.artifacts = dict(artifacts)
        self.requests: List[Tuple[str, str]] = []
        self.fail: Dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1]
        self.requests.append((request.method, name))

        status = self.fail.get(request.method)
        if status:
            return httpx.Response(status)

        body = self.artifacts.get(name)
        if body is None:
            return httpx.Response(404)
        if request.method == "HEAD":
            return httpx.Response(200, headers={"content-length": str(len(body))})
        return httpx.Response(200, content=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def count(self, method: str, name: Optional[str] = None) -> int:
        return sum(
            1 for m, n in self.requests
            if m == method and (name is None or n == name)
        )
