"""
Pytest configuration and fixtures
"""

import datetime
from pathlib import Path
from typing import Dict
import httpx
import pytest
from core.database import SqliteStore
from ingestion.exporters.snapshot_exporter import SnapshotExporter
from ingestion.extractors.artifact_cache import RemoteArtifactCache
from ingestion.runner import PipelineRunner
from tests.fakes import BASE_URL, PERIOD, FakeArtifactServer, parquet_bytes


@pytest.fixture
def premise_columns():
    return {
        "premise_code": [1, 2],
        "premise": ["KEDAI RUNCIT A", "  PASAR RAYA B  "],
        "address": ["JALAN 1, TAMAN A", None],
        "premise_type": ["Kedai Runcit", "Pasar Raya / Supermarket"],
        "state": ["Selangor", "Johor"],
        "district": ["Petaling", "Johor Bahru"],
    }


@pytest.fixture
def item_columns():
    return {
        "item_code": [10, 20],
        "item": ["AYAM BERSIH - STANDARD", "BERAS SUPER TEMPATAN 5% HANCUR"],
        "unit": ["1kg", "10kg"],
        "item_group": ["BARANGAN SEGAR", "BARANGAN KERING"],
        "item_category": ["AYAM", "BERAS"],
    }


@pytest.fixture
def price_columns():
    day_one = datetime.date(2024, 3, 1)
    day_two = datetime.date(2024, 3, 2)
    return {
        "date": [day_one, day_one, day_two, day_two],
        "premise_code": [1, 2, 1, 2],
        "item_code": [10, 20, 10, 20],
        "price": [9.5, 26.0, 9.8, 25.5],
    }


@pytest.fixture
def artifacts(premise_columns, item_columns, price_columns) -> Dict[str, bytes]:
    """The three artifacts of PERIOD, keyed by remote file name."""
    return {
        "lookup_premise.parquet": parquet_bytes(premise_columns),
        "lookup_item.parquet": parquet_bytes(item_columns),
        f"pricecatcher_{PERIOD}.parquet": parquet_bytes(price_columns),
    }


@pytest.fixture
def artifact_server(artifacts) -> FakeArtifactServer:
    return FakeArtifactServer(artifacts)


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def output_dir(tmp_path) -> Path:
    return tmp_path / "snapshots"


@pytest.fixture
def make_runner(cache_dir, output_dir):
    """Build a runner whose downloads go to the fake artifact server."""

    def factory(client: httpx.AsyncClient, **exporter_options) -> PipelineRunner:
        return PipelineRunner(
            cache=RemoteArtifactCache(cache_dir=cache_dir, client=client),
            exporter=SnapshotExporter(sleep=lambda seconds: None, **exporter_options),
            output_dir=output_dir,
            base_url=BASE_URL,
        )

    return factory


@pytest.fixture
def memory_store():
    """Empty in-memory working store with the snapshot schema"""
    store = SqliteStore.in_memory()
    store.create_schema()
    yield store
    store.dispose()
