# ============================================================================
# File: tests/integration/test_etl_failure_recovery.py
# ============================================================================

import pytest
from unittest.mock import patch

import datetime
from core.exceptions import ArchiveError, ArtifactFetchError, SnapshotCopyError
from ingestion.exporters.snapshot_exporter import SnapshotExporter
from tests.fakes import PERIOD, parquet_bytes


@pytest.mark.asyncio
async def test_failed_run_keeps_previous_snapshot(make_runner, artifact_server, output_dir):
    """
    Failure Recovery Test:
    1. A first run publishes a snapshot
    2. A second run fails during export
    3. The published snapshot and archive are untouched
    4. A third run succeeds again
    """

    snapshot = output_dir / f"pricecatcher_{PERIOD}.db"
    archive = output_dir / f"pricecatcher_{PERIOD}.zip"

    # -------------------------------------------------------
    # STEP 1: Successful run
    # -------------------------------------------------------
    async with artifact_server.client() as client:
        await make_runner(client).run(PERIOD)
        published_snapshot = snapshot.read_bytes()
        published_archive = archive.read_bytes()

        # -------------------------------------------------------
        # STEP 2: Export fails
        # -------------------------------------------------------
        with patch.object(
            SnapshotExporter,
            "_copy",
            side_effect=SnapshotCopyError("Snapshot copy failed with status 1", context={"status_code": 1})
        ):
            with pytest.raises(SnapshotCopyError):
                await make_runner(client).run(PERIOD)

        # -------------------------------------------------------
        # STEP 3: Previous outputs intact, no partial file left
        # -------------------------------------------------------
        assert snapshot.read_bytes() == published_snapshot
        assert archive.read_bytes() == published_archive
        assert sorted(p.name for p in output_dir.iterdir()) == sorted([archive.name, snapshot.name])

        # -------------------------------------------------------
        # STEP 4: Recovery
        # -------------------------------------------------------
        result = await make_runner(client).run(PERIOD)

    assert result["status"] == "success"
    assert snapshot.read_bytes() == published_snapshot


@pytest.mark.asyncio
async def test_transient_download_failure_then_recovery(make_runner, artifact_server, output_dir, cache_dir):
    """A rejected download aborts the run; the next run fetches normally"""
    artifact_server.fail["GET"] = 503

    async with artifact_server.client() as client:
        with pytest.raises(ArtifactFetchError):
            await make_runner(client).run(PERIOD)

        assert not (output_dir / f"pricecatcher_{PERIOD}.db").exists()

        del artifact_server.fail["GET"]
        result = await make_runner(client).run(PERIOD)

    assert result["latest_prices"] == 2
    assert sorted(p.name for p in cache_dir.iterdir()) == [
        "lookup_item.parquet",
        "lookup_premise.parquet",
        f"pricecatcher_{PERIOD}.parquet",
    ]


@pytest.mark.asyncio
async def test_archive_failure_keeps_previous_snapshot(make_runner, artifact_server, output_dir, price_columns):
    """
    Archive Failure Test:
    1. A first run publishes a snapshot
    2. Upstream publishes new prices and the next run fails while archiving
    3. Neither the snapshot nor the archive is replaced, no staged file is left
    4. The next run publishes the new prices
    """

    snapshot = output_dir / f"pricecatcher_{PERIOD}.db"
    archive = output_dir / f"pricecatcher_{PERIOD}.zip"

    async with artifact_server.client() as client:
        first = await make_runner(client).run(PERIOD)
        published_snapshot = snapshot.read_bytes()
        published_archive = archive.read_bytes()

        # -------------------------------------------------------
        # STEP 2: New prices upstream, archiving fails
        # -------------------------------------------------------
        revised = {column: list(values) for column, values in price_columns.items()}
        revised["date"].append(datetime.date(2024, 3, 3))
        revised["premise_code"].append(1)
        revised["item_code"].append(20)
        revised["price"].append(27.0)
        artifact_server.artifacts[f"pricecatcher_{PERIOD}.parquet"] = parquet_bytes(revised)

        with patch(
            "ingestion.runner.archive_snapshot",
            side_effect=ArchiveError("Failed to archive snapshot", context={"archive_path": str(archive)})
        ):
            with pytest.raises(ArchiveError):
                await make_runner(client).run(PERIOD)

        # -------------------------------------------------------
        # STEP 3: Previous outputs intact, nothing staged left
        # -------------------------------------------------------
        assert snapshot.read_bytes() == published_snapshot
        assert archive.read_bytes() == published_archive
        assert sorted(p.name for p in output_dir.iterdir()) == sorted([archive.name, snapshot.name])

        # -------------------------------------------------------
        # STEP 4: Recovery publishes the revised prices
        # -------------------------------------------------------
        result = await make_runner(client).run(PERIOD)

    assert first["latest_prices"] == 2
    assert result["latest_prices"] == 3
    assert snapshot.read_bytes() != published_snapshot
    assert archive.read_bytes() != published_archive
