# ============================================================================
# File: ingestion/runner.py
# Description: Snapshot pipeline orchestrator
# ============================================================================
"""
Pipeline Runner - Orchestrates fetch, load, reduce, export and archive.

One run processes one period:
- Resolve the three artifacts through the cache (concurrent downloads)
- Decode, map and load each dataset into a fresh in-memory store
- Reduce price observations to the latest value per pair
- Stage a hot snapshot of the store and archive it
- Publish snapshot and archive once both are complete

There is no partial-success mode: any fatal error aborts the run and the
previous snapshot for the period stays in place.
"""

import asyncio
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from core.config import settings
from core.database import SqliteStore
from core.exceptions import ETLException
from ingestion.base import DatasetHandler
from ingestion.extractors.artifact_cache import RemoteArtifactCache
from ingestion.extractors.parquet_reader import iter_rows
from ingestion.exporters.archiver import archive_name, archive_snapshot, publish_archive
from ingestion.exporters.snapshot_exporter import PARTIAL_SUFFIX, SnapshotExporter
from ingestion.handlers import all_handlers
from ingestion.loaders.working_store_loader import WorkingStoreLoader
from ingestion.periods import validate_period
from ingestion.transformers.latest_value import reduce_latest
from models.base import DatasetKind
from schemas.cache import CacheEntry
import logging

logger = logging.getLogger(__name__)


def snapshot_name(period: str) -> str:
    return f"pricecatcher_{period}.db"


class PipelineRunner:
    """
    Snapshot pipeline orchestrator

    Responsibilities:
    - Resolve artifacts (one cache operation per dataset)
    - Load all datasets into an ephemeral working store
    - Deduplicate prices to latest values
    - Produce the snapshot and its archive
    - Discard the working store whatever the outcome
    """

    def __init__(
        self,
        cache: Optional[RemoteArtifactCache] = None,
        exporter: Optional[SnapshotExporter] = None,
        output_dir: Union[str, Path, None] = None,
        base_url: Optional[str] = None,
        handlers: Optional[List[DatasetHandler]] = None
    ):
        self.cache = cache or RemoteArtifactCache()
        self.exporter = exporter or SnapshotExporter()
        self.output_dir = Path(output_dir or settings.OUTPUT_DIR)
        self.base_url = base_url or settings.SOURCE_BASE_URL
        self.handlers = handlers or all_handlers()

    async def run(self, period: str) -> Dict[str, Any]:
        """
        Run the full pipeline for one period.

        Args:
            period: Period token (YYYY-MM) or explicit revision label

        Returns:
            Dictionary with run statistics:
            - status: "success"
            - period: Processed period
            - artifact_bytes: Cached artifact size per dataset
            - rows_loaded: Rows loaded per table
            - observations / latest_prices: Price rows before and after reduction
            - snapshot_path / archive_path: Produced files
            - export_steps / contended_steps: Copy loop statistics

        Raises:
            ETLException: Any fatal pipeline error (subclass identifies the stage)
        """
        started = time.perf_counter()
        store = SqliteStore.in_memory()
        staged: List[Path] = []

        try:
            period = validate_period(period)

            # --------------------------------------------------
            # PHASE 1: RESOLVE ARTIFACTS
            # --------------------------------------------------
            logger.info(f"Starting snapshot pipeline for period {period}")
            entries = await self._resolve_artifacts(period)

            # --------------------------------------------------
            # PHASE 2: DECODE, MAP AND LOAD
            # --------------------------------------------------
            store.create_schema()
            rows_loaded: Dict[str, int] = {}
            for handler in self.handlers:
                logger.info(f"Loading {handler.kind.value} from {entries[handler.kind].local_path}")
                rows_loaded[handler.kind.value] = await asyncio.to_thread(
                    self._load_dataset, store, handler, entries[handler.kind]
                )

            # --------------------------------------------------
            # PHASE 3: REDUCE TO LATEST VALUES
            # --------------------------------------------------
            logger.info("Reducing price observations to latest values")
            observations, latest_prices = await asyncio.to_thread(reduce_latest, store)

            # --------------------------------------------------
            # PHASE 4: EXPORT SNAPSHOT (staged)
            # --------------------------------------------------
            snapshot_path = self.output_dir / snapshot_name(period)
            export_result = await asyncio.to_thread(self.exporter.stage, store, snapshot_path)
            staged.append(export_result.staged_path)

            # --------------------------------------------------
            # PHASE 5: ARCHIVE (from the staged snapshot)
            # --------------------------------------------------
            archive_path = self.output_dir / archive_name(period)
            staged_archive = archive_path.with_name(archive_path.name + PARTIAL_SUFFIX)
            staged.append(staged_archive)
            await asyncio.to_thread(
                archive_snapshot,
                export_result.staged_path,
                period,
                staged_archive,
                snapshot_name(period)
            )

            # --------------------------------------------------
            # PHASE 6: PUBLISH
            # --------------------------------------------------
            self.exporter.publish(export_result)
            publish_archive(staged_archive, archive_path)

        except ETLException as e:
            logger.error(
                f"Snapshot pipeline failed for {period}: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            raise

        except Exception as e:
            logger.exception("Unexpected error in snapshot pipeline")
            raise ETLException(
                "Unexpected error in snapshot pipeline",
                context={"period": period},
                original_exception=e
            )

        finally:
            store.dispose()
            for path in staged:
                path.unlink(missing_ok=True)

        result = {
            "status": "success",
            "period": period,
            "artifact_bytes": {kind.value: entry.size_bytes for kind, entry in entries.items()},
            "rows_loaded": rows_loaded,
            "observations": observations,
            "latest_prices": latest_prices,
            "snapshot_path": str(export_result.snapshot_path),
            "archive_path": str(archive_path),
            "snapshot_rows": export_result.snapshot_counts,
            "export_steps": export_result.steps,
            "contended_steps": export_result.contended_steps,
            "duration_seconds": round(time.perf_counter() - started, 3),
        }

        logger.info(
            f"Snapshot pipeline completed for {period}: "
            f"Loaded={rows_loaded}, Latest prices={latest_prices}, Snapshot={snapshot_path}"
        )
        return result

    async def _resolve_artifacts(self, period: str) -> Dict[DatasetKind, CacheEntry]:
        """
        Resolve every dataset concurrently; each targets its own cache file.

        All downloads settle before the first failure (in handler order) is
        raised, so no transfer outlives the run.
        """
        resolved = await asyncio.gather(*(
            self.cache.resolve_entry(
                handler.artifact_name(period),
                handler.remote_url(self.base_url, period)
            )
            for handler in self.handlers
        ), return_exceptions=True)

        for outcome in resolved:
            if isinstance(outcome, BaseException):
                raise outcome
        return {handler.kind: entry for handler, entry in zip(self.handlers, resolved)}

    def _load_dataset(self, store: SqliteStore, handler: DatasetHandler, entry: CacheEntry) -> int:
        loader = WorkingStoreLoader(store)
        try:
            with self.cache.open(entry) as stream:
                rows = iter_rows(stream, handler.kind.value)
                return loader.load(handler.records(rows), handler.table)
        except ETLException as e:
            e.context.setdefault("local_path", str(entry.local_path))
            raise
