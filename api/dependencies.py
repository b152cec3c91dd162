"""
Shared FastAPI dependencies
"""

from pathlib import Path
from typing import Iterator
from fastapi import Depends, HTTPException
from core.config import settings
from core.database import SqliteStore
from core.exceptions import ConfigurationError
from ingestion.periods import validate_period
from ingestion.runner import snapshot_name


def get_output_dir() -> Path:
    """Directory holding the published snapshots"""
    return Path(settings.OUTPUT_DIR)


def get_snapshot_store(period: str, output_dir: Path = Depends(get_output_dir)) -> Iterator[SqliteStore]:
    """
    Open the snapshot of ``period`` for reading.

    Raises:
        HTTPException: 400 for a malformed period, 404 when no snapshot exists
    """
    try:
        period = validate_period(period)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    path = output_dir / snapshot_name(period)
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"No snapshot for period {period}")

    store = SqliteStore.open_file(path)
    try:
        yield store
    finally:
        store.dispose()
