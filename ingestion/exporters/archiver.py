"""
Package a snapshot file into a distributable zip archive
"""

import os
import shutil
import zipfile
from pathlib import Path
from typing import Optional, Union
from core.exceptions import ArchiveError
import logging

logger = logging.getLogger(__name__)

# Fixed entry timestamp: identical snapshots produce identical archives
ENTRY_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def archive_name(period: str) -> str:
    return f"pricecatcher_{period}.zip"


def archive_snapshot(
    snapshot_path: Union[str, Path],
    period: str,
    archive_path: Union[str, Path, None] = None,
    entry_name: Optional[str] = None
) -> Path:
    """
    Write the archive of one snapshot file.

    The archive holds the snapshot as its single deflated entry. It is
    written to a temporary file and moved into place.

    Args:
        snapshot_path: Snapshot file to package (may be a staged copy)
        period: Period the snapshot covers
        archive_path: Destination; defaults to ``pricecatcher_<period>.zip``
            beside the snapshot
        entry_name: Name of the entry; defaults to the snapshot file name

    Raises:
        ArchiveError: If the snapshot cannot be read or the archive written
    """
    snapshot_path = Path(snapshot_path)
    archive_path = Path(archive_path) if archive_path else snapshot_path.with_name(archive_name(period))
    tmp_path = archive_path.with_name(archive_path.name + ".tmp")

    entry = zipfile.ZipInfo(entry_name or snapshot_path.name, date_time=ENTRY_DATE_TIME)
    entry.compress_type = zipfile.ZIP_DEFLATED
    entry.external_attr = 0o644 << 16

    try:
        with zipfile.ZipFile(tmp_path, "w") as archive, open(snapshot_path, "rb") as snapshot:
            with archive.open(entry, "w", force_zip64=True) as target:
                shutil.copyfileobj(snapshot, target, 1024 * 1024)
        os.replace(tmp_path, archive_path)
    except (OSError, zipfile.LargeZipFile) as e:
        tmp_path.unlink(missing_ok=True)
        raise ArchiveError(
            f"Failed to archive {snapshot_path}",
            context={
                "snapshot_path": str(snapshot_path),
                "archive_path": str(archive_path)
            },
            original_exception=e
        )

    logger.info(f"Archived {entry.filename} -> {archive_path} ({archive_path.stat().st_size} bytes)")
    return archive_path


def publish_archive(staged_path: Union[str, Path], archive_path: Union[str, Path]) -> Path:
    """
    Move a staged archive over its final path.

    Raises:
        ArchiveError: If the rename fails
    """
    staged_path = Path(staged_path)
    archive_path = Path(archive_path)
    try:
        os.replace(staged_path, archive_path)
    except OSError as e:
        raise ArchiveError(
            f"Failed to publish archive {archive_path}",
            context={
                "staged_path": str(staged_path),
                "archive_path": str(archive_path)
            },
            original_exception=e
        )
    return archive_path
