"""
Discover published snapshots in the output directory
"""

import datetime as dt
import re
from pathlib import Path
from typing import List
from ingestion.exporters.archiver import archive_name
from schemas.api import SnapshotInfo

SNAPSHOT_FILE_PATTERN = re.compile(r"^pricecatcher_(?P<period>.+)\.db$")


def list_snapshots(output_dir: Path) -> List[SnapshotInfo]:
    """Return complete snapshots (never ``.partial`` files) sorted by period."""
    if not output_dir.is_dir():
        return []

    snapshots = []
    for path in sorted(output_dir.iterdir()):
        match = SNAPSHOT_FILE_PATTERN.match(path.name)
        if not match or not path.is_file():
            continue

        period = match.group("period")
        stat = path.stat()
        archive = output_dir / archive_name(period)
        has_archive = archive.is_file()

        snapshots.append(SnapshotInfo(
            period=period,
            snapshot_file=path.name,
            size_bytes=stat.st_size,
            modified_at=dt.datetime.fromtimestamp(stat.st_mtime, tz=dt.timezone.utc),
            archive_file=archive.name if has_archive else None,
            archive_size_bytes=archive.stat().st_size if has_archive else None
        ))

    snapshots.sort(key=lambda info: info.period)
    return snapshots
