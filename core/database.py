"""
SQLite store management with SQLAlchemy

A run uses two kinds of store with the same schema: the ephemeral in-memory
working store that receives loads and the reduction, and the file-backed
snapshot store that the exporter copies it into.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Union
from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from core.backup import SqliteIncrementalCopy
from models.base import metadata
import logging

logger = logging.getLogger(__name__)


class SqliteStore:
    """
    SQLAlchemy engine over one SQLite database holding the snapshot schema.

    Connections are opened with ``check_same_thread=False`` so that loads
    running in worker threads and the incremental copy worker can share
    them.
    """

    def __init__(self, engine: Engine, path: Optional[Path] = None):
        self.engine = engine
        self.path = path

    @classmethod
    def in_memory(cls) -> "SqliteStore":
        """Create an empty private in-memory store (single shared connection)."""
        engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        return cls(engine)

    @classmethod
    def open_file(cls, path: Union[str, Path]) -> "SqliteStore":
        """Open (creating if needed) a file-backed store."""
        path = Path(path)
        engine = create_engine(
            f"sqlite:///{path}",
            connect_args={"check_same_thread": False},
        )
        return cls(engine, path)

    def create_schema(self) -> None:
        """Create the prices, premises and items tables with their indexes."""
        metadata.create_all(self.engine)

    def row_counts(self) -> Dict[str, int]:
        """Return the row count of every schema table."""
        counts = {}
        with self.engine.connect() as conn:
            for table in metadata.sorted_tables:
                counts[table.name] = conn.execute(
                    select(func.count()).select_from(table)
                ).scalar_one()
        return counts

    @contextmanager
    def begin_incremental_copy(self, target: "SqliteStore", pages: int) -> Iterator[SqliteIncrementalCopy]:
        """
        Start a stepped copy of this store's ``main`` database into ``target``.

        The copy replaces the whole content of ``target``. Both raw
        connections stay checked out until the context exits.
        """
        source_conn = self.engine.raw_connection()
        target_conn = target.engine.raw_connection()
        copy = None
        try:
            copy = SqliteIncrementalCopy(
                source_conn.driver_connection, target_conn.driver_connection, pages
            )
            yield copy
        finally:
            if copy is not None:
                copy.close()
            target_conn.close()
            source_conn.close()

    def dispose(self) -> None:
        """Close all pooled connections. An in-memory store is discarded."""
        self.engine.dispose()
