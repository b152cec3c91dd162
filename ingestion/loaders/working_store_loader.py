"""
Load mapped records into the in-memory working store
"""

from itertools import islice
from typing import Iterable, Optional
from pydantic import BaseModel
from sqlalchemy import Table, insert
from sqlalchemy.exc import SQLAlchemyError
from core.config import settings
from core.database import SqliteStore
from core.exceptions import DatabaseError
import logging

logger = logging.getLogger(__name__)


class WorkingStoreLoader:
    """
    Bulk-insert records with parameterized statements.

    Ensures:
    - Bound parameters only, never SQL built from values
    - Bounded memory: records are consumed in batches
    - One transaction per table load
    """

    def __init__(self, store: SqliteStore, batch_size: Optional[int] = None):
        self.store = store
        self.batch_size = batch_size or settings.ETL_BATCH_SIZE

    def load(self, records: Iterable[BaseModel], table: Table) -> int:
        """
        Insert every record as one row of ``table``.

        Args:
            records: Mapped records (consumed lazily)
            table: Destination table

        Returns:
            Number of rows inserted

        Raises:
            DatabaseError: If an insert fails
            MappingError: Propagated from the record stream
        """
        loaded_count = 0
        statement = insert(table)
        iterator = iter(records)

        with self.store.engine.connect() as conn:
            try:
                while True:
                    batch = [record.model_dump() for record in islice(iterator, self.batch_size)]
                    if not batch:
                        break
                    conn.execute(statement, batch)
                    loaded_count += len(batch)
                    logger.debug(f"{table.name}: {loaded_count} rows inserted")
                conn.commit()
            except SQLAlchemyError as e:
                conn.rollback()
                raise DatabaseError(
                    f"Failed to load {table.name}",
                    context={
                        "operation": "INSERT",
                        "table_name": table.name,
                        "rows_loaded": loaded_count
                    },
                    original_exception=e
                )

        logger.info(f"Loaded {loaded_count} rows into {table.name}")
        return loaded_count
