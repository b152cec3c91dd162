"""
Parquet decoder producing a lazy stream of row dictionaries
"""

import pyarrow as pa
import pyarrow.parquet as pq
from typing import Any, BinaryIO, Dict, Iterator, Optional
from core.config import settings
from core.exceptions import DecodeError
import logging

logger = logging.getLogger(__name__)


def iter_rows(
    stream: BinaryIO,
    dataset: str,
    batch_size: Optional[int] = None
) -> Iterator[Dict[str, Any]]:
    """
    Decode a Parquet byte stream into rows, one record batch at a time.

    Args:
        stream: Readable binary stream positioned at the start of the file
        dataset: Dataset name used in error context
        batch_size: Rows decoded per batch (defaults to READ_BATCH_SIZE)

    Yields:
        One dictionary per row, keyed by column name

    Raises:
        DecodeError: If the stream is not a readable Parquet file
    """
    batch_size = batch_size or settings.READ_BATCH_SIZE
    local_path = getattr(stream, "name", None)

    try:
        parquet_file = pq.ParquetFile(stream)
        logger.info(
            f"Decoding {dataset}: {parquet_file.metadata.num_rows} rows, "
            f"columns={parquet_file.schema_arrow.names}"
        )
        for batch in parquet_file.iter_batches(batch_size=batch_size):
            yield from batch.to_pylist()
    except (pa.ArrowException, OSError) as e:
        raise DecodeError(
            f"Failed to decode {dataset} artifact",
            context={"dataset": dataset, "local_path": local_path},
            original_exception=e
        )
