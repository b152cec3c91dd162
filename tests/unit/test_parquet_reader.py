"""
Unit tests for Parquet decoding
"""

import datetime
import io
import pytest
from core.exceptions import DecodeError
from ingestion.extractors.parquet_reader import iter_rows
from tests.fakes import parquet_bytes


def test_iter_rows_yields_dicts_across_batches(price_columns):
    """Test every row is produced regardless of batch boundaries"""
    stream = io.BytesIO(parquet_bytes(price_columns))

    rows = list(iter_rows(stream, "prices", batch_size=3))

    assert len(rows) == 4
    assert rows[0] == {
        "date": datetime.date(2024, 3, 1),
        "premise_code": 1,
        "item_code": 10,
        "price": 9.5,
    }
    assert [row["price"] for row in rows] == price_columns["price"]


def test_iter_rows_preserves_nulls(premise_columns):
    stream = io.BytesIO(parquet_bytes(premise_columns))

    rows = list(iter_rows(stream, "premises"))

    assert rows[1]["address"] is None


def test_iter_rows_rejects_non_parquet():
    """Test garbage bytes raise DecodeError with the dataset name"""
    stream = io.BytesIO(b"this is not a parquet file at all")

    with pytest.raises(DecodeError) as exc_info:
        list(iter_rows(stream, "items"))

    assert exc_info.value.context["dataset"] == "items"


def test_iter_rows_reports_local_path(tmp_path):
    """Test file-backed streams name their path in the error context"""
    path = tmp_path / "lookup_item.parquet"
    path.write_bytes(b"PAR1 truncated")

    with open(path, "rb") as stream:
        with pytest.raises(DecodeError) as exc_info:
            list(iter_rows(stream, "items"))

    assert exc_info.value.context["local_path"] == str(path)
