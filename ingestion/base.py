"""
Abstract base class for dataset ingest handlers
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Iterator, Type
from pydantic import BaseModel, ValidationError
from sqlalchemy import Table
from core.exceptions import MappingError
from models.base import DatasetKind
import logging

logger = logging.getLogger(__name__)


class DatasetHandler(ABC):
    """
    Abstract base class for one logical dataset.

    Responsibilities:
    - Name the remote artifact for a period
    - Map decoded rows to validated domain records
    - Name the working store table the records load into

    Subclasses set ``kind``, ``table`` and ``record_model``.
    """

    kind: DatasetKind
    table: Table
    record_model: Type[BaseModel]

    @abstractmethod
    def artifact_name(self, period: str) -> str:
        """
        Return the artifact identifier (file stem) for a period.

        Args:
            period: Period token (YYYY-MM) or revision label
        """
        pass

    def remote_url(self, base_url: str, period: str) -> str:
        """Build the deterministic artifact URL."""
        return f"{base_url.rstrip('/')}/{self.artifact_name(period)}.parquet"

    def map_row(self, row: Dict[str, Any], row_index: int = 0) -> BaseModel:
        """
        Map one decoded row to a domain record.

        Raises:
            MappingError: If a required numeric or date field is malformed
        """
        try:
            return self.record_model.model_validate(row)
        except ValidationError as e:
            field_errors = {
                ".".join(str(part) for part in error["loc"]): error["msg"]
                for error in e.errors()
            }
            raise MappingError(
                f"Malformed {self.kind.value} row",
                context={
                    "dataset": self.kind.value,
                    "row_index": row_index,
                    "field_errors": field_errors,
                },
                original_exception=e
            )

    def records(self, rows: Iterable[Dict[str, Any]]) -> Iterator[BaseModel]:
        """Lazily map a stream of decoded rows."""
        for row_index, row in enumerate(rows):
            yield self.map_row(row, row_index)
