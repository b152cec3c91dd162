"""
Custom exceptions for the snapshot pipeline with structured error context.

Every fatal condition in a run is raised as one of these exceptions. Each
carries a context dictionary naming the dataset, URL, path or field that
failed so the run diagnostic points at the offending resource.

Exception Hierarchy:
    ETLException (base)
    ├── ConfigurationError
    ├── ExtractionError
    │   ├── ArtifactFetchError
    │   ├── FreshnessProbeError
    │   └── CacheError
    ├── TransformationError
    │   ├── DecodeError
    │   ├── MappingError
    │   └── ReductionError
    ├── LoadError
    │   └── DatabaseError
    └── ExportError
        ├── SnapshotCopyError
        └── ArchiveError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ETLException(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (dataset, url, path, field)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


class ConfigurationError(ETLException):
    """
    Raised for invalid run parameters.

    Context should include:
        - period: The rejected period token or label
        - index: The rejected period index (if applicable)
    """
    pass


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(ETLException):
    """Base exception for artifact retrieval failures."""
    pass


class ArtifactFetchError(ExtractionError):
    """
    Raised when downloading a remote artifact fails.

    Context should include:
        - logical_name: Dataset identifier
        - url: The artifact URL
        - status_code: HTTP status code (if applicable)
    """
    pass


class FreshnessProbeError(ExtractionError):
    """
    Raised when the metadata-only probe of a cached artifact fails.

    Context should include:
        - logical_name: Dataset identifier
        - url: The artifact URL
        - content_length: Raw header value (if present but unreadable)
    """
    pass


class CacheError(ExtractionError):
    """
    Raised for local filesystem failures in the artifact cache.

    Context should include:
        - logical_name: Dataset identifier
        - local_path: Cache file path
        - operation: stat, unlink, write or open
    """
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(ETLException):
    """Base exception for decode, mapping and reduction failures."""
    pass


class DecodeError(TransformationError):
    """
    Raised when a cached artifact cannot be read as Parquet.

    Context should include:
        - dataset: Dataset kind
        - local_path: Artifact path (if known)
    """
    pass


class MappingError(TransformationError):
    """
    Raised when a required field of a row is malformed.

    Context should include:
        - dataset: Dataset kind
        - row_index: Zero-based row position in the artifact
        - field_errors: Dictionary of field name to error message
    """
    pass


class ReductionError(TransformationError):
    """
    Raised when collapsing observations to latest values fails.

    Context should include:
        - table_name: Observation table
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(ETLException):
    """Base exception for working store load failures."""
    pass


class DatabaseError(LoadError):
    """
    Raised when working store operations fail.

    Context should include:
        - operation: Type of database operation (INSERT, CREATE, COUNT)
        - table_name: Name of the table
        - rows_loaded: Rows committed before the failure (if applicable)
    """
    pass


# ============================================================================
# Export Errors
# ============================================================================

class ExportError(ETLException):
    """Base exception for snapshot and archive failures."""
    pass


class SnapshotCopyError(ExportError):
    """
    Raised when the incremental copy reports a non-recoverable status.

    Context should include:
        - snapshot_path: Destination file
        - status_code: Storage engine status code
        - remaining: Pages still to copy
        - total: Total pages in the source
    """
    pass


class ArchiveError(ExportError):
    """
    Raised when packaging a snapshot fails.

    Context should include:
        - snapshot_path: Snapshot being archived
        - archive_path: Destination archive
    """
    pass
