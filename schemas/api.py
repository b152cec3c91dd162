"""
Pydantic schemas for API request/response models
"""

import datetime as dt
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# ============================================================================
# Snapshot Catalogue Schemas
# ============================================================================

class SnapshotInfo(BaseModel):
    """A snapshot file on disk and its archive, if one was produced"""
    period: str
    snapshot_file: str
    size_bytes: int
    modified_at: dt.datetime
    archive_file: Optional[str] = None
    archive_size_bytes: Optional[int] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "period": "2024-03",
                "snapshot_file": "pricecatcher_2024-03.db",
                "size_bytes": 41943040,
                "modified_at": "2024-03-15T02:00:00Z",
                "archive_file": "pricecatcher_2024-03.zip",
                "archive_size_bytes": 9437184
            }
        }
    )


class SnapshotListResponse(BaseModel):
    """Snapshots available in the output directory, oldest period first"""
    snapshots: List[SnapshotInfo] = Field(default_factory=list)
    total: int = 0


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall status: healthy, degraded, unhealthy")
    timestamp: dt.datetime = Field(default_factory=utc_now)
    environment: str
    output_dir: str
    output_dir_exists: bool
    snapshot_count: int = 0
    latest_snapshot: Optional[SnapshotInfo] = None
    request_id: Optional[str] = None


# ============================================================================
# Price Query Schemas
# ============================================================================

class PriceRecord(BaseModel):
    """Latest price of an item at a premise, with lookup descriptors"""
    date: dt.date
    premise_code: int
    item_code: int
    price: float

    premise: Optional[str] = None
    address: Optional[str] = None
    premise_type: Optional[str] = None
    state: Optional[str] = None
    district: Optional[str] = None

    item: Optional[str] = None
    unit: Optional[str] = None
    item_group: Optional[str] = None
    item_category: Optional[str] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "date": "2024-03-14",
                "premise_code": 1,
                "item_code": 1,
                "price": 7.5,
                "premise": "KEDAI RUNCIT A",
                "address": "JALAN 1, TAMAN A",
                "premise_type": "Kedai Runcit",
                "state": "Selangor",
                "district": "Petaling",
                "item": "AYAM BERSIH - STANDARD",
                "unit": "1kg",
                "item_group": "BARANGAN SEGAR",
                "item_category": "AYAM"
            }
        }
    )


class PaginationMetadata(BaseModel):
    """Pagination metadata"""
    total_items: int
    total_pages: int
    current_page: int
    page_size: int
    has_next: bool
    has_previous: bool


class PriceListResponse(BaseModel):
    """Paginated latest prices of one snapshot"""
    period: str
    items: List[PriceRecord]
    pagination: PaginationMetadata
    filters_applied: Dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Error Response Schema
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str
    detail: Optional[str] = None
    timestamp: dt.datetime = Field(default_factory=utc_now)
