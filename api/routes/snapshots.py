"""
Snapshot catalogue and latest-price query endpoints
"""

import math
import time
import uuid
from pathlib import Path
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import and_, func, select
from api.catalog import list_snapshots
from api.dependencies import get_output_dir, get_snapshot_store
from core.database import SqliteStore
from models.items import items
from models.premises import premises
from models.prices import prices
from schemas.api import PaginationMetadata, PriceListResponse, PriceRecord, SnapshotListResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/snapshots", tags=["Snapshots"])


@router.get("", response_model=SnapshotListResponse)
def get_snapshots(output_dir: Path = Depends(get_output_dir)):
    """List snapshots and archives present in the output directory."""
    snapshots = list_snapshots(output_dir)
    return SnapshotListResponse(snapshots=snapshots, total=len(snapshots))


@router.get("/{period}/prices", response_model=PriceListResponse)
def get_prices(
    request: Request,
    period: str,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=1000, description="Items per page"),
    state: Optional[str] = Query(None, description="Filter by premise state"),
    district: Optional[str] = Query(None, description="Filter by premise district"),
    premise_type: Optional[str] = Query(None, description="Filter by premise type"),
    item_group: Optional[str] = Query(None, description="Filter by item group"),
    item_category: Optional[str] = Query(None, description="Filter by item category"),
    item_code: Optional[int] = Query(None, description="Filter by item code"),
    premise_code: Optional[int] = Query(None, description="Filter by premise code"),
    store: SqliteStore = Depends(get_snapshot_store)
):
    """
    Retrieve latest prices of one snapshot with premise and item descriptors.

    Prices whose premise or item is missing from the lookups are still
    returned, with empty descriptors.
    """
    start_time = time.time()
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")

    filters_applied = {k: v for k, v in {
        "state": state,
        "district": district,
        "premise_type": premise_type,
        "item_group": item_group,
        "item_category": item_category,
        "item_code": item_code,
        "premise_code": premise_code,
    }.items() if v is not None}

    logger.info(
        f"[{request_id}] GET /snapshots/{period}/prices - page={page}, "
        f"page_size={page_size}, filters={filters_applied}"
    )

    columns = {
        "state": premises.c.state,
        "district": premises.c.district,
        "premise_type": premises.c.premise_type,
        "item_group": items.c.item_group,
        "item_category": items.c.item_category,
        "item_code": prices.c.item_code,
        "premise_code": prices.c.premise_code,
    }
    filters = [columns[name] == value for name, value in filters_applied.items()]

    joined = (
        prices
        .outerjoin(premises, premises.c.premise_code == prices.c.premise_code)
        .outerjoin(items, items.c.item_code == prices.c.item_code)
    )

    query = select(
        prices.c.date,
        prices.c.premise_code,
        prices.c.item_code,
        prices.c.price,
        premises.c.premise,
        premises.c.address,
        premises.c.premise_type,
        premises.c.state,
        premises.c.district,
        items.c.item,
        items.c.unit,
        items.c.item_group,
        items.c.item_category,
    ).select_from(joined)
    count_query = select(func.count()).select_from(joined)

    if filters:
        query = query.where(and_(*filters))
        count_query = count_query.where(and_(*filters))

    offset = (page - 1) * page_size
    query = query.order_by(prices.c.premise_code, prices.c.item_code).offset(offset).limit(page_size)

    with store.engine.connect() as conn:
        total_items = conn.execute(count_query).scalar_one()
        rows = conn.execute(query).all()

    total_pages = math.ceil(total_items / page_size) if total_items > 0 else 0
    data = [PriceRecord.model_validate(dict(row._mapping)) for row in rows]

    logger.info(
        f"[{request_id}] Returned {len(data)} prices "
        f"(total: {(time.time() - start_time) * 1000:.2f}ms)"
    )

    return PriceListResponse(
        period=period,
        items=data,
        pagination=PaginationMetadata(
            current_page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1
        ),
        filters_applied=filters_applied
    )
