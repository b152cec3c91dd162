"""
Health check endpoint with snapshot status
"""

import os
from pathlib import Path
from fastapi import APIRouter, Depends, Request
from api.catalog import list_snapshots
from api.dependencies import get_output_dir
from core.config import settings
from schemas.api import HealthCheckResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
def health_check(request: Request, output_dir: Path = Depends(get_output_dir)):
    """
    Health check endpoint.

    Returns:
    - Output directory reachability
    - Latest published snapshot
    - Request metadata

    Status is ``unhealthy`` when the output directory is missing or not
    readable, ``degraded`` when it holds no snapshot yet.
    """
    request_id = getattr(request.state, "request_id", None)
    dir_exists = output_dir.is_dir() and os.access(output_dir, os.R_OK)

    snapshots = []
    if dir_exists:
        try:
            snapshots = list_snapshots(output_dir)
        except OSError as e:
            logger.error(f"[{request_id}] Failed to list snapshots in {output_dir}: {e}")
            dir_exists = False

    if not dir_exists:
        status = "unhealthy"
    elif not snapshots:
        status = "degraded"
    else:
        status = "healthy"

    return HealthCheckResponse(
        status=status,
        environment=settings.ENVIRONMENT,
        output_dir=str(output_dir),
        output_dir_exists=dir_exists,
        snapshot_count=len(snapshots),
        latest_snapshot=snapshots[-1] if snapshots else None,
        request_id=request_id
    )
