"""
Pydantic schema for cached remote artifacts
"""

from pathlib import Path
from pydantic import BaseModel, Field


class CacheEntry(BaseModel):
    """
    A cached artifact and its freshness fingerprint.

    The fingerprint is the byte length only. An upstream change that keeps
    the same size is not detected and the cached copy keeps being served.
    """
    logical_name: str = Field(..., min_length=1)
    local_path: Path
    size_bytes: int = Field(..., ge=0)
