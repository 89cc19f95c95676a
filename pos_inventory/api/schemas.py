"""
Pydantic schemas for FastAPI endpoints.
"""

from typing import Dict, List

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for /health endpoint."""

    status: str = Field(..., description="Service status")
    backend: str = Field(..., description="Backing store implementation")
    collections: List[str] = Field(default_factory=list, description="Registered collections")


class TableStats(BaseModel):
    """Row statistics for one KV table."""

    count: int = 0
    total_bytes: int = 0
    oldest_ts: float = 0
    newest_ts: float = 0


class CacheStatsResponse(BaseModel):
    """Response model for /cache/stats endpoint."""

    tables: Dict[str, TableStats] = Field(..., description="Statistics per KV table")


class LedgerEntry(BaseModel):
    """Ledger state of one collection."""

    collection: str
    collection_key: str
    cache_key: str
    last_fetch_time: float = Field(..., description="Last full fetch, epoch seconds")
    last_update_time: float = Field(..., description="Last recorded write, epoch seconds")
    snapshot_fresh: bool = Field(..., description="No write since the last full fetch")
    cache_valid: bool = Field(..., description="Cache entry present and within TTL")
    cache_modified: float = Field(0.0, description="Last change to the cached list, epoch seconds")


class LedgerResponse(BaseModel):
    """Response model for /cache/ledger endpoint."""

    entries: List[LedgerEntry]


class DeleteResponse(BaseModel):
    """Response model for document deletes."""

    id: str
    deleted: bool = Field(..., description="Whether the store held the document")


class InvalidateResponse(BaseModel):
    """Response model for collection invalidation."""

    collection: str
    invalidated: bool = True
