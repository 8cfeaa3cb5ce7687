"""
Data Transfer Objects for the upload queue API.
Defines response schemas rendered from store snapshots.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class FileEntryResponse(BaseModel):
    """Response schema for a single queue entry."""
    id: str = Field(..., description="Stable entry identifier")
    filename: str
    size: int = Field(..., description="File size in bytes")
    size_display: str = Field(..., description="Human readable file size")
    content_type: str
    status: str = Field(..., description="uploading, success or error")
    progress: int = Field(..., ge=0, le=100)
    remote_id: Optional[str] = None
    metadata: Optional[dict] = None
    error_message: Optional[str] = None
    created_at: datetime


class QueueSnapshotResponse(BaseModel):
    """Response schema for the full queue view."""
    entries: list[FileEntryResponse]
    count: int
    version: int = Field(..., description="Changes whenever the queue is mutated")
    is_uploading: bool
    has_successful: bool


class BatchAcceptedResponse(BaseModel):
    """Response schema for an accepted batch."""
    entry_ids: list[str]
    count: int
    message: str


class RetryAcceptedResponse(BaseModel):
    """Response schema for a scheduled retry."""
    entry_id: str
    message: str


class ClearSuccessfulResponse(BaseModel):
    """Response schema for clearing successful uploads."""
    removed: int
