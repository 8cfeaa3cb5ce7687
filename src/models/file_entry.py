"""
Queue entry domain models.
Represents one picked file moving through the upload lifecycle.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class EntryStatus(str, Enum):
    """Lifecycle states of a queue entry. There is no idle state."""
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class FileRef:
    """Immutable reference to a picked file and its metadata."""
    name: str
    size: int
    content_type: str
    content: bytes = field(repr=False)


@dataclass(frozen=True)
class UploadResult:
    """What the remote service returned for a stored file."""
    remote_id: str
    metadata: dict = field(default_factory=dict)


class FileEntry:
    """Domain model for one tracked file in the upload queue."""

    def __init__(
        self,
        entry_id: str,
        file_ref: FileRef,
        status: EntryStatus = EntryStatus.UPLOADING,
        progress: int = 0,
        result: Optional[UploadResult] = None,
        error_message: Optional[str] = None,
        created_at: Optional[datetime] = None
    ):
        self.id = entry_id
        self.file_ref = file_ref
        self.status = status
        self.progress = progress
        self.result = result
        self.error_message = error_message
        self.created_at = created_at or datetime.utcnow()

    def copy(self) -> "FileEntry":
        """Return a detached copy sharing the immutable file reference."""
        return FileEntry(
            entry_id=self.id,
            file_ref=self.file_ref,
            status=self.status,
            progress=self.progress,
            result=self.result,
            error_message=self.error_message,
            created_at=self.created_at
        )

    def __repr__(self):
        return f"FileEntry(id={self.id}, filename={self.file_ref.name}, status={self.status.value}, progress={self.progress})"
