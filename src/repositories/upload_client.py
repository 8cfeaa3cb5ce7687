"""
Abstract base class for upload clients.
Defines the contract for sending one picked file to remote storage.
"""
from abc import ABC, abstractmethod
from src.models.file_entry import FileRef, UploadResult


class UploadClient(ABC):
    """Abstract interface for the remote upload collaborator."""

    @abstractmethod
    async def upload(self, file_ref: FileRef) -> UploadResult:
        """
        Upload a single file. Single-shot: no retry and no progress callback.

        Raises:
            UploadFailedException: If the remote side rejects or fails the upload
        """
        pass
