"""
Dependency injection container for FastAPI.
Provides singleton-like behavior for the queue, its store and the upload client.
"""
from functools import lru_cache
from src.core import config
from src.repositories.file_entry_store import FileEntryStore
from src.repositories.image_api_repository import ImageApiRepository
from src.repositories.s3_repository import S3Repository
from src.repositories.upload_client import UploadClient
from src.services.file_service import FileService
from src.services.queue_driver import QueueDriver


@lru_cache()
def get_file_entry_store() -> FileEntryStore:
    """Get FileEntryStore singleton instance."""
    return FileEntryStore()


@lru_cache()
def get_upload_client() -> UploadClient:
    """Get the upload client selected by UPLOAD_BACKEND."""
    backend = config.settings.upload_backend.lower()
    if backend == "s3":
        return S3Repository()
    if backend == "image_api":
        return ImageApiRepository(token=config.settings.api_token)
    raise ValueError(f"Unknown upload backend: {config.settings.upload_backend}")


@lru_cache()
def get_file_service() -> FileService:
    """Get FileService singleton instance."""
    return FileService()


@lru_cache()
def get_queue_driver() -> QueueDriver:
    """Get QueueDriver singleton instance with injected dependencies."""
    return QueueDriver(
        store=get_file_entry_store(),
        upload_client=get_upload_client()
    )
