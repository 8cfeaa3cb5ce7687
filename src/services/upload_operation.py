"""
Upload Operation for a single queue entry.
Drives one entry through uploading -> success | error against the upload client.
"""
from typing import Optional
import structlog
from src.core.exceptions import EntryNotFoundException, InvalidTransitionException, UploadFailedException
from src.models.file_entry import EntryStatus, FileEntry, FileRef, UploadResult
from src.repositories.file_entry_store import FileEntryStore
from src.repositories.upload_client import UploadClient

logger = structlog.get_logger(__name__)

DISPATCH_PROGRESS = 50
FALLBACK_ERROR_MESSAGE = "Upload failed"


class UploadOperation:
    """Runs one upload attempt and records its outcome in the store."""

    def __init__(self, store: FileEntryStore, upload_client: UploadClient):
        self.store = store
        self.upload_client = upload_client

    async def run(self, entry_id: str, file_ref: FileRef) -> Optional[FileEntry]:
        """
        Upload the entry's file and transition the entry accordingly.

        Both the first attempt and a retry go through here; a retry drops
        the previous result or error message on dispatch.

        Args:
            entry_id: Entry identifier
            file_ref: The entry's file reference

        Returns:
            The final entry, or None if the entry was removed meanwhile
        """
        if not self.dispatch(entry_id):
            logger.debug("upload_skipped_removed_entry", entry_id=entry_id, filename=file_ref.name)
            return None
        return await self.complete(entry_id, file_ref)

    def dispatch(self, entry_id: str) -> bool:
        """
        Mark the entry as in flight (uploading, progress 50).

        Returns:
            False if the entry is gone or cannot be dispatched from its current state
        """
        try:
            self.store.transition(entry_id, {'status': EntryStatus.UPLOADING, 'progress': DISPATCH_PROGRESS})
        except EntryNotFoundException:
            return False
        except InvalidTransitionException as e:
            logger.debug("dispatch_rejected", entry_id=entry_id, reason=e.message)
            return False
        return True

    async def complete(self, entry_id: str, file_ref: FileRef) -> Optional[FileEntry]:
        """Await the upload client for a dispatched entry and record the outcome."""
        try:
            result = await self.upload_client.upload(file_ref)
            if not isinstance(result, UploadResult):
                raise TypeError(f"upload client returned {type(result).__name__}, expected UploadResult")
        except UploadFailedException as e:
            error_message = e.reason or FALLBACK_ERROR_MESSAGE
            logger.warning("upload_failed", entry_id=entry_id, filename=file_ref.name,
                           reason=error_message, detail=e.message)
            return self._finish(entry_id, {'status': EntryStatus.ERROR, 'error_message': error_message})
        except Exception as e:
            logger.exception("upload_crashed", entry_id=entry_id, filename=file_ref.name, error=str(e))
            return self._finish(entry_id, {'status': EntryStatus.ERROR, 'error_message': FALLBACK_ERROR_MESSAGE})

        try:
            entry = self.store.transition(entry_id, {'status': EntryStatus.SUCCESS, 'result': result})
        except EntryNotFoundException:
            logger.info("late_transition_discarded", entry_id=entry_id, status=EntryStatus.SUCCESS.value)
            return None
        except InvalidTransitionException as e:
            logger.error("upload_result_rejected", entry_id=entry_id, filename=file_ref.name, reason=e.message)
            return self._finish(entry_id, {'status': EntryStatus.ERROR, 'error_message': FALLBACK_ERROR_MESSAGE})

        logger.info("upload_succeeded", entry_id=entry_id, filename=file_ref.name,
                    remote_id=result.remote_id, note="AI analysis in progress")
        return entry

    def _finish(self, entry_id: str, patch: dict) -> Optional[FileEntry]:
        """Apply the final error transition; a removed entry swallows it."""
        try:
            return self.store.transition(entry_id, patch)
        except EntryNotFoundException:
            logger.info("late_transition_discarded", entry_id=entry_id, status=patch['status'].value)
            return None
        except InvalidTransitionException as e:
            logger.error("error_transition_rejected", entry_id=entry_id, reason=e.message)
            return self.store.get(entry_id)
