"""
Queue Driver for upload batches.
Orchestrates batches end to end and exposes the user commands.
"""
from typing import List, Optional, Tuple
import structlog
from src.core.exceptions import EntryNotFoundException
from src.models.file_entry import EntryStatus, FileEntry, FileRef
from src.repositories.file_entry_store import FileEntryStore
from src.repositories.upload_client import UploadClient
from src.services.upload_operation import UploadOperation

logger = structlog.get_logger(__name__)


class QueueDriver:
    """
    Service for upload queue operations.

    Uploads within a batch run strictly one after another, so at most one
    batch upload per driver is in flight at any time. Retries run on their
    own and may interleave with a batch.
    """

    def __init__(
        self,
        store: FileEntryStore = None,
        upload_client: UploadClient = None,
        upload_operation: UploadOperation = None
    ):
        self.store = store or FileEntryStore()
        if upload_operation is None:
            if upload_client is None:
                raise ValueError("QueueDriver needs an upload_client or an upload_operation")
            upload_operation = UploadOperation(self.store, upload_client)
        self.upload_operation = upload_operation
        self._active_runs = 0

    @property
    def is_uploading(self) -> bool:
        """True while a batch or a retry is running."""
        return self._active_runs > 0

    async def enqueue_batch(self, file_refs: List[FileRef]) -> List[str]:
        """
        Accept a batch and upload it sequentially.

        Args:
            file_refs: Files already admitted by the file picker

        Returns:
            Entry ids in file order
        """
        entry_ids = self.accept(file_refs)
        await self.run_batch(entry_ids)
        return entry_ids

    def accept(self, file_refs: List[FileRef]) -> List[str]:
        """Create one entry per file, in file order, without uploading yet."""
        entry_ids = [self.store.create(file_ref) for file_ref in file_refs]
        logger.info("batch_accepted", count=len(entry_ids))
        return entry_ids

    async def run_batch(self, entry_ids: List[str]) -> None:
        """Upload accepted entries one at a time; removed entries are skipped."""
        self._active_runs += 1
        try:
            for entry_id in entry_ids:
                entry = self.store.get(entry_id)
                if entry is None:
                    continue
                await self.upload_operation.run(entry_id, entry.file_ref)
        finally:
            self._active_runs -= 1
        logger.info("batch_finished", count=len(entry_ids))

    async def retry(self, entry_id: str) -> bool:
        """
        Re-run the upload for a failed entry.

        Returns:
            False if the entry is absent or not in error, True once the retry finished
        """
        file_ref = self.begin_retry(entry_id)
        if file_ref is None:
            return False
        await self.finish_retry(entry_id, file_ref)
        return True

    def begin_retry(self, entry_id: str) -> Optional[FileRef]:
        """
        Dispatch a failed entry right away so a second retry request sees it uploading.

        Returns:
            The entry's file reference, or None if the entry is absent or not in error.
            A non-None result must be followed by finish_retry().
        """
        entry = self.store.get(entry_id)
        if entry is None or entry.status != EntryStatus.ERROR or not self.upload_operation.dispatch(entry_id):
            logger.debug("retry_ignored", entry_id=entry_id,
                         status=entry.status.value if entry else None)
            return None

        self._active_runs += 1
        return entry.file_ref

    async def finish_retry(self, entry_id: str, file_ref: FileRef) -> None:
        """Upload a dispatched retry and record its outcome."""
        try:
            await self.upload_operation.complete(entry_id, file_ref)
        finally:
            self._active_runs -= 1

    def remove_entry(self, entry_id: str) -> bool:
        """
        Remove an entry in any state. An in-flight upload is not cancelled;
        its outcome is discarded when it arrives.

        Returns:
            False if the entry was already gone
        """
        try:
            self.store.remove(entry_id)
        except EntryNotFoundException:
            return False
        return True

    def clear_successful(self) -> int:
        """Remove every successful entry and return how many were removed."""
        removed = self.store.remove_where(lambda entry: entry.status == EntryStatus.SUCCESS)
        if removed:
            logger.info("successful_uploads_cleared", count=len(removed))
        return len(removed)

    def snapshot(self) -> List[FileEntry]:
        return self.store.snapshot()

    def view(self) -> Tuple[int, List[FileEntry]]:
        """Store version and entries taken together."""
        return self.store.versioned_snapshot()
