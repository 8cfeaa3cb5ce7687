"""
In-memory store for upload queue entries.
Owns the ordered entry collection and is the single point of mutation.
"""
import threading
import uuid
from typing import Callable, List, Optional, Tuple
from src.core.exceptions import EntryNotFoundException, InvalidTransitionException
from src.models.file_entry import EntryStatus, FileEntry, FileRef


PATCH_FIELDS = {'status', 'progress', 'result', 'error_message'}

ALLOWED_TRANSITIONS = {
    EntryStatus.UPLOADING: {EntryStatus.UPLOADING, EntryStatus.SUCCESS, EntryStatus.ERROR},
    EntryStatus.ERROR: {EntryStatus.UPLOADING},
    EntryStatus.SUCCESS: set(),
}


class FileEntryStore:
    """Ordered, lock-guarded collection of queue entries."""

    def __init__(self):
        # dicts keep insertion order; deleting a key never reorders the rest
        self._entries: dict[str, FileEntry] = {}
        self._lock = threading.RLock()
        self._version = 0

    @property
    def version(self) -> int:
        """Counter bumped on every mutation."""
        return self._version

    def __len__(self) -> int:
        return len(self._entries)

    def create(self, file_ref: FileRef) -> str:
        """
        Append a new entry for a picked file.

        Args:
            file_ref: Immutable file reference

        Returns:
            The new entry id
        """
        with self._lock:
            entry_id = uuid.uuid4().hex
            while entry_id in self._entries:
                entry_id = uuid.uuid4().hex

            self._entries[entry_id] = FileEntry(entry_id=entry_id, file_ref=file_ref)
            self._version += 1
            return entry_id

    def get(self, entry_id: str) -> Optional[FileEntry]:
        """Return a copy of the entry or None if absent."""
        with self._lock:
            entry = self._entries.get(entry_id)
            return entry.copy() if entry else None

    def transition(self, entry_id: str, patch: dict) -> FileEntry:
        """
        Apply a validated partial update to an entry.

        Args:
            entry_id: Entry identifier
            patch: Fields to update (status, progress, result, error_message)

        Returns:
            Copy of the updated entry

        Raises:
            EntryNotFoundException: If the entry is absent
            InvalidTransitionException: If the patch breaks the state machine
        """
        unknown = set(patch) - PATCH_FIELDS
        if unknown:
            raise InvalidTransitionException(f"Unknown patch fields: {', '.join(sorted(unknown))}")

        with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None:
                raise EntryNotFoundException(entry_id)

            updated = self._apply(entry, patch)
            self._entries[entry_id] = updated
            self._version += 1
            return updated.copy()

    def remove(self, entry_id: str) -> None:
        """
        Delete an entry.

        Raises:
            EntryNotFoundException: If the entry is absent
        """
        with self._lock:
            if entry_id not in self._entries:
                raise EntryNotFoundException(entry_id)
            del self._entries[entry_id]
            self._version += 1

    def remove_where(self, predicate: Callable[[FileEntry], bool]) -> List[str]:
        """
        Delete every entry matching the predicate.

        Returns:
            Ids of the removed entries, in collection order
        """
        with self._lock:
            removed = [entry_id for entry_id, entry in self._entries.items() if predicate(entry.copy())]
            for entry_id in removed:
                del self._entries[entry_id]
            if removed:
                self._version += 1
            return removed

    def snapshot(self) -> List[FileEntry]:
        """Return point-in-time copies of all entries in insertion order."""
        with self._lock:
            return [entry.copy() for entry in self._entries.values()]

    def versioned_snapshot(self) -> Tuple[int, List[FileEntry]]:
        """Return the version and the entries it describes, read under one lock."""
        with self._lock:
            return self._version, self.snapshot()

    def _apply(self, entry: FileEntry, patch: dict) -> FileEntry:
        """Build the next state of an entry without touching the stored one."""
        updated = entry.copy()

        if 'status' not in patch:
            if set(patch) - {'progress'}:
                raise InvalidTransitionException("Patch without status may only change progress")
            if entry.status != EntryStatus.UPLOADING:
                raise InvalidTransitionException(
                    f"Progress can only change while uploading, entry is {entry.status.value}"
                )
            updated.progress = self._uploading_progress(patch.get('progress', entry.progress))
            return updated

        try:
            status = EntryStatus(patch['status'])
        except ValueError as e:
            raise InvalidTransitionException(f"Unknown status: {patch['status']}") from e

        if status not in ALLOWED_TRANSITIONS[entry.status]:
            raise InvalidTransitionException(
                f"Cannot move entry from {entry.status.value} to {status.value}"
            )

        if status == EntryStatus.SUCCESS:
            if patch.get('result') is None:
                raise InvalidTransitionException("Success requires an upload result")
            if patch.get('error_message') is not None:
                raise InvalidTransitionException("Success cannot carry an error message")
            updated.result = patch['result']
            updated.error_message = None
            updated.progress = 100

        elif status == EntryStatus.ERROR:
            if not patch.get('error_message'):
                raise InvalidTransitionException("Error requires an error message")
            if patch.get('result') is not None:
                raise InvalidTransitionException("Error cannot carry an upload result")
            updated.error_message = patch['error_message']
            updated.result = None
            updated.progress = 0

        else:
            if patch.get('result') is not None or patch.get('error_message') is not None:
                raise InvalidTransitionException("Uploading cannot carry a result or error message")
            updated.result = None
            updated.error_message = None
            updated.progress = self._uploading_progress(patch.get('progress', 0))

        updated.status = status
        return updated

    @staticmethod
    def _uploading_progress(progress) -> int:
        if isinstance(progress, bool) or not isinstance(progress, int):
            raise InvalidTransitionException(f"Progress must be an integer, got: {progress!r}")
        if not 0 <= progress < 100:
            raise InvalidTransitionException(f"Uploading progress must be between 0 and 99, got: {progress}")
        return progress
