"""
Custom exceptions for the Image Upload Queue service.
Provides specific error types for different failure scenarios.
"""
from typing import Optional


class UploadQueueException(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationException(UploadQueueException):
    """Raised when a picked file is rejected before entering the queue."""
    pass


class EntryNotFoundException(UploadQueueException):
    """Raised when a queue entry id is not present in the store."""
    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Queue entry '{entry_id}' not found")


class InvalidTransitionException(UploadQueueException):
    """Raised when a patch would break the entry state machine."""
    pass


class UploadFailedException(UploadQueueException):
    """Raised by an upload client when the remote upload fails."""
    def __init__(self, message: str, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(message)
