"""
File Service for picked image files.
Applies the picker policy (type, size and count) before files reach the queue.
"""
import os
from typing import List, Optional
from src.core import config
from src.core.exceptions import ValidationException
from src.models.file_entry import FileRef


class FileService:
    """Service for file picking and validation operations."""

    ALLOWED_EXTENSIONS = {'.jpeg', '.jpg', '.png', '.gif', '.bmp', '.webp'}
    SIZE_UNITS = ['Bytes', 'KB', 'MB', 'GB']

    def __init__(self, max_file_size_mb: Optional[int] = None, max_batch_files: Optional[int] = None):
        self.max_file_size_mb = max_file_size_mb or config.settings.max_file_size_mb
        self.max_batch_files = max_batch_files or config.settings.max_batch_files

    def build_file_ref(self, filename: str, content: bytes, content_type: Optional[str]) -> FileRef:
        """Wrap raw upload content into an immutable FileRef."""
        return FileRef(
            name=os.path.basename(filename or ""),
            size=len(content),
            content_type=content_type or "application/octet-stream",
            content=content
        )

    def validate_batch(self, file_refs: List[FileRef]) -> None:
        """
        Validate a picked batch. Either every file is admissible or none is queued.

        Args:
            file_refs: Files picked together

        Raises:
            ValidationException: If the batch or any file violates the policy
        """
        if not file_refs:
            raise ValidationException("No files selected")

        if len(file_refs) > self.max_batch_files:
            raise ValidationException(
                f"Too many files: {len(file_refs)} selected, maximum is {self.max_batch_files}"
            )

        for file_ref in file_refs:
            self.validate_file(file_ref)

    def validate_file(self, file_ref: FileRef) -> None:
        """
        Validate a single picked file.

        Raises:
            ValidationException: If the file is not an admissible image
        """
        if not file_ref.name:
            raise ValidationException("File name cannot be empty")

        extension = os.path.splitext(file_ref.name)[1].lower()
        if extension not in self.ALLOWED_EXTENSIONS:
            raise ValidationException(
                f"{file_ref.name}: unsupported file type, allowed: {', '.join(sorted(self.ALLOWED_EXTENSIONS))}"
            )

        if not file_ref.content_type.startswith('image/'):
            raise ValidationException(f"{file_ref.name}: content type must be image/*, got: {file_ref.content_type}")

        if file_ref.size == 0:
            raise ValidationException(f"{file_ref.name}: file is empty")

        max_size_bytes = self.max_file_size_mb * 1024 * 1024
        if file_ref.size > max_size_bytes:
            raise ValidationException(
                f"{file_ref.name}: file size ({file_ref.size / (1024 * 1024):.2f}MB) exceeds maximum allowed size of {self.max_file_size_mb}MB"
            )

    def format_file_size(self, size: int) -> str:
        """Render a byte count as e.g. '1.5 KB' or '2 MB'."""
        if size <= 0:
            return "0 Bytes"
        index = 0
        while index < len(self.SIZE_UNITS) - 1 and size >= 1024 ** (index + 1):
            index += 1
        value = round(size / (1024 ** index), 2)
        return f"{value:g} {self.SIZE_UNITS[index]}"
