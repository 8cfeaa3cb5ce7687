"""
Upload queue API routes.
Renders queue snapshots and forwards user commands to the queue driver.
"""
from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends, File, Response, UploadFile, status
from src.core.dependencies import get_file_service, get_queue_driver
from src.core.exceptions import EntryNotFoundException
from src.models.dto.queue_dto import (
    BatchAcceptedResponse,
    ClearSuccessfulResponse,
    FileEntryResponse,
    QueueSnapshotResponse,
    RetryAcceptedResponse
)
from src.models.file_entry import EntryStatus, FileEntry
from src.services.file_service import FileService
from src.services.queue_driver import QueueDriver

router = APIRouter(prefix="/v1/api", tags=["Upload Queue"])


def _to_response(entry: FileEntry, file_service: FileService) -> FileEntryResponse:
    return FileEntryResponse(
        id=entry.id,
        filename=entry.file_ref.name,
        size=entry.file_ref.size,
        size_display=file_service.format_file_size(entry.file_ref.size),
        content_type=entry.file_ref.content_type,
        status=entry.status.value,
        progress=entry.progress,
        remote_id=entry.result.remote_id if entry.result else None,
        metadata=entry.result.metadata if entry.result else None,
        error_message=entry.error_message,
        created_at=entry.created_at
    )


@router.get("/queue", response_model=QueueSnapshotResponse)
async def get_queue(
    queue_driver: QueueDriver = Depends(get_queue_driver),
    file_service: FileService = Depends(get_file_service)
):
    """
    Current queue contents in insertion order.
    """
    version, entries = queue_driver.view()
    return QueueSnapshotResponse(
        entries=[_to_response(entry, file_service) for entry in entries],
        count=len(entries),
        version=version,
        is_uploading=queue_driver.is_uploading,
        has_successful=any(entry.status == EntryStatus.SUCCESS for entry in entries)
    )


@router.post("/queue", response_model=BatchAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def enqueue_files(
    background_tasks: BackgroundTasks,
    files: List[UploadFile] = File(..., description="Images to upload"),
    queue_driver: QueueDriver = Depends(get_queue_driver),
    file_service: FileService = Depends(get_file_service)
):
    """
    Add a batch of images to the queue.

    The whole batch is rejected if any file fails validation. Accepted files
    are uploaded one after another in the background.
    """
    file_refs = []
    for upload in files:
        content = await upload.read()
        file_refs.append(file_service.build_file_ref(upload.filename, content, upload.content_type))

    file_service.validate_batch(file_refs)

    entry_ids = queue_driver.accept(file_refs)
    background_tasks.add_task(queue_driver.run_batch, entry_ids)

    return BatchAcceptedResponse(
        entry_ids=entry_ids,
        count=len(entry_ids),
        message="Files accepted. Uploads in progress."
    )


@router.post("/queue/clear-successful", response_model=ClearSuccessfulResponse)
async def clear_successful(queue_driver: QueueDriver = Depends(get_queue_driver)):
    """
    Remove all successfully uploaded entries.
    """
    return ClearSuccessfulResponse(removed=queue_driver.clear_successful())


@router.post("/queue/{entry_id}/retry", response_model=RetryAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def retry_entry(
    entry_id: str,
    background_tasks: BackgroundTasks,
    queue_driver: QueueDriver = Depends(get_queue_driver)
):
    """
    Retry a failed upload. Only entries in error can be retried; the entry
    is back to uploading before this returns.
    """
    file_ref = queue_driver.begin_retry(entry_id)
    if file_ref is None:
        raise EntryNotFoundException(entry_id)

    background_tasks.add_task(queue_driver.finish_retry, entry_id, file_ref)
    return RetryAcceptedResponse(entry_id=entry_id, message="Retry scheduled.")


@router.delete("/queue/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_entry(entry_id: str, queue_driver: QueueDriver = Depends(get_queue_driver)):
    """
    Remove an entry regardless of its state. In-flight uploads are not cancelled.
    """
    if not queue_driver.remove_entry(entry_id):
        raise EntryNotFoundException(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
