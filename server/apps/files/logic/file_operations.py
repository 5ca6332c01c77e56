"""Business logic for file operations."""

import logging
import os
from typing import TYPE_CHECKING, BinaryIO, Final
from uuid import UUID

from django.core.exceptions import ValidationError
from django.core.files.storage import default_storage
from django.db import transaction
from django.db.models import QuerySet

from server.apps.files.exceptions import (
    StorageFailureError,
    StoredObjectMissingError,
)
from server.apps.files.infrastructure.metadata import (
    build_storage_name,
    detect_mime_type,
    validate_upload,
)
from server.apps.files.logic.folder_operations import (
    FolderContents,
    get_folder,
    list_children,
)
from server.apps.files.models import File, Folder
from server.apps.files.signals import (
    file_accessed,
    file_added,
    file_deleted,
    file_moved,
    files_listed,
    send_after_commit,
)

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import LoggedStorageMixin

logger = logging.getLogger(__name__)

ACTION_DOWNLOAD: Final = 'download'
ACTION_VIEW: Final = 'view'


def _get_storage() -> 'LoggedStorageMixin':
    """Get the configured default storage backend.

    Returns:
        LocalFileStorage or CloudFileStorage, depending on settings.
    """
    return default_storage  # type: ignore[return-value]


def _resolve_folder(folder_id: UUID | str | None) -> Folder | None:
    """Resolve an optional folder ID.

    Args:
        folder_id: Folder ID, None for the root.

    Returns:
        Folder instance, or None for the root.

    Raises:
        FolderNotFoundError: If folder_id is given but does not exist.
    """
    if folder_id is None:
        return None
    return get_folder(folder_id)


def _get_content_size(content: bytes | BinaryIO) -> int:
    """Get size of upload content.

    Args:
        content: Raw bytes or a file-like object.

    Returns:
        Size in bytes.
    """
    if isinstance(content, bytes):
        return len(content)
    if hasattr(content, 'size'):
        return content.size
    file_size = content.seek(0, os.SEEK_END)
    content.seek(0)
    return file_size


def get_file(file_id: UUID | str) -> File:
    """Get a file record by ID.

    Args:
        file_id: File ID.

    Returns:
        File instance.

    Raises:
        File.DoesNotExist: If the file does not exist or the ID is malformed.
    """
    try:
        return File.objects.get(pk=file_id)
    except ValidationError as error:
        raise File.DoesNotExist(f'File not found: {file_id}') from error


def upload_file(
    name: str,
    content: bytes | BinaryIO,
    content_type: str | None = None,
    folder_id: UUID | str | None = None,
) -> File:
    """Store uploaded content and create its database record.

    Transaction safety: store the content first, then create the DB
    record. If the DB transaction fails, the stored object is deleted
    again (rollback).

    Args:
        name: Original filename.
        content: File content as bytes or a binary file object.
        content_type: MIME type declared by the client, if any.
        folder_id: Destination folder, None for the root.

    Returns:
        Created File instance.

    Raises:
        FolderNotFoundError: If folder_id does not exist.
        ValidationError: If the upload breaks the configured limits.
        StorageFailureError: If the content cannot be stored.
    """
    folder = _resolve_folder(folder_id)

    size = _get_content_size(content)
    validate_upload(name, size)
    mime_type = detect_mime_type(name, content_type)

    storage = _get_storage()

    # Step 1: Store content first
    storage_name = build_storage_name(name)
    locator = storage.store(storage_name, content, mime_type)

    # Step 2: Create database record (in transaction)
    try:
        with transaction.atomic():
            file_instance = File.objects.create(
                name=name,
                url=locator,
                size=size,
                mime_type=mime_type,
                folder=folder,
            )
            logger.info(
                'File record created in database: %s (ID: %s)',
                locator,
                file_instance.id,
            )
            send_after_commit(file_added, sender=File, file=file_instance)
    except Exception:
        # Rollback: Delete stored content since DB transaction failed
        logger.exception(
            'Database transaction failed, rolling back storage upload: %s',
            locator,
        )
        storage.rollback_upload(locator)
        raise

    return file_instance


def delete_file(file_id: UUID | str) -> None:
    """Delete file content from storage, then its database record.

    Ordering: if the storage delete fails the record is kept, so a
    failure can leave an orphaned record (found by reconcile_files) but
    never an orphaned object that nothing points to.

    Args:
        file_id: ID of file to delete.

    Raises:
        File.DoesNotExist: If file doesn't exist.
        StorageFailureError: If the content cannot be deleted.
    """
    file_instance = get_file(file_id)
    locator = file_instance.url

    logger.info('Deleting file: ID=%s, locator=%s', file_id, locator)

    # Step 1: Delete from storage
    try:
        _get_storage().delete(locator)
    except Exception as error:
        raise StorageFailureError('delete', locator) from error

    # Step 2: Delete database record
    _delete_record(file_instance)


def purge_missing_file(file_id: UUID | str) -> None:
    """Delete the record of a file whose content is already gone.

    Args:
        file_id: ID of the dangling record.

    Raises:
        File.DoesNotExist: If file doesn't exist.
    """
    file_instance = get_file(file_id)
    logger.warning(
        'Purging record without stored content: ID=%s, locator=%s',
        file_id,
        file_instance.url,
    )
    _delete_record(file_instance)


def _delete_record(file_instance: File) -> None:
    """Delete a file record and announce it."""
    deleted_id = file_instance.pk
    deleted_name = file_instance.name
    folder_id = file_instance.folder_id

    try:
        with transaction.atomic():
            file_instance.delete()
            logger.info('File record deleted from database: ID=%s', deleted_id)
            send_after_commit(
                file_deleted,
                sender=File,
                file_id=deleted_id,
                file_name=deleted_name,
                folder_id=folder_id,
            )
    except Exception:
        logger.exception(
            'Failed to delete file from database: ID=%s',
            deleted_id,
        )
        raise


def move_file(file_id: UUID | str, folder_id: UUID | str | None = None) -> File:
    """Place a file in another folder (or at the root).

    Only the folder association changes; storage is not touched.

    Args:
        file_id: File to move.
        folder_id: Destination folder, None for the root.

    Returns:
        Updated File instance.

    Raises:
        File.DoesNotExist: If the file does not exist.
        FolderNotFoundError: If folder_id does not exist.
    """
    with transaction.atomic():
        try:
            file_instance = File.objects.select_for_update().get(pk=file_id)
        except ValidationError as error:
            raise File.DoesNotExist(f'File not found: {file_id}') from error

        folder = _resolve_folder(folder_id)
        old_folder_id = file_instance.folder_id
        new_folder_id = folder.pk if folder is not None else None

        file_instance.folder = folder
        file_instance.save(update_fields=['folder', 'updated_at'])

        logger.info(
            'File moved: %s (ID: %s) folder %s -> %s',
            file_instance.name,
            file_instance.id,
            old_folder_id or 'root',
            new_folder_id or 'root',
        )
        send_after_commit(
            file_moved,
            sender=File,
            file=file_instance,
            old_folder_id=old_folder_id,
            new_folder_id=new_folder_id,
        )

    return file_instance


def read_file_content(
    file_id: UUID | str,
    download: bool = False,
) -> tuple[File, bytes]:
    """Read a file's content for viewing or downloading.

    Args:
        file_id: File to read.
        download: True for an attachment download, False for inline view.

    Returns:
        Tuple of File instance and its content.

    Raises:
        File.DoesNotExist: If the file record does not exist.
        StoredObjectMissingError: If the content is gone from storage.
        StorageFailureError: If the storage backend fails.
    """
    file_instance = get_file(file_id)

    content = _get_storage().retrieve(file_instance.url)
    if content is None:
        raise StoredObjectMissingError(file_instance.url)

    send_after_commit(
        file_accessed,
        sender=File,
        file=file_instance,
        action=ACTION_DOWNLOAD if download else ACTION_VIEW,
    )
    return file_instance, content


def list_files(folder_id: UUID | str | None = None) -> list[File]:
    """List files, optionally only those directly inside a folder.

    Args:
        folder_id: Folder to list, None for every file.

    Returns:
        Files ordered by name.
    """
    queryset: QuerySet[File] = File.objects.select_related('folder')
    if folder_id is not None:
        queryset = queryset.filter(folder_id=folder_id)

    files = list(queryset.order_by('name'))
    send_after_commit(
        files_listed,
        sender=File,
        count=len(files),
        folder_id=folder_id,
    )
    return files


def list_root_contents() -> FolderContents:
    """List files and folders at the root level.

    Returns:
        FolderContents with no folder and path '/'.
    """
    return FolderContents(
        folder=None,
        files=list(File.objects.filter(folder=None).order_by('name')),
        children=list(list_children(None)),
    )


def find_missing_content(batch_size: int) -> list[File]:
    """Find file records whose stored content no longer exists.

    Args:
        batch_size: Maximum number of records to check.

    Returns:
        Records pointing at missing objects, oldest first.
    """
    storage = _get_storage()
    missing = []
    for file_instance in File.objects.order_by('created_at')[:batch_size]:
        if not storage.exists(file_instance.url):  # type: ignore[attr-defined]
            missing.append(file_instance)
    return missing
