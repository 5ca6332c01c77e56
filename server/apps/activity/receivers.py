"""Signal receivers that record file and folder activity."""

from typing import Any
from uuid import UUID

from django.apps import apps
from django.dispatch import receiver

from server.apps.activity.client import ActivityLogClient
from server.apps.files.models import File, Folder
from server.apps.files.serializers import format_id
from server.apps.files.signals import (
    file_accessed,
    file_added,
    file_deleted,
    file_moved,
    files_listed,
    folder_added,
    folder_deleted,
    folder_moved,
    folder_renamed,
)


def _client() -> ActivityLogClient:
    return apps.get_app_config('activity').client  # type: ignore[attr-defined]


@receiver(file_added, dispatch_uid='activity_file_added')
def record_upload(sender: type, file: File, **kwargs: Any) -> None:
    """Record a file upload."""
    _client().record('upload', {
        'fileId': format_id(file.id),
        'fileName': file.name,
        'fileSize': file.size,
        'details': f'File uploaded: {file.name} ({file.size} bytes)',
    })


@receiver(file_deleted, dispatch_uid='activity_file_deleted')
def record_delete(
    sender: type,
    file_id: UUID,
    file_name: str,
    **kwargs: Any,
) -> None:
    """Record a file deletion."""
    _client().record('delete', {
        'fileId': format_id(file_id),
        'fileName': file_name,
        'details': f'File deleted: {file_name}',
    })


@receiver(file_accessed, dispatch_uid='activity_file_accessed')
def record_access(
    sender: type,
    file: File,
    action: str,
    **kwargs: Any,
) -> None:
    """Record a file view or download."""
    verb = 'downloaded' if action == 'download' else 'viewed'
    _client().record(action, {
        'fileId': format_id(file.id),
        'fileName': file.name,
        'details': f'File {verb}: {file.name}',
    })


@receiver(files_listed, dispatch_uid='activity_files_listed')
def record_list(
    sender: type,
    count: int,
    folder_id: UUID | str | None,
    **kwargs: Any,
) -> None:
    """Record a file listing."""
    _client().record('list', {
        'folderId': format_id(folder_id),
        'details': f'Listed {count} files',
    })


@receiver(file_moved, dispatch_uid='activity_file_moved')
def record_file_move(
    sender: type,
    file: File,
    old_folder_id: UUID | None,
    new_folder_id: UUID | None,
    **kwargs: Any,
) -> None:
    """Record a file moving between folders."""
    _client().record('file_moved', {
        'fileId': format_id(file.id),
        'fileName': file.name,
        'details': 'File moved: {name} ({old} -> {new})'.format(
            name=file.name,
            old=format_id(old_folder_id) or 'root',
            new=format_id(new_folder_id) or 'root',
        ),
    })


@receiver(folder_added, dispatch_uid='activity_folder_added')
def record_folder_created(
    sender: type,
    folder: Folder,
    **kwargs: Any,
) -> None:
    """Record a folder creation."""
    _client().record('folder_created', {
        'folderId': format_id(folder.id),
        'details': f'Folder created: {folder.path}',
    })


@receiver(folder_deleted, dispatch_uid='activity_folder_deleted')
def record_folder_deleted(
    sender: type,
    folder_id: UUID,
    folder_name: str,
    **kwargs: Any,
) -> None:
    """Record a folder deletion."""
    _client().record('folder_deleted', {
        'folderId': format_id(folder_id),
        'details': f'Folder deleted: {folder_name}',
    })


@receiver(folder_renamed, dispatch_uid='activity_folder_renamed')
def record_folder_renamed(
    sender: type,
    folder: Folder,
    old_path: str,
    descendant_count: int,
    **kwargs: Any,
) -> None:
    """Record a folder rename and the size of the rewritten subtree."""
    _client().record('folder_renamed', {
        'folderId': format_id(folder.id),
        'details': (
            f'Folder renamed: {old_path} -> {folder.path} '
            f'({descendant_count} descendants updated)'
        ),
    })


@receiver(folder_moved, dispatch_uid='activity_folder_moved')
def record_folder_moved(
    sender: type,
    folder: Folder,
    old_path: str,
    descendant_count: int,
    **kwargs: Any,
) -> None:
    """Record a folder move and the size of the rewritten subtree."""
    _client().record('folder_moved', {
        'folderId': format_id(folder.id),
        'details': (
            f'Folder moved: {old_path} -> {folder.path} '
            f'({descendant_count} descendants updated)'
        ),
    })
