"""JSON payloads for folders and files.

These shapes are the wire contract of the live update events, so keys
are camelCase.
"""

from typing import Any
from uuid import UUID

from server.apps.files.models import File, Folder


def format_id(raw_id: UUID | str | None) -> str | None:
    """Render an ID the way clients see it.

    Args:
        raw_id: UUID, string or None.

    Returns:
        String form, or None for the root.
    """
    if raw_id is None:
        return None
    return str(raw_id)


def serialize_file(file_instance: File) -> dict[str, Any]:
    """Full file record.

    Args:
        file_instance: File to serialize.

    Returns:
        Dictionary with id, name, url, size, mimeType, folderId, createdAt.
    """
    return {
        'id': format_id(file_instance.id),
        'name': file_instance.name,
        'url': file_instance.url,
        'size': file_instance.size,
        'mimeType': file_instance.mime_type,
        'folderId': format_id(file_instance.folder_id),
        'createdAt': file_instance.created_at.isoformat(),
    }


def serialize_folder(
    folder: Folder,
    file_count: int | None = None,
    child_count: int | None = None,
) -> dict[str, Any]:
    """Full folder record with content counts.

    Counts default to the ``file_count`` / ``child_count`` annotations
    added by the folder lookups, and to 0 when absent.

    Args:
        folder: Folder to serialize.
        file_count: Number of files directly in the folder.
        child_count: Number of direct subfolders.

    Returns:
        Dictionary with id, name, path, parentId, timestamps and _count.
    """
    if file_count is None:
        file_count = getattr(folder, 'file_count', 0)
    if child_count is None:
        child_count = getattr(folder, 'child_count', 0)

    return {
        'id': format_id(folder.id),
        'name': folder.name,
        'path': folder.path,
        'parentId': format_id(folder.parent_id),
        'createdAt': folder.created_at.isoformat(),
        'updatedAt': folder.updated_at.isoformat(),
        '_count': {
            'files': file_count,
            'children': child_count,
        },
    }
