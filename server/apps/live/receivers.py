"""Signal receivers that turn file and folder changes into broadcasts."""

from typing import Any
from uuid import UUID

from django.apps import apps
from django.dispatch import receiver

from server.apps.files.models import File, Folder
from server.apps.files.serializers import (
    format_id,
    serialize_file,
    serialize_folder,
)
from server.apps.files.signals import (
    file_added,
    file_deleted,
    file_moved,
    folder_added,
    folder_deleted,
)
from server.apps.live.dispatcher import UNSCOPED, BroadcastDispatcher
from server.apps.live.events import EventKind


def _dispatcher() -> BroadcastDispatcher:
    return apps.get_app_config('live').dispatcher  # type: ignore[attr-defined]


@receiver(file_added, dispatch_uid='live_file_added')
def broadcast_file_added(sender: type, file: File, **kwargs: Any) -> None:
    """Announce a new file to clients watching its folder."""
    _dispatcher().publish(
        EventKind.FILE_ADDED,
        serialize_file(file),
        relevant_folder_id=file.folder_id,
    )


@receiver(file_deleted, dispatch_uid='live_file_deleted')
def broadcast_file_deleted(
    sender: type,
    file_id: UUID,
    folder_id: UUID | None,
    **kwargs: Any,
) -> None:
    """Announce a deleted file to clients watching its former folder."""
    _dispatcher().publish(
        EventKind.FILE_DELETED,
        {'id': format_id(file_id)},
        relevant_folder_id=folder_id,
    )


@receiver(file_moved, dispatch_uid='live_file_moved')
def broadcast_file_moved(
    sender: type,
    file: File,
    old_folder_id: UUID | None,
    new_folder_id: UUID | None,
    **kwargs: Any,
) -> None:
    """Announce a moved file to every client.

    Both the source and the destination folder views change, so the
    event is not scoped to one of them.
    """
    _dispatcher().publish(
        EventKind.FILE_MOVED,
        {
            'id': format_id(file.id),
            'oldFolderId': format_id(old_folder_id),
            'newFolderId': format_id(new_folder_id),
        },
        relevant_folder_id=UNSCOPED,
    )


@receiver(folder_added, dispatch_uid='live_folder_added')
def broadcast_folder_added(
    sender: type,
    folder: Folder,
    file_count: int,
    child_count: int,
    **kwargs: Any,
) -> None:
    """Announce a new folder to clients watching its parent."""
    _dispatcher().publish(
        EventKind.FOLDER_ADDED,
        serialize_folder(folder, file_count, child_count),
        relevant_folder_id=folder.parent_id,
    )


@receiver(folder_deleted, dispatch_uid='live_folder_deleted')
def broadcast_folder_deleted(
    sender: type,
    folder_id: UUID,
    parent_id: UUID | None,
    **kwargs: Any,
) -> None:
    """Announce a deleted folder to clients watching its parent."""
    _dispatcher().publish(
        EventKind.FOLDER_DELETED,
        {'id': format_id(folder_id)},
        relevant_folder_id=parent_id,
    )
