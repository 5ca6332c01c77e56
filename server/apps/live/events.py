"""Event kinds pushed to live update clients."""

import enum


@enum.unique
class EventKind(enum.StrEnum):
    """Event names as they appear on the wire."""

    CONNECTED = 'connected'
    FILE_ADDED = 'file:added'
    FILE_DELETED = 'file:deleted'
    FILE_MOVED = 'file:moved'
    FOLDER_ADDED = 'folder:added'
    FOLDER_DELETED = 'folder:deleted'
