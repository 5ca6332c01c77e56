"""Domain signals for files app.

Folder and file operations announce what they changed through these
signals. The ``live`` app turns them into broadcast events and the
``activity`` app into activity log records.

Signals are sent only after the surrounding transaction commits, so
receivers never observe a mutation that was rolled back.
"""

import logging
from typing import Any

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

# kwargs: file
file_added = Signal()

# kwargs: file_id, file_name, folder_id
file_deleted = Signal()

# kwargs: file, old_folder_id, new_folder_id
file_moved = Signal()

# kwargs: file, action ('download' or 'view')
file_accessed = Signal()

# kwargs: count, folder_id
files_listed = Signal()

# kwargs: folder, file_count, child_count
folder_added = Signal()

# kwargs: folder_id, folder_name, parent_id
folder_deleted = Signal()

# kwargs: folder, old_name, old_path, descendant_count
folder_renamed = Signal()

# kwargs: folder, old_parent_id, old_path, descendant_count
folder_moved = Signal()


def send_after_commit(signal: Signal, sender: type, **kwargs: Any) -> None:
    """Send a domain signal once the current transaction commits.

    Outside of a transaction the signal is sent immediately.

    Args:
        signal: Signal to send.
        sender: Model class the event is about.
        **kwargs: Signal arguments.
    """
    transaction.on_commit(
        lambda: _send_robust(signal, sender, kwargs),
    )


def _send_robust(
    signal: Signal,
    sender: type,
    kwargs: dict[str, Any],
) -> None:
    """Send signal, logging receivers that failed.

    Receivers are notification side effects; their failures never reach
    the caller of the operation that triggered them.

    Args:
        signal: Signal to send.
        sender: Model class the event is about.
        kwargs: Signal arguments.
    """
    responses = signal.send_robust(sender=sender, **kwargs)
    for receiver_func, response in responses:
        if isinstance(response, Exception):
            logger.error(
                'Signal receiver %s failed: %s',
                getattr(receiver_func, '__qualname__', receiver_func),
                response,
                exc_info=response,
            )
