"""Database models for files app."""

import uuid
from pathlib import Path
from typing import ClassVar, Final, final, override

from django.db import models

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_PATH_MAX_LENGTH: Final = 1024
_URL_MAX_LENGTH: Final = 1024
_MIME_TYPE_MAX_LENGTH: Final = 255


@final
class Folder(models.Model):
    """Folder in the hierarchical tree.

    ``path`` is denormalized from the parent chain
    (``/docs/reports`` for ``reports`` inside ``docs``) so that every
    descendant of a folder is found with a single prefix query.
    Only the folder operations in ``logic.folder_operations`` write it.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='Display label: letters, digits, spaces, - and _',
    )

    path = models.CharField(
        max_length=_PATH_MAX_LENGTH,
        unique=True,
        help_text='Canonical absolute path, e.g. /docs/reports',
    )

    # Null parent means the folder lives at the root
    parent = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        related_name='children',
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Folder'  # type: ignore[mutable-override]
        verbose_name_plural = 'Folders'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['path']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['parent', 'name'],
                name='folders_parent_name_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.path

    @property
    def is_root_level(self) -> bool:
        """Whether the folder sits directly at the root."""
        return self.parent_id is None


@final
class File(models.Model):
    """Uploaded file.

    The bytes live in the configured storage backend; ``url`` is the
    opaque locator returned by that backend. ``folder`` only places the
    file in the tree and takes no part in path computation.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='Original filename as uploaded',
    )

    url = models.CharField(
        max_length=_URL_MAX_LENGTH,
        help_text='Storage locator of the file content',
    )

    size = models.BigIntegerField(
        help_text='File size in bytes',
    )

    mime_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
    )

    # Null folder means the file lives at the root
    folder = models.ForeignKey(
        Folder,
        on_delete=models.PROTECT,
        related_name='files',
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['name']

        indexes: ClassVar[list[models.Index]] = [
            # Optimize folder listing queries
            models.Index(
                fields=['folder', 'name'],
                name='files_folder_name_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.name

    def get_extension(self) -> str:
        """Extract file extension.

        Example: 'report.PDF' -> 'pdf'

        Returns:
            Extension without dot (lowercase).
        """
        extension = Path(self.name).suffix
        return extension.lstrip('.').lower()
