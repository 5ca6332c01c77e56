"""Django admin configuration for files app.

The admin is a read and delete view. Deletes go through the file and
folder operations so stored content is removed and change events are
sent; paths and folder membership may only change through those
operations.
"""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.files.logic.file_operations import delete_file
from server.apps.files.logic.folder_operations import (
    annotated_folders,
    delete_folder,
)
from server.apps.files.models import File, Folder


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'


@admin.register(Folder)
class FolderAdmin(admin.ModelAdmin[Folder]):
    """Admin interface for Folder model."""

    list_display = [
        'path',
        'name',
        'file_count_display',
        'child_count_display',
        'updated_at',
    ]

    search_fields = [
        'name',
        'path',
    ]

    readonly_fields = [
        'name',
        'path',
        'parent',
        'created_at',
        'updated_at',
    ]

    def file_count_display(self, obj: Folder) -> int:
        """Number of files directly in the folder.

        Args:
            obj: Folder instance (annotated).

        Returns:
            File count.
        """
        return obj.file_count  # type: ignore[attr-defined]
    file_count_display.short_description = 'Files'  # type: ignore[attr-defined]

    def child_count_display(self, obj: Folder) -> int:
        """Number of direct subfolders.

        Args:
            obj: Folder instance (annotated).

        Returns:
            Subfolder count.
        """
        return obj.child_count  # type: ignore[attr-defined]
    child_count_display.short_description = 'Subfolders'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Folder]:
        """Annotate folders with their content counts.

        Args:
            request: HTTP request.

        Returns:
            Annotated QuerySet.
        """
        return annotated_folders()

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Folders are created through the folder operations only."""
        return False

    def delete_model(self, request: HttpRequest, obj: Folder) -> None:
        """Delete an empty folder through the folder operations.

        Args:
            request: HTTP request.
            obj: Folder to delete.
        """
        delete_folder(obj.pk)

    def delete_queryset(
        self,
        request: HttpRequest,
        queryset: QuerySet[Folder],
    ) -> None:
        """Delete selected folders, deepest first.

        Args:
            request: HTTP request.
            queryset: Selected folders.
        """
        folder_ids = queryset.order_by('-path').values_list('pk', flat=True)
        for folder_id in folder_ids:
            delete_folder(folder_id)


@admin.register(File)
class FileAdmin(admin.ModelAdmin[File]):
    """Admin interface for File model."""

    list_display = [
        'name',
        'folder',
        'size_display',
        'mime_type',
        'created_at',
    ]

    list_filter = [
        'mime_type',
        'created_at',
    ]

    search_fields = [
        'name',
        'url',
    ]

    readonly_fields = [
        'name',
        'folder',
        'url',
        'size',
        'mime_type',
        'created_at',
        'updated_at',
    ]

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format.

        Args:
            obj: File instance.

        Returns:
            Formatted size string.
        """
        return _format_bytes(obj.size)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('folder')

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Files are uploaded through the file operations only."""
        return False

    def delete_model(self, request: HttpRequest, obj: File) -> None:
        """Delete stored content, then the record.

        Args:
            request: HTTP request.
            obj: File to delete.
        """
        delete_file(obj.pk)

    def delete_queryset(
        self,
        request: HttpRequest,
        queryset: QuerySet[File],
    ) -> None:
        for file_id in queryset.values_list('pk', flat=True):
            delete_file(file_id)
