"""Storage backends for file content.

Both backends expose the same small interface to the logic layer:
``store`` returns a locator, ``retrieve`` reads it back (None when the
object is gone), and ``delete``/``rollback_upload`` remove it. Which one is
used is decided in settings, so file operations never branch on it.
"""

import logging
from typing import IO, Any, final

from django.core.files.base import ContentFile, File
from django.core.files.storage import FileSystemStorage
from storages.backends.s3 import S3Storage

from server.apps.files.exceptions import StorageFailureError

logger = logging.getLogger(__name__)


class LoggedStorageMixin:
    """Logging, error wrapping and rollback shared by storage backends.

    Must precede the concrete Django storage class in the bases.
    """

    def store(
        self,
        name: str,
        content: bytes | IO[bytes],
        content_type: str,
    ) -> str:
        """Store content under a name.

        Args:
            name: Requested storage name.
            content: Raw bytes or a binary file object.
            content_type: MIME type recorded with the object.

        Returns:
            Locator of the stored object (may differ from name if the
            name was already taken).

        Raises:
            StorageFailureError: If the backend fails to store it.
        """
        if isinstance(content, bytes):
            django_file: File = ContentFile(content, name=name)
        else:
            django_file = File(content, name=name)
        # Picked up by S3 as the object's Content-Type
        django_file.content_type = content_type  # type: ignore[attr-defined]

        try:
            return self.save(name, django_file)
        except Exception as error:
            raise StorageFailureError('store', name) from error

    def retrieve(self, locator: str) -> bytes | None:
        """Read stored content back.

        Args:
            locator: Locator returned by store().

        Returns:
            Content bytes, or None if the object does not exist.

        Raises:
            StorageFailureError: If the backend fails while reading.
        """
        try:
            if not self.exists(locator):  # type: ignore[attr-defined]
                logger.warning('Object not found in storage: %s', locator)
                return None
            with self.open(locator, 'rb') as stored:  # type: ignore[attr-defined]
                return stored.read()
        except Exception as error:
            logger.exception('Failed to read from storage: %s', locator)
            raise StorageFailureError('retrieve', locator) from error

    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file with error handling and logging.

        Args:
            name: Storage path for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual storage path used (may differ from name if conflicts).

        Raises:
            Exception: If the upload fails.
        """
        try:
            logger.info('Uploading file to storage: %s', name)
            saved_name = super().save(  # type: ignore[misc]
                name,
                content,
                max_length,
            )
            logger.info('Successfully uploaded file: %s', saved_name)
        except Exception:
            logger.exception('Failed to upload file to storage: %s', name)
            raise
        else:
            return saved_name

    def delete(self, name: str) -> None:
        """Delete file with error handling and logging.

        Args:
            name: Storage path of file to delete.

        Raises:
            Exception: If the delete fails.
        """
        try:
            logger.info('Deleting file from storage: %s', name)
            super().delete(name)  # type: ignore[misc]
            logger.info('Successfully deleted file: %s', name)
        except Exception:
            logger.exception('Failed to delete file from storage: %s', name)
            raise

    def rollback_upload(self, name: str) -> None:
        """Delete uploaded file for DB transaction rollback.

        Called when the database record could not be created after the
        content was stored. Best effort: failures are logged, not raised,
        as the DB rollback has already occurred.

        Args:
            name: Storage path of file to delete.
        """
        try:
            logger.warning('Rolling back upload, deleting file: %s', name)
            self.delete(name)
            logger.info('Successfully rolled back file upload: %s', name)
        except Exception:
            # The object stays in storage without a record
            logger.exception(
                'Failed to rollback upload, orphaned file: %s',
                name,
            )


@final
class LocalFileStorage(LoggedStorageMixin, FileSystemStorage):
    """Files on the local filesystem under MEDIA_ROOT.

    Existing names are never overwritten; Django picks a free name.
    """


@final
class CloudFileStorage(LoggedStorageMixin, S3Storage):
    """Files in S3-compatible object storage (MinIO, R2, AWS S3).

    Extends django-storages S3Storage with the shared logging, error
    wrapping and rollback support.
    """
