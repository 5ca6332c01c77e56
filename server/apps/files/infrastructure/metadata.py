"""Metadata extraction and validation for uploaded files."""

import mimetypes
import re
import time
from pathlib import Path
from typing import Final

from django.conf import settings
from django.core.exceptions import ValidationError

_BYTES_PER_MB: Final = 1024 * 1024
_WHITESPACE_RUN: Final = re.compile(r'\s+')
_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def detect_mime_type(filename: str, declared_type: str | None = None) -> str:
    """Detect MIME type of an upload.

    The type declared by the client wins; otherwise it is guessed from
    the filename extension.

    Args:
        filename: Filename with extension.
        declared_type: Content type sent with the upload, if any.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    if declared_type:
        return declared_type
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'document.PDF').

    Returns:
        Extension with dot, lowercase (e.g., '.pdf').
        Returns empty string if no extension.
    """
    return Path(filename).suffix.lower()


def normalize_filename(filename: str) -> str:
    """Collapse whitespace runs into single spaces and trim.

    Example: '  my   report.pdf ' -> 'my report.pdf'

    Args:
        filename: Original filename.

    Returns:
        Normalized filename.
    """
    return _WHITESPACE_RUN.sub(' ', filename).strip()


def build_storage_name(filename: str) -> str:
    """Build a unique-ish storage name for an upload.

    Example: 'my  report.pdf' -> '1767225600000-my report.pdf'

    Args:
        filename: Original filename.

    Returns:
        Millisecond timestamp prefix joined with the normalized filename.
    """
    timestamp_ms = time.time_ns() // 1_000_000
    return f'{timestamp_ms}-{normalize_filename(filename)}'


def validate_upload(filename: str, size_bytes: int) -> None:
    """Check an upload against the configured size and type limits.

    Does nothing when FILES_UPLOAD_VALIDATION_ENABLED is off.

    Args:
        filename: Original filename.
        size_bytes: Upload size in bytes.

    Raises:
        ValidationError: If the file is empty, too large, or of a type
            that is not allowed.
    """
    if not normalize_filename(filename):
        raise ValidationError('Filename is required', code='invalid_filename')

    if not settings.FILES_UPLOAD_VALIDATION_ENABLED:
        return

    max_size_mb = settings.FILES_UPLOAD_MAX_SIZE_MB
    if size_bytes > max_size_mb * _BYTES_PER_MB:
        raise ValidationError(
            f'File too large. Maximum size is {max_size_mb}MB',
            code='file_too_large',
        )

    allowed = settings.FILES_UPLOAD_ALLOWED_EXTENSIONS
    if get_file_extension(filename) not in allowed:
        raise ValidationError(
            'File type not allowed. Allowed types: {types}'.format(
                types=', '.join(allowed),
            ),
            code='file_type_not_allowed',
        )
