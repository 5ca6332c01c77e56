"""Upload validation settings."""

from server.settings.components import config

# Reject uploads that break the limits below
FILES_UPLOAD_VALIDATION_ENABLED = config(
    'FILES_UPLOAD_VALIDATION_ENABLED',
    cast=bool,
    default=True,
)

FILES_UPLOAD_MAX_SIZE_MB = config(
    'FILES_UPLOAD_MAX_SIZE_MB',
    cast=int,
    default=10,
)

FILES_UPLOAD_ALLOWED_EXTENSIONS = config(
    'FILES_UPLOAD_ALLOWED_EXTENSIONS',
    cast=lambda extensions: [
        extension.strip().lower()
        for extension in extensions.split(',')
        if extension.strip()
    ],
    default='.jpg,.jpeg,.png,.gif,.pdf,.doc,.docx,.txt,.zip',
)
