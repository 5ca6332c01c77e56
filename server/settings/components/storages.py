"""Storage configuration for uploaded files.

Two interchangeable backends hold the file bytes:
- Local filesystem under MEDIA_ROOT (development, single host)
- S3-compatible object storage via django-storages (MinIO, R2, AWS)

The cloud backend is selected as soon as a bucket name is configured,
otherwise files are written to the local filesystem.
"""

from typing import Any, Final

from server.settings.components import BASE_DIR, config

MEDIA_ROOT = config(
    'DJANGO_MEDIA_ROOT',
    default=str(BASE_DIR.joinpath('uploads')),
)

_BUCKET_NAME: Final = config('AWS_STORAGE_BUCKET_NAME', default='')

if _BUCKET_NAME:
    _DEFAULT_STORAGE: dict[str, Any] = {
        'BACKEND': 'server.apps.files.infrastructure.storage.CloudFileStorage',
        'OPTIONS': {
            'bucket_name': _BUCKET_NAME,
            'access_key': config('AWS_ACCESS_KEY_ID', default=None),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='auto',
            ),
            'file_overwrite': False,  # Prevent accidental overwrites
            'default_acl': None,  # Inherit bucket ACL
        },
    }
else:
    _DEFAULT_STORAGE = {
        'BACKEND': 'server.apps.files.infrastructure.storage.LocalFileStorage',
    }

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': _DEFAULT_STORAGE,
    'staticfiles': {
        # Keep static files separate from user files
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
