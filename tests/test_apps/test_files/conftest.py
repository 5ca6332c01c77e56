"""Shared fixtures for files app tests."""

import boto3
import pytest
from moto import mock_aws

from server.apps.files.models import File, Folder

_LOCAL_STORAGES = {
    'default': {
        'BACKEND': 'server.apps.files.infrastructure.storage.LocalFileStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}


@pytest.fixture
def local_storage(settings, tmp_path):
    """Point the default storage at a temporary directory.

    Returns:
        Directory holding the stored files.
    """
    settings.MEDIA_ROOT = str(tmp_path)
    settings.STORAGES = _LOCAL_STORAGES
    return tmp_path


@pytest.fixture
def mock_s3():
    """Mock S3 service with file-manager bucket.

    Yields:
        boto3 S3 resource with file-manager bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket='file-manager')

        yield conn


@pytest.fixture
def cloud_storage(settings, mock_s3):
    """Use the S3 backend (mocked) as the default storage.

    Returns:
        Mocked boto3 S3 resource.
    """
    settings.STORAGES = {
        **_LOCAL_STORAGES,
        'default': {
            'BACKEND': (
                'server.apps.files.infrastructure.storage.CloudFileStorage'
            ),
            'OPTIONS': {
                'bucket_name': 'file-manager',
                'region_name': 'us-east-1',
                'file_overwrite': False,
                'default_acl': None,
            },
        },
    }
    return mock_s3


@pytest.fixture
def docs(db):
    """Root-level folder '/docs'.

    Returns:
        Folder instance.
    """
    return Folder.objects.create(name='docs', path='/docs')


@pytest.fixture
def reports(docs):
    """Folder '/docs/reports' inside docs.

    Returns:
        Folder instance.
    """
    return Folder.objects.create(
        name='reports',
        path='/docs/reports',
        parent=docs,
    )


@pytest.fixture
def make_file(db):
    """Factory creating file records without stored content.

    Returns:
        Callable creating a File in the given folder.
    """

    def factory(name='notes.txt', folder=None, url=None):  # noqa: WPS430
        return File.objects.create(
            name=name,
            url=url or f'0-{name}',
            size=100,
            mime_type='text/plain',
            folder=folder,
        )

    return factory
