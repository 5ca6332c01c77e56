"""Tests for file operations business logic."""

import uuid
from io import BytesIO

import pytest
from django.core.exceptions import ValidationError

from server.apps.files.exceptions import (
    FolderNotFoundError,
    StorageFailureError,
    StoredObjectMissingError,
)
from server.apps.files.logic import file_operations
from server.apps.files.logic.file_operations import (
    delete_file,
    find_missing_content,
    list_files,
    list_root_contents,
    move_file,
    read_file_content,
    upload_file,
)
from server.apps.files.models import File
from server.apps.files.signals import file_accessed, file_added, file_moved


class _BrokenDeleteStorage:
    """Storage stub whose delete always fails."""

    def delete(self, name):
        raise OSError('disk on fire')


@pytest.mark.django_db
class TestUploadFile:
    """Tests for upload_file."""

    def test_upload_to_root(self, local_storage):
        """Test content is stored and the record points at it."""
        file_instance = upload_file('a.pdf', b'%PDF-1.4 data')

        assert file_instance.folder is None
        assert file_instance.name == 'a.pdf'
        assert file_instance.size == 13
        assert file_instance.mime_type == 'application/pdf'
        assert file_instance.url.endswith('-a.pdf')
        assert (local_storage / file_instance.url).read_bytes() == (
            b'%PDF-1.4 data'
        )

    def test_upload_into_folder(self, local_storage, docs):
        """Test the record is placed in the requested folder."""
        file_instance = upload_file('a.pdf', b'data', folder_id=docs.pk)

        assert file_instance.folder_id == docs.pk

    def test_upload_file_object(self, local_storage):
        """Test binary file objects are accepted."""
        file_instance = upload_file('notes.txt', BytesIO(b'hello world'))

        assert file_instance.size == 11
        assert file_instance.mime_type == 'text/plain'

    def test_declared_content_type_wins(self, local_storage):
        """Test the client's content type is kept."""
        file_instance = upload_file(
            'data.txt',
            b'{}',
            content_type='application/json',
        )

        assert file_instance.mime_type == 'application/json'

    def test_normalizes_storage_name(self, local_storage):
        """Test whitespace runs are collapsed in the storage name."""
        file_instance = upload_file('my   report.pdf', b'data')

        assert file_instance.name == 'my   report.pdf'
        assert file_instance.url.endswith('-my report.pdf')

    def test_upload_missing_folder(self, local_storage):
        """Test unknown folder fails before anything is stored."""
        with pytest.raises(FolderNotFoundError):
            upload_file('a.pdf', b'data', folder_id=uuid.uuid4())

        assert File.objects.count() == 0
        assert list(local_storage.iterdir()) == []

    def test_upload_too_large(self, local_storage, settings):
        """Test uploads over the size limit are rejected."""
        settings.FILES_UPLOAD_MAX_SIZE_MB = 1

        with pytest.raises(ValidationError) as exc_info:
            upload_file('a.pdf', b'x' * (1024 * 1024 + 1))

        assert exc_info.value.code == 'file_too_large'
        assert File.objects.count() == 0

    def test_upload_type_not_allowed(self, local_storage):
        """Test uploads with a disallowed extension are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            upload_file('script.exe', b'MZ')

        assert exc_info.value.code == 'file_type_not_allowed'

    def test_rolls_back_storage_when_record_fails(
        self,
        local_storage,
        monkeypatch,
    ):
        """Test stored content is removed if the record cannot be saved."""

        def failing_create(**kwargs):  # noqa: WPS430
            raise RuntimeError('database down')

        monkeypatch.setattr(File.objects, 'create', failing_create)

        with pytest.raises(RuntimeError, match='database down'):
            upload_file('a.pdf', b'data')

        assert list(local_storage.iterdir()) == []

    def test_sends_file_added(
        self,
        local_storage,
        docs,
        django_capture_on_commit_callbacks,
    ):
        """Test file_added is sent after commit with the new record."""
        received = []

        def handler(sender, **kwargs):  # noqa: WPS430
            received.append(kwargs['file'])

        file_added.connect(handler)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                file_instance = upload_file('a.pdf', b'data', folder_id=docs.pk)
        finally:
            file_added.disconnect(handler)

        assert received == [file_instance]


@pytest.mark.django_db
class TestDeleteFile:
    """Tests for delete_file."""

    def test_delete_removes_content_and_record(self, local_storage):
        """Test both the stored object and the record are gone."""
        file_instance = upload_file('a.pdf', b'data')

        delete_file(file_instance.id)

        assert not File.objects.filter(pk=file_instance.pk).exists()
        assert not (local_storage / file_instance.url).exists()

    def test_storage_failure_keeps_record(self, make_file, monkeypatch):
        """Test the record survives a failed storage delete."""
        file_instance = make_file()
        monkeypatch.setattr(
            file_operations,
            '_get_storage',
            _BrokenDeleteStorage,
        )

        with pytest.raises(StorageFailureError) as exc_info:
            delete_file(file_instance.id)

        assert exc_info.value.operation == 'delete'
        assert isinstance(exc_info.value.__cause__, OSError)
        assert File.objects.filter(pk=file_instance.pk).exists()

    def test_delete_missing(self, db):
        """Test deleting unknown or malformed IDs."""
        with pytest.raises(File.DoesNotExist):
            delete_file(uuid.uuid4())
        with pytest.raises(File.DoesNotExist):
            delete_file('not-a-uuid')


@pytest.mark.django_db
class TestMoveFile:
    """Tests for move_file."""

    def test_move_between_folders(self, make_file, docs, reports):
        """Test only the folder association changes."""
        file_instance = make_file(folder=docs)
        url = file_instance.url

        moved = move_file(file_instance.id, reports.pk)

        assert moved.folder_id == reports.pk
        assert moved.url == url

    def test_move_to_root(self, make_file, docs):
        """Test None places the file at the root."""
        file_instance = make_file(folder=docs)

        moved = move_file(file_instance.id, None)

        assert moved.folder is None

    def test_move_missing_folder(self, make_file, docs):
        """Test unknown destination leaves the file in place."""
        file_instance = make_file(folder=docs)

        with pytest.raises(FolderNotFoundError):
            move_file(file_instance.id, uuid.uuid4())

        file_instance.refresh_from_db()
        assert file_instance.folder_id == docs.pk

    def test_sends_file_moved(
        self,
        make_file,
        docs,
        reports,
        django_capture_on_commit_callbacks,
    ):
        """Test file_moved carries both folders."""
        file_instance = make_file(folder=docs)
        received = []

        def handler(sender, **kwargs):  # noqa: WPS430
            received.append(kwargs)

        file_moved.connect(handler)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                move_file(file_instance.id, reports.pk)
        finally:
            file_moved.disconnect(handler)

        assert received[0]['old_folder_id'] == docs.pk
        assert received[0]['new_folder_id'] == reports.pk


@pytest.mark.django_db
class TestReadFileContent:
    """Tests for read_file_content."""

    def test_read_content(self, local_storage):
        """Test stored bytes are returned with the record."""
        uploaded = upload_file('a.txt', b'hello')

        file_instance, content = read_file_content(uploaded.id)

        assert file_instance == uploaded
        assert content == b'hello'

    def test_missing_content(self, local_storage, make_file):
        """Test a record without stored content raises."""
        file_instance = make_file()

        with pytest.raises(StoredObjectMissingError):
            read_file_content(file_instance.id)

    @pytest.mark.parametrize(('download', 'action'), [
        (True, 'download'),
        (False, 'view'),
    ])
    def test_sends_file_accessed(
        self,
        local_storage,
        django_capture_on_commit_callbacks,
        download,
        action,
    ):
        """Test the access kind is announced."""
        uploaded = upload_file('a.txt', b'hello')
        received = []

        def handler(sender, **kwargs):  # noqa: WPS430
            received.append(kwargs['action'])

        file_accessed.connect(handler)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                read_file_content(uploaded.id, download=download)
        finally:
            file_accessed.disconnect(handler)

        assert received == [action]


@pytest.mark.django_db
class TestListing:
    """Tests for listing files."""

    def test_list_all_files(self, make_file, docs):
        """Test without folder every file is listed, by name."""
        make_file('b.txt', folder=docs)
        make_file('a.txt')

        names = [file.name for file in list_files()]

        assert names == ['a.txt', 'b.txt']

    def test_list_folder_files(self, make_file, docs):
        """Test folder listing holds only that folder's files."""
        make_file('b.txt', folder=docs)
        make_file('a.txt')

        names = [file.name for file in list_files(docs.pk)]

        assert names == ['b.txt']

    def test_list_root_contents(self, make_file, docs, reports):
        """Test root contents hold root files and root folders only."""
        make_file('root.txt')
        make_file('nested.txt', folder=docs)

        contents = list_root_contents()

        assert contents.path == '/'
        assert [file.name for file in contents.files] == ['root.txt']
        assert [folder.name for folder in contents.children] == ['docs']


@pytest.mark.django_db
def test_find_missing_content(local_storage, make_file):
    """Test only records without stored content are reported."""
    present = upload_file('present.txt', b'here')
    missing = make_file('gone.txt')

    found = find_missing_content(batch_size=100)

    assert found == [missing]
    assert present not in found
