"""Tests for broadcasts triggered by file and folder changes."""

import pytest

from server.apps.files.logic.file_operations import (
    delete_file,
    move_file,
    upload_file,
)
from server.apps.files.logic.folder_operations import (
    create_folder,
    delete_folder,
    rename_folder,
)


@pytest.mark.django_db
def test_upload_reaches_only_its_folder(
    live_registry,
    make_transport,
    local_storage,
    django_capture_on_commit_callbacks,
):
    """Test file:added goes to F1 watchers and not to F2 watchers."""
    folder_one = create_folder('one')
    folder_two = create_folder('two')
    watcher_one = make_transport()
    watcher_two = make_transport()
    live_registry.subscribe(watcher_one, folder_one.pk)
    live_registry.subscribe(watcher_two, folder_two.pk)

    with django_capture_on_commit_callbacks(execute=True):
        file_instance = upload_file('a.pdf', b'data', folder_id=folder_one.pk)

    assert file_instance.folder_id == folder_one.pk
    assert watcher_one.names() == ['connected', 'file:added']
    assert watcher_two.names() == ['connected']

    _, payload = watcher_one.events[-1]
    assert payload == {
        'id': str(file_instance.id),
        'name': 'a.pdf',
        'url': file_instance.url,
        'size': 4,
        'mimeType': 'application/pdf',
        'folderId': str(folder_one.pk),
        'createdAt': file_instance.created_at.isoformat(),
    }


@pytest.mark.django_db
def test_delete_reaches_folder_watchers(
    live_registry,
    make_transport,
    local_storage,
    django_capture_on_commit_callbacks,
):
    """Test file:deleted carries only the ID."""
    folder = create_folder('one')
    file_instance = upload_file('a.pdf', b'data', folder_id=folder.pk)
    watcher = make_transport()
    live_registry.subscribe(watcher, folder.pk)

    with django_capture_on_commit_callbacks(execute=True):
        delete_file(file_instance.id)

    assert watcher.events[-1] == (
        'file:deleted',
        {'id': str(file_instance.id)},
    )


@pytest.mark.django_db
def test_move_reaches_every_client(
    live_registry,
    make_transport,
    local_storage,
    django_capture_on_commit_callbacks,
):
    """Test file:moved is unscoped and names both folders."""
    source = create_folder('source')
    destination = create_folder('destination')
    elsewhere = create_folder('elsewhere')
    file_instance = upload_file('a.pdf', b'data', folder_id=source.pk)
    watcher = make_transport()
    live_registry.subscribe(watcher, elsewhere.pk)

    with django_capture_on_commit_callbacks(execute=True):
        move_file(file_instance.id, destination.pk)

    assert watcher.events[-1] == ('file:moved', {
        'id': str(file_instance.id),
        'oldFolderId': str(source.pk),
        'newFolderId': str(destination.pk),
    })


@pytest.mark.django_db
def test_folder_added_scoped_to_parent(
    live_registry,
    make_transport,
    django_capture_on_commit_callbacks,
):
    """Test folder:added goes to parent watchers with counts."""
    parent = create_folder('parent')
    parent_watcher = make_transport()
    other_watcher = make_transport()
    live_registry.subscribe(parent_watcher, parent.pk)
    live_registry.subscribe(other_watcher, create_folder('other').pk)

    with django_capture_on_commit_callbacks(execute=True):
        child = create_folder('child', parent.pk)

    event, payload = parent_watcher.events[-1]
    assert event == 'folder:added'
    assert payload['id'] == str(child.pk)
    assert payload['path'] == '/parent/child'
    assert payload['parentId'] == str(parent.pk)
    assert payload['_count'] == {'files': 0, 'children': 0}
    assert other_watcher.names() == ['connected']


@pytest.mark.django_db
def test_folder_deleted_scoped_to_parent(
    live_registry,
    make_transport,
    django_capture_on_commit_callbacks,
):
    """Test folder:deleted goes to parent watchers."""
    parent = create_folder('parent')
    child = create_folder('child', parent.pk)
    watcher = make_transport()
    live_registry.subscribe(watcher, parent.pk)

    with django_capture_on_commit_callbacks(execute=True):
        delete_folder(child.pk)

    assert watcher.events[-1] == ('folder:deleted', {'id': str(child.pk)})


@pytest.mark.django_db
def test_root_watcher_sees_nested_events(
    live_registry,
    make_transport,
    django_capture_on_commit_callbacks,
):
    """Test a subscription without scope receives every event."""
    parent = create_folder('parent')
    watcher = make_transport()
    live_registry.subscribe(watcher)

    with django_capture_on_commit_callbacks(execute=True):
        create_folder('child', parent.pk)

    assert watcher.names() == ['connected', 'folder:added']


@pytest.mark.django_db
def test_rename_is_not_broadcast(
    live_registry,
    make_transport,
    django_capture_on_commit_callbacks,
):
    """Test renames produce no live event."""
    folder = create_folder('before')
    watcher = make_transport()
    live_registry.subscribe(watcher)

    with django_capture_on_commit_callbacks(execute=True):
        rename_folder(folder.pk, 'after')

    assert watcher.names() == ['connected']


@pytest.mark.django_db
def test_rolled_back_change_is_not_broadcast(
    live_registry,
    make_transport,
    django_capture_on_commit_callbacks,
):
    """Test nothing is published when the transaction never commits."""
    watcher = make_transport()
    live_registry.subscribe(watcher)

    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        create_folder('pending')

    assert len(callbacks) == 1
    assert watcher.names() == ['connected']
