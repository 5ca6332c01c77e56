"""Tests for Folder and File models."""

import pytest
from django.db import IntegrityError
from django.db.models import ProtectedError

from server.apps.files.models import File, Folder


@pytest.mark.django_db
def test_folder_str(reports):
    """Test Folder __str__ returns the path."""
    assert str(reports) == '/docs/reports'


@pytest.mark.django_db
def test_folder_is_root_level(docs, reports):
    """Test root-level detection from the parent."""
    assert docs.is_root_level
    assert not reports.is_root_level


@pytest.mark.django_db
def test_folder_path_unique(docs):
    """Test the database rejects a second folder with the same path."""
    with pytest.raises(IntegrityError):
        Folder.objects.create(name='docs', path='/docs')


@pytest.mark.django_db
def test_folder_with_children_is_protected(docs, reports):
    """Test a parent cannot be deleted out from under its children."""
    with pytest.raises(ProtectedError):
        docs.delete()


@pytest.mark.django_db
def test_folder_with_files_is_protected(docs, make_file):
    """Test a folder cannot be deleted out from under its files."""
    make_file(folder=docs)

    with pytest.raises(ProtectedError):
        docs.delete()


@pytest.mark.django_db
def test_file_str(make_file):
    """Test File __str__ returns the name."""
    assert str(make_file('report.pdf')) == 'report.pdf'


@pytest.mark.django_db
def test_file_get_extension(make_file):
    """Test get_extension returns lowercase without dot."""
    assert make_file('test.PDF').get_extension() == 'pdf'
    assert make_file('README').get_extension() == ''


@pytest.mark.django_db
def test_files_ordered_by_name(make_file):
    """Test default ordering is by name."""
    make_file('b.txt')
    make_file('a.txt')

    assert list(File.objects.values_list('name', flat=True)) == [
        'a.txt',
        'b.txt',
    ]
