"""Canonical folder path computation.

A folder path is the slash-joined chain of folder names from the root:
``/docs`` for a root-level folder, ``/docs/reports`` for a child of it.
Pure functions only, no database access.
"""

import re
from typing import Final

from django.core.exceptions import ValidationError

# Character used to join path components
_PATH_SEPARATOR: Final = '/'

_FOLDER_NAME_PATTERN: Final = re.compile(r'[A-Za-z0-9_\- ]+')


def validate_folder_name(name: str) -> str:
    """Validate folder name and return it trimmed.

    Args:
        name: Name as supplied by the client.

    Returns:
        Name with surrounding whitespace removed.

    Raises:
        ValidationError: If the name is empty, whitespace only, or
            contains characters other than letters, digits, spaces,
            hyphens and underscores.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(
            'Folder name is required',
            code='invalid_folder_name',
        )

    if not _FOLDER_NAME_PATTERN.fullmatch(name):
        raise ValidationError(
            'Folder name can only contain letters, numbers, spaces, '
            'hyphens and underscores',
            code='invalid_folder_name',
        )

    return name.strip()


def compute_path(name: str, parent_path: str | None) -> str:
    """Compute the canonical path of a folder.

    Args:
        name: Folder name (trimmed here).
        parent_path: Path of the parent folder, None at the root.

    Returns:
        Absolute path, e.g. '/docs/reports'.
    """
    trimmed = name.strip()
    if parent_path is None:
        return _PATH_SEPARATOR + trimmed
    return parent_path + _PATH_SEPARATOR + trimmed


def descendant_prefix(path: str) -> str:
    """Prefix shared by every strict descendant of ``path``.

    Args:
        path: Folder path (e.g. '/docs').

    Returns:
        The path with a trailing separator (e.g. '/docs/').
    """
    return path + _PATH_SEPARATOR


def descendant_upper_bound(path: str) -> str:
    """Exclusive upper bound of the descendant paths of ``path``.

    '0' is the character right after the separator, so every string in
    ``[descendant_prefix(path), descendant_upper_bound(path))`` starts
    with the descendant prefix. Range comparisons stay case-sensitive
    where ``LIKE`` does not (SQLite).

    Args:
        path: Folder path (e.g. '/docs').

    Returns:
        The bound (e.g. '/docs0').
    """
    return path + chr(ord(_PATH_SEPARATOR) + 1)


def is_descendant_path(candidate_path: str, ancestor_path: str) -> bool:
    """Check whether a path lies inside (or is) another path.

    '/docs-old' is not inside '/docs': matching is by whole components.

    Args:
        candidate_path: Path to test.
        ancestor_path: Possible ancestor.

    Returns:
        True if candidate equals ancestor or is below it.
    """
    return (
        candidate_path == ancestor_path
        or candidate_path.startswith(descendant_prefix(ancestor_path))
    )


def rewrite_prefix(path: str, old_prefix: str, new_prefix: str) -> str:
    """Replace the leading ``old_prefix`` of a path with ``new_prefix``.

    Used when a folder is renamed or moved to carry the change down to
    its descendants.

    Args:
        path: Path starting with old_prefix.
        old_prefix: Previous path of the renamed/moved folder.
        new_prefix: New path of that folder.

    Returns:
        Rewritten path.

    Raises:
        ValueError: If path is not old_prefix or one of its descendants.
    """
    if not is_descendant_path(path, old_prefix):
        raise ValueError(
            f'Path {path!r} is not inside {old_prefix!r}',
        )
    return new_prefix + path[len(old_prefix):]


def split_path(path: str) -> list[str]:
    """Split a folder path into its names.

    Args:
        path: Absolute path (e.g. '/docs/reports').

    Returns:
        Names from the root down (e.g. ['docs', 'reports']).
        Empty list for the root path '/'.
    """
    return [part for part in path.split(_PATH_SEPARATOR) if part]


def normalize_lookup_path(raw_path: str) -> str:
    """Normalize a client supplied path for lookups.

    Example: 'docs/reports/' -> '/docs/reports'

    Args:
        raw_path: Path with or without leading/trailing slashes.

    Returns:
        Absolute path without trailing slash, '/' for the root.
    """
    return _PATH_SEPARATOR + _PATH_SEPARATOR.join(split_path(raw_path))
