"""Business logic for the folder tree.

Every write to ``Folder.path`` goes through this module. A folder's path
is a cache of its parent chain, so renames and moves rewrite the paths of
the whole subtree in the same transaction.

Locking: rename and move take row locks (``select_for_update``) on the
folder and its destination up front; descendant rows are locked by the
range query that rewrites them. Concurrent structural changes on
overlapping subtrees are therefore serialized by the database.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count, ProtectedError, QuerySet

from server.apps.files.exceptions import (
    DuplicateFolderPathError,
    FolderNotEmptyError,
    FolderNotFoundError,
    InvalidFolderMoveError,
    ParentFolderNotFoundError,
    TargetFolderNotFoundError,
)
from server.apps.files.logic.folder_paths import (
    compute_path,
    descendant_prefix,
    descendant_upper_bound,
    is_descendant_path,
    normalize_lookup_path,
    rewrite_prefix,
    validate_folder_name,
)
from server.apps.files.models import File, Folder
from server.apps.files.signals import (
    folder_added,
    folder_deleted,
    folder_moved,
    folder_renamed,
    send_after_commit,
)

logger = logging.getLogger(__name__)

FolderId = UUID | str


@dataclass(frozen=True, slots=True)
class FolderContents:
    """Files and subfolders directly inside a folder (or the root)."""

    folder: Folder | None
    files: list[File] = field(default_factory=list)
    children: list[Folder] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Path of the listed folder, '/' for the root."""
        if self.folder is None:
            return '/'
        return self.folder.path


@dataclass(frozen=True, slots=True)
class PathRepair:
    """A folder whose stored path differs from its parent chain."""

    folder_id: UUID
    old_path: str
    new_path: str


def annotated_folders() -> QuerySet[Folder]:
    """Folders annotated with ``file_count`` and ``child_count``.

    Returns:
        QuerySet over all folders.
    """
    return Folder.objects.annotate(
        file_count=Count('files', distinct=True),
        child_count=Count('children', distinct=True),
    )


def _fetch(
    queryset: QuerySet[Folder],
    folder_id: FolderId,
    error_class: type[FolderNotFoundError],
) -> Folder:
    """Fetch a folder by ID or raise the given not-found error.

    Malformed IDs are treated as missing folders.

    Args:
        queryset: QuerySet to fetch from.
        folder_id: Folder ID.
        error_class: FolderNotFoundError subclass to raise.

    Returns:
        Folder instance.
    """
    try:
        return queryset.get(pk=folder_id)
    except (Folder.DoesNotExist, ValidationError) as error:
        raise error_class(folder_id) from error


def _lock_folder(
    folder_id: FolderId,
    error_class: type[FolderNotFoundError] = FolderNotFoundError,
) -> Folder:
    """Fetch a folder row with a row lock held until commit."""
    return _fetch(Folder.objects.select_for_update(), folder_id, error_class)


def _parent_path(folder: Folder) -> str | None:
    """Path of the folder's parent, None at the root."""
    if folder.parent_id is None:
        return None
    return Folder.objects.values_list('path', flat=True).get(
        pk=folder.parent_id,
    )


def _path_taken(path: str, exclude_id: UUID | None = None) -> bool:
    """Check if another folder already owns the path."""
    queryset = Folder.objects.filter(path=path)
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)
    return queryset.exists()


def _rewrite_descendants(old_path: str, new_path: str) -> int:
    """Carry a path change down to every descendant.

    Descendants are found by a single range query on the old path and
    each one is rewritten exactly once.

    Args:
        old_path: Previous path of the changed folder.
        new_path: Current path of the changed folder.

    Returns:
        Number of descendants rewritten.
    """
    descendants = list(
        Folder.objects.select_for_update().filter(
            path__gte=descendant_prefix(old_path),
            path__lt=descendant_upper_bound(old_path),
        ).order_by('path'),
    )

    for descendant in descendants:
        descendant.path = rewrite_prefix(descendant.path, old_path, new_path)

    Folder.objects.bulk_update(descendants, ['path'])

    logger.debug(
        'Rewrote %d descendant paths: %s -> %s',
        len(descendants),
        old_path,
        new_path,
    )
    return len(descendants)


def create_folder(name: str, parent_id: FolderId | None = None) -> Folder:
    """Create a folder at the root or inside a parent folder.

    Args:
        name: Folder name (trimmed before use).
        parent_id: Parent folder ID, None for the root.

    Returns:
        Created Folder instance.

    Raises:
        ValidationError: If the name is invalid.
        ParentFolderNotFoundError: If parent_id does not exist.
        DuplicateFolderPathError: If the computed path is taken.
    """
    folder_name = validate_folder_name(name)

    with transaction.atomic():
        parent = None
        if parent_id is not None:
            parent = _lock_folder(parent_id, ParentFolderNotFoundError)

        path = compute_path(
            folder_name,
            parent.path if parent is not None else None,
        )

        if _path_taken(path):
            logger.warning('Folder path already exists: %s', path)
            raise DuplicateFolderPathError(path)

        try:
            # Savepoint: a lost race on the unique path must not poison
            # the outer transaction
            with transaction.atomic():
                folder = Folder.objects.create(
                    name=folder_name,
                    path=path,
                    parent=parent,
                )
        except IntegrityError as error:
            logger.warning('Concurrent folder creation at path: %s', path)
            raise DuplicateFolderPathError(path) from error

        logger.info('Folder created: %s (ID: %s)', path, folder.id)
        send_after_commit(
            folder_added,
            sender=Folder,
            folder=folder,
            file_count=0,
            child_count=0,
        )

    return folder


def rename_folder(folder_id: FolderId, new_name: str) -> Folder:
    """Rename a folder and rewrite the paths of its subtree.

    Args:
        folder_id: Folder to rename.
        new_name: New folder name (trimmed before use).

    Returns:
        Updated Folder instance.

    Raises:
        ValidationError: If the name is invalid.
        FolderNotFoundError: If the folder does not exist.
        DuplicateFolderPathError: If the new path is taken.
    """
    folder_name = validate_folder_name(new_name)

    with transaction.atomic():
        folder = _lock_folder(folder_id)
        old_name = folder.name
        old_path = folder.path
        new_path = compute_path(folder_name, _parent_path(folder))

        path_changed = new_path != old_path
        if path_changed and _path_taken(new_path):
            logger.warning('Folder path already exists: %s', new_path)
            raise DuplicateFolderPathError(new_path)

        folder.name = folder_name
        folder.path = new_path
        folder.save(update_fields=['name', 'path', 'updated_at'])

        descendant_count = 0
        if path_changed:
            descendant_count = _rewrite_descendants(old_path, new_path)

        logger.info(
            'Folder renamed: %s -> %s (ID: %s, %d descendants)',
            old_path,
            new_path,
            folder.id,
            descendant_count,
        )
        send_after_commit(
            folder_renamed,
            sender=Folder,
            folder=folder,
            old_name=old_name,
            old_path=old_path,
            descendant_count=descendant_count,
        )

    return folder


def move_folder(
    folder_id: FolderId,
    new_parent_id: FolderId | None = None,
) -> Folder:
    """Move a folder under another folder (or to the root).

    Args:
        folder_id: Folder to move.
        new_parent_id: Destination folder ID, None for the root.

    Returns:
        Updated Folder instance.

    Raises:
        FolderNotFoundError: If the folder does not exist.
        TargetFolderNotFoundError: If the destination does not exist.
        InvalidFolderMoveError: If the destination is the folder itself
            or one of its descendants.
        DuplicateFolderPathError: If the destination already holds a
            folder with the same name.
    """
    with transaction.atomic():
        folder = _lock_folder(folder_id)

        target = None
        if new_parent_id is not None:
            target = _lock_folder(new_parent_id, TargetFolderNotFoundError)

            # Cycle check comes before any path computation
            if target.pk == folder.pk or is_descendant_path(
                target.path,
                folder.path,
            ):
                logger.warning(
                    'Rejected move of %s into its own subtree %s',
                    folder.path,
                    target.path,
                )
                raise InvalidFolderMoveError(folder.pk, target.pk)

        new_path = compute_path(
            folder.name,
            target.path if target is not None else None,
        )

        if _path_taken(new_path, exclude_id=folder.pk):
            logger.warning('Folder path already exists: %s', new_path)
            raise DuplicateFolderPathError(new_path)

        old_path = folder.path
        old_parent_id = folder.parent_id
        path_changed = new_path != old_path

        folder.parent = target
        folder.path = new_path
        folder.save(update_fields=['parent', 'path', 'updated_at'])

        descendant_count = 0
        if path_changed:
            descendant_count = _rewrite_descendants(old_path, new_path)

        logger.info(
            'Folder moved: %s -> %s (ID: %s, %d descendants)',
            old_path,
            new_path,
            folder.id,
            descendant_count,
        )
        send_after_commit(
            folder_moved,
            sender=Folder,
            folder=folder,
            old_parent_id=old_parent_id,
            old_path=old_path,
            descendant_count=descendant_count,
        )

    return folder


def delete_folder(folder_id: FolderId) -> None:
    """Delete an empty folder.

    Args:
        folder_id: Folder to delete.

    Raises:
        FolderNotFoundError: If the folder does not exist.
        FolderNotEmptyError: If it still holds files or subfolders.
    """
    with transaction.atomic():
        folder = _lock_folder(folder_id)
        file_count = folder.files.count()
        child_count = folder.children.count()

        if file_count or child_count:
            raise FolderNotEmptyError(folder.pk, file_count, child_count)

        deleted_id = folder.pk
        deleted_name = folder.name
        parent_id = folder.parent_id

        try:
            folder.delete()
        except ProtectedError as error:
            # Content arrived between the count and the delete
            raise FolderNotEmptyError(
                deleted_id,
                File.objects.filter(folder_id=deleted_id).count(),
                Folder.objects.filter(parent_id=deleted_id).count(),
            ) from error

        logger.info('Folder deleted: %s (ID: %s)', deleted_name, deleted_id)
        send_after_commit(
            folder_deleted,
            sender=Folder,
            folder_id=deleted_id,
            folder_name=deleted_name,
            parent_id=parent_id,
        )


def get_folder(folder_id: FolderId) -> Folder:
    """Get a folder with its content counts.

    Args:
        folder_id: Folder ID.

    Returns:
        Folder annotated with file_count and child_count.

    Raises:
        FolderNotFoundError: If the folder does not exist.
    """
    return _fetch(annotated_folders(), folder_id, FolderNotFoundError)


def get_folder_by_path(path: str) -> Folder:
    """Get a folder by its canonical path.

    Args:
        path: Folder path; leading/trailing slashes are normalized.

    Returns:
        Folder annotated with file_count and child_count.

    Raises:
        FolderNotFoundError: If no folder has that path.
    """
    lookup_path = normalize_lookup_path(path)
    try:
        return annotated_folders().get(path=lookup_path)
    except Folder.DoesNotExist as error:
        raise FolderNotFoundError(lookup_path) from error


def list_children(parent_id: FolderId | None = None) -> QuerySet[Folder]:
    """List direct subfolders of a folder, or root-level folders.

    Args:
        parent_id: Parent folder ID, None for the root.

    Returns:
        Annotated QuerySet ordered by name.
    """
    return annotated_folders().filter(parent_id=parent_id).order_by('name')


def list_folders() -> QuerySet[Folder]:
    """List every folder, ordered by path (tree order)."""
    return annotated_folders().order_by('path')


def get_folder_contents(folder_id: FolderId) -> FolderContents:
    """Get a folder with the files and subfolders directly inside it.

    Args:
        folder_id: Folder ID.

    Returns:
        FolderContents for the folder.

    Raises:
        FolderNotFoundError: If the folder does not exist.
    """
    folder = get_folder(folder_id)
    return FolderContents(
        folder=folder,
        files=list(File.objects.filter(folder=folder).order_by('name')),
        children=list(list_children(folder.pk)),
    )


def rebuild_folder_paths(dry_run: bool = False) -> list[PathRepair]:
    """Recompute every stored path from the parent chain.

    Walks the tree from the root-level folders down and compares each
    stored path with the one computed from its parent. Folders that
    cannot be reached from the root (a parent cycle) are only logged.

    Args:
        dry_run: Report drift without writing.

    Returns:
        Repairs found (and applied unless dry_run).
    """
    repairs: list[PathRepair] = []

    with transaction.atomic():
        folders = list(Folder.objects.select_for_update().order_by('path'))
        children_by_parent: dict[UUID | None, list[Folder]] = {}
        for folder in folders:
            children_by_parent.setdefault(folder.parent_id, []).append(folder)

        visited: set[UUID] = set()
        queue: deque[tuple[Folder, str | None]] = deque(
            (folder, None) for folder in children_by_parent.get(None, [])
        )
        while queue:
            folder, parent_path = queue.popleft()
            visited.add(folder.pk)
            expected = compute_path(folder.name, parent_path)
            if folder.path != expected:
                repairs.append(PathRepair(folder.pk, folder.path, expected))
                folder.path = expected
            queue.extend(
                (child, expected)
                for child in children_by_parent.get(folder.pk, [])
            )

        unreachable = [
            folder.pk for folder in folders if folder.pk not in visited
        ]
        if unreachable:
            logger.error(
                'Folders unreachable from the root: %s',
                ', '.join(str(folder_pk) for folder_pk in unreachable),
            )

        if repairs and not dry_run:
            _apply_repairs(repairs)

    logger.info(
        'Folder path check: %d drifted%s',
        len(repairs),
        ' (dry run)' if dry_run else '',
    )
    return repairs


def _apply_repairs(repairs: list[PathRepair]) -> None:
    """Write repaired paths without tripping the unique constraint.

    Paths are first parked on a unique placeholder, then set to their
    final value, so swaps between drifted folders never collide.

    Args:
        repairs: Repairs to apply.
    """
    for repair in repairs:
        Folder.objects.filter(pk=repair.folder_id).update(
            path=f'#repair/{repair.folder_id}',
        )
    for repair in repairs:
        Folder.objects.filter(pk=repair.folder_id).update(
            path=repair.new_path,
        )
        logger.info(
            'Repaired folder path: %s -> %s (ID: %s)',
            repair.old_path,
            repair.new_path,
            repair.folder_id,
        )
