"""Exceptions for files app.

Invalid names and rejected uploads raise Django's ``ValidationError``;
missing files raise ``File.DoesNotExist``. Everything else lives here.
"""

from uuid import UUID


class FolderNotFoundError(Exception):
    """Raised when a referenced folder does not exist."""

    role = 'Folder'

    def __init__(self, folder_id: UUID | str) -> None:
        """Initialize FolderNotFoundError.

        Args:
            folder_id: ID that was looked up.
        """
        self.folder_id = folder_id
        super().__init__(f'{self.role} not found: {folder_id}')


class ParentFolderNotFoundError(FolderNotFoundError):
    """Raised when the parent of a new folder does not exist."""

    role = 'Parent folder'


class TargetFolderNotFoundError(FolderNotFoundError):
    """Raised when the destination of a folder move does not exist."""

    role = 'Target folder'


class DuplicateFolderPathError(Exception):
    """Raised when another folder already owns the computed path."""

    def __init__(self, path: str) -> None:
        """Initialize DuplicateFolderPathError.

        Args:
            path: Path that is already taken.
        """
        self.path = path
        super().__init__(
            f'A folder with this name already exists in this location: {path}',
        )


class InvalidFolderMoveError(Exception):
    """Raised when a folder would be moved into itself or its subtree."""

    def __init__(self, folder_id: UUID, target_id: UUID) -> None:
        """Initialize InvalidFolderMoveError.

        Args:
            folder_id: Folder being moved.
            target_id: Requested new parent.
        """
        self.folder_id = folder_id
        self.target_id = target_id
        super().__init__(
            f'Cannot move folder {folder_id} into itself '
            f'or its descendant {target_id}',
        )


class FolderNotEmptyError(Exception):
    """Raised when deleting a folder that still has files or subfolders."""

    def __init__(
        self,
        folder_id: UUID,
        file_count: int,
        child_count: int,
    ) -> None:
        """Initialize FolderNotEmptyError.

        Args:
            folder_id: Folder that was asked to be deleted.
            file_count: Files still in the folder.
            child_count: Subfolders still in the folder.
        """
        self.folder_id = folder_id
        self.file_count = file_count
        self.child_count = child_count
        super().__init__(
            f'Cannot delete folder {folder_id} with contents '
            f'({file_count} files, {child_count} subfolders)',
        )


class StorageFailureError(Exception):
    """Raised when the storage backend fails to store or delete content."""

    def __init__(self, operation: str, name: str) -> None:
        """Initialize StorageFailureError.

        Args:
            operation: What was attempted ('store', 'delete', ...).
            name: Storage name or locator involved.
        """
        self.operation = operation
        self.name = name
        super().__init__(f'Storage {operation} failed: {name}')


class StoredObjectMissingError(Exception):
    """Raised when a file record points at content that no longer exists."""

    def __init__(self, locator: str) -> None:
        """Initialize StoredObjectMissingError.

        Args:
            locator: Storage locator that could not be read.
        """
        self.locator = locator
        super().__init__(f'File not found in storage: {locator}')
