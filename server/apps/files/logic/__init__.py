"""Business logic layer for files app.

This package contains all business logic of the file manager:
- Folder path computation and the folder tree operations
- File upload, download, move and delete

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
