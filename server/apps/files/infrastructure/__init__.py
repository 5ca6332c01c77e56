"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Storage backends (local filesystem, S3-compatible object storage)
- Upload metadata and validation (MIME type, size, extension)

Keep infrastructure concerns separate from business logic.
"""
