"""Django app configuration for files app."""

from django.apps import AppConfig


class FilesConfig(AppConfig):
    """Folder tree, file records and their storage.

    Changes are announced through ``server.apps.files.signals``; this app
    has no receivers of its own.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.files'
    label = 'files'
    verbose_name = 'Files and folders'
