"""Management command to recompute folder paths from the parent chain."""

from typing import Any

from django.core.management.base import BaseCommand

from server.apps.files.logic.folder_operations import rebuild_folder_paths


class Command(BaseCommand):
    """Check every folder path against its parent chain and fix drift."""

    help = 'Recompute folder paths from the folder hierarchy'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show drifted paths without fixing them',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        repairs = rebuild_folder_paths(dry_run=dry_run)

        verb = 'Would repair' if dry_run else 'Repaired'
        for repair in repairs:
            self.stdout.write(
                f'{verb}: {repair.old_path} -> {repair.new_path}',
            )

        self.stdout.write(
            self.style.SUCCESS(f'{verb} {len(repairs)} folder paths'),
        )
