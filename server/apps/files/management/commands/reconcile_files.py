"""Management command to find file records whose content is gone."""

import logging
from typing import Any, Final

from django.core.management.base import BaseCommand

from server.apps.files.logic.file_operations import (
    find_missing_content,
    purge_missing_file,
)

_DEFAULT_BATCH_SIZE: Final = 1000

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Report (and optionally delete) records without stored content.

    File deletion removes the stored object before the record, so an
    interrupted delete leaves a record pointing at nothing. This sweep
    finds those records.
    """

    help = 'Find file records whose stored content no longer exists'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--delete',
            action='store_true',
            help='Delete the dangling records instead of only listing them',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max records to check (default: {_DEFAULT_BATCH_SIZE})',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the reconciliation.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        delete = options['delete']
        batch_size = options['batch_size']

        self.stdout.write(f'Checking up to {batch_size} file records')

        missing = find_missing_content(batch_size)

        purged = 0
        failed = 0
        for file_instance in missing:
            self.stdout.write(
                f'Missing content: {file_instance.name} '
                f'(ID: {file_instance.id}, locator: {file_instance.url})',
            )
            if not delete:
                continue

            try:
                purge_missing_file(file_instance.id)
                purged += 1
            except Exception as exc:
                self.stderr.write(
                    f'Failed to delete {file_instance.id}: {exc}',
                )
                logger.exception(
                    'Failed to purge dangling file record: %s',
                    file_instance.id,
                )
                failed += 1

        if delete:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Deleted {purged} dangling records, {failed} failed',
                ),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(f'Found {len(missing)} dangling records'),
            )
