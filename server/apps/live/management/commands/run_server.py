"""Django management command to run the file manager HTTP server."""

import logging
import os
import sys
from typing import Any, final, override

from cheroot.wsgi import Server as WSGIServer
from django.conf import settings
from django.core.management.base import BaseCommand, CommandParser

from server.wsgi import application

logger = logging.getLogger(__name__)

# Set in the child process started by the reloader
_RELOAD_ENV_VAR = 'FILE_MANAGER_RELOAD_SUBPROCESS'

# Options forwarded from the reloader to the child process
_FORWARDED_OPTIONS = ('host', 'port', 'threads')


@final
class Command(BaseCommand):
    """Serve the project with the threaded cheroot WSGI server.

    Every open event stream occupies one worker thread, so ``--threads``
    bounds the number of live update clients.
    """

    help = 'Run the file manager HTTP server with live updates'

    @override
    def add_arguments(self, parser: CommandParser) -> None:
        """Add command arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument('--host', help='Bind address (default: SERVER_HOST)')
        parser.add_argument(
            '--port',
            type=int,
            help='Bind port (default: SERVER_PORT)',
        )
        parser.add_argument(
            '--threads',
            type=int,
            help='Worker threads (default: SERVER_THREADS)',
        )
        parser.add_argument(
            '--reload',
            action='store_true',
            help='Restart on Python file changes (development only)',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Start the server, or the reloader that supervises it.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        in_child = os.environ.get(_RELOAD_ENV_VAR) == 'true'
        if options['reload'] and not in_child:
            self._supervise(options)
            return

        self._serve(
            host=options['host'] or settings.SERVER_HOST,
            port=options['port'] or settings.SERVER_PORT,
            threads=options['threads'] or settings.SERVER_THREADS,
        )

    def _serve(self, host: str, port: int, threads: int) -> None:
        """Serve requests until interrupted.

        Args:
            host: Bind address.
            port: Bind port.
            threads: Size of the worker thread pool.
        """
        server = WSGIServer(
            bind_addr=(host, port),
            wsgi_app=application,
            numthreads=threads,
        )
        server.server_name = 'FileManager'

        self.stdout.write(
            self.style.SUCCESS(
                f'Serving on http://{host}:{port}/ with {threads} threads',
            ),
        )
        logger.info('HTTP server starting on %s:%d', host, port)

        try:
            server.start()
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nShutting down...'))
        finally:
            server.stop()
            logger.info('HTTP server stopped')

    def _supervise(self, options: dict[str, Any]) -> None:
        """Run the server in a child process restarted on code changes.

        Args:
            options: Command options.
        """
        try:
            import watchfiles  # noqa: PLC0415
        except ImportError:
            self.stderr.write(
                self.style.ERROR(
                    'watchfiles is required for --reload, '
                    'install the "dev" extra',
                ),
            )
            sys.exit(1)

        child_command = [sys.executable, '-m', 'django', 'run_server']
        for option in _FORWARDED_OPTIONS:
            if options[option]:
                child_command.extend([f'--{option}', str(options[option])])

        os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'server.settings')
        os.environ[_RELOAD_ENV_VAR] = 'true'

        self.stdout.write(self.style.SUCCESS('Watching for code changes'))
        watchfiles.run_process(
            str(settings.BASE_DIR / 'server'),
            target=' '.join(child_command),
            target_type='command',
            watch_filter=watchfiles.PythonFilter(),
            callback=self._report_changes,
        )

    def _report_changes(self, changes: set[tuple[Any, str]]) -> None:
        for change_type, path in changes:
            self.stdout.write(
                self.style.WARNING(f'{change_type.name}: {path}, restarting'),
            )
