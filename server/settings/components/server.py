"""HTTP server settings for the run_server command."""

from server.settings.components import config

SERVER_HOST = config('SERVER_HOST', default='0.0.0.0')  # noqa: S104
SERVER_PORT = config('SERVER_PORT', cast=int, default=8000)

# Worker threads; each open event stream holds one
SERVER_THREADS = config('SERVER_THREADS', cast=int, default=32)
