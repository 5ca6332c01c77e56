"""External activity log settings."""

from server.settings.components import config

ACTIVITY_LOG_ENABLED = config('ACTIVITY_LOG_ENABLED', cast=bool, default=True)

# Base URL of the logging function app, e.g. https://logs.example.net
ACTIVITY_LOG_FUNCTION_URL = config('ACTIVITY_LOG_FUNCTION_URL', default='')
ACTIVITY_LOG_FUNCTION_KEY = config('ACTIVITY_LOG_FUNCTION_KEY', default='')

ACTIVITY_LOG_TIMEOUT = config(
    'ACTIVITY_LOG_TIMEOUT',
    cast=float,
    default=5.0,
)
