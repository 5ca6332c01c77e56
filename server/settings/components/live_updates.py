"""Live update (server-sent events) settings."""

from server.settings.components import config

# Seconds of silence before a heartbeat comment is written to the stream
LIVE_UPDATES_HEARTBEAT_SECONDS = config(
    'LIVE_UPDATES_HEARTBEAT_SECONDS',
    cast=int,
    default=25,
)

# Pending events per client before the client is considered dead
LIVE_UPDATES_QUEUE_SIZE = config(
    'LIVE_UPDATES_QUEUE_SIZE',
    cast=int,
    default=50,
)
