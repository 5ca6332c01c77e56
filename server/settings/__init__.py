"""Django settings for the file manager project.

Settings are split into components and combined with django-split-settings.
Values are read from the environment (or ``config/.env``) via decouple.
"""

from split_settings.tools import include

include(
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/files.py',
    'components/live_updates.py',
    'components/activity.py',
    'components/server.py',
)
