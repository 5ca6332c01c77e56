"""Shared helpers for settings components."""

from pathlib import Path
from typing import Final

from decouple import AutoConfig

# Project root: the directory that contains the ``server`` package
BASE_DIR: Final = Path(__file__).parent.parent.parent.parent

# Looks for ``config/.env`` and falls back to environment variables
config = AutoConfig(search_path=BASE_DIR.joinpath('config'))
