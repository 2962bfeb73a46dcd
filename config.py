# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Centralized configuration for environment variables."""

import os
from pathlib import Path
from typing import Optional

DATA_DIR_ENV = "PIXEL_BALL_DATA_DIR"
SEED_ENV = "PIXEL_BALL_SEED"
LOG_LEVEL_ENV = "PIXEL_BALL_LOG_LEVEL"

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data" / "profiles"


def get_data_dir() -> Path:
    """Return the directory saved profiles live in."""
    value = os.environ.get(DATA_DIR_ENV, "")
    return Path(value) if value else DEFAULT_DATA_DIR


def get_default_seed() -> Optional[int]:
    """Return the seed from the environment, or None for a random one."""
    value = os.environ.get(SEED_ENV, "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{SEED_ENV} must be an integer, got {value!r}") from None


def get_log_level() -> str:
    """Return the logging level name (default WARNING)."""
    return os.environ.get(LOG_LEVEL_ENV, "WARNING").upper() or "WARNING"
