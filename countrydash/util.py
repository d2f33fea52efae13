"""Small helpers for timestamps and the location of the data file."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from countrydash.config import (
    DATA_DIR,
    DATA_ENV_VAR,
    DEFAULT_DATA_FILE,
    LOG_FALLBACK_DATA_PATH_USED,
    TIMESTAMP_LAYOUT,
)

logger = logging.getLogger(__name__)


def current_timestamp(now: datetime | None = None) -> str:
    """Format ``now`` (local time by default) as ``yyyyMMdd HH:mm``."""
    moment = now if now is not None else datetime.now()
    return moment.strftime(TIMESTAMP_LAYOUT)


def default_data_path() -> str:
    """Return the document store file, from the environment or the project's data directory."""
    custom = os.environ.get(DATA_ENV_VAR, "")
    if custom:
        return custom
    project_root = Path(__file__).resolve().parent.parent
    fallback = str(project_root / DATA_DIR / DEFAULT_DATA_FILE)
    logger.info(LOG_FALLBACK_DATA_PATH_USED.format(fallback))
    return fallback