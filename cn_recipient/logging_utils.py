import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "CN_RECIPIENT_LOG_LEVEL"


def _resolve_level(level_name: str) -> int:
    normalized = (level_name or "WARNING").upper()
    if normalized.isdigit():
        return int(normalized)
    return getattr(logging, normalized, logging.WARNING)


def configure_logging(level_override: Optional[str] = None) -> None:
    """
    Level precedence: ``CN_RECIPIENT_LOG_LEVEL``, then ``level_override``,
    then ``WARNING``. Leaves existing handlers (e.g. uvicorn's) in place.
    """
    level_value = _resolve_level(os.getenv(LOG_LEVEL_ENV) or level_override or "WARNING")

    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level_value)
    else:
        logging.basicConfig(level=level_value)
