"""
Logging setup for the civic triage core.
"""

import logging
import sys
from typing import Optional

from app.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once for scripts and embedding applications.

    Args:
        level: Log level name; defaults to settings.LOG_LEVEL (DEBUG when settings.DEBUG)
    """
    if level is None:
        level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
