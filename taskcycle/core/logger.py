"""
Logging setup.

Every module obtains its logger through setup_logger(__name__) so handlers
and levels are configured in one place.
"""

import logging
import sys

from taskcycle.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logger(name: str) -> logging.Logger:
    """Return a logger, attaching a stream handler unless an ancestor has one."""
    log = logging.getLogger(name)
    if not log.hasHandlers():
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    log.setLevel(get_settings().LOG_LEVEL.upper())
    return log


logger = setup_logger("taskcycle")
