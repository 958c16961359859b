"""
Logging setup for applications that use the connector.

The package only creates module loggers; call ``configure_logging`` from the
application entry point to attach a handler.
"""
import logging
from typing import Optional

from orm_connector.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name; defaults to ``settings.LOG_LEVEL``
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    logging.getLogger("orm_connector").setLevel(log_level)
