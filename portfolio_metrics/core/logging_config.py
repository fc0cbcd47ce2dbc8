"""
Logging setup for applications embedding the metrics engine.

The engine's modules only create named loggers; nothing is configured on
import. Host applications call configure_logging() once at startup.
"""

import logging
from typing import Optional

from portfolio_metrics.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging with the engine's format.

    Args:
        level: Log level name. Defaults to ``Settings.log_level``.
    """
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format=LOG_FORMAT,
    )
