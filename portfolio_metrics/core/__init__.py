"""
Core infrastructure package for the portfolio metrics engine.

Provides:
- Configuration management via pydantic-settings
- The InvalidRecordError exception raised in strict mode
- Logging setup for host applications

This module re-exports key components so callers can write:

    from portfolio_metrics.core import get_settings, InvalidRecordError

Instead of:

    from portfolio_metrics.core.config import get_settings
    from portfolio_metrics.core.errors import InvalidRecordError
"""

from portfolio_metrics.core.config import Settings, get_settings
from portfolio_metrics.core.errors import InvalidRecordError
from portfolio_metrics.core.logging_config import configure_logging, LOG_FORMAT

__all__ = [
    'Settings',
    'get_settings',
    'InvalidRecordError',
    'configure_logging',
    'LOG_FORMAT',
]
