"""
Utility modules for tierbot.

This package provides the structured logging setup shared by all modules.
"""

from .logger import (
    LogConfig,
    get_logger,
    log_config_from_settings,
    remove_handlers,
    set_log_level,
    setup_logging,
)

__all__ = [
    "LogConfig",
    "setup_logging",
    "get_logger",
    "log_config_from_settings",
    "remove_handlers",
    "set_log_level",
]
