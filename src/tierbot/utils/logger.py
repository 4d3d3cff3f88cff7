"""
Logging system for tierbot.

This module provides structured logging with support for console and rotating
file output, JSON and pretty formatting, and masking of credentials.

Example Usage:
    ```python
    from tierbot.config import load_config
    from tierbot.utils.logger import get_logger, log_config_from_settings, setup_logging

    config = load_config()
    setup_logging(log_config_from_settings(config.logging, format="json"))

    logger = get_logger(__name__)
    logger.info("position_sized", pair="BNBUSDT", quantity=10.0)
    logger.warning("daily_loss_limit_reached", loss_pct=0.06)
    ```
"""

from dataclasses import dataclass
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from typing import TYPE_CHECKING, Any, Literal

import structlog
from structlog.types import EventDict, Processor

if TYPE_CHECKING:
    from tierbot.config.settings import LoggingSettings

BYTES_PER_MB = 1024 * 1024

# Root handlers installed by setup_logging, replaced on reconfiguration
_installed_handlers: list[logging.Handler] = []


@dataclass
class LogConfig:
    """Configuration for the logging system.

    Attributes:
        level: Logging level (DEBUG, INFO, WARN/WARNING, ERROR, CRITICAL)
        format: Console output format - "json" for production, "pretty" for development
        file_path: Optional path to log file. If None, no file output
        console_output: Whether to output to console (default: True)
        max_file_size_mb: Size at which the log file is rotated
        max_backup_files: Number of rotated files to keep
        include_timestamp: Whether to include timestamps in logs
        include_caller_info: Whether to include caller file/line information
        app_version: Application version string
    """

    level: str = "INFO"
    format: Literal["json", "pretty"] = "pretty"
    file_path: str | None = None
    console_output: bool = True
    max_file_size_mb: int = 10
    max_backup_files: int = 5
    include_timestamp: bool = True
    include_caller_info: bool = False
    app_version: str = "0.1.0"


def log_config_from_settings(
    settings: "LoggingSettings", format: Literal["json", "pretty"] = "pretty"
) -> LogConfig:
    """Build a LogConfig from the loaded logging settings block.

    Args:
        settings: Validated LoggingSettings
        format: Console output format

    Returns:
        LogConfig with file output only when file logging is enabled
    """
    return LogConfig(
        level=settings.level,
        format=format,
        file_path=settings.file_path if settings.file_logging_enabled else None,
        console_output=settings.console_logging_enabled,
        max_file_size_mb=settings.max_file_size_mb,
        max_backup_files=settings.max_backup_files,
    )


def add_app_info(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application-level information to log entries."""
    event_dict["app"] = "tierbot"
    event_dict["version"] = getattr(add_app_info, "version", "unknown")
    return event_dict


def filter_sensitive(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Filter and mask sensitive information from logs.

    Masks API keys, secrets, passwords and tokens, including values nested in
    dictionaries and lists.

    Args:
        logger: The logger instance
        method_name: The logging method name
        event_dict: The event dictionary

    Returns:
        Updated event dictionary with masked sensitive data
    """
    sensitive_keys = {
        "api_key",
        "apikey",
        "api_secret",
        "apisecret",
        "password",
        "token",
        "secret",
        "webhook_url",
    }

    def mask_value(value: Any) -> Any:
        if isinstance(value, str):
            if len(value) <= 4:
                return "***"
            return f"{value[:2]}***{value[-2:]}"
        return "***"

    def recursive_mask(data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: mask_value(value) if key.lower() in sensitive_keys else recursive_mask(value)
                for key, value in data.items()
            }
        if isinstance(data, (list, tuple)):
            return type(data)(recursive_mask(item) for item in data)
        return data

    return recursive_mask(event_dict)  # type: ignore[no-any-return]


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    # getLevelName returns a "Level X" string for unknown names
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(config: LogConfig) -> None:
    """Setup the logging system with the given configuration.

    Configures structlog to hand events to the standard library, installs a
    console handler when console output is enabled and a size-rotated JSON
    file handler when a file path is set. Previously installed root handlers
    are replaced, so calling this again reconfigures logging. Handlers added by
    other code (test capture handlers, for example) are left alone.

    Args:
        config: LogConfig instance with logging configuration
    """
    add_app_info.version = config.app_version  # type: ignore[attr-defined]
    level = _resolve_level(config.level)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_app_info,
        filter_sensitive,
    ]
    if config.include_timestamp:
        shared_processors.append(structlog.processors.TimeStamper(fmt="iso"))
    if config.include_caller_info:
        shared_processors.append(
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            )
        )
    shared_processors.append(structlog.processors.StackInfoRenderer())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    remove_handlers()
    logging.getLogger().setLevel(level)

    def formatter(*renderers: Processor) -> structlog.stdlib.ProcessorFormatter:
        return structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
        )

    json_renderers = (structlog.processors.format_exc_info, structlog.processors.JSONRenderer())

    if config.console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        if config.format == "json":
            console_handler.setFormatter(formatter(*json_renderers))
        else:
            console_handler.setFormatter(formatter(structlog.dev.ConsoleRenderer(colors=True)))
        _install(console_handler)

    if config.file_path:
        file_path = Path(config.file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        # Use JSON format for file output regardless of console format
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=config.max_file_size_mb * BYTES_PER_MB,
            backupCount=config.max_backup_files,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter(*json_renderers))
        _install(file_handler)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance for the given name.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Configured structlog BoundLogger instance
    """
    return structlog.get_logger(name)


def set_log_level(level: str) -> None:
    """Change the logging level at runtime.

    Args:
        level: New log level (DEBUG, INFO, WARN/WARNING, ERROR, CRITICAL)
    """
    logging.getLogger().setLevel(_resolve_level(level))


def _install(handler: logging.Handler) -> None:
    logging.getLogger().addHandler(handler)
    _installed_handlers.append(handler)


def remove_handlers() -> None:
    """Detach and close every handler installed by :func:`setup_logging`."""
    root_logger = logging.getLogger()
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root_logger.removeHandler(handler)
        handler.close()
