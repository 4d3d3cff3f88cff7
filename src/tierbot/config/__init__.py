"""
Configuration module for tierbot.

Exports the configuration blocks, the loader and the validator for
application-wide configuration management.
"""

from .settings import (
    DEFAULT_EXIT_TIERS,
    CapitalAllocation,
    Configuration,
    ExitTier,
    GeneralSettings,
    LoggingSettings,
    RiskManagement,
    TieredExitPolicy,
    TradingParameters,
    load_config,
)
from .validation import ConfigurationError, find_violations, validate_config

__all__ = [
    "Configuration",
    "CapitalAllocation",
    "ExitTier",
    "TieredExitPolicy",
    "RiskManagement",
    "TradingParameters",
    "LoggingSettings",
    "GeneralSettings",
    "DEFAULT_EXIT_TIERS",
    "load_config",
    "ConfigurationError",
    "validate_config",
    "find_violations",
]
