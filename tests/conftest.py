"""
Shared pytest fixtures for the tierbot test suite.

This module provides fixtures for:
- Injected environment mappings (live credentials, testnet)
- Loaded, validated configurations
- A process environment cleared of every tierbot key
- Logging reset between tests
"""

import pytest
import structlog

from tierbot.config import (
    CapitalAllocation,
    Configuration,
    GeneralSettings,
    LoggingSettings,
    RiskManagement,
    TieredExitPolicy,
    TradingParameters,
    load_config,
)
from tierbot.utils import remove_handlers

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


# ============================================================================
# Environment Fixtures
# ============================================================================

CONFIG_BLOCKS = (
    CapitalAllocation,
    TieredExitPolicy,
    RiskManagement,
    TradingParameters,
    LoggingSettings,
    GeneralSettings,
)

ENVIRONMENT_KEYS = sorted(
    field.validation_alias
    for block in CONFIG_BLOCKS
    for field in block.model_fields.values()
    if isinstance(field.validation_alias, str)
)


@pytest.fixture
def live_environ() -> dict[str, str]:
    """Minimal environment for live trading: credentials only, everything else default."""
    return {"API_KEY": "test-api-key", "API_SECRET": "test-api-secret"}


@pytest.fixture
def testnet_environ() -> dict[str, str]:
    """Environment for testnet trading without credentials."""
    return {"TRADING_TESTNET_ENABLED": "true"}


@pytest.fixture
def clean_environment(monkeypatch):
    """Remove every recognized tierbot key from the process environment."""
    for key in ENVIRONMENT_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def default_config(live_environ) -> Configuration:
    """Default configuration with live credentials supplied."""
    return load_config(environ=live_environ)


@pytest.fixture
def replace_block():
    """Return a helper copying a configuration with fields of one block replaced.

    Copies skip validation, so the result may violate any invariant.
    """

    def _replace(config: Configuration, block: str, **updates) -> Configuration:
        updated = getattr(config, block).model_copy(update=updates)
        return config.model_copy(update={block: updated})

    return _replace


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove installed handlers and reset structlog after each test."""
    yield

    remove_handlers()
    structlog.reset_defaults()
