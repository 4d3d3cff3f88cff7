"""
Default values for the tierbot configuration.

Every default the loader falls back to lives here, grouped by configuration
block. The exit-tier ladder is turned into ExitTier models once by the
settings module and shared by every loaded configuration.

Values are annotated Final; the settings blocks only ever read them.
"""

from typing import Final

# =============================================================================
# Capital Allocation
# =============================================================================

DEFAULT_TOTAL_CAPITAL: Final[float] = 1000.0
DEFAULT_RISK_PERCENTAGE: Final[float] = 0.05
"""Fraction of current equity put at risk on a single trade (5%)."""

DEFAULT_MINIMUM_CAPITAL: Final[float] = 10.0
DEFAULT_MAX_CAPITAL_PER_TRADE: Final[float] = 500.0
DEFAULT_MIN_WIN_RATE_FOR_INCREASE: Final[float] = 0.55
DEFAULT_MAX_WIN_RATE_THRESHOLD: Final[float] = 0.85


# =============================================================================
# Tiered Exit
# =============================================================================

DEFAULT_EXIT_LADDER: Final[tuple[tuple[float, float], ...]] = (
    (0.5, 0.2),
    (1.0, 0.3),
    (1.5, 0.25),
    (2.0, 0.25),
)
"""
Take-profit ladder as (profit_percentage, close_percentage) pairs, ascending
by profit. Each tier closes a fraction of the position that is still open.
"""

DEFAULT_MAX_HOLD_MINUTES: Final[int] = 240
DEFAULT_TRAILING_STOP_PERCENTAGE: Final[float] = 0.5


# =============================================================================
# Risk Management
# =============================================================================

DEFAULT_MAX_RISK_PERCENTAGE: Final[float] = 0.02
DEFAULT_MAX_CONSECUTIVE_LOSSES: Final[int] = 5
DEFAULT_PAUSE_DURATION_MINUTES: Final[int] = 30
DEFAULT_MAX_DAILY_LOSS_PERCENTAGE: Final[float] = 0.05
"""
Maximum daily loss as a fraction of the day's starting equity (5%).
Trading halts for the day once this is exceeded.
"""

DEFAULT_STOP_LOSS_PERCENTAGE: Final[float] = 0.03
DEFAULT_BREAK_EVEN_THRESHOLD: Final[float] = 0.5
DEFAULT_MAX_POSITION_SIZE: Final[float] = 0.1
"""Position value cap as a fraction of equity (10%)."""

DEFAULT_MAX_CORRELATION_THRESHOLD: Final[float] = 0.8
DEFAULT_MAX_DRAWDOWN_PERCENTAGE: Final[float] = 0.15
DEFAULT_MINIMUM_EQUITY_LEVEL: Final[float] = 500.0


# =============================================================================
# Trading Parameters
# =============================================================================

DEFAULT_TRADING_PAIR: Final[str] = "BNBUSDT"
DEFAULT_MIN_ORDER_QUANTITY: Final[float] = 0.01
DEFAULT_MAX_ORDER_QUANTITY: Final[float] = 1000.0
DEFAULT_SLIPPAGE_TOLERANCE: Final[float] = 0.01
DEFAULT_ORDER_TIMEOUT_SECONDS: Final[int] = 30
DEFAULT_MAKER_FEE: Final[float] = 0.001
DEFAULT_TAKER_FEE: Final[float] = 0.001


# =============================================================================
# Logging
# =============================================================================

DEFAULT_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_LOG_FILE_PATH: Final[str] = "./logs/bot.log"
DEFAULT_MAX_LOG_FILE_SIZE_MB: Final[int] = 10
DEFAULT_MAX_BACKUP_FILES: Final[int] = 5


# =============================================================================
# General
# =============================================================================

DEFAULT_REFRESH_INTERVAL_SECONDS: Final[int] = 5

TRUTHY_VALUES: Final[frozenset[str]] = frozenset({"true", "1", "yes"})
"""
Case-insensitive tokens read as True for boolean settings.
Any other non-empty value reads as False.
"""

DEFAULT_ENV_FILE: Final[str] = ".env"
