"""
Validation of a loaded tierbot configuration.

Checks run in a fixed order, block by block: capital allocation, tiered exit,
risk management, trading parameters, logging, then the top-level settings.
Each check tests exactly one invariant. :func:`validate_config` stops at the
first violation; :func:`find_violations` reports all of them.

Threshold checks that belong to an optional feature (correlation check,
drawdown monitoring, equity protection, tiered exit) only run while that
feature is enabled.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .settings import (
        CapitalAllocation,
        Configuration,
        LoggingSettings,
        RiskManagement,
        TieredExitPolicy,
        TradingParameters,
    )

POSITIVE = "> 0"
NON_NEGATIVE = ">= 0"
FRACTION = "in (0, 1]"
UNIT_INTERVAL = "in [0, 1]"


class ConfigurationError(Exception):
    """A configuration setting violates one of its invariants.

    Attributes:
        field: Dotted path of the offending setting, e.g. ``risk_management.max_position_size``
        constraint: The violated constraint in words
        value: The offending value
    """

    def __init__(self, field: str, constraint: str, value: Any = None):
        self.field = field
        self.constraint = constraint
        self.value = value
        super().__init__(f"{field} must be {constraint}, got {value!r}")


def _positive(field: str, value: float) -> Iterator[ConfigurationError]:
    if not value > 0:
        yield ConfigurationError(field, POSITIVE, value)


def _non_negative(field: str, value: float) -> Iterator[ConfigurationError]:
    if not value >= 0:
        yield ConfigurationError(field, NON_NEGATIVE, value)


def _fraction(field: str, value: float) -> Iterator[ConfigurationError]:
    if not 0 < value <= 1:
        yield ConfigurationError(field, FRACTION, value)


def _unit_interval(field: str, value: float) -> Iterator[ConfigurationError]:
    if not 0 <= value <= 1:
        yield ConfigurationError(field, UNIT_INTERVAL, value)


def _capital_allocation(capital: CapitalAllocation) -> Iterator[ConfigurationError]:
    yield from _positive("capital_allocation.total_capital", capital.total_capital)
    yield from _fraction("capital_allocation.risk_percentage", capital.risk_percentage)
    yield from _positive("capital_allocation.minimum_capital", capital.minimum_capital)
    yield from _positive(
        "capital_allocation.max_capital_per_trade", capital.max_capital_per_trade
    )
    if capital.max_capital_per_trade > capital.total_capital:
        yield ConfigurationError(
            "capital_allocation.max_capital_per_trade",
            f"<= total_capital ({capital.total_capital})",
            capital.max_capital_per_trade,
        )
    yield from _fraction(
        "capital_allocation.min_win_rate_for_increase", capital.min_win_rate_for_increase
    )
    yield from _fraction(
        "capital_allocation.max_win_rate_threshold", capital.max_win_rate_threshold
    )


def _tiered_exit(policy: TieredExitPolicy) -> Iterator[ConfigurationError]:
    if not policy.enabled:
        return

    if not policy.tiers:
        yield ConfigurationError("tiered_exit.tiers", "a non-empty list of tiers", [])
    for index, tier in enumerate(policy.tiers):
        yield from _positive(
            f"tiered_exit.tiers[{index}].profit_percentage", tier.profit_percentage
        )
        yield from _fraction(
            f"tiered_exit.tiers[{index}].close_percentage", tier.close_percentage
        )
    yield from _positive("tiered_exit.max_hold_minutes", policy.max_hold_minutes)
    yield from _non_negative(
        "tiered_exit.trailing_stop_percentage", policy.trailing_stop_percentage
    )


def _risk_management(risk: RiskManagement) -> Iterator[ConfigurationError]:
    yield from _fraction("risk_management.max_risk_percentage", risk.max_risk_percentage)
    yield from _positive(
        "risk_management.max_consecutive_losses", risk.max_consecutive_losses
    )
    yield from _positive(
        "risk_management.pause_duration_minutes", risk.pause_duration_minutes
    )
    yield from _fraction(
        "risk_management.max_daily_loss_percentage", risk.max_daily_loss_percentage
    )
    yield from _unit_interval(
        "risk_management.stop_loss_percentage", risk.stop_loss_percentage
    )
    yield from _non_negative(
        "risk_management.break_even_threshold", risk.break_even_threshold
    )
    yield from _fraction("risk_management.max_position_size", risk.max_position_size)

    if risk.correlation_check_enabled:
        yield from _unit_interval(
            "risk_management.max_correlation_threshold", risk.max_correlation_threshold
        )
    if risk.drawdown_monitoring_enabled:
        yield from _fraction(
            "risk_management.max_drawdown_percentage", risk.max_drawdown_percentage
        )
    if risk.equity_protection_enabled:
        yield from _non_negative(
            "risk_management.minimum_equity_level", risk.minimum_equity_level
        )


def _trading(trading: TradingParameters) -> Iterator[ConfigurationError]:
    if not trading.pair:
        yield ConfigurationError("trading.pair", "a non-empty trading pair", trading.pair)

    # Credentials are reported by name only, never by value
    if not trading.testnet_enabled:
        if not trading.api_key.get_secret_value():
            yield ConfigurationError("trading.api_key", "provided for live trading")
        if not trading.api_secret.get_secret_value():
            yield ConfigurationError("trading.api_secret", "provided for live trading")

    yield from _positive("trading.min_order_quantity", trading.min_order_quantity)
    yield from _positive("trading.max_order_quantity", trading.max_order_quantity)
    if trading.max_order_quantity < trading.min_order_quantity:
        yield ConfigurationError(
            "trading.max_order_quantity",
            f">= min_order_quantity ({trading.min_order_quantity})",
            trading.max_order_quantity,
        )
    yield from _unit_interval("trading.slippage_tolerance", trading.slippage_tolerance)
    yield from _positive("trading.order_timeout_seconds", trading.order_timeout_seconds)
    yield from _unit_interval("trading.maker_fee", trading.maker_fee)
    yield from _unit_interval("trading.taker_fee", trading.taker_fee)


def _logging(settings: LoggingSettings) -> Iterator[ConfigurationError]:
    if settings.file_logging_enabled and not settings.file_path:
        yield ConfigurationError(
            "logging.file_path", "set when file logging is enabled", settings.file_path
        )
    yield from _positive("logging.max_file_size_mb", settings.max_file_size_mb)
    yield from _non_negative("logging.max_backup_files", settings.max_backup_files)


def iter_violations(config: Configuration) -> Iterator[ConfigurationError]:
    """
    Yield every invariant violation of ``config`` in validation order.

    The generator is lazy: checks after the first violation only run when the
    caller keeps iterating.
    """
    yield from _capital_allocation(config.capital_allocation)
    yield from _tiered_exit(config.tiered_exit)
    yield from _risk_management(config.risk_management)
    yield from _trading(config.trading)
    yield from _logging(config.logging)
    yield from _positive("refresh_interval_seconds", config.refresh_interval_seconds)


def validate_config(config: Configuration) -> None:
    """
    Validate a configuration, failing fast on the first violation.

    Args:
        config: Configuration to check

    Raises:
        ConfigurationError: For the first invariant the configuration violates
    """
    for violation in iter_violations(config):
        raise violation


def find_violations(config: Configuration) -> list[ConfigurationError]:
    """Return all invariant violations of ``config``, in validation order."""
    return list(iter_violations(config))
