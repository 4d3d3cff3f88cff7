"""
Risk and position-sizing calculations.

Pure functions over a validated Configuration. None of them mutate the
configuration or keep state between calls, so the trading loop may call them
from any thread.
"""

from tierbot.config import Configuration


def calculate_risk_capital(config: Configuration, equity: float) -> float:
    """
    Calculate the capital put at risk on the next trade.

    Formula: risk_capital = equity * risk_percentage

    Args:
        config: Validated configuration
        equity: Current account equity (non-negative)

    Returns:
        Capital to risk, in account currency
    """
    return equity * config.capital_allocation.risk_percentage


def calculate_position_size(
    config: Configuration,
    equity: float,
    entry_price: float,
    stop_loss_price: float,
) -> float:
    """
    Calculate the position size for a long entry with a stop below it.

    The stop-distance size is risk_capital / (entry_price - stop_loss_price),
    capped at (equity * max_position_size) / entry_price so that exposure never
    exceeds the configured share of equity.

    Args:
        config: Validated configuration
        equity: Current account equity
        entry_price: Planned entry price
        stop_loss_price: Stop-loss price, expected below entry

    Returns:
        Position quantity, or 0.0 when the stop is not below the entry price
    """
    price_difference = entry_price - stop_loss_price
    if price_difference <= 0:
        return 0.0

    position_size = calculate_risk_capital(config, equity) / price_difference

    max_position_value = equity * config.risk_management.max_position_size
    max_quantity = max_position_value / entry_price

    return min(position_size, max_quantity)


def is_within_daily_loss_limit(
    config: Configuration, starting_equity: float, current_equity: float
) -> bool:
    """
    Check if trading can continue under the daily loss limit.

    Args:
        config: Validated configuration
        starting_equity: Equity at the start of the trading day (must be > 0)
        current_equity: Current equity

    Returns:
        True if trading should continue, False if limit exceeded
    """
    loss_pct = (starting_equity - current_equity) / starting_equity
    return loss_pct <= config.risk_management.max_daily_loss_percentage


def is_within_drawdown_limit(
    config: Configuration, peak_equity: float, current_equity: float
) -> bool:
    """
    Check if the drawdown from peak equity is within the configured limit.

    Without an established peak (peak_equity <= 0) there is no drawdown.

    Returns:
        True if trading should continue, False if limit exceeded
    """
    if peak_equity <= 0:
        return True

    drawdown = (peak_equity - current_equity) / peak_equity
    return drawdown <= config.risk_management.max_drawdown_percentage
