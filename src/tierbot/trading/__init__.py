"""
Trading module for tierbot.

Provides the risk capital, position sizing and loss-limit calculations the
trading loop consults before opening or holding positions.
"""

from .risk import (
    calculate_position_size,
    calculate_risk_capital,
    is_within_daily_loss_limit,
    is_within_drawdown_limit,
)

__all__ = [
    "calculate_risk_capital",
    "calculate_position_size",
    "is_within_daily_loss_limit",
    "is_within_drawdown_limit",
]
