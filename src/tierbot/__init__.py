"""
tierbot - configuration and risk sizing core for a tiered take-profit trading bot.
"""

__version__ = "0.1.0"
