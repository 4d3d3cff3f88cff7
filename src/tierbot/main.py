"""
tierbot - tiered take-profit trading bot

Main entry point: loads the configuration from the environment, validates it,
configures logging from the loaded settings and reports what the bot would run
with. Startup is refused on any configuration error.
"""

import argparse
import sys
from typing import NoReturn

from tierbot import __version__
from tierbot.config import Configuration, ConfigurationError, load_config
from tierbot.config.constants import DEFAULT_ENV_FILE
from tierbot.utils import LogConfig, get_logger, log_config_from_settings, setup_logging


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog="tierbot",
        description="Load and validate the tierbot trading configuration.",
    )
    parser.add_argument(
        "--env-file",
        default=DEFAULT_ENV_FILE,
        help="Dotenv file read in addition to the process environment (default: %(default)s)",
    )
    parser.add_argument(
        "--log-format",
        choices=["pretty", "json"],
        default="pretty",
        help="Console log format (default: %(default)s)",
    )
    return parser


def summarize(config: Configuration) -> dict:
    """
    Summarize the settings an operator checks before going live.

    Credentials and the webhook URL are left out.
    """
    risk = config.risk_management
    return {
        "pair": config.trading.pair,
        "testnet": config.trading.testnet_enabled,
        "dry_run": config.dry_run_enabled,
        "total_capital": config.capital_allocation.total_capital,
        "risk_percentage": config.capital_allocation.risk_percentage,
        "tiered_exit": config.tiered_exit.enabled,
        "tiers": [
            (tier.profit_percentage, tier.close_percentage)
            for tier in config.tiered_exit.tiers
            if tier.enabled
        ],
        "max_daily_loss_percentage": risk.max_daily_loss_percentage,
        "drawdown_limit": (
            risk.max_drawdown_percentage if risk.drawdown_monitoring_enabled else None
        ),
        "equity_floor": risk.minimum_equity_level if risk.equity_protection_enabled else None,
        "refresh_interval_seconds": config.refresh_interval_seconds,
    }


def main(argv: list[str] | None = None) -> int:
    """
    Run the configuration check.

    Args:
        argv: Command line arguments, defaults to sys.argv

    Returns:
        Process exit code: 0 when the configuration is valid, 1 otherwise
    """
    args = build_parser().parse_args(argv)
    logger = get_logger(__name__)

    try:
        config = load_config(env_file=args.env_file)
    except ConfigurationError as e:
        setup_logging(LogConfig(format=args.log_format, app_version=__version__))
        logger.error(
            "configuration_invalid",
            field=e.field,
            constraint=e.constraint,
            error=str(e),
        )
        return 1

    log_config = log_config_from_settings(config.logging, format=args.log_format)
    log_config.app_version = __version__
    setup_logging(log_config)
    logger.info("tierbot_ready", **summarize(config))
    return 0


def run() -> NoReturn:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
