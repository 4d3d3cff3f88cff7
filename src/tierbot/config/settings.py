"""
Configuration settings for the tierbot trading bot.

Uses pydantic-settings for environment variable management with nested models
for the capital, tiered exit, risk, trading and logging domains. Every block is
frozen: a loaded configuration is read-only for the life of the process.

Environment values are read leniently. An empty value means "unset", boolean
settings accept "true", "1" and "yes" (any case), and a value that cannot be
parsed is logged and replaced by the field default. Strict checking happens
afterwards in :mod:`tierbot.config.validation`.
"""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Annotated, Any, Final, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from tierbot.utils import get_logger

from .constants import (
    DEFAULT_BREAK_EVEN_THRESHOLD,
    DEFAULT_ENV_FILE,
    DEFAULT_EXIT_LADDER,
    DEFAULT_LOG_FILE_PATH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAKER_FEE,
    DEFAULT_MAX_BACKUP_FILES,
    DEFAULT_MAX_CAPITAL_PER_TRADE,
    DEFAULT_MAX_CONSECUTIVE_LOSSES,
    DEFAULT_MAX_CORRELATION_THRESHOLD,
    DEFAULT_MAX_DAILY_LOSS_PERCENTAGE,
    DEFAULT_MAX_DRAWDOWN_PERCENTAGE,
    DEFAULT_MAX_HOLD_MINUTES,
    DEFAULT_MAX_LOG_FILE_SIZE_MB,
    DEFAULT_MAX_ORDER_QUANTITY,
    DEFAULT_MAX_POSITION_SIZE,
    DEFAULT_MAX_RISK_PERCENTAGE,
    DEFAULT_MAX_WIN_RATE_THRESHOLD,
    DEFAULT_MIN_ORDER_QUANTITY,
    DEFAULT_MIN_WIN_RATE_FOR_INCREASE,
    DEFAULT_MINIMUM_CAPITAL,
    DEFAULT_MINIMUM_EQUITY_LEVEL,
    DEFAULT_ORDER_TIMEOUT_SECONDS,
    DEFAULT_PAUSE_DURATION_MINUTES,
    DEFAULT_REFRESH_INTERVAL_SECONDS,
    DEFAULT_RISK_PERCENTAGE,
    DEFAULT_SLIPPAGE_TOLERANCE,
    DEFAULT_STOP_LOSS_PERCENTAGE,
    DEFAULT_TAKER_FEE,
    DEFAULT_TOTAL_CAPITAL,
    DEFAULT_TRADING_PAIR,
    DEFAULT_TRAILING_STOP_PERCENTAGE,
    TRUTHY_VALUES,
)
from .validation import validate_config

logger = get_logger(__name__)

BlockT = TypeVar("BlockT", bound=BaseSettings)


class ExitTier(BaseModel):
    """A single take-profit step: close a fraction of the open position at a profit level."""

    profit_percentage: float = Field(description="Profit percentage that triggers this tier")
    close_percentage: float = Field(
        description="Fraction of the remaining position to close (0-1]"
    )
    enabled: bool = Field(default=True, description="Whether this tier is active")

    model_config = ConfigDict(frozen=True)


DEFAULT_EXIT_TIERS: Final[tuple[ExitTier, ...]] = tuple(
    ExitTier(profit_percentage=profit, close_percentage=close)
    for profit, close in DEFAULT_EXIT_LADDER
)


class EnvironmentBlock(BaseSettings):
    """
    Base class for every configuration block read from the environment.

    Implements the lenient typed lookup shared by all blocks: empty values fall
    back to the default, booleans use the truthy token list, and unparsable
    values are logged and replaced by the default instead of failing the load.
    A field is read only under the key named by its validation alias.
    """

    model_config = SettingsConfigDict(
        env_file=DEFAULT_ENV_FILE,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("*", mode="wrap")
    @classmethod
    def _read_leniently(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        if not isinstance(value, str):
            return handler(value)

        field = cls.model_fields[info.field_name]
        default = field.get_default(call_default_factory=True)

        if value == "":
            return default
        if field.annotation is bool:
            return value.lower() in TRUTHY_VALUES

        try:
            return handler(value)
        except ValidationError:
            logger.warning(
                "invalid_environment_value",
                key=field.validation_alias or info.field_name,
                value=value,
                default=default,
            )
            return default


class CapitalAllocation(EnvironmentBlock):
    """Capital allocation policy settings."""

    total_capital: float = Field(
        default=DEFAULT_TOTAL_CAPITAL,
        validation_alias="FIXED_CAPITAL_TOTAL",
        description="Total capital allocated to the strategy",
    )
    risk_percentage: float = Field(
        default=DEFAULT_RISK_PERCENTAGE,
        validation_alias="FIXED_CAPITAL_RISK_PERCENT",
        description="Fraction of equity risked per trade (0-1]",
    )
    minimum_capital: float = Field(
        default=DEFAULT_MINIMUM_CAPITAL,
        validation_alias="FIXED_CAPITAL_MINIMUM",
        description="Capital floor below which no trade is opened",
    )
    max_capital_per_trade: float = Field(
        default=DEFAULT_MAX_CAPITAL_PER_TRADE,
        validation_alias="FIXED_CAPITAL_MAX_PER_TRADE",
        description="Maximum capital committed to a single trade",
    )
    dynamic_allocation_enabled: bool = Field(
        default=False,
        validation_alias="FIXED_CAPITAL_DYNAMIC_ALLOCATION",
        description="Scale allocation with the observed win rate",
    )
    min_win_rate_for_increase: float = Field(
        default=DEFAULT_MIN_WIN_RATE_FOR_INCREASE,
        validation_alias="FIXED_CAPITAL_MIN_WIN_RATE",
        description="Win rate above which allocation may increase",
    )
    max_win_rate_threshold: float = Field(
        default=DEFAULT_MAX_WIN_RATE_THRESHOLD,
        validation_alias="FIXED_CAPITAL_MAX_WIN_RATE",
        description="Win rate at which allocation stops increasing",
    )


class TieredExitPolicy(EnvironmentBlock):
    """Multi-tier take-profit settings."""

    # Supplied by load_config; a stray TIERS variable is never decoded
    tiers: Annotated[tuple[ExitTier, ...], NoDecode] = Field(
        default=DEFAULT_EXIT_TIERS, description="Exit tiers, ascending by profit percentage"
    )
    enabled: bool = Field(
        default=True,
        validation_alias="MULTI_TIER_ENABLED",
        description="Enable the tiered take-profit strategy",
    )
    close_on_timeout_enabled: bool = Field(
        default=True,
        validation_alias="MULTI_TIER_CLOSE_ON_TIMEOUT",
        description="Close the whole position when max hold time elapses",
    )
    max_hold_minutes: int = Field(
        default=DEFAULT_MAX_HOLD_MINUTES,
        validation_alias="MULTI_TIER_MAX_HOLD_TIME",
        description="Maximum time to hold a position in minutes",
    )
    trailing_stop_percentage: float = Field(
        default=DEFAULT_TRAILING_STOP_PERCENTAGE,
        validation_alias="MULTI_TIER_TRAILING_STOP",
        description="Trailing stop trigger percentage",
    )


class RiskManagement(EnvironmentBlock):
    """Risk management thresholds."""

    max_risk_percentage: float = Field(
        default=DEFAULT_MAX_RISK_PERCENTAGE, validation_alias="RISK_MAX_RISK_PERCENT"
    )
    max_consecutive_losses: int = Field(
        default=DEFAULT_MAX_CONSECUTIVE_LOSSES,
        validation_alias="RISK_MAX_CONSECUTIVE_LOSSES",
        description="Losing trades in a row before trading pauses",
    )
    pause_duration_minutes: int = Field(
        default=DEFAULT_PAUSE_DURATION_MINUTES,
        validation_alias="RISK_PAUSE_DURATION_MINUTES",
        description="Pause length after hitting the consecutive loss limit",
    )
    max_daily_loss_percentage: float = Field(
        default=DEFAULT_MAX_DAILY_LOSS_PERCENTAGE,
        validation_alias="RISK_MAX_DAILY_LOSS_PERCENT",
    )
    stop_loss_percentage: float = Field(
        default=DEFAULT_STOP_LOSS_PERCENTAGE, validation_alias="RISK_STOP_LOSS_PERCENT"
    )
    break_even_stop_enabled: bool = Field(
        default=True, validation_alias="RISK_BREAK_EVEN_STOP_ENABLED"
    )
    break_even_threshold: float = Field(
        default=DEFAULT_BREAK_EVEN_THRESHOLD,
        validation_alias="RISK_BREAK_EVEN_THRESHOLD",
        description="Profit percentage that moves the stop to entry",
    )
    max_position_size: float = Field(
        default=DEFAULT_MAX_POSITION_SIZE,
        validation_alias="RISK_MAX_POSITION_SIZE",
        description="Maximum position value as a fraction of equity",
    )
    correlation_check_enabled: bool = Field(
        default=True, validation_alias="RISK_CORRELATION_CHECK_ENABLED"
    )
    max_correlation_threshold: float = Field(
        default=DEFAULT_MAX_CORRELATION_THRESHOLD,
        validation_alias="RISK_MAX_CORRELATION_THRESHOLD",
    )
    drawdown_monitoring_enabled: bool = Field(
        default=True, validation_alias="RISK_DRAWDOWN_MONITORING_ENABLED"
    )
    max_drawdown_percentage: float = Field(
        default=DEFAULT_MAX_DRAWDOWN_PERCENTAGE, validation_alias="RISK_MAX_DRAWDOWN_PERCENT"
    )
    equity_protection_enabled: bool = Field(
        default=True, validation_alias="RISK_EQUITY_PROTECTION_ENABLED"
    )
    minimum_equity_level: float = Field(
        default=DEFAULT_MINIMUM_EQUITY_LEVEL,
        validation_alias="RISK_MINIMUM_EQUITY_LEVEL",
        description="Equity level below which trading stops",
    )


class TradingParameters(EnvironmentBlock):
    """Trading pair, exchange credentials and order parameters."""

    pair: str = Field(
        default=DEFAULT_TRADING_PAIR,
        validation_alias="TRADING_PAIR",
        description="Trading pair to monitor",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""), validation_alias="API_KEY", description="Exchange API key"
    )
    api_secret: SecretStr = Field(
        default=SecretStr(""), validation_alias="API_SECRET", description="Exchange API secret"
    )
    testnet_enabled: bool = Field(
        default=False,
        validation_alias="TRADING_TESTNET_ENABLED",
        description="Use the exchange testnet",
    )
    min_order_quantity: float = Field(
        default=DEFAULT_MIN_ORDER_QUANTITY, validation_alias="TRADING_MIN_ORDER_QUANTITY"
    )
    max_order_quantity: float = Field(
        default=DEFAULT_MAX_ORDER_QUANTITY, validation_alias="TRADING_MAX_ORDER_QUANTITY"
    )
    slippage_tolerance: float = Field(
        default=DEFAULT_SLIPPAGE_TOLERANCE, validation_alias="TRADING_SLIPPAGE_TOLERANCE"
    )
    order_timeout_seconds: int = Field(
        default=DEFAULT_ORDER_TIMEOUT_SECONDS, validation_alias="TRADING_ORDER_TIMEOUT_SECONDS"
    )
    order_validation_enabled: bool = Field(
        default=True,
        validation_alias="TRADING_ORDER_VALIDATION_ENABLED",
        description="Validate orders before submission",
    )
    maker_fee: float = Field(default=DEFAULT_MAKER_FEE, validation_alias="TRADING_MAKER_FEE")
    taker_fee: float = Field(default=DEFAULT_TAKER_FEE, validation_alias="TRADING_TAKER_FEE")


class LoggingSettings(EnvironmentBlock):
    """Logging configuration settings."""

    level: str = Field(default=DEFAULT_LOG_LEVEL, validation_alias="LOG_LEVEL")
    file_path: str = Field(
        default=DEFAULT_LOG_FILE_PATH,
        validation_alias="LOG_FILE_PATH",
        description="Log file path, required when file logging is enabled",
    )
    console_logging_enabled: bool = Field(default=True, validation_alias="LOG_CONSOLE_ENABLED")
    file_logging_enabled: bool = Field(default=True, validation_alias="LOG_FILE_ENABLED")
    max_file_size_mb: int = Field(
        default=DEFAULT_MAX_LOG_FILE_SIZE_MB,
        validation_alias="LOG_MAX_FILE_SIZE_MB",
        description="Size in MB at which the log file is rotated",
    )
    max_backup_files: int = Field(
        default=DEFAULT_MAX_BACKUP_FILES,
        validation_alias="LOG_MAX_BACKUP_FILES",
        description="Number of rotated log files to keep",
    )


class GeneralSettings(EnvironmentBlock):
    """Top-level operational settings."""

    refresh_interval_seconds: int = Field(
        default=DEFAULT_REFRESH_INTERVAL_SECONDS,
        validation_alias="REFRESH_INTERVAL_SECONDS",
        description="Market data refresh interval",
    )
    dry_run_enabled: bool = Field(
        default=False,
        validation_alias="DRY_RUN_MODE",
        description="Compute decisions without submitting orders",
    )
    webhook_url: str = Field(
        default="", validation_alias="WEBHOOK_URL", description="Notification webhook URL"
    )
    notifications_enabled: bool = Field(default=True, validation_alias="NOTIFICATIONS_ENABLED")


class Configuration(BaseModel):
    """
    Main settings class combining all configuration domains.

    Assembled by :func:`load_config` from blocks already read from the
    environment, so it has no environment lookup of its own. Read-only once
    built.
    """

    capital_allocation: CapitalAllocation
    tiered_exit: TieredExitPolicy
    risk_management: RiskManagement
    trading: TradingParameters
    logging: LoggingSettings

    refresh_interval_seconds: int = DEFAULT_REFRESH_INTERVAL_SECONDS
    dry_run_enabled: bool = False
    webhook_url: str = ""
    notifications_enabled: bool = True

    model_config = ConfigDict(frozen=True)


def _tiers_ascending(tiers: tuple[ExitTier, ...]) -> bool:
    return all(
        earlier.profit_percentage <= later.profit_percentage
        for earlier, later in zip(tiers, tiers[1:])
    )


def load_config(
    environ: Mapping[str, str] | None = None,
    env_file: str | Path | None = DEFAULT_ENV_FILE,
    tiers: Sequence[ExitTier] = DEFAULT_EXIT_TIERS,
) -> Configuration:
    """
    Load and validate the bot configuration.

    Reads every setting from the process environment (and ``env_file`` when it
    exists), or only from ``environ`` when a mapping is given. The exit-tier
    ladder never comes from the environment: it is ``tiers``, the fixed
    default ladder unless the caller supplies another one.

    Args:
        environ: Optional key/value source used instead of the process environment
        env_file: Dotenv file consulted in process mode; None disables it
        tiers: Exit-tier ladder, kept in the given order

    Returns:
        Validated, read-only Configuration

    Raises:
        ConfigurationError: If any setting violates a configuration invariant
    """

    def build(block_cls: type[BlockT], **values: Any) -> BlockT:
        if environ is None:
            return block_cls(_env_file=env_file, **values)
        return block_cls.model_validate({**environ, **values})

    config = Configuration(
        capital_allocation=build(CapitalAllocation),
        tiered_exit=build(TieredExitPolicy, tiers=tuple(tiers)),
        risk_management=build(RiskManagement),
        trading=build(TradingParameters),
        logging=build(LoggingSettings),
        **build(GeneralSettings).model_dump(),
    )

    if not _tiers_ascending(config.tiered_exit.tiers):
        logger.warning(
            "exit_tiers_not_ascending",
            profit_percentages=[tier.profit_percentage for tier in config.tiered_exit.tiers],
        )

    validate_config(config)

    logger.info(
        "configuration_loaded",
        pair=config.trading.pair,
        testnet=config.trading.testnet_enabled,
        dry_run=config.dry_run_enabled,
        tiers=len(config.tiered_exit.tiers),
    )
    return config
