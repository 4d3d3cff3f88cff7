"""
Integration tests for the tierbot entry point.

Runs the startup check end to end: dotenv and process environment loading,
validation, logging setup and the exit code.
"""

import json

import pytest

from tierbot.config import ExitTier, load_config
from tierbot.main import build_parser, main, summarize


@pytest.fixture
def workdir(tmp_path, clean_environment):
    """Run from an empty directory with no tierbot keys in the environment."""
    clean_environment.chdir(tmp_path)
    return tmp_path


def _write_env(path, **values) -> str:
    path.write_text("".join(f"{key}={value}\n" for key, value in values.items()))
    return str(path)


@pytest.mark.integration
class TestMain:
    """Tests for main()."""

    def test_valid_configuration(self, workdir, capsys):
        """Test that a valid configuration starts and reports its settings."""
        env_file = _write_env(
            workdir / "bot.env",
            API_KEY="k",
            API_SECRET="s",
            TRADING_PAIR="ETHUSDT",
            LOG_FILE_PATH=str(workdir / "logs" / "bot.log"),
        )

        assert main(["--env-file", env_file, "--log-format", "json"]) == 0

        lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line]
        ready = next(line for line in lines if line["event"] == "tierbot_ready")
        assert ready["pair"] == "ETHUSDT"
        assert ready["testnet"] is False
        assert ready["tiers"] == [[0.5, 0.2], [1.0, 0.3], [1.5, 0.25], [2.0, 0.25]]

    def test_writes_log_file(self, workdir):
        """Test that the rotating log file receives the startup event."""
        log_file = workdir / "logs" / "bot.log"
        workdir.joinpath(".env").write_text(
            f"TRADING_TESTNET_ENABLED=true\nLOG_FILE_PATH={log_file}\nLOG_CONSOLE_ENABLED=false\n"
        )

        assert main([]) == 0

        assert "tierbot_ready" in log_file.read_text()

    def test_invalid_configuration(self, workdir, capsys):
        """Test that missing credentials refuse startup."""
        assert main(["--env-file", str(workdir / "missing.env"), "--log-format", "json"]) == 1

        out = capsys.readouterr().out
        assert "configuration_invalid" in out
        assert "trading.api_key" in out

    def test_process_environment_overrides_dotenv(self, workdir, clean_environment, capsys):
        """Test that an invalid process value wins over a valid dotenv value."""
        env_file = _write_env(
            workdir / "bot.env", TRADING_TESTNET_ENABLED="true", FIXED_CAPITAL_TOTAL="500"
        )
        clean_environment.setenv("FIXED_CAPITAL_TOTAL", "-1")

        assert main(["--env-file", env_file, "--log-format", "json"]) == 1

        assert "capital_allocation.total_capital" in capsys.readouterr().out

    def test_unrelated_variables_do_not_block_startup(self, workdir, clean_environment, capsys):
        """Test that variables named after blocks or fields are not configuration."""
        env_file = _write_env(workdir / "bot.env", TRADING_TESTNET_ENABLED="true", LEVEL="DEBUG")
        clean_environment.setenv("LOGGING", "verbose")
        clean_environment.setenv("TIERS", "none")
        clean_environment.setenv("PAIR", "ETHUSDT")

        assert main(["--env-file", env_file, "--log-format", "json"]) == 0

        lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line]
        ready = next(line for line in lines if line["event"] == "tierbot_ready")
        assert ready["pair"] == "BNBUSDT"
        assert len(ready["tiers"]) == 4


@pytest.mark.unit
class TestCommandLine:
    """Tests for argument parsing and the startup summary."""

    def test_parser_defaults(self):
        """Test default arguments."""
        args = build_parser().parse_args([])
        assert args.env_file == ".env"
        assert args.log_format == "pretty"

    def test_parser_rejects_unknown_format(self):
        """Test that only pretty and json formats are accepted."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-format", "xml"])

    def test_summary_leaves_out_credentials(self, live_environ):
        """Test that the summary carries no secrets."""
        summary = summarize(load_config(environ=live_environ))

        assert "test-api-key" not in repr(summary)
        assert summary["drawdown_limit"] == 0.15
        assert summary["equity_floor"] == 500.0

    def test_summary_skips_disabled_tiers(self, live_environ):
        """Test that disabled tiers are not reported."""
        tiers = (
            ExitTier(profit_percentage=0.5, close_percentage=0.5, enabled=False),
            ExitTier(profit_percentage=1.0, close_percentage=0.5),
        )
        summary = summarize(load_config(environ=live_environ, tiers=tiers))

        assert summary["tiers"] == [(1.0, 0.5)]
