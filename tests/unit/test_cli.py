"""Unit tests for CLI argument parsing and overrides."""
from __future__ import annotations

from dlmm_positions.cli import apply_overrides, build_parser
from dlmm_positions.config import AppConfig


class TestBuildParser:
    def test_check_command(self) -> None:
        args = build_parser().parse_args(["check"])
        assert args.command == "check"

    def test_monitor_command_default_interval(self) -> None:
        args = build_parser().parse_args(["monitor"])
        assert args.command == "monitor"
        assert args.interval is None

    def test_monitor_command_custom_interval(self) -> None:
        args = build_parser().parse_args(["monitor", "10"])
        assert args.command == "monitor"
        assert args.interval == 10.0

    def test_config_flag(self) -> None:
        args = build_parser().parse_args(["--config", "/tmp/c.yaml", "check"])
        assert args.config == "/tmp/c.yaml"

    def test_log_level_flag(self) -> None:
        args = build_parser().parse_args(["--log-level", "DEBUG", "check"])
        assert args.log_level == "DEBUG"

    def test_account_and_mode_flags(self) -> None:
        args = build_parser().parse_args(["--account", "abc", "--mode", "live", "check"])
        assert args.account == "abc"
        assert args.mode == "live"

    def test_no_command(self) -> None:
        args = build_parser().parse_args([])
        assert args.command is None


class TestApplyOverrides:
    def test_no_overrides_keeps_config(self) -> None:
        cfg = AppConfig()
        args = build_parser().parse_args(["check"])
        assert apply_overrides(cfg, args) == cfg

    def test_overrides_applied(self) -> None:
        args = build_parser().parse_args(
            ["--account", "wallet-1", "--mode", "live", "monitor", "5"]
        )
        cfg = apply_overrides(AppConfig(), args)
        assert cfg.account.address == "wallet-1"
        assert cfg.data_source.mode == "live"
        assert cfg.refresh.interval_seconds == 5.0
