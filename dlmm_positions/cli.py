"""Command-line interface for the DLMM position tracker."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace

from .config import DATA_SOURCE_MODES, AppConfig, load_config
from .formatting import build_event_message
from .logging_setup import configure_logging
from .models import RefreshEvent, RefreshEventKind
from .services import RefreshOrchestrator
from .services.report import build_report

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="dlmm-positions",
        description="Saros DLMM liquidity position tracker",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--account",
        default=None,
        help="Wallet address to track (overrides config)",
    )
    parser.add_argument(
        "--mode",
        default=None,
        choices=list(DATA_SOURCE_MODES),
        help="Data source mode (overrides config)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("check", help="Fetch positions once and print the report")

    monitor_parser = sub.add_parser("monitor", help="Keep refreshing positions")
    monitor_parser.add_argument(
        "interval",
        nargs="?",
        type=float,
        default=None,
        help="Refresh interval in seconds (overrides config)",
    )

    return parser


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Fold command-line overrides into the loaded configuration."""
    if args.mode:
        config = replace(config, data_source=replace(config.data_source, mode=args.mode))
    if args.account:
        config = replace(config, account=replace(config.account, address=args.account))
    interval = getattr(args, "interval", None)
    if interval:
        config = replace(
            config, refresh=replace(config.refresh, interval_seconds=interval)
        )
    return config


async def _check(orchestrator: RefreshOrchestrator, account: str) -> int:
    outcome = await orchestrator.bind(account)
    print(
        build_report(
            orchestrator.positions,
            orchestrator.summary,
            orchestrator.last_fetch_time,
            account=account,
        )
    )
    if outcome is None or not outcome.ok:
        print(f"Error loading positions: {orchestrator.error}", file=sys.stderr)
        return 1
    return 0


async def _monitor(orchestrator: RefreshOrchestrator, account: str) -> int:
    def _print_event(event: RefreshEvent) -> None:
        if event.kind is RefreshEventKind.SUCCESS:
            print(
                build_report(
                    orchestrator.positions,
                    orchestrator.summary,
                    orchestrator.last_fetch_time,
                    account=account,
                ),
                flush=True,
            )
        elif event.kind is RefreshEventKind.FAILED:
            print(build_event_message(event), file=sys.stderr, flush=True)

    orchestrator.subscribe(_print_event)
    await orchestrator.bind(account, wait=False)
    await asyncio.Event().wait()
    return 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = apply_overrides(load_config(args.config), args)

    account = config.account.address
    if not account:
        print("No account configured: pass --account or set account.address", file=sys.stderr)
        return 1

    orchestrator = RefreshOrchestrator.from_config(config)
    try:
        if args.command == "check":
            return await _check(orchestrator, account)
        if args.command == "monitor":
            return await _monitor(orchestrator, account)
        build_parser().print_help()
        return 1
    finally:
        await orchestrator.close()


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(asyncio.run(_run(args)))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        sys.exit(0)
