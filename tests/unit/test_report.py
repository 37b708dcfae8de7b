"""Unit tests for text formatting and the portfolio report."""
from __future__ import annotations

from datetime import datetime, timezone

from dlmm_positions.formatting import (
    build_event_message,
    format_account,
    format_currency,
    format_percentage,
    format_timestamp,
)
from dlmm_positions.models import (
    EnrichedPosition,
    PortfolioSummary,
    RefreshEvent,
    RefreshEventKind,
)
from dlmm_positions.services.aggregator import summarize
from dlmm_positions.services.report import build_position_line, build_report

ACCOUNT = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
WHEN = datetime(2026, 3, 4, 5, 6, 7, tzinfo=timezone.utc)


def _event(kind: RefreshEventKind, **kwargs) -> RefreshEvent:
    defaults = dict(
        kind=kind,
        account=ACCOUNT,
        attempt=1,
        max_attempts=3,
        timestamp=WHEN,
    )
    defaults.update(kwargs)
    return RefreshEvent(**defaults)


class TestFormatting:
    def test_currency(self) -> None:
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(0) == "$0.00"
        assert format_currency(-3) == "-$3.00"

    def test_percentage(self) -> None:
        assert format_percentage(12.345) == "+12.35%"
        assert format_percentage(0) == "+0.00%"
        assert format_percentage(-4.5) == "-4.50%"

    def test_timestamp(self) -> None:
        assert format_timestamp(None) == "Never"
        assert format_timestamp(WHEN) == "2026-03-04 05:06:07 UTC"

    def test_account_shortened(self) -> None:
        assert format_account(ACCOUNT) == "7xKXtg2CW8...osgAsU"
        assert format_account("short") == "short"


class TestEventMessages:
    def test_loading(self) -> None:
        msg = build_event_message(_event(RefreshEventKind.LOADING, attempt=2))
        assert msg == "⏳ Fetching DLMM positions for 7xKXtg2CW8...osgAsU (attempt 2/3)"

    def test_success(self) -> None:
        msg = build_event_message(_event(RefreshEventKind.SUCCESS, position_count=2))
        assert msg == "✅ Loaded 2 DLMM positions for 7xKXtg2CW8...osgAsU"

    def test_retrying_counts_attempts_left(self) -> None:
        msg = build_event_message(
            _event(RefreshEventKind.RETRYING, attempt=1, message="boom")
        )
        assert "Retrying... (2 attempts left)" in msg
        assert msg.endswith(": boom")

    def test_failed(self) -> None:
        msg = build_event_message(
            _event(RefreshEventKind.FAILED, attempt=3, message="HTTP 500")
        )
        assert msg.startswith("🚨 Failed to load DLMM positions")
        assert "HTTP 500" in msg


class TestReport:
    def test_position_line(self, sample_enriched: list[EnrichedPosition]) -> None:
        line = build_position_line(sample_enriched[0])
        assert line.startswith("Pool 12345678... · SOL · bins 0-0")
        assert "Value: $3,500.00" in line
        assert "P&L: $1,000.00 (+40.00%)" in line
        assert "Fees: $12.50" in line

    def test_full_report(self, sample_enriched: list[EnrichedPosition]) -> None:
        report = build_report(
            list(reversed(sample_enriched)),
            summarize(sample_enriched),
            WHEN,
            account=ACCOUNT,
        )
        assert report.startswith("📋 DLMM Portfolio · 7xKXtg2CW8...osgAsU")
        assert "Total Value: $5,200.00" in report
        assert "Fees Earned: $18.50" in report
        assert "Positions: 2" in report
        assert report.index("Pool 12345678") < report.index("Pool 98765432")
        assert report.endswith("Last updated: 2026-03-04 05:06:07 UTC")

    def test_empty_report(self) -> None:
        report = build_report([], PortfolioSummary(), None)
        assert report.startswith("📋 DLMM Portfolio\n")
        assert "No DLMM positions found." in report
        assert "Total Value: $0.00" in report
        assert report.endswith("Last updated: Never")
