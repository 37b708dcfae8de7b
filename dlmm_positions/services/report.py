"""Plain-text portfolio report."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from ..formatting import (
    format_account,
    format_currency,
    format_percentage,
    format_timestamp,
)
from ..models import EnrichedPosition, PortfolioSummary
from .aggregator import sort_positions


def _token_symbols(position: EnrichedPosition) -> str:
    return "/".join(t.symbol for t in position.tokens) if position.tokens else "-"


def build_position_line(position: EnrichedPosition) -> str:
    return (
        f"{position.pool_name} · {_token_symbols(position)} · "
        f"bins {position.lower_bin_id}-{position.upper_bin_id}\n"
        f"  Value: {format_currency(position.total_value)}"
        f" · P&L: {format_currency(position.pnl)}"
        f" ({format_percentage(position.pnl_percentage)})"
        f" · Fees: {format_currency(position.fees)}"
    )


def build_summary_block(summary: PortfolioSummary) -> str:
    return (
        f"Total Value: {format_currency(summary.total_value)}\n"
        f"Total P&L: {format_currency(summary.total_pnl)}"
        f" · Avg Return: {format_percentage(summary.avg_pnl_percentage)}\n"
        f"Fees Earned: {format_currency(summary.total_fees)}\n"
        f"Positions: {summary.total_positions}"
    )


def build_report(
    positions: Sequence[EnrichedPosition],
    summary: PortfolioSummary,
    last_fetch_time: datetime | None,
    account: str = "",
    sort_field: str = "total_value",
) -> str:
    """Full portfolio report, positions sorted by ``sort_field`` descending."""
    header = "📋 DLMM Portfolio"
    if account:
        header += f" · {format_account(account)}"

    if positions:
        body = "\n\n".join(
            build_position_line(p) for p in sort_positions(positions, sort_field)
        )
    else:
        body = "No DLMM positions found."

    return (
        f"{header}\n"
        f"\n"
        f"{build_summary_block(summary)}\n"
        f"\n"
        f"{body}\n"
        f"\n"
        f"Last updated: {format_timestamp(last_fetch_time)}"
    )
