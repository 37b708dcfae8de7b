"""Portfolio-level reductions over enriched positions."""
from __future__ import annotations

from collections.abc import Sequence

from ..models import EnrichedPosition, PortfolioSummary

SORT_FIELDS = ("pool", "total_value", "pnl", "pnl_percentage", "fees", "last_updated")


def summarize(positions: Sequence[EnrichedPosition]) -> PortfolioSummary:
    """Reduce the current positions into a summary.

    The average P&L percentage is the unweighted mean across positions.
    """
    count = len(positions)
    if count == 0:
        return PortfolioSummary()

    return PortfolioSummary(
        total_value=sum(p.total_value for p in positions),
        total_pnl=sum(p.pnl for p in positions),
        total_positions=count,
        total_fees=sum(p.fees for p in positions),
        avg_pnl_percentage=sum(p.pnl_percentage for p in positions) / count,
    )


def _sort_key(field: str):
    if field == "pool":
        return lambda p: p.pool_name or f"Pool {p.pool}"
    return lambda p: getattr(p, field)


def sort_positions(
    positions: Sequence[EnrichedPosition],
    field: str = "total_value",
    descending: bool = True,
) -> list[EnrichedPosition]:
    """Return a sorted copy of ``positions``."""
    if field not in SORT_FIELDS:
        raise ValueError(
            f"Unknown sort field '{field}' (expected one of {', '.join(SORT_FIELDS)})"
        )
    return sorted(positions, key=_sort_key(field), reverse=descending)
