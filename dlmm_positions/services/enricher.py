"""Price merged positions and derive value and P&L."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from ..interfaces.price_oracle import PriceOracle
from ..models import EnrichedPosition, MergedPosition

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def calc_pnl(total_value: float, liquidity_shares: Iterable[float]) -> tuple[float, float]:
    """Return ``(pnl, pnl_percentage)`` against the deposited liquidity.

    pnl = total_value - sum(shares)
    pnl_percentage = pnl / sum(shares) * 100, or 0 when nothing was deposited
    """
    liquidity_value = sum(liquidity_shares)
    pnl = total_value - liquidity_value
    pnl_percentage = (pnl / liquidity_value) * 100 if liquidity_value > 0 else 0.0
    return pnl, pnl_percentage


def _with_values(
    position: MergedPosition,
    token_values: tuple[float, ...],
    total_value: float,
    pnl: float,
    pnl_percentage: float,
    stamp: datetime,
) -> EnrichedPosition:
    return EnrichedPosition(
        id=position.id,
        pool=position.pool,
        lower_bin_id=position.lower_bin_id,
        upper_bin_id=position.upper_bin_id,
        liquidity_shares=position.liquidity_shares,
        tokens=position.tokens,
        fees=position.fees,
        pool_id=position.pool_id,
        pool_name=position.pool_name,
        total_tokens=position.total_tokens,
        token_values=token_values,
        total_value=total_value,
        pnl=pnl,
        pnl_percentage=pnl_percentage,
        last_updated=stamp,
    )


async def enrich_position(
    position: MergedPosition,
    oracle: PriceOracle,
    now: Callable[[], datetime] = _utcnow,
) -> EnrichedPosition:
    """Price one position; on any lookup error the position is zeroed."""
    results = await asyncio.gather(
        *(oracle.get_price(token.mint) for token in position.tokens),
        return_exceptions=True,
    )
    failure = next((r for r in results if isinstance(r, BaseException)), None)
    if failure is not None:
        logger.warning(
            "Failed to fetch prices for position %s in %s: %s",
            position.id,
            position.pool_name,
            failure,
        )
        return _with_values(
            position,
            token_values=tuple(0.0 for _ in position.tokens),
            total_value=0.0,
            pnl=0.0,
            pnl_percentage=0.0,
            stamp=now(),
        )

    # missing prices count as zero; values are floored at zero
    token_values = tuple(
        max(token.amount * (price or 0.0), 0.0)
        for token, price in zip(position.tokens, results)
    )
    total_value = sum(token_values)
    pnl, pnl_percentage = calc_pnl(total_value, position.liquidity_shares)

    return _with_values(
        position,
        token_values=token_values,
        total_value=total_value,
        pnl=pnl,
        pnl_percentage=pnl_percentage,
        stamp=now(),
    )


async def enrich(
    positions: Iterable[MergedPosition],
    oracle: PriceOracle,
    now: Callable[[], datetime] = _utcnow,
) -> list[EnrichedPosition]:
    """Price all positions concurrently, preserving input order."""
    return list(
        await asyncio.gather(*(enrich_position(p, oracle, now) for p in positions))
    )
