"""Merge pool-level aggregates with bin-level positions."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ..models import BinPosition, MergedPosition, PoolAggregate

logger = logging.getLogger(__name__)


def normalize_pool_id(value: Any) -> str:
    """Canonical string form of a pool reference.

    Integral numbers and numeric strings compare equal:
        123, "123", " 123 ", 123.0, "123.0" → "123"
    Anything else is returned stripped.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    if text.isdigit():
        return str(int(text))
    if text.endswith(".0") and text[:-2].isdigit():
        return str(int(text[:-2]))
    return text


def pool_display_name(pool_id: str) -> str:
    return f"Pool {pool_id[:8]}..."


def _summary_position(pool: PoolAggregate, name: str) -> MergedPosition:
    """Stand-in position for a pool that has no bin-level detail."""
    return MergedPosition(
        id=f"pool_{pool.pool_id}",
        pool=pool.pool_id,
        lower_bin_id=0,
        upper_bin_id=0,
        liquidity_shares=(pool.total_liquidity,),
        tokens=pool.total_tokens,
        fees=0.0,
        pool_id=pool.pool_id,
        pool_name=name,
        total_tokens=pool.total_tokens,
    )


def reconcile(
    pool_aggregates: Iterable[PoolAggregate],
    bin_positions: Iterable[BinPosition],
) -> list[MergedPosition]:
    """Merge both collections into one list of positions.

    Pools keep their input order; within a pool, bins keep theirs. A pool
    without matching bins contributes exactly one summary position. Bins
    whose pool reference matches no aggregate are dropped.
    """
    pools = list(pool_aggregates)
    bins = list(bin_positions)

    bins_by_pool: dict[str, list[BinPosition]] = {}
    for bin_position in bins:
        bins_by_pool.setdefault(normalize_pool_id(bin_position.pool), []).append(
            bin_position
        )

    merged: list[MergedPosition] = []
    matched_keys: set[str] = set()

    for pool in pools:
        key = normalize_pool_id(pool.pool_id)
        name = pool_display_name(pool.pool_id)
        pool_bins = bins_by_pool.get(key, [])

        if not pool_bins:
            merged.append(_summary_position(pool, name))
            continue

        matched_keys.add(key)
        for b in pool_bins:
            merged.append(
                MergedPosition(
                    id=b.id,
                    pool=b.pool,
                    lower_bin_id=b.lower_bin_id,
                    upper_bin_id=b.upper_bin_id,
                    liquidity_shares=b.liquidity_shares,
                    tokens=b.tokens,
                    fees=b.fees,
                    pool_id=pool.pool_id,
                    pool_name=name,
                    total_tokens=pool.total_tokens,
                )
            )

    for key, orphans in bins_by_pool.items():
        if key not in matched_keys:
            logger.warning(
                "Dropping %d bin position(s) for pool %s: no pool aggregate",
                len(orphans),
                key,
            )

    logger.debug(
        "Reconciled %d pools and %d bins into %d positions",
        len(pools),
        len(bins),
        len(merged),
    )
    return merged
