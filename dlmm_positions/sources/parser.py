"""Pure parsing functions for Saros DLMM position payloads, no I/O."""
from __future__ import annotations

import logging
from typing import Any

from ..models import BinPosition, PoolAggregate, Token

logger = logging.getLogger(__name__)


def extract_records(payload: Any) -> list[dict[str, Any]]:
    """Return the record list from a bare list or a ``{"data": [...]}`` body."""
    if isinstance(payload, dict):
        payload = payload.get("data", [])
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict)]


def parse_token(raw: dict[str, Any]) -> Token:
    """Parse a token entry.

    Examples:
        {"mint": "So1...", "symbol": "SOL", "amount": 25} → Token(amount=25.0)
    """
    if not isinstance(raw, dict):
        raise TypeError(f"token entry must be an object, got {type(raw).__name__}")
    decimals = raw.get("decimals")
    return Token(
        mint=str(raw.get("mint", "")),
        symbol=str(raw.get("symbol", "")),
        amount=float(raw.get("amount", 0) or 0),
        decimals=int(decimals) if decimals is not None else None,
    )


def parse_tokens(raw: Any) -> tuple[Token, ...]:
    if not raw:
        return ()
    if not isinstance(raw, list):
        raise TypeError(f"token list must be an array, got {type(raw).__name__}")
    return tuple(parse_token(t) for t in raw)


def parse_pool_aggregate(raw: dict[str, Any]) -> PoolAggregate:
    pool_id = raw.get("poolId")
    if pool_id is None or str(pool_id) == "":
        raise ValueError("pool aggregate without poolId")
    return PoolAggregate(
        pool_id=str(pool_id),
        total_liquidity=float(raw.get("totalLiquidity", 0) or 0),
        total_tokens=parse_tokens(raw.get("totalTokens")),
        pair_id=str(raw.get("pairId", "") or ""),
    )


def parse_bin_position(raw: dict[str, Any]) -> BinPosition:
    lower = int(raw.get("lowerBinId", 0))
    upper = int(raw.get("upperBinId", 0))
    if lower > upper:
        raise ValueError(f"lowerBinId {lower} > upperBinId {upper}")
    if raw.get("pool") is None:
        raise ValueError("bin position without pool reference")
    return BinPosition(
        id=raw.get("id", ""),
        pool=raw["pool"],
        lower_bin_id=lower,
        upper_bin_id=upper,
        liquidity_shares=tuple(float(s) for s in raw.get("liquidityShares") or ()),
        tokens=parse_tokens(raw.get("tokens")),
        fees=float(raw.get("fees", 0) or 0),
    )


def parse_pool_aggregates(payload: Any) -> list[PoolAggregate]:
    """Parse every well-formed pool aggregate, skipping malformed records."""
    pools: list[PoolAggregate] = []
    for raw in extract_records(payload):
        try:
            pools.append(parse_pool_aggregate(raw))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed pool position %r: %s", raw.get("poolId"), e)
    return pools


def parse_bin_positions(payload: Any) -> list[BinPosition]:
    """Parse every well-formed bin position, skipping malformed records."""
    bins: list[BinPosition] = []
    for raw in extract_records(payload):
        try:
            bins.append(parse_bin_position(raw))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed bin position %r: %s", raw.get("id"), e)
    return bins
