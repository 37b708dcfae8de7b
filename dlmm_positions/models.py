"""Data models: all frozen (immutable)."""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class Token:
    """Single token amount inside a pool or bin position."""

    mint: str
    symbol: str
    amount: float
    decimals: int | None = None


@dataclass(frozen=True)
class BinPosition:
    """One discrete liquidity range as reported by the bin-position endpoint."""

    id: int | str
    pool: int | str
    lower_bin_id: int
    upper_bin_id: int
    liquidity_shares: tuple[float, ...]
    tokens: tuple[Token, ...]
    fees: float


@dataclass(frozen=True)
class PoolAggregate:
    """Coarse per-pool totals as reported by the pool-position endpoint."""

    pool_id: str
    total_liquidity: float
    total_tokens: tuple[Token, ...]
    pair_id: str = ""


@dataclass(frozen=True)
class MergedPosition(BinPosition):
    """Bin position with its owning pool's metadata attached."""

    pool_id: str
    pool_name: str
    total_tokens: tuple[Token, ...]


@dataclass(frozen=True)
class EnrichedPosition(MergedPosition):
    """Merged position with prices applied and P&L derived."""

    token_values: tuple[float, ...]
    total_value: float
    pnl: float
    pnl_percentage: float
    last_updated: datetime


@dataclass(frozen=True)
class PortfolioSummary:
    """Portfolio-wide totals over the current positions."""

    total_value: float = 0.0
    total_pnl: float = 0.0
    total_positions: int = 0
    total_fees: float = 0.0
    avg_pnl_percentage: float = 0.0


@dataclass(frozen=True)
class FetchResult:
    """Both position collections for one account.

    ``success`` is False when either collection was replaced by demo data.
    """

    pool_aggregates: tuple[PoolAggregate, ...]
    bin_positions: tuple[BinPosition, ...]
    success: bool


class RefreshState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class RefreshEventKind(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    RETRYING = "retrying"
    FAILED = "failed"


@dataclass(frozen=True)
class RefreshEvent:
    """Progress notification emitted once per attempt phase."""

    kind: RefreshEventKind
    account: str
    attempt: int
    max_attempts: int
    timestamp: datetime
    message: str = ""
    position_count: int = 0

    @property
    def attempts_left(self) -> int:
        return self.max_attempts - self.attempt


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    RETRIABLE = "retriable"
    TERMINAL = "terminal"
    STALE = "stale"


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one attempt or one whole refresh cycle."""

    status: OutcomeStatus
    positions: tuple[EnrichedPosition, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


@dataclass(frozen=True)
class PositionsView:
    """Snapshot handed to presentation code."""

    positions: tuple[EnrichedPosition, ...]
    loading: bool
    error: str | None
    summary: PortfolioSummary
    refetch: Callable[[], None]
    last_fetch_time: datetime | None
