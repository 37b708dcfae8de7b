"""Position source protocol: pool and bin position retrieval."""
from typing import Protocol

from ..models import BinPosition, FetchResult, PoolAggregate


class PositionSource(Protocol):
    """Abstract interface for fetching an account's DLMM positions.

    The per-collection fetches return ``(records, ok)`` where ``ok`` is False
    when the records are a demo substitute for a failed live request.
    """

    async def fetch_pool_aggregates(
        self, account: str, pair_id: str | None = None
    ) -> tuple[list[PoolAggregate], bool]: ...

    async def fetch_bin_positions(
        self, account: str, pair_id: str | None = None
    ) -> tuple[list[BinPosition], bool]: ...

    async def fetch_all(
        self, account: str, pair_id: str | None = None
    ) -> FetchResult: ...
