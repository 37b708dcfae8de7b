"""Price oracle protocol: per-token price lookup."""
from typing import Protocol


class PriceOracle(Protocol):
    """Abstract interface for fetching a token's USD price.

    Implementations resolve failures to a fallback price or ``0.0`` instead
    of raising.
    """

    async def get_price(self, mint: str) -> float: ...
