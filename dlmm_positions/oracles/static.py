"""Fixed price table used in demo mode and as the live-mode fallback."""
import logging

logger = logging.getLogger(__name__)


class StaticPriceOracle:
    """Serve prices from an in-memory ``{mint: usd}`` table."""

    def __init__(self, prices: dict[str, float]) -> None:
        self.prices = dict(prices)

    async def get_price(self, mint: str) -> float:
        price = self.prices.get(mint)
        if price is None:
            logger.debug("No static price for mint %s", mint)
            return 0.0
        return float(price)
