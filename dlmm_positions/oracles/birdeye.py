"""Birdeye public API price oracle."""
import logging
import ssl

import aiohttp
import certifi

from ..config import PriceOracleConfig

logger = logging.getLogger(__name__)


class BirdeyeOracle:
    """Fetch single-token USD prices from Birdeye.

    Any transport or decoding failure resolves to the configured fallback
    price for the mint (``0.0`` when none is configured).
    """

    def __init__(self, config: PriceOracleConfig) -> None:
        self.base_url = config.base_url.rstrip("/")
        self.api_key = config.api_key
        self.timeout = config.timeout
        self.fallback_prices = dict(config.fallback_prices)

    def _fallback(self, mint: str) -> float:
        return float(self.fallback_prices.get(mint, 0.0))

    async def get_price(self, mint: str) -> float:
        """Return the current price of ``mint`` in USD. Never raises."""
        if not mint:
            return 0.0

        url = f"{self.base_url}/defi/price"
        headers = {"Accept": "application/json", "x-chain": "solana"}
        if self.api_key:
            headers["X-API-KEY"] = self.api_key

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url,
                    params={"address": mint},
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        logger.warning(
                            "Birdeye price for %s: HTTP %s, using fallback",
                            mint,
                            response.status,
                        )
                        return self._fallback(mint)

                    data = await response.json()
                    body = data.get("data") if isinstance(data, dict) else None
                    value = body.get("value") if isinstance(body, dict) else None
                    if value is None:
                        logger.warning("Birdeye returned no price for %s, using fallback", mint)
                        return self._fallback(mint)
                    return float(value)
        except Exception as e:
            logger.error("Error fetching price for mint %s: %s", mint, e)
            return self._fallback(mint)
