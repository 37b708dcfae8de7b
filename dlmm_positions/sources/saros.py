"""Saros DLMM API client for pool-level and bin-level user positions."""
from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ..config import DataSourceConfig
from ..models import BinPosition, FetchResult, PoolAggregate
from . import parser
from .demo import DEMO_BIN_POSITIONS, DEMO_POOL_AGGREGATES

logger = logging.getLogger(__name__)

POOL_POSITION_PATH = "/api/pool-position"
BIN_POSITION_PATH = "/api/bin-position"


class SarosPositionSource:
    """Fetch a user's DLMM positions from the Saros API.

    In ``demo`` mode the fixed demo dataset is returned without any network
    traffic. In ``live`` mode a failed request is replaced by the demo
    dataset and reported through the ``ok`` / ``success`` flags.
    """

    def __init__(self, config: DataSourceConfig) -> None:
        self.mode = config.mode
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout
        self.page_size = config.page_size
        self.default_pair_id = config.pair_id

    @property
    def is_demo(self) -> bool:
        return self.mode == "demo"

    def _params(self, account: str, pair_id: str | None) -> dict[str, str]:
        params = {
            "user_id": account,
            "page_num": "1",
            "page_size": str(self.page_size),
        }
        pair = pair_id if pair_id is not None else self.default_pair_id
        if pair:
            params["pair_id"] = pair
        return params

    async def _get(self, path: str, params: dict[str, str]) -> Any:
        """GET a JSON document, raising on transport errors and non-200 replies."""
        url = f"{self.base_url}{path}"
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(
                url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    raise RuntimeError(f"HTTP {response.status} from {url}")
                return await response.json()

    async def fetch_pool_aggregates(
        self, account: str, pair_id: str | None = None
    ) -> tuple[list[PoolAggregate], bool]:
        """Fetch pool-level aggregates for ``account``."""
        if self.is_demo:
            logger.debug("Using demo pool positions for %s", account)
            return list(DEMO_POOL_AGGREGATES), True

        try:
            payload = await self._get(POOL_POSITION_PATH, self._params(account, pair_id))
        except Exception as e:
            logger.error("Error fetching pool positions from Saros API: %s", e)
            logger.warning("Saros API unavailable, falling back to demo pool positions")
            return list(DEMO_POOL_AGGREGATES), False

        try:
            pools = parser.parse_pool_aggregates(payload)
        except Exception as e:
            logger.error("Unreadable pool positions payload from Saros API: %s", e)
            return [], False

        logger.info("Fetched %d pool positions for %s", len(pools), account)
        return pools, True

    async def fetch_bin_positions(
        self, account: str, pair_id: str | None = None
    ) -> tuple[list[BinPosition], bool]:
        """Fetch bin-level positions for ``account``."""
        if self.is_demo:
            logger.debug("Using demo bin positions for %s", account)
            return list(DEMO_BIN_POSITIONS), True

        try:
            payload = await self._get(BIN_POSITION_PATH, self._params(account, pair_id))
        except Exception as e:
            logger.error("Error fetching bin positions from Saros API: %s", e)
            logger.warning("Saros API unavailable, falling back to demo bin positions")
            return list(DEMO_BIN_POSITIONS), False

        try:
            bins = parser.parse_bin_positions(payload)
        except Exception as e:
            logger.error("Unreadable bin positions payload from Saros API: %s", e)
            return [], False

        logger.info("Fetched %d bin positions for %s", len(bins), account)
        return bins, True

    async def fetch_all(self, account: str, pair_id: str | None = None) -> FetchResult:
        """Fetch pool and bin positions in parallel."""
        try:
            (pools, pools_ok), (bins, bins_ok) = await asyncio.gather(
                self.fetch_pool_aggregates(account, pair_id),
                self.fetch_bin_positions(account, pair_id),
            )
        except Exception as e:
            logger.error("Error fetching all positions: %s", e)
            return FetchResult(
                pool_aggregates=DEMO_POOL_AGGREGATES,
                bin_positions=DEMO_BIN_POSITIONS,
                success=False,
            )

        return FetchResult(
            pool_aggregates=tuple(pools),
            bin_positions=tuple(bins),
            success=pools_ok and bins_ok,
        )
