"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from dlmm_positions.config import (
    SOL_MINT,
    USDC_MINT,
    USDT_MINT,
    AccountConfig,
    AppConfig,
    DataSourceConfig,
    NotificationsConfig,
    PriceOracleConfig,
    RefreshConfig,
    TelegramConfig,
)
from dlmm_positions.models import (
    BinPosition,
    EnrichedPosition,
    FetchResult,
    PoolAggregate,
    Token,
)

WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_refresh_config() -> RefreshConfig:
    return RefreshConfig(
        interval_seconds=3600.0,
        retry_delay_seconds=0.0,
        initial_attempts=3,
        background_attempts=1,
    )


@pytest.fixture()
def sample_data_source_config() -> DataSourceConfig:
    return DataSourceConfig(
        mode="live",
        base_url="https://api.example.com",
        timeout=5,
        page_size=50,
    )


@pytest.fixture()
def sample_oracle_config() -> PriceOracleConfig:
    return PriceOracleConfig(
        provider="birdeye",
        base_url="https://birdeye.example.com",
        api_key="birdeye-key",
        timeout=5,
        fallback_prices={SOL_MINT: 100.0, USDC_MINT: 1.0},
    )


@pytest.fixture()
def sample_app_config(
    sample_refresh_config: RefreshConfig,
    sample_data_source_config: DataSourceConfig,
    sample_oracle_config: PriceOracleConfig,
) -> AppConfig:
    return AppConfig(
        account=AccountConfig(address=WALLET),
        data_source=sample_data_source_config,
        price_oracle=sample_oracle_config,
        refresh=sample_refresh_config,
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=True,
                alert_bot_token="fake-alert-token",
                log_bot_token="fake-log-token",
                chat_id="12345",
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_pools() -> list[PoolAggregate]:
    return [
        PoolAggregate(
            pool_id="123456789",
            total_liquidity=10000.0,
            total_tokens=(
                Token(mint=SOL_MINT, symbol="SOL", amount=50.0),
                Token(mint=USDC_MINT, symbol="USDC", amount=2000.0),
            ),
        ),
        PoolAggregate(
            pool_id="987654321",
            total_liquidity=5000.0,
            total_tokens=(
                Token(mint=SOL_MINT, symbol="SOL", amount=25.0),
                Token(mint=USDT_MINT, symbol="USDT", amount=1000.0),
            ),
        ),
    ]


@pytest.fixture()
def sample_bins() -> list[BinPosition]:
    return [
        BinPosition(
            id=1,
            pool=123456789,
            lower_bin_id=100,
            upper_bin_id=200,
            liquidity_shares=(1000.0, 1500.0),
            tokens=(
                Token(mint=SOL_MINT, symbol="SOL", amount=25.0),
                Token(mint=USDC_MINT, symbol="USDC", amount=1000.0),
            ),
            fees=12.5,
        ),
        BinPosition(
            id=2,
            pool=987654321,
            lower_bin_id=150,
            upper_bin_id=250,
            liquidity_shares=(600.0, 600.0),
            tokens=(
                Token(mint=SOL_MINT, symbol="SOL", amount=12.0),
                Token(mint=USDT_MINT, symbol="USDT", amount=500.0),
            ),
            fees=6.0,
        ),
    ]


@pytest.fixture()
def sample_fetch_result(
    sample_pools: list[PoolAggregate], sample_bins: list[BinPosition]
) -> FetchResult:
    return FetchResult(
        pool_aggregates=tuple(sample_pools),
        bin_positions=tuple(sample_bins),
        success=True,
    )


@pytest.fixture()
def sample_prices() -> dict[str, float]:
    return {SOL_MINT: 100.0, USDC_MINT: 1.0, USDT_MINT: 1.0}


def _enriched(
    id: int | str,
    pool_name: str,
    total_value: float,
    pnl: float,
    pnl_percentage: float,
    fees: float,
) -> EnrichedPosition:
    return EnrichedPosition(
        id=id,
        pool=str(id),
        lower_bin_id=0,
        upper_bin_id=0,
        liquidity_shares=(total_value - pnl,),
        tokens=(Token(mint=SOL_MINT, symbol="SOL", amount=1.0),),
        fees=fees,
        pool_id=str(id),
        pool_name=pool_name,
        total_tokens=(),
        token_values=(total_value,),
        total_value=total_value,
        pnl=pnl,
        pnl_percentage=pnl_percentage,
        last_updated=FIXED_NOW,
    )


@pytest.fixture()
def sample_enriched() -> list[EnrichedPosition]:
    return [
        _enriched(1, "Pool 12345678...", 3500.0, 1000.0, 40.0, 12.5),
        _enriched(2, "Pool 98765432...", 1700.0, 500.0, 500.0 / 1200.0 * 100, 6.0),
    ]


# ---------------------------------------------------------------------------
# Collaborator doubles
# ---------------------------------------------------------------------------


@pytest.fixture()
def oracle_factory() -> Callable[..., AsyncMock]:
    """Build an AsyncMock price oracle backed by a ``{mint: price}`` table.

    Mints listed in ``failing`` raise instead of returning a price.
    """

    def _make(prices: dict[str, float], failing: Iterable[str] = ()) -> AsyncMock:
        failing_mints = set(failing)

        async def _get_price(mint: str) -> float:
            if mint in failing_mints:
                raise RuntimeError(f"price feed down for {mint}")
            return prices.get(mint, 0.0)

        oracle = AsyncMock()
        oracle.get_price.side_effect = _get_price
        return oracle

    return _make


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    account:
      address: "0xTEST"
    data_source:
      mode: live
      base_url: "https://api.example.com"
      timeout: 5
      page_size: 25
      pair_id: "pair-1"
      accept_demo_fallback: false
    price_oracle:
      provider: birdeye
      base_url: "https://birdeye.example.com"
      api_key: "key-1"
      timeout: 4
      fallback_prices: {MINT_A: 2.5}
    refresh:
      interval_seconds: 45
      retry_delay_seconds: 1.5
      initial_attempts: 4
      background_attempts: 2
    notifications:
      telegram:
        enabled: true
        alert_bot_token: "tok1"
        log_bot_token: "tok2"
        chat_id: "999"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
