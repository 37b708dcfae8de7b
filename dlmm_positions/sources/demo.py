"""Fixed demo dataset served in demo mode and on live-source failure."""
from ..config import SOL_MINT, USDC_MINT, USDT_MINT
from ..models import BinPosition, PoolAggregate, Token

DEMO_POOL_AGGREGATES: tuple[PoolAggregate, ...] = (
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
)

DEMO_BIN_POSITIONS: tuple[BinPosition, ...] = (
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
)
