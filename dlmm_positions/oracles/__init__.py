"""Price oracle implementations."""
from .birdeye import BirdeyeOracle
from .static import StaticPriceOracle

__all__ = ["BirdeyeOracle", "StaticPriceOracle"]
