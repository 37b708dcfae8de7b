"""Protocol interfaces for the DLMM position tracker."""
from .notifier import Notifier
from .position_source import PositionSource
from .price_oracle import PriceOracle

__all__ = ["Notifier", "PositionSource", "PriceOracle"]
