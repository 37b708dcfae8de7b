"""Position source implementations."""
from .saros import SarosPositionSource

__all__ = ["SarosPositionSource"]
