"""Service modules"""
from .aggregator import sort_positions, summarize
from .enricher import enrich
from .orchestrator import PositionFetchError, RefreshOrchestrator
from .reconciler import reconcile

__all__ = [
    "PositionFetchError",
    "RefreshOrchestrator",
    "enrich",
    "reconcile",
    "sort_positions",
    "summarize",
]
