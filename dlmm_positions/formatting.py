"""Pure text formatting helpers shared by reports and notifications."""
from __future__ import annotations

from datetime import datetime

from .models import RefreshEvent, RefreshEventKind


def format_currency(value: float) -> str:
    """Format a USD amount, e.g. 1234.5 → '$1,234.50', -3 → '-$3.00'."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_percentage(value: float) -> str:
    """Format a signed percentage, e.g. 12.345 → '+12.35%'."""
    return f"{'+' if value >= 0 else ''}{value:.2f}%"


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "Never"
    return value.strftime("%Y-%m-%d %H:%M:%S UTC")


def format_account(address: str) -> str:
    if len(address) > 16:
        return f"{address[:10]}...{address[-6:]}"
    return address


def build_event_message(event: RefreshEvent) -> str:
    account = format_account(event.account)
    if event.kind is RefreshEventKind.LOADING:
        return (
            f"⏳ Fetching DLMM positions for {account} "
            f"(attempt {event.attempt}/{event.max_attempts})"
        )
    if event.kind is RefreshEventKind.SUCCESS:
        return f"✅ Loaded {event.position_count} DLMM positions for {account}"
    if event.kind is RefreshEventKind.RETRYING:
        return (
            f"🔁 Retrying... ({event.attempts_left} attempts left) for {account}: "
            f"{event.message}"
        )
    return f"🚨 Failed to load DLMM positions for {account}: {event.message}"
