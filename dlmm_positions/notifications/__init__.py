"""Notification modules."""
from .relay import NotificationRelay
from .telegram import TelegramNotifier

__all__ = ["NotificationRelay", "TelegramNotifier"]
