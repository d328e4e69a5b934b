"""Notification sinks and message formatting."""

from .formatters import format_selection, format_result, format_reconciliation
from .notifier import Notifier, LogNotifier, TelegramNotifier, NotificationDispatcher

__all__ = [
    "format_selection",
    "format_result",
    "format_reconciliation",
    "Notifier",
    "LogNotifier",
    "TelegramNotifier",
    "NotificationDispatcher",
]
