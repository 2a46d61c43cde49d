"""Notification sub-package: alert delivery for ALERT transitions."""

from physio_monitor.notifications.handlers import (
    NotificationDispatcher,
    NotificationHandler,
    build_alert_notification,
    create_dispatcher,
)

__all__ = [
    "NotificationDispatcher",
    "NotificationHandler",
    "build_alert_notification",
    "create_dispatcher",
]
