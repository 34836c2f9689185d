"""
Control panel notifications.

Errors stay on screen twice as long as notices.
"""

from datetime import datetime, timezone
from typing import List, Optional

from contentkit.config.logging import get_logger
from contentkit.config.settings import get_settings
from contentkit.models.schemas import Notification, NotificationType

logger = get_logger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


class NotificationCenter:
    """Tracks notifications until their display duration runs out."""

    def __init__(self, duration: Optional[int] = None) -> None:
        self.duration = duration if duration is not None else get_settings().notification_duration
        self.notifications: List[Notification] = []

    def display_notification(self, type: str, message: str) -> Notification:
        notification_type = NotificationType(type)
        duration = self.duration
        if notification_type == NotificationType.ERROR:
            duration *= 2

        notification = Notification(type=notification_type, message=message, duration=duration)
        self.notifications.append(notification)
        logger.info("Notification displayed", type=notification_type.value, message=message)
        return notification

    def display_notice(self, message: str) -> Notification:
        return self.display_notification(NotificationType.NOTICE.value, message)

    def display_error(self, message: Optional[str] = None) -> Notification:
        return self.display_notification(NotificationType.ERROR.value, message or UNKNOWN_ERROR_MESSAGE)

    def active(self, now: Optional[datetime] = None) -> List[Notification]:
        now = now or datetime.now(timezone.utc)
        return [n for n in self.notifications if n.expires_at() > now]

    def expire(self, now: Optional[datetime] = None) -> List[Notification]:
        """Drop notifications whose duration has elapsed and return them."""
        now = now or datetime.now(timezone.utc)
        expired = [n for n in self.notifications if n.expires_at() <= now]
        self.notifications = [n for n in self.notifications if n.expires_at() > now]
        return expired
