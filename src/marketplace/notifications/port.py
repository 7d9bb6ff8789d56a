"""Notification service port: the narrow interface the core writes through."""

from abc import ABC, abstractmethod
from enum import Enum


class NotificationKind(Enum):
    ORDER = "order"
    SYSTEM = "system"
    PROMO = "promo"


class NotifierPort(ABC):
    """Abstract interface for the external notification service."""

    @abstractmethod
    def create(self, user_id: str, title: str, message: str, kind: str) -> dict:
        """Record a notification for ``user_id``.

        Returns:
            dict with keys: id, user_id, title, message, kind, is_read, created_at
        """
        ...

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[dict]:
        """Notifications for ``user_id``, newest first."""
        ...

    @abstractmethod
    def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of ``user_id`` as read, returning how many changed."""
        ...
