"""In-memory notifier: default adapter for development and tests."""

from datetime import UTC, datetime
from uuid import uuid4

import structlog

from marketplace.notifications.port import NotificationKind, NotifierPort

logger = structlog.get_logger(__name__)


class InMemoryNotifier(NotifierPort):
    """Keeps notifications in a list. Tests inspect ``sent`` to verify dispatch."""

    def __init__(self):
        self.sent: list[dict] = []

    def create(self, user_id: str, title: str, message: str, kind: str) -> dict:
        if kind not in {k.value for k in NotificationKind}:
            raise ValueError(f"Unknown notification kind: {kind}")

        notification = {
            "id": str(uuid4()),
            "user_id": str(user_id),
            "title": title,
            "message": message,
            "kind": kind,
            "is_read": False,
            "created_at": datetime.now(UTC),
        }
        self.sent.append(notification)
        logger.info("Notification dispatched", user_id=str(user_id), title=title, kind=kind)
        return dict(notification)

    def list_by_user(self, user_id: str) -> list[dict]:
        mine = [dict(n) for n in self.sent if n["user_id"] == str(user_id)]
        return list(reversed(mine))

    def mark_all_read(self, user_id: str) -> int:
        changed = 0
        for notification in self.sent:
            if notification["user_id"] == str(user_id) and not notification["is_read"]:
                notification["is_read"] = True
                changed += 1
        return changed

    def for_user(self, user_id: str) -> list[dict]:
        return [n for n in self.sent if n["user_id"] == str(user_id)]

    def reset(self):
        self.sent.clear()
