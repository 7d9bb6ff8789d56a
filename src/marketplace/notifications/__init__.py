"""Notifier registry.

Uses the in-memory adapter by default; a real notification service adapter
can be installed at startup with ``set_notifier``.
"""

from marketplace.notifications.port import NotificationKind, NotifierPort

_notifier: NotifierPort | None = None


def get_notifier() -> NotifierPort:
    """Return the configured notifier (singleton)."""
    global _notifier
    if _notifier is None:
        from marketplace.notifications.memory_adapter import InMemoryNotifier

        _notifier = InMemoryNotifier()
    return _notifier


def set_notifier(notifier: NotifierPort) -> None:
    global _notifier
    _notifier = notifier


def reset_notifier():
    """Reset the notifier singleton (useful for testing)."""
    global _notifier
    _notifier = None


def notify(user_id: str, title: str, message: str, kind: str = NotificationKind.SYSTEM.value) -> dict:
    return get_notifier().create(str(user_id), title, message, kind)
