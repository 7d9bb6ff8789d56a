"""Tests for the in-memory notifier and the ``notify`` helper."""

import pytest

from marketplace.notifications import get_notifier, notify, reset_notifier, set_notifier
from marketplace.notifications.memory_adapter import InMemoryNotifier


@pytest.fixture()
def notifier():
    return InMemoryNotifier()


def test_create_returns_unread_notification(notifier):
    sent = notifier.create("user-1", "Order Update", "Order #ABC is now completed.", "order")
    assert sent["is_read"] is False
    assert sent["kind"] == "order"


def test_unknown_kind_is_rejected(notifier):
    with pytest.raises(ValueError):
        notifier.create("user-1", "Hi", "Hello", "sms")


def test_list_by_user_is_newest_first(notifier):
    notifier.create("user-1", "First", "1", "system")
    notifier.create("user-2", "Other", "x", "system")
    notifier.create("user-1", "Second", "2", "promo")

    assert [n["title"] for n in notifier.list_by_user("user-1")] == ["Second", "First"]


def test_mark_all_read(notifier):
    notifier.create("user-1", "First", "1", "system")
    notifier.create("user-1", "Second", "2", "system")
    notifier.create("user-2", "Other", "x", "system")

    assert notifier.mark_all_read("user-1") == 2
    assert notifier.mark_all_read("user-1") == 0
    assert all(n["is_read"] for n in notifier.list_by_user("user-1"))
    assert not notifier.list_by_user("user-2")[0]["is_read"]


def test_notify_goes_through_installed_notifier(notifier):
    set_notifier(notifier)
    notify("user-1", "Shop Approved", "Your shop is live.")

    assert get_notifier() is notifier
    assert notifier.sent[0]["kind"] == "system"

    reset_notifier()
    assert get_notifier() is not notifier
