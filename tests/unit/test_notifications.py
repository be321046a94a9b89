"""
Unit tests for notifications.py toast collection.
"""

from __future__ import annotations

import pytest

from cowork_booking.notifications import HISTORY_LIMIT, Notifier


@pytest.mark.unit
def test_levels_and_default_titles(notifier: Notifier) -> None:
    """Test that each level carries its French default title."""
    notifier.success("ok")
    notifier.info("fyi")
    notifier.warning("careful")
    notifier.error("boom", title="Session expirée")

    assert [(n.level, n.title) for n in notifier.history] == [
        ("success", "Succès"),
        ("info", "Information"),
        ("warning", "Attention"),
        ("error", "Session expirée"),
    ]
    assert notifier.last().message == "boom"


@pytest.mark.unit
def test_history_keeps_only_the_most_recent(notifier: Notifier) -> None:
    """Test that the oldest notifications are dropped past the limit."""
    for i in range(HISTORY_LIMIT + 5):
        notifier.info(f"message {i}")

    assert len(notifier.history) == HISTORY_LIMIT
    assert notifier.history[0].message == "message 5"
    assert notifier.last().message == f"message {HISTORY_LIMIT + 4}"


@pytest.mark.unit
def test_drain_returns_and_clears(notifier: Notifier) -> None:
    """Test that drained notifications are handed over once."""
    notifier.success("first")
    notifier.error("second")

    assert [n.message for n in notifier.drain()] == ["first", "second"]
    assert notifier.drain() == []
    assert notifier.last() is None
