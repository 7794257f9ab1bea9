"""Unit tests for the daily goal review job."""

from __future__ import annotations

import datetime as dt
import logging

import pytest

from pacer.scheduler.jobs import review_goals, start_scheduler, scheduler
from pacer.config import settings

TODAY = dt.date(2025, 1, 16)


def test_review_counts_reached_and_off_track(
    session, add_client, add_goal, add_snapshot, caplog
) -> None:
    add_client()
    add_goal("revenue", 100, dt.date(2025, 1, 1), dt.date(2025, 1, 31), label="Hit")
    add_goal("orders", 200, dt.date(2025, 1, 1), dt.date(2025, 1, 31), label="Slow")
    add_snapshot("woocommerce", dt.date(2025, 1, 2), {"totalRevenue": 120, "totalOrders": 5})

    with caplog.at_level(logging.INFO, logger="pacer.scheduler"):
        counts = review_goals(session, today=TODAY)

    assert counts == {"goals": 2, "goal_reached": 1, "off_track": 1}
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("goal_reached: Hit") for m in messages)
    assert any(m.startswith("off_track: Slow") for m in messages)


def test_review_skips_inactive_clients(session, add_client, add_goal) -> None:
    add_client(status="paused")
    add_goal("revenue", 100, dt.date(2025, 1, 1), dt.date(2025, 1, 31))

    assert review_goals(session, today=TODAY)["goals"] == 0


def test_review_never_writes_goal_status(session, add_client, add_goal, add_snapshot) -> None:
    add_client()
    goal = add_goal("revenue", 10, dt.date(2025, 1, 1), dt.date(2025, 1, 31))
    add_snapshot("woocommerce", dt.date(2025, 1, 2), {"totalRevenue": 50})

    review_goals(session, today=TODAY)
    session.refresh(goal)

    assert goal.status == "active"


def test_disabled_scheduler_does_not_start(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "scheduler_enabled", False)

    start_scheduler()

    assert not scheduler.running


def test_invalid_goal_does_not_hide_valid_ones(session, add_client, add_goal) -> None:
    """A goal with a zero target is skipped; other goals are still reviewed."""
    add_client("bad", name="Bad")
    add_client("good", name="Good")
    add_goal("revenue", 0, dt.date(2025, 1, 1), dt.date(2025, 1, 31), client_id="bad")
    add_goal("revenue", 100, dt.date(2025, 1, 1), dt.date(2025, 1, 31), client_id="good")
    add_goal("orders", 50, dt.date(2025, 1, 1), dt.date(2025, 1, 31), client_id="bad")

    assert review_goals(session, today=TODAY)["goals"] == 2
