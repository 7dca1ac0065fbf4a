"""Shared fixtures for daykanban tests."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure the repo root (daykanban/, kanban_server.py) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from daykanban.schema import Card, CardMovement, Column  # noqa: E402

T0 = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)


@pytest.fixture
def columns():
    return [
        Column(id="todo", name="TODO", position=0, is_static=True),
        Column(id="doing", name="Doing", position=1, is_static=True),
        Column(id="done", name="Done", position=2, is_static=True),
    ]


@pytest.fixture
def fixed_clock():
    """Clock frozen at T0 + 10h."""
    now = T0 + 10 * HOUR
    return lambda: now


def make_card(moves=(), column_id=None, created=T0, **kwargs):
    """
    Build a card from (from, to, offset) triples; offset is a timedelta from T0.
    Current column defaults to the last move's destination.
    """
    history = [
        CardMovement(id=str(i + 1), from_column_id=src, to_column_id=dst, timestamp=T0 + offset)
        for i, (src, dst, offset) in enumerate(moves)
    ]
    if column_id is None:
        column_id = history[-1].to_column_id if history else "todo"
    return Card(
        id=kwargs.pop("id", "card-1"),
        title=kwargs.pop("title", "Test card"),
        column_id=column_id,
        created_date=created,
        movement_history=history,
        **kwargs,
    )
