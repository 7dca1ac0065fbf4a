# daykanban — time-in-column tracking
#
# Interval accumulation over a card's movement log:
#
#   movement.to   == column  → open interval (entry time)
#   movement.from == column  → close interval, add (exit - entry)
#   still open and card sits in column → add (now - entry)
#
# A second entry into the same column without an exit overwrites the open
# interval's start. Malformed histories under/over-count; they never raise.
#
# Precondition: the card's current column has an open entry in its own
# history. Without one, time in the current column reads as 0.

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional

from .formatters import format_duration
from .schema import COLUMN_IDS, Card, CardMovement, Column, TimeBreakdown

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_MS = timedelta(milliseconds=1)


def system_clock() -> datetime:
    return datetime.now(timezone.utc)


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Whole milliseconds from start to end (negative if end is earlier)."""
    return (end - start) // _MS


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 away from zero for positives (display rounding, not banker's)."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


@dataclass
class TimeTrackingSummary:
    """Everything the card detail view shows, computed from one clock reading."""
    time_in_current_column: int
    time_in_current_column_formatted: str
    total_time: int
    total_time_formatted: str
    breakdown: List[TimeBreakdown] = field(default_factory=list)
    current_column_percentage: int = 0
    is_completed: bool = False

    def to_dict(self):
        return {
            "timeInCurrentColumn": self.time_in_current_column,
            "timeInCurrentColumnFormatted": self.time_in_current_column_formatted,
            "totalTime": self.total_time,
            "totalTimeFormatted": self.total_time_formatted,
            "breakdown": [b.to_dict() for b in self.breakdown],
            "currentColumnPercentage": self.current_column_percentage,
            "isCompleted": self.is_completed,
        }


class TimeTracker:
    """
    Computes column durations for cards.

    The clock is injected; each public method reads it at most once so all
    figures of one call agree with each other.
    """

    def __init__(self, clock: Optional[Clock] = None, done_column_id: str = COLUMN_IDS["DONE"]):
        self.clock = clock or system_clock
        self.done_column_id = done_column_id

    def at(self, now: datetime) -> "TimeTracker":
        """Tracker pinned to now, for batches that must share one clock reading."""
        return TimeTracker(clock=lambda: now, done_column_id=self.done_column_id)

    # ── movement log ─────────────────────────────────────────

    @staticmethod
    def get_movement_history(card: Card) -> List[CardMovement]:
        """Movements in chronological order (stable; the card is untouched)."""
        return sorted(card.movement_history, key=lambda m: m.timestamp)

    # ── single card ──────────────────────────────────────────

    def _time_in_column(self, card: Card, column_id: str, now: datetime) -> int:
        if not card.movement_history:
            return 0

        total = 0
        entry_time: Optional[datetime] = None

        for movement in self.get_movement_history(card):
            if movement.to_column_id == column_id:
                if entry_time is not None and movement.from_column_id != column_id:
                    logger.debug(
                        f"Card {card.id}: re-entry into {column_id} without exit, "
                        f"dropping open interval from {entry_time.isoformat()}"
                    )
                entry_time = movement.timestamp

            if movement.from_column_id == column_id:
                if entry_time is not None:
                    total += elapsed_ms(entry_time, movement.timestamp)
                    entry_time = None
                else:
                    logger.debug(f"Card {card.id}: exit from {column_id} without entry")

        if card.column_id == column_id and entry_time is not None:
            total += elapsed_ms(entry_time, now)

        return total

    def _total_time(self, card: Card, now: datetime) -> int:
        completion = next(
            (m for m in self.get_movement_history(card) if m.to_column_id == self.done_column_id),
            None,
        )
        if completion is None:
            return elapsed_ms(card.created_date, now)
        return elapsed_ms(card.created_date, completion.timestamp)

    def get_time_in_column(self, card: Card, column_id: str) -> int:
        """Milliseconds the card has spent in column_id, open interval included."""
        return self._time_in_column(card, column_id, self.clock())

    def get_total_time_to_completion(self, card: Card) -> int:
        """Creation → first arrival in the terminal column, or → now if never done."""
        return self._total_time(card, self.clock())

    def _breakdown(self, card: Card, columns: Iterable[Column], now: datetime) -> List[TimeBreakdown]:
        total = self._total_time(card, now) or 1
        breakdown = []
        for column in columns:
            spent = self._time_in_column(card, column.id, now)
            breakdown.append(TimeBreakdown(
                column_id=column.id,
                column_name=column.name,
                time_spent=spent,
                percentage=round_half_up(spent / total * 100, 2),
            ))
        return breakdown

    def get_time_breakdown(self, card: Card, columns: Iterable[Column]) -> List[TimeBreakdown]:
        """
        Per-column time and share of the total, in the order of columns.

        History referencing a column absent from columns is left out.
        """
        return self._breakdown(card, columns, self.clock())

    def _current_percentage(self, card: Card, now: datetime) -> int:
        total = self._total_time(card, now) or 1
        current = self._time_in_column(card, card.column_id, now)
        return int(round_half_up(current / total * 100))

    def get_current_column_percentage(self, card: Card) -> int:
        return self._current_percentage(card, self.clock())

    @staticmethod
    def format_duration(milliseconds: int) -> str:
        return format_duration(milliseconds)

    def summarize(self, card: Card, columns: Iterable[Column]) -> TimeTrackingSummary:
        now = self.clock()
        in_current = self._time_in_column(card, card.column_id, now)
        total = self._total_time(card, now)
        return TimeTrackingSummary(
            time_in_current_column=in_current,
            time_in_current_column_formatted=format_duration(in_current),
            total_time=total,
            total_time_formatted=format_duration(total),
            breakdown=self._breakdown(card, columns, now),
            current_column_percentage=self._current_percentage(card, now),
            is_completed=card.column_id == self.done_column_id,
        )

    # ── across cards ─────────────────────────────────────────

    def get_average_time_in_column(self, cards: Iterable[Card], column_id: str) -> float:
        """Mean time in column_id over cards that ever entered it."""
        now = self.clock()
        visited = [
            card for card in cards
            if any(m.to_column_id == column_id for m in card.movement_history)
        ]
        if not visited:
            return 0.0
        return sum(self._time_in_column(c, column_id, now) for c in visited) / len(visited)
