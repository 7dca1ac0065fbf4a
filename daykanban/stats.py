"""
Dashboard statistics over many cards.

A card counts as completed on the day of its first movement into the
terminal column. Days run inclusively from start to end.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from .schema import COLUMN_IDS, Card, Column
from .timetracking import TimeTracker

logger = logging.getLogger(__name__)

TOP_TAGS = 5
# Chart colours for columns that carry none
DEFAULT_COLUMN_COLORS = ["#6366F1", "#EC4899", "#10B981", "#F59E0B", "#3B82F6", "#8B5CF6"]


@dataclass
class DashboardStats:
    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    avg_completion_time: float = 0.0
    completion_data: List[Dict] = field(default_factory=list)
    time_by_column: List[Dict] = field(default_factory=list)
    tag_distribution: List[Dict] = field(default_factory=list)
    daily_completion: List[Dict] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "totalTasks": self.total_tasks,
            "completedTasks": self.completed_tasks,
            "inProgressTasks": self.in_progress_tasks,
            "avgCompletionTime": self.avg_completion_time,
            "completionData": self.completion_data,
            "timeByColumn": self.time_by_column,
            "tagDistribution": self.tag_distribution,
            "dailyCompletion": self.daily_completion,
        }


def each_day(start: date, end: date) -> List[date]:
    if isinstance(start, datetime):
        start = start.date()
    if isinstance(end, datetime):
        end = end.date()
    if end < start:
        return []
    return [start + timedelta(days=n) for n in range((end - start).days + 1)]


def completion_day(card: Card, done_column_id: str) -> Optional[date]:
    for movement in TimeTracker.get_movement_history(card):
        if movement.to_column_id == done_column_id:
            return movement.timestamp.date()
    return None


def tag_distribution(cards: List[Card], limit: int = TOP_TAGS) -> List[Dict]:
    counts = Counter(tag for card in cards for tag in card.tags)
    total = len(cards) or 1
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
    return [
        {"tag": tag, "count": count, "percentage": count / total * 100}
        for tag, count in ranked
    ]


def compute_dashboard_stats(
    cards: Iterable[Card],
    columns: Iterable[Column],
    start: date,
    end: date,
    tracker: Optional[TimeTracker] = None,
    in_progress_column_id: str = COLUMN_IDS["DOING"],
) -> DashboardStats:
    """Aggregate the dashboard figures for cards over [start, end]."""
    tracker = tracker or TimeTracker()
    tracker = tracker.at(tracker.clock())
    cards = list(cards)
    columns = list(columns)
    done_id = tracker.done_column_id

    completed = [c for c in cards if c.column_id == done_id]
    completion_times = [tracker.get_total_time_to_completion(c) for c in completed]
    avg_completion = sum(completion_times) / len(completion_times) if completion_times else 0.0

    days = each_day(start, end)
    per_day = Counter()
    for card in cards:
        day = completion_day(card, done_id)
        if day is not None:
            per_day[day] += 1

    time_by_column = []
    for idx, column in enumerate(columns):
        spent = sum(tracker.get_time_in_column(c, column.id) for c in cards)
        time_by_column.append({
            "columnName": column.name,
            "time": spent,
            "color": column.color or DEFAULT_COLUMN_COLORS[idx % len(DEFAULT_COLUMN_COLORS)],
        })

    logger.debug(f"Dashboard stats: {len(cards)} cards over {len(days)} days")

    return DashboardStats(
        total_tasks=len(cards),
        completed_tasks=len(completed),
        in_progress_tasks=sum(1 for c in cards if c.column_id == in_progress_column_id),
        avg_completion_time=avg_completion,
        completion_data=[
            {"date": f"{day:%b} {day.day}", "completed": per_day.get(day, 0)}
            for day in days
        ],
        time_by_column=time_by_column,
        tag_distribution=tag_distribution(cards),
        daily_completion=[
            {"date": day.isoformat(), "count": per_day.get(day, 0)}
            for day in days
        ],
    )
