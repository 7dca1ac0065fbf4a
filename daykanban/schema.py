"""
Card, column and movement schema.

Card lifecycle:
  (created) → todo → doing → done

A card's location history is an append-only movement log. The first
movement has from_column_id == "" (the card did not exist before) and the
last movement's to_column_id is the card's current column. Cards are
immutable-by-replacement: engines read them, board operations build new ones.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
import json
import uuid


# Static column IDs
COLUMN_IDS = {
    "TODO": "todo",
    "DOING": "doing",
    "DONE": "done",
}

# from_column_id of the creation movement
CREATION_SOURCE = ""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any, default: Optional[datetime] = None) -> Optional[datetime]:
    """Read an ISO-8601 string (or datetime) as an aware datetime; naive means UTC."""
    if value is None or value == "":
        return default
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value)
        # JSON.stringify(Date) writes a trailing Z
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return default
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if isinstance(value, datetime) else value


@dataclass(frozen=True)
class CardMovement:
    """One atomic column transition."""
    from_column_id: str
    to_column_id: str
    timestamp: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_creation(self) -> bool:
        return self.from_column_id == CREATION_SOURCE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fromColumnId": self.from_column_id,
            "toColumnId": self.to_column_id,
            "timestamp": _iso(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CardMovement":
        return cls(
            id=str(data.get("id") or uuid.uuid4()),
            from_column_id=data.get("fromColumnId") or "",
            to_column_id=data.get("toColumnId") or "",
            timestamp=parse_timestamp(data.get("timestamp"), default=_utcnow()),
        )


@dataclass(frozen=True)
class ChecklistItem:
    """Checklist entry. Carried through untouched by the engines."""
    id: str
    text: str
    is_completed: bool = False
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "isCompleted": self.is_completed,
            "createdAt": _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChecklistItem":
        return cls(
            id=str(data.get("id", "")),
            text=data.get("text", ""),
            is_completed=bool(data.get("isCompleted", False)),
            created_at=parse_timestamp(data.get("createdAt"), default=_utcnow()),
        )


@dataclass(frozen=True)
class Column:
    """Board column. The engines only read id and name."""
    id: str
    name: str
    position: int = 0
    is_static: bool = False
    color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "position": self.position,
            "isStatic": self.is_static,
        }
        if self.color:
            data["color"] = self.color
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Column":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            position=int(data.get("position", 0) or 0),
            is_static=bool(data.get("isStatic", False)),
            color=data.get("color"),
        )


@dataclass(frozen=True)
class Card:
    """Core card on a day board."""

    # Identifiers
    id: str

    # Content
    title: str
    description: str = ""          # rich text source, see richtext.py

    # Location
    column_id: str = COLUMN_IDS["TODO"]
    created_date: datetime = field(default_factory=_utcnow)
    movement_history: List[CardMovement] = field(default_factory=list)

    # Metadata (pass-through)
    template_id: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    checklist: List[ChecklistItem] = field(default_factory=list)

    @classmethod
    def create(cls, title: str, column_id: str = COLUMN_IDS["TODO"], **kwargs) -> "Card":
        """New card with its creation movement already logged."""
        now = kwargs.pop("created_date", None) or _utcnow()
        movement = CardMovement(
            from_column_id=CREATION_SOURCE,
            to_column_id=column_id,
            timestamp=now,
        )
        return cls(
            id=kwargs.pop("id", None) or str(uuid.uuid4()),
            title=title,
            column_id=column_id,
            created_date=now,
            movement_history=[movement],
            **kwargs,
        )

    def moved_to(self, column_id: str, timestamp: Optional[datetime] = None) -> "Card":
        """Return a copy moved to column_id with the movement appended."""
        if column_id == self.column_id:
            return self
        movement = CardMovement(
            from_column_id=self.column_id,
            to_column_id=column_id,
            timestamp=timestamp or _utcnow(),
        )
        return replace(
            self,
            column_id=column_id,
            movement_history=list(self.movement_history) + [movement],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the persisted (camelCase) keys."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "createdDate": _iso(self.created_date),
            "columnId": self.column_id,
            "templateId": self.template_id,
            "tags": list(self.tags),
            "checklist": [item.to_dict() for item in self.checklist],
            "movementHistory": [m.to_dict() for m in self.movement_history],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        """Deserialize from dict."""
        history = data.get("movementHistory", [])
        if isinstance(history, str):
            try:
                history = json.loads(history)
            except json.JSONDecodeError:
                history = []

        tags = data.get("tags") or []
        checklist = data.get("checklist") or []

        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            description=data.get("description") or "",
            column_id=data.get("columnId") or COLUMN_IDS["TODO"],
            created_date=parse_timestamp(data.get("createdDate"), default=_utcnow()),
            movement_history=[
                CardMovement.from_dict(m) for m in history if isinstance(m, dict)
            ],
            template_id=data.get("templateId"),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
            checklist=[
                ChecklistItem.from_dict(c) for c in checklist if isinstance(c, dict)
            ] if isinstance(checklist, list) else [],
        )


@dataclass(frozen=True)
class TimeBreakdown:
    """Time spent in one column, with its share of the card's total time."""
    column_id: str
    column_name: str
    time_spent: int      # milliseconds
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columnId": self.column_id,
            "columnName": self.column_name,
            "timeSpent": self.time_spent,
            "percentage": self.percentage,
        }
