"""Display formatting for durations, dates and times."""
import logging
from datetime import date, datetime
from typing import Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "%m/%d/%Y"
TIME_FORMATS = {
    "12h": "%I:%M %p",
    "24h": "%H:%M",
}

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


def format_duration(milliseconds: Union[int, float]) -> str:
    """
    Human-readable duration: at most two units, no trailing zero unit.

    >>> format_duration(5400000)
    '1h 30m'
    >>> format_duration(2 * 86400000)
    '2d'
    """
    if milliseconds < 0:
        return "0m"

    seconds = int(milliseconds // SECOND_MS)
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        remaining_hours = hours % 24
        return f"{days}d {remaining_hours}h" if remaining_hours else f"{days}d"

    if hours > 0:
        remaining_minutes = minutes % 60
        return f"{hours}h {remaining_minutes}m" if remaining_minutes else f"{hours}h"

    if minutes > 0:
        return f"{minutes}m"

    return f"{seconds}s"


def format_date(value: Union[date, datetime], date_format: Optional[str] = None) -> str:
    """strftime with the user's pattern; a broken pattern falls back to the default."""
    pattern = date_format or DEFAULT_DATE_FORMAT
    try:
        return value.strftime(pattern)
    except ValueError as e:
        logger.debug(f"Bad date format {pattern!r}: {e}")
        return value.strftime(DEFAULT_DATE_FORMAT)


def format_time(value: datetime, time_format: str = "12h") -> str:
    pattern = TIME_FORMATS.get(time_format, TIME_FORMATS["12h"])
    text = value.strftime(pattern)
    if time_format != "24h":
        # 09:05 AM -> 9:05 AM
        text = text.lstrip("0") or text
    return text


def format_datetime(value: datetime, date_format: Optional[str] = None, time_format: str = "12h") -> str:
    return f"{format_date(value, date_format)} {format_time(value, time_format)}"
