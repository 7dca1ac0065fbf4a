"""
Cursor-aware edit operations for the description editor.

Every operation is a pure function of (text, selection) and returns the new
text plus the new caret offset. The host text input owns the real widget,
selection and undo history.
"""
import logging
from typing import NamedTuple, Optional, Set

from .markers import (
    BULLET_PREFIX, FORMAT_MARKERS, MARKER_PAIRS, index_of, last_index_of,
)

logger = logging.getLogger(__name__)


class EditResult(NamedTuple):
    text: str
    cursor: int

    def to_dict(self):
        return {"text": self.text, "cursor": self.cursor}


def _clamp(pos: int, text: str) -> int:
    return max(0, min(pos, len(text)))


def _ordered(text: str, sel_start: int, sel_end: int):
    start, end = _clamp(sel_start, text), _clamp(sel_end, text)
    return (start, end) if start <= end else (end, start)


def wrap_selection(text: str, sel_start: int, sel_end: int, prefix: str, suffix: str) -> EditResult:
    """
    Wrap the selection in prefix/suffix.

    With a selection the caret lands after the suffix; with a collapsed
    caret the empty pair is inserted and the caret sits between them.
    """
    text = text or ""
    start, end = _ordered(text, sel_start, sel_end)
    selected = text[start:end]

    if selected:
        wrapped = prefix + selected + suffix
        return EditResult(text[:start] + wrapped + text[end:], start + len(wrapped))

    return EditResult(text[:start] + prefix + suffix + text[end:], start + len(prefix))


def insert_code_block(text: str, sel_start: int, sel_end: int) -> EditResult:
    prefix, suffix = FORMAT_MARKERS["codeblock"]
    return wrap_selection(text, sel_start, sel_end, prefix, suffix)


def insert_bullet(text: str, sel_start: int) -> EditResult:
    """Toggle a leading "- " on the caret's line."""
    text = text or ""
    caret = _clamp(sel_start, text)
    line_start = last_index_of(text, "\n", caret - 1) + 1

    if text.startswith(BULLET_PREFIX, line_start):
        new_text = text[:line_start] + text[line_start + len(BULLET_PREFIX):]
        return EditResult(new_text, max(caret - len(BULLET_PREFIX), line_start))

    new_text = text[:line_start] + BULLET_PREFIX + text[line_start:]
    return EditResult(new_text, caret + len(BULLET_PREFIX))


def apply_format(text: str, sel_start: int, sel_end: int, name: str) -> EditResult:
    """Toolbar / shortcut dispatch by format name."""
    try:
        prefix, suffix = FORMAT_MARKERS[name]
    except KeyError:
        raise ValueError(f"Unknown format: {name}") from None
    return wrap_selection(text, sel_start, sel_end, prefix, suffix)


def handle_marker_deletion(text: str, cursor: int, is_backspace: bool) -> Optional[EditResult]:
    """
    Delete a whole marker pair when Backspace/Delete touches one marker.

    Backspace after a marker: remove it together with the next same marker
    after the caret, or failing that the previous one before it. Delete
    before a marker mirrors this. Content between the pair is kept.

    Returns None when the caret touches no marker; the caller then performs
    the default single-character deletion. Only call with a collapsed caret.
    """
    if not text or cursor < 0 or cursor > len(text):
        return None

    for marker, name in MARKER_PAIRS:
        m_len = len(marker)

        if is_backspace:
            if cursor < m_len or text[cursor - m_len:cursor] != marker:
                continue
            # marker before the caret as an opener
            closing = index_of(text, marker, cursor)
            if closing != -1:
                new_text = text[:cursor - m_len] + text[cursor:closing] + text[closing + m_len:]
                logger.debug(f"Removed {name} pair at {cursor - m_len}/{closing}")
                return EditResult(new_text, cursor - m_len)
            # marker before the caret as a closer
            marker_start = cursor - m_len
            opening = last_index_of(text, marker, marker_start - 1)
            if opening != -1:
                content = text[opening + m_len:marker_start]
                new_text = text[:opening] + content + text[cursor:]
                logger.debug(f"Removed {name} pair at {opening}/{marker_start}")
                return EditResult(new_text, opening + len(content))
        else:
            if cursor + m_len > len(text) or text[cursor:cursor + m_len] != marker:
                continue
            # marker after the caret as an opener
            closing = index_of(text, marker, cursor + m_len)
            if closing != -1:
                content = text[cursor + m_len:closing]
                new_text = text[:cursor] + content + text[closing + m_len:]
                logger.debug(f"Removed {name} pair at {cursor}/{closing}")
                return EditResult(new_text, cursor)
            # marker after the caret as a closer
            opening = last_index_of(text, marker, cursor - 1)
            if opening != -1 and opening < cursor:
                content = text[opening + m_len:cursor]
                new_text = text[:opening] + content + text[cursor + m_len:]
                logger.debug(f"Removed {name} pair at {opening}/{cursor}")
                return EditResult(new_text, opening + len(content))

    return None


def _inside_pair(text: str, cursor: int, marker: str) -> bool:
    before = last_index_of(text, marker, cursor - 1)
    after = index_of(text, marker, cursor)
    if before == -1 or after == -1 or after <= before:
        return False
    return marker not in text[before + len(marker):cursor]


def get_active_formats(text: str, cursor: int) -> Set[str]:
    """
    Formats whose markers surround the caret, for toolbar highlighting.

    A heuristic over the raw string; the parser stays authoritative.
    """
    active: Set[str] = set()
    if not text:
        return active
    cursor = _clamp(cursor, text)

    for name, marker in (("bold", "*"), ("italic", "_"), ("code", "`")):
        if _inside_pair(text, cursor, marker):
            active.add(name)

    if _inside_pair(text, cursor, "~~"):
        active.add("strikethrough")

    # single ~ only; tildes belonging to ~~ do not count
    before = last_index_of(text, "~", cursor - 1)
    after = index_of(text, "~", cursor)
    if before != -1 and after != -1 and after > before:
        doubled_before = before > 0 and text[before - 1] == "~"
        doubled_after = after + 1 < len(text) and text[after + 1] == "~"
        if not doubled_before and not doubled_after and "~" not in text[before + 1:cursor]:
            active.add("underline")

    return active
