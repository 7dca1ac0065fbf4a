"""
Rich text parser: description string → node tree.

The tree is never stored. It is rebuilt from the description on every
render, so the string stays the single source of truth.

Pass order:
  1. split on fenced code blocks (```...```, spans lines)
  2. split text segments into lines, group consecutive bullet lines
  3. one prioritised regex scan per line / bullet item:
     code, strikethrough, bold, italic, underline, URL
"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


CODE_BLOCK_RE = re.compile(r"```(.*?)```", re.DOTALL)
BULLET_RE = re.compile(r"^([-*]\s+)(.*)$")
# Strikethrough must come before underline, code before everything.
INLINE_RE = re.compile(
    r"(`[^`]+`)"
    r"|(~~[^~]+~~)"
    r"|(\*[^*]+\*)"
    r"|(_[^_]+_)"
    r"|(~[^~]+~)"
    r"|(https?://\S+)"
)


# ═══════════════════════════════════════════════════════════════
# NODE TYPES: closed set, dispatched with accept(visitor)
# ═══════════════════════════════════════════════════════════════

class Node(ABC):
    """Base of all node kinds."""
    type: str = ""

    @abstractmethod
    def accept(self, visitor): ...

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]: ...


@dataclass(frozen=True)
class Text(Node):
    content: str
    type = "text"

    def accept(self, visitor):
        return visitor.visit_text(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "content": self.content}


@dataclass(frozen=True)
class _Span(Node):
    """Inline span delimited by the same marker on both sides."""
    content: str
    marker = ""

    @property
    def source(self) -> str:
        return self.marker + self.content + self.marker

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "content": self.content}


@dataclass(frozen=True)
class Bold(_Span):
    type = "bold"
    marker = "*"

    def accept(self, visitor):
        return visitor.visit_bold(self)


@dataclass(frozen=True)
class Italic(_Span):
    type = "italic"
    marker = "_"

    def accept(self, visitor):
        return visitor.visit_italic(self)


@dataclass(frozen=True)
class Underline(_Span):
    type = "underline"
    marker = "~"

    def accept(self, visitor):
        return visitor.visit_underline(self)


@dataclass(frozen=True)
class Strikethrough(_Span):
    type = "strikethrough"
    marker = "~~"

    def accept(self, visitor):
        return visitor.visit_strikethrough(self)


@dataclass(frozen=True)
class Code(_Span):
    type = "code"
    marker = "`"

    def accept(self, visitor):
        return visitor.visit_code(self)


@dataclass(frozen=True)
class Link(Node):
    url: str
    type = "link"

    def accept(self, visitor):
        return visitor.visit_link(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "url": self.url}


@dataclass(frozen=True)
class CodeBlock(Node):
    """Fenced block. raw is the exact text between the fences."""
    raw: str
    type = "codeblock"

    @property
    def content(self) -> str:
        return self.raw[1:] if self.raw.startswith("\n") else self.raw

    @property
    def lines(self) -> List[str]:
        return self.content.split("\n") if self.content else [""]

    def accept(self, visitor):
        return visitor.visit_codeblock(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "content": self.content}


@dataclass(frozen=True)
class BulletItem:
    """One "- item" line. line_end is "\\n" unless it closes its segment."""
    marker: str
    children: Tuple[Node, ...]
    line_end: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"children": [c.to_dict() for c in self.children]}


@dataclass(frozen=True)
class BulletList(Node):
    items: Tuple[BulletItem, ...] = field(default_factory=tuple)
    type = "bulletList"

    def accept(self, visitor):
        return visitor.visit_bullet_list(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "items": [i.to_dict() for i in self.items]}


# ═══════════════════════════════════════════════════════════════
# PARSER
# ═══════════════════════════════════════════════════════════════

def split_code_blocks(text: str) -> List[Tuple[str, str]]:
    """Split into ("text", chunk) / ("codeblock", inner) segments, in order."""
    segments: List[Tuple[str, str]] = []
    last = 0
    for match in CODE_BLOCK_RE.finditer(text):
        if match.start() > last:
            segments.append(("text", text[last:match.start()]))
        segments.append(("codeblock", match.group(1)))
        last = match.end()
    if last < len(text):
        segments.append(("text", text[last:]))
    return segments


def parse_inline(text: str) -> List[Node]:
    """Single-pass inline scan of one line."""
    nodes: List[Node] = []
    last = 0
    for match in INLINE_RE.finditer(text):
        if match.start() > last:
            nodes.append(Text(text[last:match.start()]))
        full = match.group(0)
        if match.group(1):
            nodes.append(Code(full[1:-1]))
        elif match.group(2):
            nodes.append(Strikethrough(full[2:-2]))
        elif match.group(3):
            nodes.append(Bold(full[1:-1]))
        elif match.group(4):
            nodes.append(Italic(full[1:-1]))
        elif match.group(5):
            nodes.append(Underline(full[1:-1]))
        else:
            nodes.append(Link(full))
        last = match.end()
    if last < len(text):
        nodes.append(Text(text[last:]))
    return nodes


def _parse_text_segment(segment: str) -> List[Node]:
    lines = segment.split("\n")
    nodes: List[Node] = []
    bullets: List[BulletItem] = []

    def flush():
        if bullets:
            nodes.append(BulletList(tuple(bullets)))
            bullets.clear()

    for idx, line in enumerate(lines):
        is_last = idx == len(lines) - 1
        line_end = "" if is_last else "\n"
        match = BULLET_RE.match(line)
        if match:
            bullets.append(BulletItem(
                marker=match.group(1),
                children=tuple(parse_inline(match.group(2))),
                line_end=line_end,
            ))
            continue
        flush()
        nodes.extend(parse_inline(line))
        if line_end:
            nodes.append(Text(line_end))

    flush()
    return nodes


def parse_description(text: str) -> List[Node]:
    """Parse a card description into a list of top-level nodes."""
    if not text:
        return []
    nodes: List[Node] = []
    for kind, chunk in split_code_blocks(text):
        if kind == "codeblock":
            nodes.append(CodeBlock(chunk))
        else:
            nodes.extend(_parse_text_segment(chunk))
    return nodes


def nodes_to_dicts(nodes: List[Node]) -> List[Dict[str, Any]]:
    return [n.to_dict() for n in nodes]

