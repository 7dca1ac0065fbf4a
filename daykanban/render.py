"""
Node tree → output renderers.

One parser, several renderers:
  ReadRenderer      fully decorated HTML (line-numbered code blocks, links)
  OverlayRenderer   HTML that sits behind a live textarea; its visible text
                    is the source string character for character
  PlainTextRenderer markers stripped, for previews and search
"""
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Set

from markupsafe import Markup, escape

from .markers import CODE_FENCE
from .richtext import (
    Bold, BulletList, Code, CodeBlock, Italic, Link, Node, Strikethrough,
    Text, Underline, parse_description,
)
from .validators import InputValidator

logger = logging.getLogger(__name__)

RENDER_MODES = ("read", "overlay")


class NodeVisitor(ABC):
    """One visit method per node kind. Missing one is a TypeError at instantiation."""

    @abstractmethod
    def visit_text(self, node: Text): ...

    @abstractmethod
    def visit_bold(self, node: Bold): ...

    @abstractmethod
    def visit_italic(self, node: Italic): ...

    @abstractmethod
    def visit_underline(self, node: Underline): ...

    @abstractmethod
    def visit_strikethrough(self, node: Strikethrough): ...

    @abstractmethod
    def visit_code(self, node: Code): ...

    @abstractmethod
    def visit_codeblock(self, node: CodeBlock): ...

    @abstractmethod
    def visit_bullet_list(self, node: BulletList): ...

    @abstractmethod
    def visit_link(self, node: Link): ...

    def render(self, nodes: List[Node]):
        return Markup("").join(node.accept(self) for node in nodes)


# ═══════════════════════════════════════════════════════════════
# Read mode
# ═══════════════════════════════════════════════════════════════

class ReadRenderer(NodeVisitor):
    """
    Decorated HTML for display.

    Line breaks become <br>. Links are rendered but never opened here:
    activate(url) hands a link from the latest render to the caller's
    open_external callback.
    """

    def __init__(self, open_external: Optional[Callable[[str], None]] = None):
        self.open_external = open_external
        self.links: Set[str] = set()

    def render(self, nodes: List[Node]) -> Markup:
        self.links = set()
        return super().render(nodes)

    def visit_text(self, node: Text) -> Markup:
        return Markup("<br>").join(escape(part) for part in node.content.split("\n"))

    def visit_bold(self, node: Bold) -> Markup:
        return Markup('<strong class="font-bold">%s</strong>') % node.content

    def visit_italic(self, node: Italic) -> Markup:
        return Markup('<em class="italic">%s</em>') % node.content

    def visit_underline(self, node: Underline) -> Markup:
        return Markup('<span class="underline">%s</span>') % node.content

    def visit_strikethrough(self, node: Strikethrough) -> Markup:
        return Markup('<span class="line-through">%s</span>') % node.content

    def visit_code(self, node: Code) -> Markup:
        return Markup('<code class="inline-code">%s</code>') % node.content

    def visit_codeblock(self, node: CodeBlock) -> Markup:
        rows = Markup("").join(
            Markup(
                '<tr><td class="line-number">%s</td>'
                '<td class="code-line">%s</td></tr>'
            ) % (number, line or " ")
            for number, line in enumerate(node.lines, start=1)
        )
        return Markup(
            '<div class="code-block"><table><tbody>%s</tbody></table></div>'
        ) % rows

    def visit_bullet_list(self, node: BulletList) -> Markup:
        items = Markup("").join(
            Markup('<li class="bullet-item">%s</li>') % NodeVisitor.render(self, list(item.children))
            for item in node.items
        )
        return Markup('<ul class="bullet-list">%s</ul>') % items

    def visit_link(self, node: Link) -> Markup:
        url = InputValidator.sanitize_url(node.url)
        if not url:
            return escape(node.url)
        self.links.add(url)
        return Markup(
            '<a href="%s" class="external-link" data-external="true" '
            'rel="noopener noreferrer">%s</a>'
        ) % (url, url)

    def activate(self, url: str) -> bool:
        """Open a rendered link through the caller's callback."""
        if url not in self.links:
            logger.debug(f"Ignoring activation of unrendered link: {url}")
            return False
        if self.open_external is None:
            logger.debug(f"No open_external callback; link not opened: {url}")
            return False
        self.open_external(url)
        return True


# ═══════════════════════════════════════════════════════════════
# Overlay mode
# ═══════════════════════════════════════════════════════════════

class OverlayRenderer(NodeVisitor):
    """
    HTML drawn behind a transparent textarea.

    Every source character is emitted exactly once, markers included (as
    dimmed spans), so the textarea caret stays aligned with the decoration.
    """

    @staticmethod
    def _marker(text: str) -> Markup:
        return Markup('<span class="marker">%s</span>') % text

    def _span(self, node, tag: str, css: str) -> Markup:
        marker = self._marker(node.marker)
        body = Markup('<%s class="%s">%s</%s>') % (Markup(tag), css, node.content, Markup(tag))
        return marker + body + marker

    def visit_text(self, node: Text) -> Markup:
        return escape(node.content)

    def visit_bold(self, node: Bold) -> Markup:
        return self._span(node, "strong", "font-bold")

    def visit_italic(self, node: Italic) -> Markup:
        return self._span(node, "em", "italic")

    def visit_underline(self, node: Underline) -> Markup:
        return self._span(node, "span", "underline")

    def visit_strikethrough(self, node: Strikethrough) -> Markup:
        return self._span(node, "span", "line-through")

    def visit_code(self, node: Code) -> Markup:
        return self._span(node, "code", "inline-code")

    def visit_codeblock(self, node: CodeBlock) -> Markup:
        fence = self._marker(CODE_FENCE)
        return fence + Markup('<span class="code-block">%s</span>') % node.raw + fence

    def visit_bullet_list(self, node: BulletList) -> Markup:
        return Markup("").join(
            self._marker(item.marker) + self.render(list(item.children)) + escape(item.line_end)
            for item in node.items
        )

    def visit_link(self, node: Link) -> Markup:
        return Markup('<span class="underline">%s</span>') % node.url


# ═══════════════════════════════════════════════════════════════
# Plain text
# ═══════════════════════════════════════════════════════════════

class PlainTextRenderer(NodeVisitor):
    """Markers removed; bullets shown as "• "."""

    def visit_text(self, node: Text) -> str:
        return node.content

    def visit_bold(self, node: Bold) -> str:
        return node.content

    visit_italic = visit_bold
    visit_underline = visit_bold
    visit_strikethrough = visit_bold
    visit_code = visit_bold

    def visit_codeblock(self, node: CodeBlock) -> str:
        return node.content

    def visit_bullet_list(self, node: BulletList) -> str:
        return "".join(
            "• " + self.render(list(item.children)) + item.line_end
            for item in node.items
        )

    def visit_link(self, node: Link) -> str:
        return node.url

    def render(self, nodes: List[Node]) -> str:
        return "".join(node.accept(self) for node in nodes)


def render_description(
    text: str,
    mode: str = "read",
    open_external: Optional[Callable[[str], None]] = None,
) -> Markup:
    """Parse and render a description wrapped in its container element."""
    if mode not in RENDER_MODES:
        raise ValueError(f"Invalid render mode: {mode}")
    nodes = parse_description(text)
    if mode == "overlay":
        body = OverlayRenderer().render(nodes)
    else:
        body = ReadRenderer(open_external).render(nodes)
    return Markup('<div class="rich-text %s">%s</div>') % (mode, body)


def to_plain_text(text: str) -> str:
    return PlainTextRenderer().render(parse_description(text))
