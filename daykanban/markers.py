"""
Marker vocabulary shared by the parser and the edit operations.

  *text*      bold
  _text_      italic
  ~text~      underline (never half of a ~~ pair)
  ~~text~~    strikethrough
  `text`      inline code
  ```text```  fenced code block (may span lines)
  - text      bullet item (line level)
"""
from typing import Dict, List, NamedTuple, Tuple


class MarkerPair(NamedTuple):
    marker: str
    name: str


# Longer markers first so ~~ is never taken as two ~ markers.
MARKER_PAIRS: List[MarkerPair] = [
    MarkerPair("~~", "strikethrough"),
    MarkerPair("```", "codeblock"),
    MarkerPair("*", "bold"),
    MarkerPair("_", "italic"),
    MarkerPair("~", "underline"),
    MarkerPair("`", "code"),
]

BULLET_PREFIX = "- "
CODE_FENCE = "```"

# Toolbar / shortcut formats -> (prefix, suffix)
FORMAT_MARKERS: Dict[str, Tuple[str, str]] = {
    "bold": ("*", "*"),
    "italic": ("_", "_"),
    "underline": ("~", "~"),
    "strikethrough": ("~~", "~~"),
    "code": ("`", "`"),
    "codeblock": (CODE_FENCE + "\n", "\n" + CODE_FENCE),
}


def index_of(text: str, sub: str, from_index: int = 0) -> int:
    """First occurrence of sub starting at or after from_index, else -1."""
    if from_index < 0:
        from_index = 0
    return text.find(sub, from_index)


def last_index_of(text: str, sub: str, from_index: int) -> int:
    """Last occurrence of sub starting at or before from_index, else -1.

    A negative from_index never matches.
    """
    if from_index < 0 or not sub:
        return -1
    return text.rfind(sub, 0, from_index + len(sub))
