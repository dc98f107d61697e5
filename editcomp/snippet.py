"""
Parser for LSP style snippet templates.

Supported syntax:
- `$1` and `${1}` tabstops
- `${1:default}` placeholders, the default text can contain nested stops
- `\\$`, `\\\\` escapes (and `\\}` inside placeholders or at the top level)

Parsing never fails, unrecognized trailing input is dropped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable
from typing import Union

log = logging.getLogger(__name__)

TABSTOP_REGEXPS = (re.compile(r"\$([0-9]+)"), re.compile(r"\$\{([0-9]+)\}"))
PLACEHOLDER_REGEXP = re.compile(r"\$\{([0-9]+):(.*?)\}")

# Escapable characters which terminate a text run; loose escapes do not terminate it
TOP_LEVEL_ESCAPES = ("$", "\\")
TOP_LEVEL_LOOSE_ESCAPES = ("}",)
PLACEHOLDER_ESCAPES = ("$", "}", "\\")


@dataclass(frozen=True)
class Text:
    value: str

    def __str__(self) -> str:
        return to_string(self)


@dataclass(frozen=True)
class Tabstop:
    index: int

    def __str__(self) -> str:
        return to_string(self)


@dataclass(frozen=True)
class Placeholder:
    index: int
    children: tuple[SnippetElement, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    def __str__(self) -> str:
        return to_string(self)


SnippetElement = Union[Text, Tabstop, Placeholder]
TabSpan = tuple[int, tuple[int, int]]


def text_of(element: SnippetElement) -> str:
    """Return the literal text reachable from the element."""
    if isinstance(element, Text):
        return element.value
    if isinstance(element, Placeholder):
        return "".join(text_of(child) for child in element.children)
    return ""


def length_of(element: SnippetElement) -> int:
    if isinstance(element, Text):
        return len(element.value)
    if isinstance(element, Placeholder):
        return sum(length_of(child) for child in element.children)
    return 0


def to_string(element: SnippetElement) -> str:
    if isinstance(element, Text):
        return element.value
    if isinstance(element, Placeholder):
        children = "".join(to_string(child) for child in element.children)
        return f"${{{element.index}:{children}}}"
    return f"${element.index}"


def elements_tabs(elements: Iterable[SnippetElement], start: int) -> list[TabSpan]:
    """Compute `(index, (start, end))` spans of all stops in the flattened text.

    A placeholder is listed before the stops nested inside of it.
    """
    tabs: list[TabSpan] = []
    pos = start
    for element in elements:
        if isinstance(element, Text):
            pos += len(element.value)
        elif isinstance(element, Placeholder):
            end = pos + sum(length_of(child) for child in element.children)
            tabs.append((element.index, (pos, end)))
            tabs.extend(elements_tabs(element.children, pos))
            pos = end
        else:
            tabs.append((element.index, (pos, pos)))
    return tabs


def escape_text(text: str, nested: bool = False) -> str:
    """Escape literal text so that the parser reads it back unchanged.

    `nested` selects the escaping used inside of a placeholder default.
    """
    escapes = PLACEHOLDER_ESCAPES if nested else TOP_LEVEL_ESCAPES + TOP_LEVEL_LOOSE_ESCAPES
    return "".join(f"\\{c}" if c in escapes else c for c in text)


@dataclass(frozen=True)
class Snippet:
    elements: tuple[SnippetElement, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", tuple(self.elements))

    @classmethod
    def parse(cls, template: str) -> Snippet:
        elements, end = _extract_elements(
            template, 0, TOP_LEVEL_ESCAPES, TOP_LEVEL_LOOSE_ESCAPES
        )
        if end < len(template):
            log.debug(f"[SNIPPET] Dropping unparsed input {template[end:]!r}")
        return cls(tuple(elements))

    def text(self) -> str:
        return "".join(text_of(element) for element in self.elements)

    def tabs(self, start: int = 0) -> list[TabSpan]:
        return elements_tabs(self.elements, start)

    def __len__(self) -> int:
        return sum(length_of(element) for element in self.elements)

    def is_empty(self) -> bool:
        return len(self) == 0

    def __str__(self) -> str:
        return "".join(to_string(element) for element in self.elements)


def parse(template: str) -> Snippet:
    """Parse a snippet template, see `Snippet.parse`."""
    return Snippet.parse(template)


def _extract_elements(
    s: str, pos: int, escapes: tuple[str, ...], loose_escapes: tuple[str, ...]
) -> tuple[list[SnippetElement], int]:
    elements: list[SnippetElement] = []
    while pos < len(s):
        res = (
            _extract_tabstop(s, pos)
            or _extract_placeholder(s, pos)
            or _extract_text(s, pos, escapes, loose_escapes)
        )
        if res is None:
            break
        element, pos = res
        elements.append(element)
    return elements, pos


def _extract_tabstop(s: str, pos: int) -> tuple[Tabstop, int] | None:
    for regexp in TABSTOP_REGEXPS:
        match = regexp.match(s, pos)
        if match:
            return Tabstop(int(match.group(1))), match.end()
    return None


def _extract_placeholder(s: str, pos: int) -> tuple[Placeholder, int] | None:
    match = PLACEHOLDER_REGEXP.match(s, pos)
    if match is None:
        return None

    index = int(match.group(1))
    if not match.group(2):
        return Placeholder(index, (Text(""),)), match.end()

    # The nested parse runs on the whole string, the lazy match only tells
    # where the default text begins
    children, end = _extract_elements(s, match.start(2), PLACEHOLDER_ESCAPES, ())
    return Placeholder(index, tuple(children)), end + 1


def _extract_text(
    s: str, pos: int, escapes: tuple[str, ...], loose_escapes: tuple[str, ...]
) -> tuple[Text, int] | None:
    all_escapes = escapes + loose_escapes
    chars: list[str] = []
    end = pos
    while end < len(s):
        if s[end] == "\\" and end + 1 < len(s) and s[end + 1] in all_escapes:
            chars.append(s[end + 1])
            end += 2
            continue
        if s[end] in escapes:
            break
        chars.append(s[end])
        end += 1

    if not chars:
        return None
    return Text("".join(chars)), end
