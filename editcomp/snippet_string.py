from __future__ import annotations

from editcomp.snippet import Snippet
from editcomp.snippet import escape_text


class SnippetString:
    """Incremental builder of snippet templates with auto-numbered stops."""

    cur_idx: int
    value: str

    def __init__(self, value: str = ""):
        self.value = value
        self.cur_idx = 1

    def append_placeholder(self, value: str) -> None:
        """Append a placeholder, `value` is raw template text and can contain nested stops."""
        self.value += f"${{{self.get_and_inc()}:{value}}}"

    def append_text_placeholder(self, value: str) -> None:
        """Append a placeholder whose default is the literal `value`."""
        self.append_placeholder(escape_text(value, nested=True))

    def append_tabstop(self) -> None:
        self.value += f"${self.get_and_inc()}"

    def append_final_tabstop(self) -> None:
        self.value += "$0"

    def append_text(self, value: str) -> None:
        self.value += escape_text(value)

    def get_and_inc(self) -> int:
        i = self.cur_idx
        self.cur_idx += 1
        return i

    def to_snippet(self) -> Snippet:
        return Snippet.parse(self.value)

    def __str__(self) -> str:
        return self.value
