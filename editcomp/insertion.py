from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field

import lsprotocol.types as lsp_types

from editcomp.snippet import Snippet
from editcomp.snippet import TabSpan

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Insertion:
    """Text to put in the buffer for an accepted completion item."""

    text: str

    # Tab stops of a snippet, as absolute buffer offsets
    tabs: list[TabSpan] = field(default_factory=list)


def item_new_text(item: lsp_types.CompletionItem) -> str:
    """Return the raw text the item inserts, following the LSP precedence."""
    if item.text_edit is not None:
        return item.text_edit.new_text
    return item.insert_text or item.label


def insertion_for_item(
    item: lsp_types.CompletionItem, offset: int = 0, snippet_support: bool = True
) -> Insertion:
    """Expand the completion `item` inserted at buffer `offset`."""
    text = item_new_text(item)
    if not snippet_support or item.insert_text_format != lsp_types.InsertTextFormat.Snippet:
        return Insertion(text)

    snippet = Snippet.parse(text)
    log.debug(f'[INSERTION] Expanded snippet "{text}" of item "{item.label}"')
    return Insertion(snippet.text(), snippet.tabs(offset))
