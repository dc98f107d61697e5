from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from dataclasses import replace
from typing import Any
from typing import Iterable

import lsprotocol.types as lsp_types

from editcomp.fuzzy import FuzzyScorer

log = logging.getLogger(__name__)


class CompletionStatus(enum.Enum):
    Inactive = "inactive"
    Started = "started"


@dataclass(frozen=True)
class ScoredCompletionItem:
    item: lsp_types.CompletionItem
    score: int = 0
    label_score: int = 0
    indices: tuple[int, ...] = ()

    @property
    def label(self) -> str:
        return self.item.label

    def filter_text(self) -> str:
        return self.item.filter_text if self.item.filter_text is not None else self.item.label


ScoredItems = tuple[ScoredCompletionItem, ...]

EMPTY: ScoredItems = ()


def sort_key(scored: ScoredCompletionItem) -> tuple[int, int, int]:
    """Best score first, then best label score, then the shortest label."""
    return (-scored.score, -scored.label_score, len(scored.label))


class CompletionState:
    """State of a single completion session in the editor.

    Owned by one writer (the editor control thread), other parties only read
    the immutable tuples exposed by `current_items()`.
    """

    def __init__(self, scorer: FuzzyScorer, wrap_around: bool = True):
        self.scorer = scorer
        self.wrap_around = wrap_around

        self.request_id = 0
        self.status = CompletionStatus.Inactive
        self.buffer_id: Any = None
        self.position: lsp_types.Position | None = None
        self.input = ""
        self.index = 0

        # Responses keyed by the input the request was made with
        self.input_items: dict[str, ScoredItems] = {}
        self.filtered_items: ScoredItems = EMPTY

    def __len__(self) -> int:
        return len(self.current_items())

    def is_empty(self) -> bool:
        return len(self) == 0

    def is_active(self) -> bool:
        return self.status != CompletionStatus.Inactive

    def start(self, request_id: int, buffer_id: Any, position: lsp_types.Position) -> None:
        """Begin (or re-request) a completion at the given buffer position."""
        if self.is_active() and (self.buffer_id, self.position) != (buffer_id, position):
            log.debug(
                f"[COMPLETION] Request {self.request_id} superseded by {request_id} at a new position"
            )
            self.input_items = {}
            self.filtered_items = EMPTY
            self.index = 0

        self.request_id = request_id
        self.status = CompletionStatus.Started
        self.buffer_id = buffer_id
        self.position = position

    def cancel(self) -> None:
        if self.status == CompletionStatus.Inactive:
            return
        self.status = CompletionStatus.Inactive
        self.input = ""
        self.input_items = {}
        self.filtered_items = EMPTY
        self.index = 0

    def update_input(self, text: str) -> None:
        self.input = text
        self.index = 0
        if self.status == CompletionStatus.Inactive:
            return
        self.filter_items()

    def receive(
        self, request_id: int, text: str, items: Iterable[lsp_types.CompletionItem]
    ) -> bool:
        """Store the response made for input `text`, return `False` when it was discarded."""
        if self.status == CompletionStatus.Inactive or self.request_id != request_id:
            log.debug(
                f"[COMPLETION] Discarding response {request_id} (current {self.request_id}, {self.status})"
            )
            return False

        self.input_items[text] = tuple(ScoredCompletionItem(item) for item in items)
        log.debug(
            f'[COMPLETION] Stored {len(self.input_items[text])} items of request {request_id} for "{text}"'
        )
        self.filter_items()
        return True

    def next(self) -> None:
        self.index = self._move(1)

    def previous(self) -> None:
        self.index = self._move(-1)

    def _move(self, step: int) -> int:
        length = len(self)
        if length == 0:
            return self.index
        if self.wrap_around:
            return (self.index + step) % length
        return min(max(self.index + step, 0), length - 1)

    def all_items(self) -> ScoredItems:
        """Unfiltered pool, the response for the current input or the initial one."""
        items = self.input_items.get(self.input)
        if items is None:
            items = self.input_items.get("", EMPTY)
        return items

    def current_items(self) -> ScoredItems:
        if not self.input:
            return self.all_items()
        return self.filtered_items

    def current_item(self) -> lsp_types.CompletionItem:
        return self.current_items()[self.index].item

    def current_label(self) -> str:
        return self.current_items()[self.index].label

    def filter_items(self) -> None:
        """Rank the whole pool against the current input."""
        if not self.input:
            return

        items = []
        for scored in self.all_items():
            filter_text = scored.filter_text()
            shift = scored.label.find(filter_text)
            if shift == -1:
                continue

            res = self.scorer.fuzzy_indices(filter_text, self.input)
            if res is None:
                continue
            score, indices = res

            label_score = score
            label_res = self.scorer.fuzzy_indices(scored.label, self.input)
            if label_res is not None:
                label_score = label_res[0]

            items.append(
                replace(
                    scored,
                    score=score,
                    label_score=label_score,
                    indices=tuple(i + shift for i in indices),
                )
            )

        items.sort(key=sort_key)
        self.filtered_items = tuple(items)
        log.debug(f'[COMPLETION] {len(items)} items match "{self.input}"')
