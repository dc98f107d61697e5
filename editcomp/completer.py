from __future__ import annotations

import contextlib
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any
from typing import Iterator

import lsprotocol.types as lsp_types
from lsprotocol.converters import get_converter
from pluggy import PluginManager

from editcomp.completion import CompletionState
from editcomp.completion import CompletionStatus
from editcomp.completion import ScoredItems
from editcomp.config import CompletionConfig
from editcomp.hookspecs import CompletionCallback
from editcomp.hookspecs import CompletionResult
from editcomp.plugin_manager_provider import PluginManagerProvider

log = logging.getLogger(__name__)

converter = get_converter()


@dataclass(frozen=True)
class CompletionMessage:
    """Decoded provider response, tagged with the request it answers."""

    request_id: int
    input: str
    items: list[lsp_types.CompletionItem]


def response_items(result: CompletionResult) -> list[lsp_types.CompletionItem] | None:
    """Extract the completion items from a provider result.

    Return `None` for failures and payloads which cannot be decoded.
    """
    if isinstance(result, BaseException):
        log.warning(f"[COMPLETION] Provider failed: {result!r}")
        return None
    if result is None:
        return []
    if isinstance(result, lsp_types.CompletionList):
        return list(result.items)
    if isinstance(result, list) and all(isinstance(i, lsp_types.CompletionItem) for i in result):
        return result

    # Raw JSON, either `{"items": [...], "isIncomplete": ...}` or a plain item list
    if isinstance(result, dict):
        result = result.get("items", [])

    try:
        if isinstance(result, list):
            return converter.structure(result, list[lsp_types.CompletionItem])
    except Exception as e:  # pylint: disable=broad-except
        log.warning(f"[COMPLETION] Cannot decode provider response: {e}")
        return None

    log.warning(f"[COMPLETION] Unexpected provider response type {type(result)}")
    return None


class Completer:
    """Completion controller driven by the host editor.

    All methods except the provider callbacks must be called from a single
    control thread. Responses travel through a mailbox, drained by
    `process_messages`, and are dropped unless they answer the current request.
    """

    def __init__(
        self,
        plugin_manager: PluginManager | None = None,
        config: CompletionConfig | None = None,
    ):
        self.pm = plugin_manager or PluginManagerProvider.instance()
        self.config = config or CompletionConfig()
        self.state = CompletionState(
            self.pm.hook.editcomp_fuzzy_scorer(), wrap_around=self.config.wrap_around
        )
        self.mailbox: queue.SimpleQueue[CompletionMessage] = queue.SimpleQueue()

    @property
    def request_id(self) -> int:
        return self.state.request_id

    @property
    def status(self) -> CompletionStatus:
        return self.state.status

    @property
    def input(self) -> str:
        return self.state.input

    @property
    def index(self) -> int:
        return self.state.index

    @property
    def filtered_items(self) -> ScoredItems:
        return self.state.filtered_items

    def __len__(self) -> int:
        return len(self.state)

    def is_empty(self) -> bool:
        return self.state.is_empty()

    def did_change_configuration(self, config: dict[str, Any] | None) -> None:
        """Apply a new `editcomp` configuration section."""
        self.config = CompletionConfig.from_dict(config)
        self.state.wrap_around = self.config.wrap_around

    def trigger(
        self, buffer_id: Any, position: lsp_types.Position, request_id: int | None = None
    ) -> int:
        """Start a completion at `position` and dispatch the request to a provider.

        Return the id of the new request, responses of all older requests are ignored.
        """
        if request_id is None:
            request_id = self.state.request_id + 1
        elif request_id <= self.state.request_id:
            raise ValueError(
                f"Request id {request_id} is not newer than the current {self.state.request_id}"
            )

        with self._notifying():
            self.state.start(request_id, buffer_id, position)

        log.debug(f"[COMPLETION] Requesting {request_id} for buffer {buffer_id} at {position}")
        accepted = self.pm.hook.editcomp_request_completion(
            request_id=request_id,
            buffer_id=buffer_id,
            position=position,
            callback=self._response_callback(request_id, self.state.input),
        )
        if not accepted:
            log.warning(f"[COMPLETION] No provider accepted request {request_id} for {buffer_id}")
        return request_id

    def _response_callback(self, request_id: int, text: str) -> CompletionCallback:
        lock = threading.Lock()
        called = False

        def callback(result: CompletionResult) -> None:
            nonlocal called
            with lock:
                if called:
                    log.warning(f"[COMPLETION] Ignoring repeated response to request {request_id}")
                    return
                called = True

            items = response_items(result)
            if items is not None:
                self.mailbox.put(CompletionMessage(request_id, text, items))

        return callback

    def process_messages(self) -> int:
        """Deliver the pending provider responses, return the number of accepted ones."""
        accepted = 0
        while True:
            try:
                message = self.mailbox.get_nowait()
            except queue.Empty:
                return accepted
            if self.receive(message.request_id, message.input, message.items):
                accepted += 1

    def receive(
        self, request_id: int, text: str, items: list[lsp_types.CompletionItem]
    ) -> bool:
        with self._notifying():
            return self.state.receive(request_id, text, items)

    def update_input(self, text: str) -> None:
        with self._notifying():
            self.state.update_input(text)

    def next(self) -> None:
        with self._notifying():
            self.state.next()

    def previous(self) -> None:
        with self._notifying():
            self.state.previous()

    def cancel(self) -> None:
        with self._notifying():
            self.state.cancel()

    def cancel_request(self, request_id: int) -> None:
        """Cancel the completion only when `request_id` is still the current request."""
        if self.state.request_id == request_id:
            self.cancel()

    def current_items(self) -> ScoredItems:
        return self.state.current_items()

    def current_item(self) -> lsp_types.CompletionItem:
        return self.state.current_item()

    def current_label(self) -> str:
        return self.state.current_label()

    @contextlib.contextmanager
    def _notifying(self) -> Iterator[None]:
        """Emit change notifications for mutations done inside the block."""
        state = self.state
        before = (state.status, state.input, state.request_id, state.current_items())
        index = state.index
        yield
        after = (state.status, state.input, state.request_id, state.current_items())
        if before[:3] != after[:3] or before[3] is not after[3]:
            self.pm.hook.editcomp_completion_changed(completer=self)
        if index != state.index:
            self.pm.hook.editcomp_selection_changed(completer=self, index=state.index)
