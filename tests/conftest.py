from __future__ import annotations

import logging
from typing import Callable

import lsprotocol.types as lsp_types
import pytest
from pluggy import PluginManager

from editcomp import hookimpl
from editcomp.completer import Completer
from editcomp.plugin_manager_provider import get_plugin_manager

# Enable logging, so that when the test fails they can be inspected
logging.getLogger().setLevel(logging.DEBUG)


class RecordingProvider:
    """Provider keeping the callbacks, so that tests decide when to answer."""

    def __init__(self) -> None:
        self.requests: dict[int, Callable] = {}

    @hookimpl
    def editcomp_request_completion(self, request_id, buffer_id, position, callback):
        self.requests[request_id] = callback
        return True

    def answer(self, request_id: int, labels: list[str]) -> None:
        self.requests[request_id](
            lsp_types.CompletionList(
                is_incomplete=False,
                items=[lsp_types.CompletionItem(label=label) for label in labels],
            )
        )


@pytest.fixture
def plugin_manager() -> PluginManager:
    return get_plugin_manager()


@pytest.fixture
def provider(plugin_manager: PluginManager) -> RecordingProvider:
    recording = RecordingProvider()
    plugin_manager.register(recording, name="recording")
    return recording


@pytest.fixture
def completer(plugin_manager: PluginManager, provider: RecordingProvider) -> Completer:
    return Completer(plugin_manager)


@pytest.fixture
def position() -> lsp_types.Position:
    return lsp_types.Position(line=3, character=7)


@pytest.fixture
def items() -> Callable[..., list[lsp_types.CompletionItem]]:
    def _items(*labels: str) -> list[lsp_types.CompletionItem]:
        return [lsp_types.CompletionItem(label=label) for label in labels]

    return _items
