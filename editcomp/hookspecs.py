# pylint: disable=unused-argument

"""
Declaration of the available hooks for editcomp.

Completion providers answer `editcomp_request_completion`, the host editor
listens on the notification hooks to re-layout and scroll the completion list.

WARNING: Declared API is unstable and is likely to change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any
from typing import Callable
from typing import Union

import lsprotocol.types as lsp_types
import pluggy

from editcomp.fuzzy import FuzzyScorer

if TYPE_CHECKING:
    from editcomp.completer import Completer

hookspec = pluggy.HookspecMarker("editcomp")

# Raw provider result, decoded by the completer before it reaches the state
CompletionResult = Union[
    lsp_types.CompletionList, list, dict, None, BaseException
]
CompletionCallback = Callable[[CompletionResult], None]


@hookspec(firstresult=True)
def editcomp_fuzzy_scorer() -> FuzzyScorer:  # type: ignore
    ...


@hookspec(firstresult=True)
def editcomp_request_completion(
    request_id: int,
    buffer_id: Any,
    position: lsp_types.Position,
    callback: CompletionCallback,
) -> bool | None:
    """Dispatch a completion request without blocking.

    Return `True` when the request was accepted, the `callback` must then be
    invoked exactly once, from any thread. Return `None` to let another
    provider handle the buffer.
    """


@hookspec
def editcomp_completion_changed(completer: Completer) -> None:
    """The displayed completion list, input or status changed."""


@hookspec
def editcomp_selection_changed(completer: Completer, index: int) -> None:
    """The selected row changed."""
