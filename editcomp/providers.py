"""
Completion providers.

Providers are plugins implementing the `editcomp_request_completion` hook:
- `StaticCompletionProvider` answers every request with a fixed item list
- `LspCompletionProvider` forwards requests to a language server
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import logging
from pathlib import Path
from typing import Any
from typing import Iterable

import lsprotocol.types as lsp_types
from pygls.lsp.client import LanguageClient

from editcomp import hookimpl
from editcomp.completer import converter
from editcomp.hookspecs import CompletionCallback
from editcomp.version import __version__

log = logging.getLogger(__name__)


class StaticCompletionProvider:
    """Answer all requests synchronously with the same items."""

    def __init__(self, items: Iterable[lsp_types.CompletionItem]):
        self.items = list(items)

    @classmethod
    def from_json(cls, path: str | Path) -> StaticCompletionProvider:
        """Load items from a JSON completion list or a JSON item list."""
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)

        if isinstance(payload, dict):
            payload = payload.get("items", [])
        items = converter.structure(payload, list[lsp_types.CompletionItem])
        log.debug(f'[PROVIDER] Loaded {len(items)} completion items from "{path}"')
        return cls(items)

    @hookimpl
    def editcomp_request_completion(
        self,
        request_id: int,
        callback: CompletionCallback,
    ) -> bool:
        log.debug(f"[PROVIDER] Answering request {request_id} with {len(self.items)} items")
        callback(lsp_types.CompletionList(is_incomplete=False, items=list(self.items)))
        return True


class LspCompletionProvider:
    """Forward completion requests to a language server.

    Requests are scheduled on `loop` (the loop the client runs on) and may be
    made from any thread. Only buffers registered with `open_buffer` are
    handled, requests for other buffers are left to other providers.
    """

    def __init__(self, client: LanguageClient, loop: asyncio.AbstractEventLoop):
        self.client = client
        self.loop = loop
        self.documents: dict[Any, str] = {}

    @classmethod
    async def start(
        cls, command: list[str], root_uri: str | None = None
    ) -> LspCompletionProvider:
        """Spawn the language server `command` and initialize it."""
        log.info(f"[PROVIDER] Starting language server {command}")
        client = LanguageClient("editcomp", __version__)
        await client.start_io(*command)

        result = await client.initialize_async(
            lsp_types.InitializeParams(
                capabilities=lsp_types.ClientCapabilities(
                    text_document=lsp_types.TextDocumentClientCapabilities(
                        completion=lsp_types.CompletionClientCapabilities(
                            completion_item=lsp_types.ClientCompletionItemOptions(
                                snippet_support=True,
                            ),
                        ),
                    ),
                ),
                root_uri=root_uri,
            )
        )
        log.info(f"[PROVIDER] Language server initialized: {result.server_info}")
        client.initialized(lsp_types.InitializedParams())

        return cls(client, asyncio.get_running_loop())

    async def stop(self) -> None:
        """Shut the language server down."""
        try:
            await self.client.shutdown_async(None)
            self.client.exit(None)
        except Exception as e:  # pylint: disable=broad-except
            log.debug(f"[PROVIDER] Error during language server shutdown: {e}")
        await self.client.stop()

    def open_buffer(self, buffer_id: Any, uri: str) -> None:
        self.documents[buffer_id] = uri

    def close_buffer(self, buffer_id: Any) -> None:
        self.documents.pop(buffer_id, None)

    def request(
        self,
        request_id: int,
        buffer_id: Any,
        position: lsp_types.Position,
        callback: CompletionCallback,
    ) -> concurrent.futures.Future[None]:
        """Schedule the request on the client loop, `callback` gets the result."""
        uri = self.documents[buffer_id]
        log.debug(f'[PROVIDER] Sending request {request_id} for "{uri}" at {position}')
        return asyncio.run_coroutine_threadsafe(
            self._complete(request_id, uri, position, callback), self.loop
        )

    async def _complete(
        self,
        request_id: int,
        uri: str,
        position: lsp_types.Position,
        callback: CompletionCallback,
    ) -> None:
        try:
            result = await self.client.text_document_completion_async(
                lsp_types.CompletionParams(
                    text_document=lsp_types.TextDocumentIdentifier(uri=uri),
                    position=position,
                )
            )
        except Exception as e:  # pylint: disable=broad-except
            log.error(f"[PROVIDER] Request {request_id} failed: {e}")
            callback(e)
            return

        callback(result)

    @hookimpl
    def editcomp_request_completion(
        self,
        request_id: int,
        buffer_id: Any,
        position: lsp_types.Position,
        callback: CompletionCallback,
    ) -> bool | None:
        if buffer_id not in self.documents:
            return None
        self.request(request_id, buffer_id, position, callback)
        return True
