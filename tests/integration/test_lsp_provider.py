# type: ignore

import asyncio

import lsprotocol.types as lsp_types
import pytest
from pytest_mock import MockerFixture

from editcomp.completer import Completer
from editcomp.providers import LspCompletionProvider

URI = "file:///tmp/example.py"


@pytest.fixture
def client(mocker: MockerFixture):
    res = mocker.MagicMock()
    res.text_document_completion_async = mocker.AsyncMock(
        return_value=lsp_types.CompletionList(
            is_incomplete=False,
            items=[
                lsp_types.CompletionItem(label="print"),
                lsp_types.CompletionItem(label="property"),
            ],
        )
    )
    return res


@pytest.mark.asyncio
async def test_request_forwards_to_server(client):
    provider = LspCompletionProvider(client, asyncio.get_running_loop())
    provider.open_buffer(1, URI)
    position = lsp_types.Position(line=2, character=3)

    results = []
    await asyncio.wrap_future(provider.request(7, 1, position, results.append))

    (params,) = client.text_document_completion_async.await_args.args
    assert params.text_document.uri == URI
    assert params.position == position
    (result,) = results
    assert [item.label for item in result.items] == ["print", "property"]


@pytest.mark.asyncio
async def test_failure_is_passed_to_callback(client):
    client.text_document_completion_async.side_effect = RuntimeError("server crashed")
    provider = LspCompletionProvider(client, asyncio.get_running_loop())
    provider.open_buffer(1, URI)

    results = []
    await asyncio.wrap_future(
        provider.request(1, 1, lsp_types.Position(line=0, character=0), results.append)
    )
    (error,) = results
    assert isinstance(error, RuntimeError)


@pytest.mark.asyncio
async def test_completer_with_lsp_provider(client, plugin_manager):
    provider = LspCompletionProvider(client, asyncio.get_running_loop())
    provider.open_buffer("main.py", URI)
    plugin_manager.register(provider, name="lsp")
    completer = Completer(plugin_manager)

    # Unknown buffers are left to other providers
    completer.trigger("other.py", lsp_types.Position(line=0, character=0))
    client.text_document_completion_async.assert_not_called()

    completer.trigger("main.py", lsp_types.Position(line=0, character=2))
    completer.update_input("pro")

    for _ in range(100):
        if completer.process_messages():
            break
        await asyncio.sleep(0.01)

    assert [scored.label for scored in completer.current_items()] == ["property"]
    assert completer.current_items()[0].indices == (0, 1, 2)


@pytest.mark.asyncio
async def test_close_buffer(client):
    provider = LspCompletionProvider(client, asyncio.get_running_loop())
    provider.open_buffer(1, URI)
    provider.close_buffer(1)
    provider.close_buffer(1)

    assert (
        provider.editcomp_request_completion(
            request_id=1,
            buffer_id=1,
            position=lsp_types.Position(line=0, character=0),
            callback=lambda result: None,
        )
        is None
    )


@pytest.mark.asyncio
async def test_stop(client, mocker: MockerFixture):
    client.shutdown_async = mocker.AsyncMock(side_effect=RuntimeError("already gone"))
    client.stop = mocker.AsyncMock()
    provider = LspCompletionProvider(client, asyncio.get_running_loop())

    await provider.stop()
    client.stop.assert_awaited_once()
