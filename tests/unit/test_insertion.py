# type: ignore

import lsprotocol.types as lsp_types
import pytest

from editcomp.insertion import Insertion
from editcomp.insertion import insertion_for_item
from editcomp.insertion import item_new_text

RANGE = lsp_types.Range(
    start=lsp_types.Position(line=0, character=0),
    end=lsp_types.Position(line=0, character=2),
)


@pytest.mark.parametrize(
    "item, text",
    (
        (lsp_types.CompletionItem(label="label"), "label"),
        (lsp_types.CompletionItem(label="label", insert_text="insert"), "insert"),
        (
            lsp_types.CompletionItem(
                label="label",
                insert_text="insert",
                text_edit=lsp_types.TextEdit(range=RANGE, new_text="edit"),
            ),
            "edit",
        ),
    ),
)
def test_item_new_text(item, text):
    assert item_new_text(item) == text


def test_plain_text_is_not_expanded():
    item = lsp_types.CompletionItem(label="f", insert_text="f(${1:x})")
    assert insertion_for_item(item, offset=3) == Insertion("f(${1:x})")


def test_snippet_is_expanded():
    item = lsp_types.CompletionItem(
        label="for",
        insert_text="for ${1:i} in ${2:range}:\n\t$0",
        insert_text_format=lsp_types.InsertTextFormat.Snippet,
    )
    insertion = insertion_for_item(item, offset=10)
    assert insertion.text == "for i in range:\n\t"
    assert insertion.tabs == [(1, (14, 15)), (2, (19, 24)), (0, (27, 27))]


def test_snippet_support_disabled():
    item = lsp_types.CompletionItem(
        label="f",
        insert_text="f($1)",
        insert_text_format=lsp_types.InsertTextFormat.Snippet,
    )
    assert insertion_for_item(item, snippet_support=False) == Insertion("f($1)")
