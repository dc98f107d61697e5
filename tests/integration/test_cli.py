# type: ignore

import json

import pytest
from pytest_mock import MockerFixture

from editcomp import cli


@pytest.fixture(autouse=True)
def keep_logging(mocker: MockerFixture):
    mocker.patch("editcomp.utils.setup_logging")
    mocker.patch("editcomp.utils.set_logging_level")


@pytest.fixture
def items_file(tmp_path):
    path = tmp_path / "items.json"
    path.write_text(
        json.dumps(
            {
                "isIncomplete": False,
                "items": [
                    {"label": "format"},
                    {"label": "for", "insertText": "for ${1:i} in ${2:range}:$0", "insertTextFormat": 2},
                    {"label": "xfxoxrxm"},
                    {"label": "bar"},
                ],
            }
        )
    )
    return path


def test_highlight_label():
    assert cli.highlight_label("format", [0, 2]) == "[f]o[r]mat"
    assert cli.highlight_label("abc", [], "<", ">") == "abc"


def test_snippet(capsys):
    assert cli.main(["snippet", "f(${1:x}, $2)$0", "--offset", "4"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "text: 'f(x, )'",
        "canonical: 'f(${1:x}, $2)$0'",
        "tab 1: 6-7",
        "tab 2: 9-9",
        "tab 0: 10-10",
    ]


def test_rank(items_file, capsys):
    assert cli.main(["rank", str(items_file), "for"]) == 0
    lines = capsys.readouterr().out.splitlines()

    assert lines[0].startswith(">")
    assert lines[0].endswith("[f][o][r]")
    assert lines[1].endswith("[f][o][r]mat")
    assert lines[2].endswith("x[f]x[o]x[r]xm")
    assert lines[3] == "insert: 'for i in range:'"
    assert lines[4:] == ["tab 1: 4-5", "tab 2: 9-14", "tab 0: 15-15"]


def test_rank_select(items_file, capsys):
    assert cli.main(["rank", str(items_file), "for", "--select", "1"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[1].startswith(">")
    assert lines[3] == "insert: 'format'"


def test_rank_without_snippet_support(items_file, tmp_path, capsys):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"snippetSupport": False}))
    assert cli.main(["rank", str(items_file), "for", "--config", str(config)]) == 0
    assert "insert: 'for ${1:i} in ${2:range}:$0'" in capsys.readouterr().out


def test_rank_no_match(items_file, capsys):
    assert cli.main(["rank", str(items_file), "zzz"]) == 1
    assert capsys.readouterr().out == 'No completion matches "zzz"\n'
