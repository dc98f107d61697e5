from __future__ import annotations

import argparse
import json
import logging
from typing import Sequence

import lsprotocol.types as lsp_types

from editcomp import utils
from editcomp.completer import Completer
from editcomp.config import CompletionConfig
from editcomp.insertion import insertion_for_item
from editcomp.plugin_manager_provider import get_plugin_manager
from editcomp.providers import StaticCompletionProvider
from editcomp.snippet import Snippet

log = logging.getLogger(__name__)


def highlight_label(label: str, indices: Sequence[int], start: str = "[", end: str = "]") -> str:
    """Wrap the matched characters of the label."""
    matched = set(indices)
    return "".join(f"{start}{c}{end}" if i in matched else c for i, c in enumerate(label))


def run_snippet(args: argparse.Namespace) -> int:
    snippet = Snippet.parse(args.template)
    print(f"text: {snippet.text()!r}")
    print(f"canonical: {str(snippet)!r}")
    for index, (start, end) in snippet.tabs(args.offset):
        print(f"tab {index}: {start}-{end}")
    return 0


def run_rank(args: argparse.Namespace) -> int:
    config = CompletionConfig()
    if args.config:
        with open(args.config, encoding="utf-8") as f:
            config = CompletionConfig.from_dict(json.load(f))

    plugin_manager = get_plugin_manager()
    plugin_manager.register(StaticCompletionProvider.from_json(args.file), name="static")

    completer = Completer(plugin_manager, config)
    completer.trigger(buffer_id=args.file, position=lsp_types.Position(line=0, character=0))
    completer.process_messages()
    completer.update_input(args.input)

    if completer.is_empty():
        print(f'No completion matches "{args.input}"')
        return 1

    for _ in range(args.select):
        completer.next()

    for row, scored in enumerate(completer.current_items()):
        marker = ">" if row == completer.index else " "
        print(
            f"{marker} {scored.score:>5} {scored.label_score:>5} {highlight_label(scored.label, scored.indices)}"
        )

    insertion = insertion_for_item(completer.current_item(), snippet_support=config.snippet_support)
    print(f"insert: {insertion.text!r}")
    for index, (start, end) in insertion.tabs:
        print(f"tab {index}: {start}-{end}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = utils.create_options_parser().parse_args(argv)

    utils.setup_logging()
    utils.set_logging_level(args.verbose)
    log.debug(f"[CLI] Running {args.command} with {args}")

    if args.command == "snippet":
        return run_snippet(args)
    return run_rank(args)


if __name__ == "__main__":
    raise SystemExit(main())
