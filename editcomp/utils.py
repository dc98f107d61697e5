from __future__ import annotations

import argparse
import logging
import os
import sys

from editcomp.version import __version__

log = logging.getLogger(__name__)


def create_options_parser() -> argparse.ArgumentParser:
    """Create argparse parser object."""
    parser = argparse.ArgumentParser(description="Snippet parsing and completion ranking tools")
    parser.add_argument("-v", "--verbose", action="count", help="verbosity level", default=0)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    snippet_parser = subparsers.add_parser("snippet", help="parse a snippet template")
    snippet_parser.add_argument("template", help="snippet template, e.g. 'foo(${1:arg})$0'")
    snippet_parser.add_argument(
        "--offset", type=int, default=0, help="offset of the insertion in the buffer"
    )

    rank_parser = subparsers.add_parser("rank", help="rank completion items against an input")
    rank_parser.add_argument("file", help="JSON file with a completion list or an item list")
    rank_parser.add_argument("input", help="filter text typed by the user")
    rank_parser.add_argument("--config", help="JSON file with the editcomp configuration")
    rank_parser.add_argument(
        "--select", type=int, default=0, help="number of rows to move the selection down"
    )
    return parser


def setup_logging() -> None:
    """Setup the default application logging."""
    # Configure the application logging
    root_logger = logging.getLogger()

    # Remove old handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    log_format = "[{asctime}] [{name:>15}:{lineno:<3}] [{levelname:.4}] -- {message}"

    # Default logging is to stderr
    stream_logging_handler = logging.StreamHandler(stream=sys.stderr)
    stream_logging_handler.setFormatter(logging.Formatter(log_format, style="{"))
    root_logger.addHandler(stream_logging_handler)

    log_file = os.environ.get("EDITCOMP_LOG_FILE")
    if log_file:
        file_logging_handler = logging.FileHandler(log_file)
        file_logging_handler.setFormatter(logging.Formatter(log_format, style="{"))
        root_logger.addHandler(file_logging_handler)


def set_logging_level(verbose_count: int) -> None:
    """Set the logging level based on the number of -v options on command line."""
    log_levels = [logging.WARNING, logging.INFO, logging.DEBUG]
    log_level = log_levels[min(verbose_count, len(log_levels) - 1)]
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
