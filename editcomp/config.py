from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

log = logging.getLogger(__name__)

# Name of the configuration section requested from the editor
CONFIG_SECTION = "editcomp"


@dataclass
class CompletionConfig:
    # Selection moves from the last row to the first one and back
    wrap_around: bool = True

    # Expand snippet formatted completion items on insertion
    snippet_support: bool = True

    @classmethod
    def from_dict(cls, config: dict[str, Any] | None = None) -> CompletionConfig:
        """Create the configuration from the editor `editcomp` section."""

        # Default is empty config
        config = config or {}

        res = cls(
            wrap_around=bool(config.get("wrapAround", True)),
            snippet_support=bool(config.get("snippetSupport", True)),
        )
        log.debug(f"[CONFIG] Loaded {res}")
        return res
