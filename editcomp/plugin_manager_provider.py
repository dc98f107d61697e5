from __future__ import annotations

import logging

from pluggy import PluginManager

from editcomp import hookimpl
from editcomp import hookspecs
from editcomp.fuzzy import FuzzyMatcher
from editcomp.fuzzy import FuzzyScorer

log = logging.getLogger(__name__)


def get_plugin_manager() -> PluginManager:
    """Construct new plugin manager instance."""
    log.info("Creating PluginManager")
    manager = PluginManager("editcomp")
    manager.add_hookspecs(hookspecs)
    manager.load_setuptools_entrypoints("editcomp")
    manager.register(EditcompCorePlugin(), name="core")
    log.info(f"\t{manager.list_name_plugin()=}")
    manager.trace.root.setwriter(log.debug)
    return manager


class PluginManagerProvider:
    """Singleton class providing the PluginManager object."""

    manager = None

    @classmethod
    def instance(cls) -> PluginManager:
        """Return singleton instance."""
        if cls.manager is None:
            cls.manager = get_plugin_manager()
        return cls.manager


class EditcompCorePlugin:
    @hookimpl(trylast=True)
    def editcomp_fuzzy_scorer(self) -> FuzzyScorer:
        return FuzzyMatcher()
