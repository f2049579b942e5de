"""Startup registration of plugins provided by importable modules."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .plugin_registry import PluginRegistry

if TYPE_CHECKING:
    from scenario_runner.scenario_discovery.suite_discovery import SuiteLoader
    from scenario_runner.scenario_execution.query_target import QueryTarget

_LOGGER = logging.getLogger(__name__)

REGISTRATION_FUNCTION = "register_plugins"


class PluginModuleError(Exception):
    """Raised when a plugin module cannot be imported or registered."""


@dataclass
class RunnerSetup:
    """Everything a plugin module may contribute to the runs of this process."""

    plugins: PluginRegistry = field(default_factory=PluginRegistry)
    target: QueryTarget | None = None
    suite_loader: SuiteLoader | None = None


def load_plugin_modules(module_names: Iterable[str], setup: RunnerSetup) -> RunnerSetup:
    """Import each module and call its ``register_plugins(setup)`` function."""
    for module_name in module_names:
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise PluginModuleError(f"Cannot import plugin module '{module_name}': {exc}") from exc
        register = getattr(module, REGISTRATION_FUNCTION, None)
        if not callable(register):
            raise PluginModuleError(
                f"Plugin module '{module_name}' does not define {REGISTRATION_FUNCTION}(setup)."
            )
        register(setup)
        _LOGGER.info("Plugin module %s registered.", module_name)
    return setup
