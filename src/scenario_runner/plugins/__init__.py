"""Plugin domain exports."""

from .extension_points import NoneResultMode, ResultMode, ResultsWriter, ScenarioSetUp
from .plugin_modules import PluginModuleError, RunnerSetup, load_plugin_modules
from .plugin_registry import PluginRegistry

__all__ = [
    "NoneResultMode",
    "PluginModuleError",
    "PluginRegistry",
    "ResultMode",
    "ResultsWriter",
    "RunnerSetup",
    "ScenarioSetUp",
    "load_plugin_modules",
]
