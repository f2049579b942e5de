"""Scenario discovery domain exports."""

from .naming import strip_extension
from .scenario_source import ScenarioRequest, ScenarioSource
from .suite_discovery import SuiteDiscoveryError, SuiteLoader, discover_suites
from .xml_suite_loader import SuiteDefinitionError, XmlSuiteLoader

__all__ = [
    "ScenarioRequest",
    "ScenarioSource",
    "SuiteDefinitionError",
    "SuiteDiscoveryError",
    "SuiteLoader",
    "XmlSuiteLoader",
    "discover_suites",
    "strip_extension",
]
