"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import load_properties_file, parse_properties_text
from .property_layers import (
    Configuration,
    ConfigurationError,
    PlaceholderResolutionError,
    merge_configurations,
)
from .runtime_settings import RunSettings

__all__ = [
    "Configuration",
    "ConfigurationError",
    "PlaceholderResolutionError",
    "RunSettings",
    "merge_configurations",
    "load_properties_file",
    "parse_properties_text",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
