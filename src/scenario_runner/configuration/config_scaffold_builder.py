"""Base configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "scenario-runner.properties"

_CONFIG_SCAFFOLD_TEMPLATE = """# Base configuration template for scenario-runner.
# Replace every <REQUIRED> placeholder before running.
# Values may reference other keys or environment variables with ${key}.

# Scenario definition file, or a directory of *.properties scenario files.
scenario=<REQUIRED>
# Regular expressions matched against scenario names (file name without suffix).
scenarios.include=.*
scenarios.exclude=

# Suite definitions are read from ${artifacts.dir}/${query.set.dir}/${test.queries.dir}.
artifacts.dir=<REQUIRED>
query.set.dir=<REQUIRED>
test.queries.dir=<REQUIRED>
suite.suffix=.xml
suites.include=.*
suites.exclude=

# Directory receiving run.properties, run-result.yaml and writer output.
output.dir=<REQUIRED>

# Optional: registered result mode name and per-scenario time limit in seconds.
# result.mode=<OPTIONAL>
# scenario.max.time=<OPTIONAL>
"""


def build_placeholder_configuration() -> str:
    """Build a base configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder base configuration to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
