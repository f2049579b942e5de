"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from scenario_runner.configuration import (
    DEFAULT_CONFIG_FILENAME,
    Configuration,
    ConfigurationError,
    load_properties_file,
    write_placeholder_configuration,
)
from scenario_runner.plugins import PluginModuleError, RunnerSetup, load_plugin_modules
from scenario_runner.results import ResultsWorkbookWriter, SummaryTextWriter
from scenario_runner.run_execution import RunOrchestrator

_LOGGER = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="scenario-runner")
def cli() -> None:
    """Run file-defined query test scenarios against a target system."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the base configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder base configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(
    name="run",
    context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
)
@click.option(
    "-f",
    "--file",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Path to file with default properties",
)
@click.option(
    "-P",
    "properties",
    multiple=True,
    metavar="KEY=VALUE",
    help="Define property to add or override (e.g. -Pmy.prop=value1)",
)
@click.option(
    "--plugin",
    "plugin_modules",
    multiple=True,
    metavar="MODULE",
    help="Importable module defining register_plugins(setup)",
)
@click.option(
    "--log-level",
    default="INFO",
    show_default=True,
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    help="Logging threshold",
)
@click.pass_context
def run_scenarios(
    ctx: click.Context,
    config_path: str | None,
    properties: tuple[str, ...],
    plugin_modules: tuple[str, ...],
    log_level: str,
) -> None:
    """Execute every scenario selected by the configuration."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if ctx.args:
        _LOGGER.debug("Ignoring unknown arguments: %s", " ".join(ctx.args))
    try:
        configuration = build_run_configuration(config_path, properties)
        setup = load_plugin_modules(plugin_modules, build_default_setup())
        orchestrator = RunOrchestrator(
            configuration,
            plugins=setup.plugins,
            target=setup.target,
            suite_loader=setup.suite_loader,
        )
        result = orchestrator.start(synchronous=True).result()
    except (ConfigurationError, PluginModuleError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(
        f"scenarios={result.scenario_count} skipped_scenarios={result.skipped_scenarios} "
        f"queries={result.total} passed={result.passed} failed={result.failed} "
        f"skipped={result.skipped}"
    )


def build_run_configuration(
    config_path: str | None, properties: tuple[str, ...]
) -> Configuration:
    """Layer ``-P`` overrides on top of the optional base configuration file."""
    base = load_properties_file(config_path) if config_path else Configuration()
    overrides: dict[str, str] = {}
    for definition in properties:
        key, separator, value = definition.partition("=")
        if not separator or not key:
            _LOGGER.warning("Ignoring property definition without '=': %s", definition)
            continue
        overrides[key] = value
    return base.with_overrides(overrides)


def build_default_setup() -> RunnerSetup:
    """Return a setup with the bundled results writers registered."""
    setup = RunnerSetup()
    setup.plugins.register_results_writer(SummaryTextWriter)
    setup.plugins.register_results_writer(ResultsWorkbookWriter)
    return setup


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
