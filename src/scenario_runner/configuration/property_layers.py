"""Layered key/value configuration with placeholder resolution."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator, Mapping
from pathlib import Path

_LOGGER = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{([^${}]+)\}")
_TRUE_VALUES = frozenset({"true", "yes", "on", "1"})
_FALSE_VALUES = frozenset({"false", "no", "off", "0"})

DUMP_FILENAME = "run.properties"


class ConfigurationError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""


class PlaceholderResolutionError(ConfigurationError):
    """Raised when a placeholder cannot be resolved or forms a cycle."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Cannot resolve property '{key}': {reason}")
        self.key = key


class Configuration(Mapping[str, str]):
    """Ordered mapping of string keys to string values.

    Instances are never mutated; every derivation returns a new configuration,
    so a per-scenario layer cannot leak into the run it was derived from.
    """

    def __init__(self, values: Mapping[str, object] | None = None) -> None:
        self._values: dict[str, str] = {}
        for key, value in (values or {}).items():
            self._values[str(key)] = "" if value is None else str(value)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Configuration({self._values!r})"

    def copy(self) -> Configuration:
        return Configuration(self._values)

    def with_overrides(self, overrides: Mapping[str, object]) -> Configuration:
        """Return a new configuration where ``overrides`` win over existing keys."""
        merged: dict[str, object] = dict(self._values)
        merged.update(overrides)
        return Configuration(merged)

    def get_bool(self, key: str, default: bool = False) -> bool:
        raw = self._values.get(key)
        if raw is None or not raw.strip():
            return default
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigurationError(f"{key} must be a boolean, got '{raw}'.")

    def resolve(
        self, environ: Mapping[str, str] | None = None, *, strict: bool = True
    ) -> Configuration:
        """Return a copy with every ``${key}`` token substituted.

        References are looked up in this configuration first and then in
        ``environ`` (the process environment by default).

        With ``strict=False`` a token that cannot be resolved is kept as
        written and a warning is logged, so a later layer can still define it.

        Raises:
          PlaceholderResolutionError: In strict mode, on a reference cycle or a
            reference that neither the configuration nor the environment defines.
        """
        environment = os.environ if environ is None else environ
        resolved: dict[str, str] = {}
        for key in self._values:
            if strict:
                self._resolve_key(key, resolved, environment, (), strict=True)
                continue
            try:
                value = self._resolve_key(key, resolved, environment, (), strict=False)
            except PlaceholderResolutionError as exc:
                _LOGGER.warning("%s. Value is kept unresolved.", exc)
                resolved[key] = self._values[key]
                continue
            if _PLACEHOLDER.search(value):
                _LOGGER.warning("Property '%s' keeps unresolved placeholders: %s", key, value)
        return Configuration({key: resolved[key] for key in self._values})

    def _resolve_key(
        self,
        key: str,
        resolved: dict[str, str],
        environment: Mapping[str, str],
        chain: tuple[str, ...],
        *,
        strict: bool,
    ) -> str:
        if key in resolved:
            return resolved[key]
        if key in chain:
            cycle = " -> ".join(chain + (key,))
            raise PlaceholderResolutionError(key, f"placeholder cycle {cycle}")
        chain = chain + (key,)

        def substitute(match: re.Match[str]) -> str:
            reference = match.group(1).strip()
            if reference in self._values:
                return self._resolve_key(reference, resolved, environment, chain, strict=strict)
            if reference in environment:
                return environment[reference]
            if not strict:
                return match.group(0)
            raise PlaceholderResolutionError(key, f"unknown reference '${{{reference}}}'")

        value = self._values[key]
        seen = {value}
        while _PLACEHOLDER.search(value):
            expanded = _PLACEHOLDER.sub(substitute, value)
            if not strict and expanded == value:
                break
            if expanded in seen:
                raise PlaceholderResolutionError(key, "placeholder expansion does not terminate")
            seen.add(expanded)
            value = expanded
        resolved[key] = value
        return value

    def to_properties_text(self) -> str:
        lines = [f"{key}={_escape_value(value)}" for key, value in self._values.items()]
        return "\n".join(lines) + ("\n" if lines else "")

    def dump_to_dir(self, directory: Path | str | None) -> Path | None:
        """Write the configuration to ``run.properties`` inside ``directory``."""
        if directory is None:
            _LOGGER.warning("Output directory is not set. Configuration is not dumped.")
            return None
        destination = Path(directory)
        try:
            destination.mkdir(parents=True, exist_ok=True)
            target = destination / DUMP_FILENAME
            target.write_text(self.to_properties_text(), encoding="utf-8")
        except OSError as exc:
            _LOGGER.error("Unable to dump configuration to %s: %s", destination, exc)
            return None
        return target


def merge_configurations(base: Configuration, override: Mapping[str, object]) -> Configuration:
    """Merge ``override`` on top of ``base`` without touching ``base``."""
    return base.with_overrides(override)


def _escape_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n")
