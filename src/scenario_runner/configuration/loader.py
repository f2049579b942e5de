"""Key/value definition file loader."""

from __future__ import annotations

from pathlib import Path

from .property_layers import Configuration, ConfigurationError

_COMMENT_PREFIXES = ("#", "!")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "f": "\f"}


def load_properties_file(path: Path | str) -> Configuration:
    """Load one ``.properties`` definition file into a configuration."""
    source = Path(path)
    if not source.is_file():
        raise ConfigurationError(f"Definition file not found: {source}")
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Failed to read definition file {source}: {exc}") from exc
    return parse_properties_text(text)


def parse_properties_text(text: str) -> Configuration:
    """Parse ``key=value`` / ``key: value`` / ``key value`` lines.

    Lines starting with ``#`` or ``!`` are comments and a trailing backslash
    joins a line with the next one.
    """
    values: dict[str, str] = {}
    for logical_line in _logical_lines(text):
        key, value = _split_entry(logical_line)
        values[key] = value
    return Configuration(values)


def _logical_lines(text: str):
    pending = ""
    for raw_line in text.splitlines():
        line = raw_line.lstrip()
        if not pending and (not line or line.startswith(_COMMENT_PREFIXES)):
            continue
        if _ends_with_continuation(line):
            pending += line[:-1]
            continue
        yield pending + line
        pending = ""
    if pending:
        yield pending


def _ends_with_continuation(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _split_entry(line: str) -> tuple[str, str]:
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in "=:" or char.isspace():
            break
        index += 1
    key = _unescape(line[:index])
    rest = line[index:].lstrip()
    if rest[:1] in ("=", ":") and (index >= len(line) or line[index].isspace()):
        rest = rest[1:].lstrip()
    elif index < len(line) and line[index] in "=:":
        rest = line[index + 1 :].lstrip()
    return key, _unescape(rest)


def _unescape(value: str) -> str:
    chars: list[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if char == "\\" and index + 1 < len(value):
            following = value[index + 1]
            chars.append(_ESCAPES.get(following, following))
            index += 2
            continue
        chars.append(char)
        index += 1
    return "".join(chars)
