"""Identifier derivation from definition file names."""

from __future__ import annotations


def strip_extension(file_name: str) -> str:
    """Remove the last extension of ``file_name``.

    Hidden files (a single leading dot) and names without a dot are returned
    unchanged, so ``.env`` stays ``.env`` and ``a.b.xml`` becomes ``a.b``.
    """
    index = file_name.rfind(".")
    if index <= 0:
        return file_name
    return file_name[:index]
