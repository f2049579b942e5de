"""Run identifier generation."""

from __future__ import annotations

import logging

_LOGGER = logging.getLogger(__name__)

# Letters without the ambiguous o/O pair, followed by digits: 60 symbols.
ID_ALPHABET = "abcdefghijklmnpqrstuvwxyzABCDEFGHIJKLMNPQRSTUVWXYZ0123456789"
ID_LENGTH = 8


class RunIdentifierCounter:
    """Odometer over ``length`` positions of ``alphabet``.

    Position 0 changes fastest. When the last position overflows every
    position restarts from the first symbol and a warning is logged.
    """

    def __init__(self, alphabet: str = ID_ALPHABET, length: int = ID_LENGTH) -> None:
        if not alphabet or len(set(alphabet)) != len(alphabet):
            raise ValueError("Identifier alphabet must contain unique symbols.")
        if length <= 0:
            raise ValueError("Identifier length must be greater than zero.")
        self._alphabet = alphabet
        self._positions = [0] * length

    @property
    def capacity(self) -> int:
        return len(self._alphabet) ** len(self._positions)

    def next_identifier(self) -> str:
        identifier = "".join(self._alphabet[position] for position in self._positions)
        self._advance()
        return identifier

    def _advance(self) -> None:
        for index, position in enumerate(self._positions):
            if position + 1 < len(self._alphabet):
                self._positions[index] = position + 1
                return
            self._positions[index] = 0
        _LOGGER.warning(
            "Run identifier counter overflow. Next identifier starts from the beginning."
        )
