"""Parsed template nodes.

Templates are parsed once into immutable trees of these nodes and cached.
Uses frozen dataclasses with slots for low memory overhead.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

__all__ = [
    "ArgumentType",
    "FormattedArgument",
    "Pattern",
    "PatternElement",
    "PluralArgument",
    "Pound",
    "SelectArgument",
    "SimpleArgument",
    "Text",
]


class ArgumentType(StrEnum):
    """Argument type keyword in `{name, type, ...}`."""

    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    PLURAL = "plural"
    SELECTORDINAL = "selectordinal"
    SELECT = "select"


@dataclass(frozen=True, slots=True)
class Text:
    """Literal text, with quoting already resolved."""

    value: str


@dataclass(frozen=True, slots=True)
class SimpleArgument:
    """`{name}`: value formatted by its Python type."""

    name: str


@dataclass(frozen=True, slots=True)
class FormattedArgument:
    """`{name, number|date|time[, style]}`."""

    name: str
    kind: ArgumentType
    style: str | None = None


@dataclass(frozen=True, slots=True)
class Pound:
    """`#` inside a plural branch: the number, minus offset, formatted."""


@dataclass(frozen=True, slots=True)
class PluralArgument:
    """`{name, plural|selectordinal, [offset:N] =N {...} one {...} other {...}}`."""

    name: str
    options: tuple[tuple[str, Pattern], ...]
    offset: int = 0
    ordinal: bool = False

    def option(self, key: str) -> Pattern | None:
        """Return the branch for key, if present."""
        for selector, pattern in self.options:
            if selector == key:
                return pattern
        return None


@dataclass(frozen=True, slots=True)
class SelectArgument:
    """`{name, select, key {...} other {...}}`."""

    name: str
    options: tuple[tuple[str, Pattern], ...]

    def option(self, key: str) -> Pattern | None:
        """Return the branch for key, if present."""
        for selector, pattern in self.options:
            if selector == key:
                return pattern
        return None


type PatternElement = (
    Text | SimpleArgument | FormattedArgument | Pound | PluralArgument | SelectArgument
)
type Pattern = tuple[PatternElement, ...]
