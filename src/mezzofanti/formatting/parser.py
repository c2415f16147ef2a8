"""Template parser for the supported ICU MessageFormat subset.

Grammar (informal):

    pattern   := (text | '#' | '{' argument '}')*
    argument  := name
               | name ',' ('number' | 'date' | 'time') [',' style]
               | name ',' ('plural' | 'selectordinal') ',' ['offset:' N] options
               | name ',' 'select' ',' options
    options   := (selector '{' pattern '}')+          ; must include 'other'
    selector  := '=' N | keyword

Quoting follows ICU: `''` is a literal apostrophe; an apostrophe directly
before `{`, `}` or (inside plural branches) `#` starts a quoted literal that
runs to the next single apostrophe. Any other apostrophe is literal.

Malformed templates raise FormatError with the offending position, as do
templates nesting arguments deeper than MAX_NESTING_DEPTH.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import functools

from mezzofanti.constants import MAX_TEMPLATE_CACHE_SIZE
from mezzofanti.errors import FormatError
from mezzofanti.formatting.depth import DepthGuard
from mezzofanti.formatting.nodes import (
    ArgumentType,
    FormattedArgument,
    Pattern,
    PatternElement,
    PluralArgument,
    Pound,
    SelectArgument,
    SimpleArgument,
    Text,
)

__all__ = ["extract_placeholders", "parse_template"]

_PLURAL_KEYWORDS = frozenset(("zero", "one", "two", "few", "many", "other"))
_NAME_STOP = frozenset(",{}")


class _TemplateParser:
    """Single-use recursive descent parser over one template string."""

    __slots__ = ("depth", "pos", "source")

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self.depth = DepthGuard(template=source)

    def error(self, reason: str) -> FormatError:
        return FormatError(
            f"Malformed template at position {self.pos}: {reason}",
            template=self.source,
        )

    @property
    def is_eof(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.source[index] if index < len(self.source) else ""

    def skip_whitespace(self) -> None:
        while not self.is_eof and self.source[self.pos].isspace():
            self.pos += 1

    def expect(self, char: str) -> None:
        if self.peek() != char:
            found = repr(self.peek()) if not self.is_eof else "end of template"
            raise self.error(f"expected {char!r}, found {found}")
        self.pos += 1

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------

    def parse_pattern(self, *, nested: bool, in_plural: bool) -> Pattern:
        elements: list[PatternElement] = []
        text: list[str] = []

        def flush() -> None:
            if text:
                elements.append(Text("".join(text)))
                text.clear()

        while not self.is_eof:
            char = self.source[self.pos]
            if char == "'":
                text.append(self.parse_quote(in_plural=in_plural))
            elif char == "{":
                flush()
                self.pos += 1
                with self.depth:
                    elements.append(self.parse_argument(in_plural=in_plural))
            elif char == "}":
                if nested:
                    break
                raise self.error("unmatched '}'")
            elif char == "#" and in_plural:
                flush()
                self.pos += 1
                elements.append(Pound())
            else:
                text.append(char)
                self.pos += 1
        else:
            if nested:
                raise self.error("unterminated branch, missing '}'")
        flush()
        return tuple(elements)

    def parse_quote(self, *, in_plural: bool) -> str:
        # Called with pos on an apostrophe.
        next_char = self.peek(1)
        if next_char == "'":
            self.pos += 2
            return "'"
        if next_char not in ("{", "}") and not (in_plural and next_char == "#"):
            self.pos += 1
            return "'"

        self.pos += 1
        literal: list[str] = []
        while not self.is_eof:
            char = self.source[self.pos]
            if char == "'":
                if self.peek(1) == "'":
                    literal.append("'")
                    self.pos += 2
                    continue
                self.pos += 1
                break
            literal.append(char)
            self.pos += 1
        return "".join(literal)

    # ------------------------------------------------------------------
    # Arguments
    # ------------------------------------------------------------------

    def parse_word(self, what: str) -> str:
        self.skip_whitespace()
        start = self.pos
        while (
            not self.is_eof
            and not self.source[self.pos].isspace()
            and self.source[self.pos] not in _NAME_STOP
        ):
            self.pos += 1
        word = self.source[start : self.pos]
        if not word:
            raise self.error(f"missing {what}")
        self.skip_whitespace()
        return word

    def parse_argument(self, *, in_plural: bool) -> PatternElement:
        name = self.parse_word("argument name")
        if not (name.replace("_", "a").replace("-", "a").isalnum()):
            raise self.error(f"invalid argument name {name!r}")
        if self.peek() == "}":
            self.pos += 1
            return SimpleArgument(name)
        self.expect(",")

        keyword = self.parse_word("argument type")
        try:
            kind = ArgumentType(keyword)
        except ValueError:
            raise self.error(f"unknown argument type {keyword!r}") from None

        match kind:
            case ArgumentType.NUMBER | ArgumentType.DATE | ArgumentType.TIME:
                return self.parse_formatted(name, kind)
            case ArgumentType.PLURAL | ArgumentType.SELECTORDINAL:
                self.expect(",")
                return self.parse_plural(name, ordinal=kind is ArgumentType.SELECTORDINAL)
            case ArgumentType.SELECT:
                self.expect(",")
                options = self.parse_options(in_plural=in_plural, plural=False)
                return SelectArgument(name, options)

    def parse_formatted(self, name: str, kind: ArgumentType) -> FormattedArgument:
        if self.peek() == "}":
            self.pos += 1
            return FormattedArgument(name, kind)
        self.expect(",")
        start = self.pos
        while not self.is_eof and self.source[self.pos] != "}":
            if self.source[self.pos] == "{":
                raise self.error("'{' not allowed in argument style")
            self.pos += 1
        style = self.source[start : self.pos].strip()
        self.expect("}")
        if not style:
            raise self.error("empty argument style")
        return FormattedArgument(name, kind, style)

    def parse_plural(self, name: str, *, ordinal: bool) -> PluralArgument:
        self.skip_whitespace()
        offset = 0
        if self.source.startswith("offset:", self.pos):
            self.pos += len("offset:")
            self.skip_whitespace()
            start = self.pos
            while not self.is_eof and self.source[self.pos].isdigit():
                self.pos += 1
            if start == self.pos:
                raise self.error("offset requires a non-negative integer")
            offset = int(self.source[start : self.pos])
        options = self.parse_options(in_plural=True, plural=True)
        return PluralArgument(name, options, offset=offset, ordinal=ordinal)

    def parse_options(self, *, in_plural: bool, plural: bool) -> tuple[tuple[str, Pattern], ...]:
        options: dict[str, Pattern] = {}
        while True:
            self.skip_whitespace()
            if self.peek() == "}":
                self.pos += 1
                break
            if self.is_eof:
                raise self.error("unterminated argument, missing '}'")
            selector = self.parse_word("selector")
            if plural and not selector.startswith("=") and selector not in _PLURAL_KEYWORDS:
                raise self.error(f"invalid plural selector {selector!r}")
            if selector.startswith("="):
                try:
                    int(selector[1:])
                except ValueError:
                    raise self.error(f"invalid exact selector {selector!r}") from None
            if selector in options:
                raise self.error(f"duplicate selector {selector!r}")
            self.expect("{")
            options[selector] = self.parse_pattern(nested=True, in_plural=in_plural)
            self.expect("}")
        if "other" not in options:
            raise self.error("'other' branch is required")
        return tuple(options.items())


@functools.lru_cache(maxsize=MAX_TEMPLATE_CACHE_SIZE)
def parse_template(template: str) -> Pattern:
    """Parse a template into an immutable pattern (cached).

    Raises:
        FormatError: If the template is malformed
    """
    return _TemplateParser(template).parse_pattern(nested=False, in_plural=False)


def _collect(pattern: Pattern, names: dict[str, None]) -> None:
    for element in pattern:
        match element:
            case SimpleArgument(name=name) | FormattedArgument(name=name):
                names.setdefault(name)
            case PluralArgument(name=name, options=options) | SelectArgument(
                name=name, options=options
            ):
                names.setdefault(name)
                for _, branch in options:
                    _collect(branch, names)
            case _:
                pass


def extract_placeholders(template: str) -> tuple[str, ...]:
    """Return argument names referenced by a template, in first-use order.

    Example:
        >>> extract_placeholders("{count, plural, one {# file} other {# files}} by {user}")
        ('count', 'user')

    Raises:
        FormatError: If the template is malformed
    """
    names: dict[str, None] = {}
    _collect(parse_template(template), names)
    return tuple(names)
