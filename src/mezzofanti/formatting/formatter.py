"""Locale-aware template rendering with Babel.

MessageFormatter renders templates parsed by formatting.parser. Numbers, dates
and times are formatted with Babel's CLDR data; plural and selectordinal
branches use Babel's CLDR plural rules.

Error policy: anything that would render wrong output raises FormatError.
This covers missing variables, values of the wrong type, malformed or too
deeply nested templates, and styles or values Babel cannot format (Babel's
own exceptions are re-raised as FormatError). Unknown locales fall back to
FALLBACK_LOCALE data with a warning, since the template itself is still
valid.

Python 3.13+. Depends on Babel for CLDR data.
"""

from __future__ import annotations

import functools
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Protocol

from babel import dates as babel_dates
from babel import numbers as babel_numbers
from babel.core import UnknownLocaleError

from mezzofanti.constants import FALLBACK_LOCALE
from mezzofanti.errors import FormatError
from mezzofanti.formatting.depth import DepthGuard
from mezzofanti.formatting.nodes import (
    ArgumentType,
    FormattedArgument,
    Pattern,
    PluralArgument,
    Pound,
    SelectArgument,
    SimpleArgument,
    Text,
)
from mezzofanti.formatting.parser import parse_template
from mezzofanti.locale_utils import get_babel_locale

if TYPE_CHECKING:
    from babel import Locale

__all__ = ["Formatter", "MessageFormatter", "select_plural_category"]

logger = logging.getLogger(__name__)

type Number = int | float | Decimal

# What Babel raises for values or patterns it cannot format
_BABEL_ERRORS = (
    ValueError,
    TypeError,
    InvalidOperation,
    OverflowError,
    AttributeError,
    KeyError,
)


class Formatter(Protocol):
    """Renders a template with variables for a locale.

    Implementations raise FormatError on missing or mistyped variables.
    """

    def render(self, template: str, variables: Mapping[str, object], locale: str) -> str:
        """Render template with variables using locale-sensitive rules."""
        ...


@functools.lru_cache(maxsize=128)
def _resolve_locale(locale_code: str) -> Locale:
    try:
        return get_babel_locale(locale_code)
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(
            "Unknown locale '%s': %s. Falling back to %s", locale_code, e, FALLBACK_LOCALE
        )
        return get_babel_locale(FALLBACK_LOCALE)


def _is_number(value: object) -> bool:
    return isinstance(value, int | float | Decimal) and not isinstance(value, bool)


def _is_finite(number: Number) -> bool:
    if isinstance(number, int):
        return True
    if isinstance(number, Decimal):
        return number.is_finite()
    return math.isfinite(number)


def _exact_key(number: Number) -> str | None:
    try:
        integral = int(number)
    except (ValueError, OverflowError):
        return None
    return f"={integral}" if integral == number else None


def select_plural_category(n: Number, locale: str, *, ordinal: bool = False) -> str:
    """Select the CLDR plural category of n for locale.

    Examples:
        >>> select_plural_category(1, "en")
        'one'
        >>> select_plural_category(5, "ru")
        'many'
        >>> select_plural_category(2, "en", ordinal=True)
        'two'
    """
    locale_obj = _resolve_locale(locale)
    rule = locale_obj.ordinal_form if ordinal else locale_obj.plural_form
    return rule(n)


@dataclass(frozen=True, slots=True)
class _RenderContext:
    """State shared by the nested calls of one render()."""

    variables: Mapping[str, object]
    locale: Locale
    template: str
    depth: DepthGuard


class MessageFormatter:
    """Formatter for the ICU MessageFormat subset described in formatting.parser.

    Stateless apart from the module-level parse and locale caches; safe to
    share between threads and tasks.

    Example:
        >>> MessageFormatter().render("Hello {name}!", {"name": "Ana"}, "en")
        'Hello Ana!'
        >>> MessageFormatter().render(
        ...     "{n, plural, one {# file} other {# files}}", {"n": 1200}, "de"
        ... )
        '1.200 files'
    """

    __slots__ = ()

    def render(self, template: str, variables: Mapping[str, object], locale: str) -> str:
        """Render template with variables.

        Raises:
            FormatError: On malformed or too deeply nested templates, missing
                variables, values of the wrong type for their argument and
                values or styles Babel cannot format
        """
        pattern = parse_template(template)
        parts: list[str] = []
        context = _RenderContext(variables, _resolve_locale(locale), template, DepthGuard(template))
        self._render(pattern, context, parts, None)
        return "".join(parts)

    def _render(
        self, pattern: Pattern, context: _RenderContext, parts: list[str], pound: str | None
    ) -> None:
        locale = context.locale
        template = context.template
        for element in pattern:
            match element:
                case Text(value=value):
                    parts.append(value)
                case Pound():
                    # Parser only emits Pound inside plural branches
                    parts.append(pound or "#")
                case SimpleArgument(name=name):
                    value = self._lookup(name, context.variables, template)
                    parts.append(self._format_simple(value, locale))
                case FormattedArgument():
                    value = self._lookup(element.name, context.variables, template)
                    parts.append(self._format_typed(element, value, locale, template))
                case PluralArgument():
                    value = self._lookup(element.name, context.variables, template)
                    branch, pound_text = self._select_plural(element, value, locale, template)
                    with context.depth:
                        self._render(branch, context, parts, pound_text)
                case SelectArgument():
                    value = self._lookup(element.name, context.variables, template)
                    key = value if isinstance(value, str) else str(value)
                    branch = element.option(key)
                    if branch is None:
                        branch = element.option("other") or ()
                    with context.depth:
                        self._render(branch, context, parts, pound)

    @staticmethod
    def _lookup(name: str, variables: Mapping[str, object], template: str) -> object:
        try:
            return variables[name]
        except KeyError:
            msg = f"Missing variable {name!r}"
            raise FormatError(msg, template=template, argument=name) from None

    @staticmethod
    def _format_simple(value: object, locale: Locale) -> str:
        if isinstance(value, str):
            return value
        if _is_number(value):
            return babel_numbers.format_decimal(value, locale=locale)  # type: ignore[arg-type]
        if isinstance(value, datetime):
            return babel_dates.format_datetime(value, "short", locale=locale)
        if isinstance(value, date):
            return babel_dates.format_date(value, "short", locale=locale)
        if isinstance(value, time):
            return babel_dates.format_time(value, "short", locale=locale)
        return str(value)

    def _format_typed(
        self, arg: FormattedArgument, value: object, locale: Locale, template: str
    ) -> str:
        if arg.kind is ArgumentType.NUMBER:
            if not _is_number(value):
                raise self._type_error(arg.name, "number", value, template)
            return self._format_number(arg, value, locale, template)  # type: ignore[arg-type]

        fmt = arg.style or "medium"
        if arg.kind is ArgumentType.DATE:
            if not isinstance(value, date):
                raise self._type_error(arg.name, "date", value, template)
            format_value = babel_dates.format_date
        else:
            if not isinstance(value, datetime | time):
                raise self._type_error(arg.name, "time", value, template)
            format_value = babel_dates.format_time
        try:
            return format_value(value, fmt, locale=locale)  # type: ignore[arg-type]
        except _BABEL_ERRORS as e:
            msg = f"Cannot format {arg.name!r} with {arg.kind.value} style {fmt!r}: {e}"
            raise FormatError(msg, template=template, argument=arg.name) from e

    @staticmethod
    def _format_number(
        arg: FormattedArgument, value: Number, locale: Locale, template: str
    ) -> str:
        style = arg.style
        if style is not None and style.startswith("::"):
            msg = f"Number skeletons are not supported: {style!r}"
            raise FormatError(msg, template=template, argument=arg.name)
        try:
            match style:
                case None:
                    return babel_numbers.format_decimal(value, locale=locale)
                case "integer":
                    return babel_numbers.format_decimal(value, format="#,##0", locale=locale)
                case "percent":
                    return babel_numbers.format_percent(value, locale=locale)
                case _:
                    return babel_numbers.format_decimal(value, format=style, locale=locale)
        except _BABEL_ERRORS as e:
            msg = f"Cannot format {arg.name!r} with number style {style!r}: {e}"
            raise FormatError(msg, template=template, argument=arg.name) from e

    def _select_plural(
        self, arg: PluralArgument, value: object, locale: Locale, template: str
    ) -> tuple[Pattern, str]:
        if not _is_number(value):
            raise self._type_error(arg.name, "plural", value, template)
        number: Number = value  # type: ignore[assignment]
        if not _is_finite(number):
            msg = f"Variable {arg.name!r} must be a finite number, got {number!r}"
            raise FormatError(msg, template=template, argument=arg.name)
        exact_key = _exact_key(number)
        exact = arg.option(exact_key) if exact_key else None
        shifted = number - arg.offset
        try:
            pound = babel_numbers.format_decimal(shifted, locale=locale)
            if exact is not None:
                return exact, pound
            rule = locale.ordinal_form if arg.ordinal else locale.plural_form
            category = rule(shifted)
        except _BABEL_ERRORS as e:
            msg = f"Cannot select a plural category for {arg.name!r}: {e}"
            raise FormatError(msg, template=template, argument=arg.name) from e
        branch = arg.option(category)
        if branch is None:
            branch = arg.option("other")
        if branch is None:
            msg = f"Plural argument {arg.name!r} has no 'other' branch"
            raise FormatError(msg, template=template, argument=arg.name)
        return branch, pound

    @staticmethod
    def _type_error(name: str, expected: str, value: object, template: str) -> FormatError:
        msg = f"Variable {name!r} must be a {expected} value, got {type(value).__name__}"
        return FormatError(msg, template=template, argument=name)
