"""Current locale: process-wide default plus a per-task override.

The default locale is written once at configuration time and read many times.
The override lives in a ContextVar, so it belongs to one logical unit of work:

    - each thread starts with no override (threads do not inherit contextvars)
    - each asyncio task gets a copy of its creator's context at creation time,
      so setting an override inside a task never leaks into sibling tasks

Prefer passing the locale explicitly (translate(..., locale=...),
Resolver.resolve(..., locale=...)). Use with_locale() only at the boundary
where threading the locale through the call chain is impractical.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import ParamSpec, TypeVar

from mezzofanti.constants import FALLBACK_LOCALE
from mezzofanti.errors import ConfigurationError
from mezzofanti.locale_utils import normalize_locale

__all__ = [
    "call_with_locale",
    "current_locale",
    "get_default_locale",
    "set_default_locale",
    "with_locale",
]

P = ParamSpec("P")
R = TypeVar("R")

logger = logging.getLogger(__name__)

_locale_override: ContextVar[str | None] = ContextVar("mezzofanti_locale", default=None)

_default_locale: str | None = None
_default_lock = threading.Lock()


def set_default_locale(locale: str) -> None:
    """Set the process-wide default locale.

    Write-once: setting the same value again is a no-op, setting a different
    value raises.

    Raises:
        ConfigurationError: If a different default was already set
        ValueError: If locale is empty
    """
    global _default_locale  # noqa: PLW0603  # pylint: disable=global-statement
    normalized = normalize_locale(locale)
    if not normalized:
        msg = "Default locale cannot be empty"
        raise ValueError(msg)
    with _default_lock:
        if _default_locale is not None and _default_locale != normalized:
            msg = (
                f"Default locale already set to {_default_locale!r}; "
                f"refusing to change it to {normalized!r}"
            )
            raise ConfigurationError(msg)
        _default_locale = normalized
    logger.debug("Default locale set to %s", normalized)


def get_default_locale() -> str:
    """Return the configured default locale, or FALLBACK_LOCALE."""
    return _default_locale if _default_locale is not None else FALLBACK_LOCALE


def _clear_default_locale() -> None:
    global _default_locale  # noqa: PLW0603  # pylint: disable=global-statement
    with _default_lock:
        _default_locale = None


def current_locale() -> str:
    """Return the override for the current context, else the default.

    Never fails.
    """
    override = _locale_override.get()
    return override if override is not None else get_default_locale()


@contextmanager
def with_locale(locale: str) -> Iterator[str]:
    """Override the current locale for the duration of a with block.

    The previous value is restored on every exit path: normal exit, exception
    and task cancellation (CancelledError unwinds through the finally clause).

    Example:
        >>> with with_locale("it"):
        ...     current_locale()
        'it'
    """
    token = _locale_override.set(normalize_locale(locale))
    try:
        yield current_locale()
    finally:
        _locale_override.reset(token)


def call_with_locale(
    locale: str, body: Callable[P, R], /, *args: P.args, **kwargs: P.kwargs
) -> R:
    """Call body(*args, **kwargs) with the locale overridden.

    Functional form of with_locale().
    """
    with with_locale(locale):
        return body(*args, **kwargs)
