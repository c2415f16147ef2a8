"""Locale code utilities.

Centralizes BCP-47 to POSIX normalization, cached Babel locale parsing,
parent-chain computation for lookups and system locale detection.

Python 3.13+.
"""

from __future__ import annotations

import functools
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from babel import Locale

__all__ = [
    "get_babel_locale",
    "get_system_locale",
    "locale_chain",
    "normalize_locale",
]


def normalize_locale(locale_code: str) -> str:
    """Convert a BCP-47 locale code to POSIX format.

    BCP-47 uses hyphens (en-US), Babel and gettext directory layouts use
    underscores (en_US). Encoding suffixes (".UTF-8") are dropped.

    Example:
        >>> normalize_locale("pt-BR")
        'pt_BR'
        >>> normalize_locale("de_DE.UTF-8")
        'de_DE'
    """
    return locale_code.split(".", 1)[0].strip().replace("-", "_")


def locale_chain(locale_code: str) -> tuple[str, ...]:
    """Return the locale followed by its less specific parents.

    Example:
        >>> locale_chain("zh-Hant-TW")
        ('zh_Hant_TW', 'zh_Hant', 'zh')
        >>> locale_chain("it")
        ('it',)
    """
    parts = normalize_locale(locale_code).split("_")
    return tuple("_".join(parts[:end]) for end in range(len(parts), 0, -1) if parts[0])


@functools.lru_cache(maxsize=128)
def get_babel_locale(locale_code: str) -> Locale:
    """Get a Babel Locale object with caching.

    Thread-safe via lru_cache internal locking.

    Raises:
        babel.core.UnknownLocaleError: If locale is not recognized
        ValueError: If locale format is invalid
    """
    # Lazy import: Babel loads CLDR data at import time; defer until needed
    from babel import Locale  # noqa: PLC0415

    return Locale.parse(normalize_locale(locale_code))


def get_system_locale(environ: Mapping[str, str] | None = None) -> str | None:
    """Detect the locale from LC_ALL, LC_MESSAGES and LANG, in that order.

    "C" and "POSIX" pseudo-locales are ignored.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Normalized locale code, or None if nothing usable is set
    """
    env = os.environ if environ is None else environ
    for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = env.get(var, "")
        locale_code = normalize_locale(value) if value else ""
        if locale_code and locale_code not in ("C", "POSIX"):
            return locale_code
    return None
