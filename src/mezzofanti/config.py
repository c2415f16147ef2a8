"""Process configuration: default locale, backend and formatter.

Configuration is write-once. Call configure() once during application startup;
after that, the backend and default locale are read-only, which is what makes
the runtime lock-free. Unconfigured processes run in pass-through mode with
FALLBACK_LOCALE as the default.

Example:
    >>> from mezzofanti import configure
    >>> from mezzofanti.backends import GettextBackend
    >>> configure(default_locale="pt-PT", backend=GettextBackend("priv/mezzofanti"))

    Or from the environment:

    >>> configure(Settings.from_environ())

Python 3.13+.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from mezzofanti.backends import GettextBackend
from mezzofanti.constants import ENV_DEFAULT_LOCALE, ENV_TRANSLATIONS_DIR, FALLBACK_LOCALE
from mezzofanti.errors import ConfigurationError
from mezzofanti.formatting import Formatter, MessageFormatter
from mezzofanti.locale_context import _clear_default_locale, set_default_locale
from mezzofanti.locale_utils import get_system_locale, normalize_locale
from mezzofanti.resolver import Resolver

if TYPE_CHECKING:
    from mezzofanti.backends import Backend

__all__ = [
    "Settings",
    "configure",
    "get_resolver",
    "get_settings",
    "is_configured",
    "reset_configuration",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable process configuration.

    Attributes:
        default_locale: Locale used when no override is active
        backend: Translation backend (None for pass-through mode)
        formatter: Template formatter
    """

    default_locale: str = FALLBACK_LOCALE
    backend: Backend | None = None
    formatter: Formatter = field(default_factory=MessageFormatter)

    def __post_init__(self) -> None:
        normalized = normalize_locale(self.default_locale)
        if not normalized:
            msg = "default_locale cannot be empty"
            raise ValueError(msg)
        object.__setattr__(self, "default_locale", normalized)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        - MEZZOFANTI_DEFAULT_LOCALE, else LC_ALL / LC_MESSAGES / LANG,
          else FALLBACK_LOCALE
        - MEZZOFANTI_TRANSLATIONS_DIR: root of a GettextBackend (unset means
          pass-through mode)
        """
        env = os.environ if environ is None else environ
        default_locale = env.get(ENV_DEFAULT_LOCALE) or get_system_locale(env) or FALLBACK_LOCALE
        translations_dir = env.get(ENV_TRANSLATIONS_DIR)
        backend = GettextBackend(translations_dir) if translations_dir else None
        return cls(default_locale=default_locale, backend=backend)


_lock = threading.Lock()
_settings: Settings | None = None
_resolver: Resolver | None = None


def configure(settings: Settings | None = None, /, **overrides: Any) -> Settings:
    """Configure Mezzofanti for this process. Call once at startup.

    Args:
        settings: Complete settings (defaults to Settings())
        **overrides: Fields replaced on settings (default_locale, backend,
            formatter)

    Returns:
        The settings now in effect

    Raises:
        ConfigurationError: If the process was already configured
    """
    global _settings, _resolver  # noqa: PLW0603  # pylint: disable=global-statement
    effective = replace(settings or Settings(), **overrides)
    with _lock:
        if _settings is not None:
            msg = "Mezzofanti is already configured; configure() may only be called once"
            raise ConfigurationError(msg)
        set_default_locale(effective.default_locale)
        _settings = effective
        _resolver = Resolver(effective.backend, effective.formatter)
    logger.info(
        "Mezzofanti configured: default locale %s, backend %s",
        effective.default_locale,
        type(effective.backend).__name__ if effective.backend is not None else "none",
    )
    return effective


def is_configured() -> bool:
    """Return True once configure() has been called."""
    return _settings is not None


def get_settings() -> Settings:
    """Return the settings in effect (defaults if never configured)."""
    return _settings if _settings is not None else Settings()


_default_resolver = Resolver()


def get_resolver() -> Resolver:
    """Return the process resolver (pass-through if never configured)."""
    return _resolver if _resolver is not None else _default_resolver


def reset_configuration() -> None:
    """Forget the configuration and the default locale.

    Intended for tests only; there is no supported runtime reconfiguration.
    """
    global _settings, _resolver  # noqa: PLW0603  # pylint: disable=global-statement
    with _lock:
        _settings = None
        _resolver = None
        _clear_default_locale()
