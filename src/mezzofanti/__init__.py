"""Mezzofanti - mark messages once, translate them from a central catalog.

Libraries and applications mark user-visible strings with translate(). The
application's extraction step scans its own source AND its dependencies,
so every message ends up in one catalog without each library shipping its
own translation files. At runtime a single configured backend supplies
translations, falling back to the source text.

Public API:
    translate - Mark a message for extraction and render it at runtime
    configure - Write-once process configuration (default locale, backend)
    Settings - Immutable configuration container
    Message - Catalog entry (identity, text, domain, context, provenance)
    Provenance - Call-site location of a message
    compute_identity - Stable (text, domain, context) fingerprint
    Resolver - Identity + locale + variables -> rendered text
    current_locale / with_locale / call_with_locale - Current locale control

Exceptions:
    MezzofantiError - Base exception class
    FormatError - Template/variable mismatch at render time
    ConfigurationError - Write-once configuration violated
    IdentityComputationError - Non-string identity fields
    ScanUnitFailure - A source unit could not be scanned
    VariableConsistencyWarning - Same message, different declared variables

Submodules:
    mezzofanti.extraction - Scanner, registry, extractor and POT writer
    mezzofanti.backends - Backend protocol, in-memory and gettext backends
    mezzofanti.formatting - Formatter protocol and the Babel-backed formatter
"""

from .config import Settings, configure, get_resolver, get_settings, reset_configuration
from .errors import (
    ConfigurationError,
    FormatError,
    IdentityComputationError,
    MezzofantiError,
    ScanUnitFailure,
    VariableConsistencyWarning,
)
from .identity import MessageId, compute_identity
from .locale_context import (
    call_with_locale,
    current_locale,
    get_default_locale,
    set_default_locale,
    with_locale,
)
from .message import Message, Provenance
from .resolver import Resolver
from .translator import translate

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError  # noqa: E402
from importlib.metadata import version as _get_version  # noqa: E402

try:
    __version__ = _get_version("mezzofanti")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "ConfigurationError",
    "FormatError",
    "IdentityComputationError",
    "Message",
    "MessageId",
    "MezzofantiError",
    "Provenance",
    "Resolver",
    "ScanUnitFailure",
    "Settings",
    "VariableConsistencyWarning",
    "__version__",
    "call_with_locale",
    "compute_identity",
    "configure",
    "current_locale",
    "get_default_locale",
    "get_resolver",
    "get_settings",
    "reset_configuration",
    "set_default_locale",
    "translate",
    "with_locale",
]
