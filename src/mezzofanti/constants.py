"""Shared constants for Mezzofanti.

Placing constants here avoids circular imports between the extraction and
runtime packages.

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Message defaults
    "DEFAULT_DOMAIN",
    "DEFAULT_CONTEXT",
    # Locale
    "FALLBACK_LOCALE",
    # Identity
    "IDENTITY_DIGEST_CHARS",
    # Templates
    "MAX_NESTING_DEPTH",
    # Extraction
    "DEFAULT_OUTPUT_DIR",
    "MARKER_NAME",
    "MARKER_MODULE",
    # Caches
    "MAX_TEMPLATE_CACHE_SIZE",
    "MAX_MESSAGE_CACHE_SIZE",
    # Environment
    "ENV_DEFAULT_LOCALE",
    "ENV_TRANSLATIONS_DIR",
]

# ============================================================================
# MESSAGE DEFAULTS
# ============================================================================

# Domain assigned to messages marked without an explicit domain.
# Domains map to catalog file names (default.pot, default.po).
DEFAULT_DOMAIN: str = "default"

# Context of messages marked without a disambiguating context.
DEFAULT_CONTEXT: str = ""

# ============================================================================
# LOCALE
# ============================================================================

# Locale returned by current_locale() when nothing was configured.
FALLBACK_LOCALE: str = "en"

# ============================================================================
# IDENTITY
# ============================================================================

# Hex characters kept from the SHA-256 digest (128 bits).
IDENTITY_DIGEST_CHARS: int = 32

# ============================================================================
# TEMPLATES
# ============================================================================

# Deepest plural/select nesting accepted by the parser and the formatter.
# Real templates nest two or three levels; anything near this is malformed
# or adversarial input and would otherwise end in RecursionError.
MAX_NESTING_DEPTH: int = 100

# ============================================================================
# EXTRACTION
# ============================================================================

# Destination of `mezzofanti extract` when --output is not given.
DEFAULT_OUTPUT_DIR: str = "priv/mezzofanti"

# The marking entry point recognized by the source scanner.
MARKER_NAME: str = "translate"
MARKER_MODULE: str = "mezzofanti"

# ============================================================================
# CACHES
# ============================================================================

# Parsed templates kept by MessageFormatter.
MAX_TEMPLATE_CACHE_SIZE: int = 1024

# Runtime Message objects kept by translate() (one per distinct call).
MAX_MESSAGE_CACHE_SIZE: int = 4096

# ============================================================================
# ENVIRONMENT
# ============================================================================

ENV_DEFAULT_LOCALE: str = "MEZZOFANTI_DEFAULT_LOCALE"
ENV_TRANSLATIONS_DIR: str = "MEZZOFANTI_TRANSLATIONS_DIR"
