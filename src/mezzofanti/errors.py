"""Mezzofanti exception and warning hierarchy.

Propagation policy:
    - Identity computation and registry accumulation never fail observably.
      IdentityComputationError only signals a programmer error (wrong types).
    - A missing translation is NOT an error: backends return None and the
      resolver falls back to the source text.
    - FormatError is raised to the caller of resolve()/translate(). Rendering
      garbage silently is worse than failing visibly.
    - ScanUnitFailure is collected by the extractor, which keeps going with the
      remaining units and reports failures in aggregate.
    - VariableConsistencyWarning is a warning, never fatal to extraction.

Python 3.13+.
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "FormatError",
    "IdentityComputationError",
    "MezzofantiError",
    "ScanUnitFailure",
    "VariableConsistencyWarning",
]


class MezzofantiError(Exception):
    """Base exception for all Mezzofanti errors."""


class IdentityComputationError(MezzofantiError, TypeError):
    """Message identity could not be computed.

    Only raised when text, domain or context is not a string. Treat as a
    fatal programmer error.
    """


class FormatError(MezzofantiError):
    """Template rendering failed.

    Raised on missing variables, values of the wrong type for the argument
    (e.g. a date argument given a string) and malformed templates.

    Attributes:
        template: Template being rendered
        argument: Name of the offending argument, if any
    """

    def __init__(self, message: str, *, template: str = "", argument: str | None = None) -> None:
        """Initialize FormatError.

        Args:
            message: Human-readable error description
            template: Template being rendered
            argument: Name of the offending argument (optional)
        """
        super().__init__(message)
        self.template = template
        self.argument = argument


class ScanUnitFailure(MezzofantiError):
    """A single scanning unit could not be scanned.

    The extractor records the failure and continues with the other units.

    Attributes:
        unit: Module name of the unit
        path: Source path of the unit (may be empty for unresolvable packages)
        reason: Short description of the underlying problem
    """

    def __init__(self, unit: str, path: str, reason: str) -> None:
        super().__init__(f"Cannot scan {unit} ({path or '<unknown>'}): {reason}")
        self.unit = unit
        self.path = path
        self.reason = reason


class ConfigurationError(MezzofantiError):
    """Write-once configuration was written twice.

    The default locale and the backend are set once at startup. There is no
    runtime mutation path; use reset_configuration() in tests.
    """


class VariableConsistencyWarning(UserWarning):
    """The same message declares different variables at different call sites.

    Attributes:
        identity: Identity of the affected message
        variants: Every distinct variable tuple seen, in provenance order
    """

    def __init__(self, identity: str, text: str, variants: tuple[tuple[str, ...], ...]) -> None:
        rendered = "; ".join("(" + ", ".join(v) + ")" for v in variants)
        super().__init__(
            f"Message {identity} ({text!r}) declares different variables "
            f"across call sites: {rendered}"
        )
        self.identity = identity
        self.text = text
        self.variants = variants
