"""Backend protocol for runtime translation lookup.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mezzofanti.identity import MessageId
    from mezzofanti.message import Message

__all__ = ["Backend"]


@runtime_checkable
class Backend(Protocol):
    """Maps (identity, locale) to a translated template.

    At most one backend is active per process; it is chosen at configuration
    time and never swapped at runtime. This is a Protocol (structural typing)
    rather than an ABC, so any object with a matching lookup() qualifies.

    A lookup miss is returned as None. It is an expected outcome: the resolver
    falls back to the message's source text. Raise only for real failures
    (I/O errors, corrupt data); those propagate to the caller.

    Example:
        >>> class UpperBackend:
        ...     def lookup(self, identity, locale, message):
        ...         return message.text.upper() if locale == "shout" else None
    """

    def lookup(self, identity: MessageId, locale: str, message: Message) -> str | None:
        """Return the template for identity in locale, or None on a miss.

        Args:
            identity: Message identity
            locale: Normalized locale code (e.g. "pt_BR")
            message: The source-language message record, for backends that key
                on text/context or need the domain
        """
        ...
