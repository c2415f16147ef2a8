"""In-memory translation table.

Useful for tests, for applications that load translations from their own
storage at startup, and as the simplest reference Backend.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from mezzofanti.constants import DEFAULT_CONTEXT, DEFAULT_DOMAIN
from mezzofanti.identity import MessageId, compute_identity
from mezzofanti.locale_utils import locale_chain, normalize_locale

if TYPE_CHECKING:
    from mezzofanti.message import Message

__all__ = ["InMemoryBackend"]


class InMemoryBackend:
    """Backend over a {(locale, identity): template} table.

    Populate with add() or from_mapping() during configuration; after the
    backend is handed to configure() treat it as read-only. Lookups try the
    locale and then its parents (pt_BR, then pt).

    Example:
        >>> backend = InMemoryBackend()
        >>> backend.add("it", "Hello {name}!", "Ciao {name}!")
        >>> msg = Message("Hello {name}!")
        >>> backend.lookup(msg.identity, "it", msg)
        'Ciao {name}!'
        >>> backend.lookup(msg.identity, "fr", msg) is None
        True
    """

    __slots__ = ("_table",)

    def __init__(self) -> None:
        self._table: dict[tuple[str, MessageId], str] = {}

    def add(
        self,
        locale: str,
        text: str,
        template: str,
        *,
        domain: str = DEFAULT_DOMAIN,
        context: str = DEFAULT_CONTEXT,
    ) -> MessageId:
        """Add a translation of (text, domain, context) for locale.

        Returns:
            The identity the translation is stored under
        """
        identity = compute_identity(text, domain, context)
        self._table[(normalize_locale(locale), identity)] = template
        return identity

    @classmethod
    def from_mapping(
        cls, translations: Mapping[str, Iterable[tuple[Message, str]]]
    ) -> InMemoryBackend:
        """Build a backend from {locale: [(message, template), ...]}."""
        backend = cls()
        for locale, entries in translations.items():
            for message, template in entries:
                backend.add(
                    locale, message.text, template, domain=message.domain, context=message.context
                )
        return backend

    def locales(self) -> tuple[str, ...]:
        """Return the locales that have at least one translation, sorted."""
        return tuple(sorted({locale for locale, _ in self._table}))

    def __len__(self) -> int:
        return len(self._table)

    def lookup(self, identity: MessageId, locale: str, message: Message) -> str | None:
        """Return the template for identity in locale or a parent locale."""
        for candidate in locale_chain(locale):
            template = self._table.get((candidate, identity))
            if template is not None:
                return template
        return None
