"""The translate() entry point.

translate() plays two roles. At runtime it resolves and renders a message.
For extraction, its call sites are what the source scanner looks for. Only
calls with a literal text (and literal domain/context) can be extracted:

    from mezzofanti import translate

    translate("Hello world!")
    translate("Hello {guest}!", context="greeting", variables={"guest": guest})

Python 3.13+.
"""

from __future__ import annotations

import functools
from collections.abc import Mapping

from mezzofanti.config import get_resolver
from mezzofanti.constants import DEFAULT_CONTEXT, DEFAULT_DOMAIN, MAX_MESSAGE_CACHE_SIZE
from mezzofanti.message import Message

__all__ = ["message_for", "translate"]


@functools.lru_cache(maxsize=MAX_MESSAGE_CACHE_SIZE)
def message_for(text: str, domain: str, context: str, comment: str = "") -> Message:
    """Return the (cached) runtime Message for an identity triple.

    Runtime messages carry no provenance; that is collected by extraction.
    """
    return Message(text, domain=domain, context=context, comment=comment)


def translate(
    text: str,
    *,
    domain: str = DEFAULT_DOMAIN,
    context: str = DEFAULT_CONTEXT,
    comment: str = "",
    variables: Mapping[str, object] | None = None,
    locale: str | None = None,
) -> str:
    """Translate and render a message.

    Args:
        text: Source-language template (a string literal, to be extractable)
        domain: Message domain; maps to the catalog file name
        context: Disambiguates equal texts with different meanings
        comment: Hint for translators; extracted, ignored at runtime
        variables: Values interpolated into the template
        locale: Target locale; defaults to the current locale

    Returns:
        The rendered translation, or the rendered source text when no
        translation exists

    Raises:
        FormatError: If variables do not satisfy the template
        IdentityComputationError: If text, domain or context is not a string

    Example:
        >>> translate("Hello {name}!", variables={"name": "Ana"})
        'Hello Ana!'
    """
    message = message_for(text, domain, context, comment)
    return get_resolver().resolve(message.identity, message, variables, locale)
