"""Runtime message resolution.

Resolution is a pure request/response operation:

    1. locale = explicit argument, else current_locale()
    2. no backend       -> render the source text
    3. backend          -> render the backend's template, or the source text
                           if the backend reports a miss (returns None)

A missing translation is invisible to the caller. A template/variable mismatch
is not: FormatError propagates. Exceptions raised by the backend itself also
propagate; timeouts and retries around slow backends belong to the
integrating system.

Thread Safety:
    Resolver holds only immutable references (backend, formatter), so one
    instance is safely shared by every thread and task.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from mezzofanti.formatting import Formatter, MessageFormatter
from mezzofanti.locale_context import current_locale
from mezzofanti.locale_utils import normalize_locale

if TYPE_CHECKING:
    from mezzofanti.backends import Backend
    from mezzofanti.identity import MessageId
    from mezzofanti.message import Message

__all__ = ["Resolver"]

logger = logging.getLogger(__name__)

_NO_VARIABLES: Mapping[str, object] = {}


class Resolver:
    """Resolves message identities to rendered text.

    Example:
        >>> msg = Message("Hello {name}!")
        >>> Resolver().resolve(msg.identity, msg, {"name": "Ana"}, "en")
        'Hello Ana!'
    """

    __slots__ = ("_backend", "_formatter")

    def __init__(
        self, backend: Backend | None = None, formatter: Formatter | None = None
    ) -> None:
        """Initialize resolver.

        Args:
            backend: Translation backend; None runs in pass-through mode
            formatter: Template formatter (defaults to MessageFormatter)
        """
        self._backend = backend
        self._formatter: Formatter = formatter if formatter is not None else MessageFormatter()

    @property
    def backend(self) -> Backend | None:
        """The configured backend, if any."""
        return self._backend

    @property
    def formatter(self) -> Formatter:
        """The formatter used for rendering."""
        return self._formatter

    def __repr__(self) -> str:
        return f"Resolver(backend={self._backend!r}, formatter={self._formatter!r})"

    def lookup_template(self, identity: MessageId, message: Message, locale: str) -> str:
        """Return the template to render: the translation or the source text."""
        if self._backend is None:
            return message.text
        template = self._backend.lookup(identity, locale, message)
        if template is None:
            logger.debug("No %s translation for %s, using source text", locale, identity)
            return message.text
        return template

    def resolve(
        self,
        identity: MessageId,
        message: Message,
        variables: Mapping[str, object] | None = None,
        locale: str | None = None,
    ) -> str:
        """Resolve and render a message.

        Args:
            identity: Message identity (normally message.identity)
            message: Source-language message record
            variables: Values for the template's arguments
            locale: Target locale; defaults to current_locale()

        Returns:
            Rendered text in the target locale, or the rendered source text

        Raises:
            FormatError: If variables do not satisfy the template
        """
        target = normalize_locale(locale) if locale is not None else current_locale()
        template = self.lookup_template(identity, message, target)
        return self._formatter.render(
            template, variables if variables is not None else _NO_VARIABLES, target
        )
