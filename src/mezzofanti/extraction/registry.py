"""Per-unit message accumulator.

One MessageRegistry collects the messages discovered in one scanning unit
(one source module). Registration never fails.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Iterator

from mezzofanti.identity import MessageId
from mezzofanti.message import Message, Provenance

__all__ = ["MessageRegistry"]

type _SiteKey = tuple[MessageId, tuple[Provenance, ...]]


class MessageRegistry:
    """Accumulates the messages marked in one unit, in discovery order.

    Policy: last write wins per call site. A call site is the pair
    (identity, provenance); registering it again replaces the stored record
    but keeps its original position, so a call site visited repeatedly (e.g.
    inside a loop during a dynamic scan) never grows the registry. Different
    call sites of the same message are all kept; the extractor merges them.

    Example:
        >>> registry = MessageRegistry("app.views")
        >>> site = Provenance("app/views.py", 3, "app.views")
        >>> registry.register(Message("Hi", provenance=(site,)))
        >>> registry.register(Message("Hi", comment="greeting", provenance=(site,)))
        >>> [m.comment for m in registry.export()]
        ['greeting']
    """

    __slots__ = ("_records", "unit")

    def __init__(self, unit: str) -> None:
        """Initialize an empty registry.

        Args:
            unit: Name of the scanning unit (dotted module name)
        """
        self.unit = unit
        self._records: dict[_SiteKey, Message] = {}

    def register(self, message: Message) -> None:
        """Record a discovered message."""
        self._records[(message.identity, message.provenance)] = message

    def export(self) -> tuple[Message, ...]:
        """Return every recorded message in discovery order."""
        return tuple(self._records.values())

    def identities(self) -> frozenset[MessageId]:
        """Return the distinct identities recorded."""
        return frozenset(identity for identity, _ in self._records)

    def __contains__(self, identity: object) -> bool:
        return any(key_identity == identity for key_identity, _ in self._records)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.export())

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"MessageRegistry(unit={self.unit!r}, records={len(self._records)})"
