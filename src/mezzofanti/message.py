"""Message records carried from extraction to runtime lookup.

Message is the catalog entry: the identity triple (text, domain, context), a
translator comment, the declared variables and where the message was marked.
Provenance is informational only and never affects identity.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from mezzofanti.constants import DEFAULT_CONTEXT, DEFAULT_DOMAIN
from mezzofanti.identity import MessageId, compute_identity

__all__ = ["Message", "Provenance"]


@dataclass(frozen=True, slots=True, order=True)
class Provenance:
    """Location of one call site that marks a message.

    Ordered by (file, line, module) so merged provenance lists sort
    deterministically.
    """

    file: str
    """Source path relative to the project root."""

    line: int
    """1-based line number of the call."""

    module: str
    """Dotted name of the owning module."""

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


def _dedupe(names: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))


@dataclass(frozen=True, slots=True)
class Message:
    """A translatable message.

    Use Message(...) directly; identity is derived in __post_init__ and cannot
    be passed in, so a Message can never carry a stale identity.

    Example:
        >>> msg = Message("Hello {name}!", variables=("name",))
        >>> msg.domain, msg.context
        ('default', '')
        >>> msg.identity == compute_identity("Hello {name}!")
        True
    """

    text: str
    domain: str = DEFAULT_DOMAIN
    context: str = DEFAULT_CONTEXT
    comment: str = ""
    variables: tuple[str, ...] = ()
    provenance: tuple[Provenance, ...] = ()
    identity: MessageId = field(init=False, compare=False)

    def __post_init__(self) -> None:
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "variables", _dedupe(tuple(self.variables)))
        object.__setattr__(self, "provenance", tuple(self.provenance))
        object.__setattr__(
            self, "identity", compute_identity(self.text, self.domain, self.context)
        )

    @property
    def key(self) -> tuple[str, str, str]:
        """The identity triple (text, domain, context)."""
        return (self.text, self.domain, self.context)

    def with_provenance(self, *sites: Provenance) -> Message:
        """Return a copy with the given sites added to provenance."""
        merged = tuple(sorted(set(self.provenance).union(sites)))
        return replace(self, provenance=merged)

    def merge(self, other: Message) -> Message:
        """Union the provenance of two records of the same message.

        Comment and variables of self win when non-empty; callers that need
        order independence (the extractor) pick them before merging.

        Raises:
            ValueError: If the records have different identities
        """
        if other.identity != self.identity:
            msg = f"Cannot merge message {other.identity} into {self.identity}"
            raise ValueError(msg)
        return replace(
            self,
            comment=self.comment or other.comment,
            variables=self.variables or other.variables,
            provenance=tuple(sorted(set(self.provenance).union(other.provenance))),
        )
