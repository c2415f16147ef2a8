"""Stable message fingerprints.

A message is identified by the triple (text, domain, context). The identity is
the first 128 bits of a SHA-256 digest over a length-prefixed encoding of the
triple, rendered as lowercase hex. It is stable across processes, interpreter
versions and machines: no hash() (randomized per process), no id(), no ordering
dependence.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import hashlib
from typing import NewType

from mezzofanti.constants import DEFAULT_CONTEXT, DEFAULT_DOMAIN, IDENTITY_DIGEST_CHARS
from mezzofanti.errors import IdentityComputationError

__all__ = ["MessageId", "compute_identity"]

MessageId = NewType("MessageId", str)

# Bumped only if the encoding below changes; catalogs keyed on old
# identities would then need re-extraction.
_IDENTITY_VERSION = b"mezzofanti:1"


def _encode_field(value: str) -> bytes:
    # Length prefix makes ("ab", "c") and ("a", "bc") distinct inputs.
    data = value.encode("utf-8", errors="surrogatepass")
    return len(data).to_bytes(8, "big") + data


def compute_identity(
    text: str,
    domain: str = DEFAULT_DOMAIN,
    context: str = DEFAULT_CONTEXT,
) -> MessageId:
    """Compute the identity of a message.

    Referentially transparent: equal inputs always give equal identities.
    Different inputs give different identities with overwhelming probability
    (a collision requires a 128-bit SHA-256 prefix collision).

    Args:
        text: Source-language message text
        domain: Message domain
        context: Disambiguating context (empty string for none)

    Returns:
        32-character lowercase hex identity

    Raises:
        IdentityComputationError: If any argument is not a string

    Example:
        >>> compute_identity("Hello {name}!") == compute_identity("Hello {name}!", "default", "")
        True
        >>> len(compute_identity("Hello"))
        32
    """
    for name, value in (("text", text), ("domain", domain), ("context", context)):
        if not isinstance(value, str):
            msg = f"Message {name} must be str, got {type(value).__name__}"
            raise IdentityComputationError(msg)

    digest = hashlib.sha256(_IDENTITY_VERSION)
    digest.update(_encode_field(text))
    digest.update(_encode_field(domain))
    digest.update(_encode_field(context))
    return MessageId(digest.hexdigest()[:IDENTITY_DIGEST_CHARS])
