"""Tests for message identity computation.

Identity must be deterministic, stable across processes and machines, and
distinct for distinct (text, domain, context) triples.
"""

from __future__ import annotations

import subprocess
import sys

import pytest
from hypothesis import event, given
from hypothesis import strategies as st

from mezzofanti.errors import IdentityComputationError
from mezzofanti.identity import compute_identity

triples = st.tuples(st.text(), st.text(), st.text())


class TestComputeIdentity:
    """Basic behavior of compute_identity."""

    def test_known_value(self) -> None:
        """Identity of a fixed triple never changes between releases or machines."""
        assert compute_identity("Hello {name}!", "default", "") == (
            "45135152602452ce64ceb6839a0fc66e"
        )

    def test_defaults_are_default_domain_and_empty_context(self) -> None:
        """Omitted domain and context mean "default" and ""."""
        assert compute_identity("Hello") == compute_identity("Hello", "default", "")

    def test_fixed_width_lowercase_hex(self) -> None:
        """Identity is 32 lowercase hex characters."""
        identity = compute_identity("x", "d", "c")
        assert len(identity) == 32
        assert identity == identity.lower()
        int(identity, 16)

    def test_context_disambiguates(self) -> None:
        """Same text in different contexts gives different identities."""
        assert compute_identity("Open", context="door") != compute_identity("Open", context="file")

    def test_domain_disambiguates(self) -> None:
        """Same text in different domains gives different identities."""
        assert compute_identity("Open", "default") != compute_identity("Open", "errors")

    def test_field_boundaries_are_unambiguous(self) -> None:
        """Moving characters between fields changes the identity."""
        assert compute_identity("ab", "c", "") != compute_identity("a", "bc", "")
        assert compute_identity("a", "", "b") != compute_identity("a", "b", "")

    @pytest.mark.parametrize(
        ("text", "domain", "context"),
        [(1, "default", ""), ("x", None, ""), ("x", "default", b"ctx")],
    )
    def test_non_string_fields_raise(self, text: object, domain: object, context: object) -> None:
        """Non-string fields are a programmer error."""
        with pytest.raises(IdentityComputationError):
            compute_identity(text, domain, context)  # type: ignore[arg-type]

    def test_identity_error_is_type_error(self) -> None:
        """IdentityComputationError can be caught as TypeError."""
        with pytest.raises(TypeError):
            compute_identity(None)  # type: ignore[arg-type]

    def test_stable_across_processes(self) -> None:
        """A fresh interpreter (new hash seed) computes the same identity."""
        code = (
            "from mezzofanti.identity import compute_identity;"
            "print(compute_identity('Hello {name}!', 'default', ''))"
        )
        result = subprocess.run(
            [sys.executable, "-c", code],
            capture_output=True,
            text=True,
            check=True,
            env={"PYTHONHASHSEED": "12345", "PYTHONPATH": ":".join(sys.path)},
        )
        assert result.stdout.strip() == compute_identity("Hello {name}!")


class TestIdentityProperties:
    """Property-based tests for identity determinism and distinctness."""

    @given(triple=triples)
    def test_deterministic(self, triple: tuple[str, str, str]) -> None:
        """Equal inputs always give equal identities."""
        assert compute_identity(*triple) == compute_identity(*triple)

    @given(a=triples, b=triples)
    def test_distinct_inputs_distinct_identities(
        self, a: tuple[str, str, str], b: tuple[str, str, str]
    ) -> None:
        """Different triples give different identities."""
        event("equal" if a == b else "different")
        assert (compute_identity(*a) == compute_identity(*b)) == (a == b)

    @given(text=st.text(alphabet=st.characters(codec="utf-8")))
    def test_unicode_text(self, text: str) -> None:
        """Any encodable text hashes without error."""
        assert len(compute_identity(text)) == 32
