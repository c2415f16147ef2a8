"""Tests for the per-unit MessageRegistry."""

from __future__ import annotations

from mezzofanti.extraction.registry import MessageRegistry
from mezzofanti.message import Message, Provenance


def _site(line: int) -> Provenance:
    return Provenance("app/views.py", line, "app.views")


class TestMessageRegistry:
    """Accumulation and export."""

    def test_empty(self) -> None:
        """A new registry exports nothing."""
        registry = MessageRegistry("app.views")
        assert registry.export() == ()
        assert len(registry) == 0
        assert registry.unit == "app.views"

    def test_export_in_discovery_order(self) -> None:
        """export() preserves registration order."""
        registry = MessageRegistry("app.views")
        messages = [Message(text, provenance=(_site(i),)) for i, text in enumerate("cab")]
        for message in messages:
            registry.register(message)
        assert registry.export() == tuple(messages)

    def test_same_call_site_last_write_wins(self) -> None:
        """Re-registering one call site replaces it in place."""
        registry = MessageRegistry("app.views")
        registry.register(Message("a", provenance=(_site(1),)))
        registry.register(Message("b", provenance=(_site(2),)))
        for _ in range(100):
            registry.register(Message("a", comment="latest", provenance=(_site(1),)))
        exported = registry.export()
        assert len(exported) == 2
        assert exported[0].text == "a"
        assert exported[0].comment == "latest"

    def test_distinct_call_sites_kept(self) -> None:
        """The same message marked twice in one unit is kept twice."""
        registry = MessageRegistry("app.views")
        registry.register(Message("a", provenance=(_site(1),)))
        registry.register(Message("a", provenance=(_site(9),)))
        assert len(registry) == 2
        assert registry.identities() == frozenset({Message("a").identity})

    def test_contains_by_identity(self) -> None:
        """Membership is tested by identity."""
        registry = MessageRegistry("app.views")
        registry.register(Message("a"))
        assert Message("a").identity in registry
        assert Message("b").identity not in registry

    def test_export_does_not_mutate(self) -> None:
        """Exporting twice returns equal snapshots."""
        registry = MessageRegistry("app.views")
        registry.register(Message("a"))
        assert registry.export() == registry.export()
        assert list(registry) == list(registry.export())
