"""Tests for the current-locale context."""

from __future__ import annotations

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from mezzofanti.errors import ConfigurationError
from mezzofanti.locale_context import (
    call_with_locale,
    current_locale,
    get_default_locale,
    set_default_locale,
    with_locale,
)


class TestDefaultLocale:
    """Write-once process default."""

    def test_fallback_when_unset(self) -> None:
        """Without configuration the default is "en"."""
        assert get_default_locale() == "en"
        assert current_locale() == "en"

    def test_set_once(self) -> None:
        """The default is normalized and becomes the current locale."""
        set_default_locale("pt-PT")
        assert get_default_locale() == "pt_PT"
        assert current_locale() == "pt_PT"

    def test_same_value_again_is_allowed(self) -> None:
        """Repeating the same default is a no-op."""
        set_default_locale("de")
        set_default_locale("de")
        assert get_default_locale() == "de"

    def test_different_value_rejected(self) -> None:
        """The default cannot be changed at runtime."""
        set_default_locale("de")
        with pytest.raises(ConfigurationError, match="already set"):
            set_default_locale("fr")
        assert get_default_locale() == "de"

    def test_empty_rejected(self) -> None:
        """An empty default is invalid."""
        with pytest.raises(ValueError, match="empty"):
            set_default_locale("")


class TestWithLocale:
    """Scoped overrides."""

    def test_override_and_restore(self) -> None:
        """The override applies inside the block only."""
        with with_locale("it") as active:
            assert active == "it"
            assert current_locale() == "it"
        assert current_locale() == "en"

    def test_nested(self) -> None:
        """Inner overrides shadow outer ones and unwind in order."""
        with with_locale("it"):
            with with_locale("fr-CA"):
                assert current_locale() == "fr_CA"
            assert current_locale() == "it"
        assert current_locale() == "en"

    def test_restored_on_exception(self) -> None:
        """An exception leaving the block still restores the previous locale."""
        with pytest.raises(RuntimeError), with_locale("it"):
            raise RuntimeError("boom")
        assert current_locale() == "en"

    def test_override_beats_default(self) -> None:
        """An override wins over the configured default."""
        set_default_locale("de")
        with with_locale("it"):
            assert current_locale() == "it"
        assert current_locale() == "de"

    def test_call_with_locale(self) -> None:
        """The functional form passes arguments through."""
        def wrap(prefix: str, *, suffix: str) -> str:
            return prefix + current_locale() + suffix

        result = call_with_locale("it", wrap, "<", suffix=">")
        assert result == "<it>"
        assert current_locale() == "en"

    def test_call_with_locale_restores_on_exception(self) -> None:
        """The functional form restores on error too."""

        def fail() -> None:
            raise ValueError(current_locale())

        with pytest.raises(ValueError, match="it"):
            call_with_locale("it", fail)
        assert current_locale() == "en"


class TestIsolation:
    """Overrides never leak between threads or tasks."""

    def test_threads_do_not_see_each_other(self) -> None:
        """Each thread has its own override."""
        barrier = threading.Barrier(4)

        def work(locale: str) -> str:
            with with_locale(locale):
                barrier.wait(timeout=5)
                return current_locale()

        locales = ["it", "fr", "de", "ja"]
        with ThreadPoolExecutor(max_workers=4) as pool:
            assert list(pool.map(work, locales)) == locales

    def test_new_thread_starts_without_override(self) -> None:
        """Threads do not inherit the creator's override."""
        seen: list[str] = []
        with with_locale("it"):
            thread = threading.Thread(target=lambda: seen.append(current_locale()))
            thread.start()
            thread.join()
        assert seen == ["en"]

    def test_asyncio_tasks_are_isolated(self) -> None:
        """An override set inside one task is invisible to its siblings."""

        async def task(locale: str, ready: asyncio.Event, go: asyncio.Event) -> str:
            with with_locale(locale):
                ready.set()
                await go.wait()
                return current_locale()

        async def main() -> list[str]:
            go = asyncio.Event()
            readies = [asyncio.Event() for _ in range(3)]
            tasks = [
                asyncio.create_task(task(loc, ready, go))
                for loc, ready in zip(["it", "fr", "de"], readies, strict=True)
            ]
            for ready in readies:
                await ready.wait()
            outside = current_locale()
            go.set()
            return [outside, *await asyncio.gather(*tasks)]

        assert asyncio.run(main()) == ["en", "it", "fr", "de"]

    def test_cancelled_task_restores(self) -> None:
        """Cancellation unwinds the override."""
        observed: list[str] = []

        async def sleeper() -> None:
            try:
                with with_locale("it"):
                    await asyncio.sleep(10)
            finally:
                observed.append(current_locale())

        async def main() -> None:
            t = asyncio.create_task(sleeper())
            await asyncio.sleep(0)
            t.cancel()
            with pytest.raises(asyncio.CancelledError):
                await t

        asyncio.run(main())
        assert observed == ["en"]
