"""Backend reading translations from gettext PO files.

Layout (one file per domain per locale):

    translations root
    └─ locale
       └─ LC_MESSAGES
          ├─ default.po
          └─ errors.po

Entries are keyed on (msgid, msgctxt) inside a (locale, domain) file, which is
exactly the (text, context) half of a message identity; the domain comes from
the file name. PO files are parsed with Babel's babel.messages.pofile.

Python 3.13+. Depends on Babel.
"""

from __future__ import annotations

import logging
from pathlib import Path
from threading import RLock
from typing import TYPE_CHECKING

from babel.messages.pofile import read_po

from mezzofanti.identity import MessageId, compute_identity
from mezzofanti.locale_utils import locale_chain

if TYPE_CHECKING:
    from mezzofanti.message import Message

__all__ = ["GettextBackend"]

logger = logging.getLogger(__name__)

type _Table = dict[MessageId, str]


class GettextBackend:
    """Backend over `<root>/<locale>/LC_MESSAGES/<domain>.po` files.

    Files are loaded lazily on first lookup of a (locale, domain) pair and kept
    for the lifetime of the backend. Missing files count as empty catalogs.
    Untranslated (empty msgstr) and fuzzy entries are misses.

    Lookups try the locale and then its parents: a pt_BR lookup falls back to
    pt/LC_MESSAGES/<domain>.po before reporting a miss.

    Thread Safety:
        Loading is guarded by an RLock; loaded tables are never mutated.

    Security:
        Locale and domain names containing path separators or ".." are
        rejected, so lookups cannot escape the translations root.

    Attributes:
        root: Translations root directory
    """

    __slots__ = ("_lock", "_tables", "root")

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._tables: dict[tuple[str, str], _Table] = {}
        self._lock = RLock()

    @staticmethod
    def _validate_component(kind: str, value: str) -> None:
        if not value:
            msg = f"{kind} cannot be empty"
            raise ValueError(msg)
        if ".." in value:
            msg = f"Path traversal sequences not allowed in {kind}: '{value}'"
            raise ValueError(msg)
        if "/" in value or "\\" in value:
            msg = f"Path separators not allowed in {kind}: '{value}'"
            raise ValueError(msg)

    def path_for(self, locale: str, domain: str) -> Path:
        """Return the PO file path for (locale, domain).

        Raises:
            ValueError: If locale or domain is unsafe as a path component
        """
        self._validate_component("locale", locale)
        self._validate_component("domain", domain)
        return self.root / locale / "LC_MESSAGES" / f"{domain}.po"

    def _load(self, locale: str, domain: str) -> _Table:
        path = self.path_for(locale, domain)
        table: _Table = {}
        try:
            with path.open("rb") as fileobj:
                catalog = read_po(fileobj, locale=None, domain=domain)
        except FileNotFoundError:
            logger.debug("No catalog for locale %s, domain %s at %s", locale, domain, path)
            return table

        for entry in catalog:
            # Header entry has an empty msgid; plural-form entries (tuple
            # msgids) are not produced by extraction, ICU plurals live inside
            # the template.
            if not entry.id or not isinstance(entry.id, str):
                continue
            if entry.fuzzy or not entry.string or not isinstance(entry.string, str):
                continue
            identity = compute_identity(entry.id, domain, entry.context or "")
            table[identity] = entry.string
        logger.debug("Loaded %d translations from %s", len(table), path)
        return table

    def _table(self, locale: str, domain: str) -> _Table:
        key = (locale, domain)
        table = self._tables.get(key)
        if table is not None:
            return table
        with self._lock:
            table = self._tables.get(key)
            if table is None:
                table = self._load(locale, domain)
                self._tables[key] = table
            return table

    def lookup(self, identity: MessageId, locale: str, message: Message) -> str | None:
        """Return the translated template, or None on a miss.

        Raises:
            ValueError: If locale or the message domain is unsafe as a path
            OSError: If a catalog exists but cannot be read
        """
        for candidate in locale_chain(locale):
            template = self._table(candidate, message.domain).get(identity)
            if template is not None:
                return template
        return None

    def loaded(self) -> tuple[tuple[str, str], ...]:
        """Return the (locale, domain) pairs loaded so far, sorted."""
        with self._lock:
            return tuple(sorted(self._tables))

    def clear_cache(self) -> None:
        """Drop loaded catalogs so the next lookup re-reads them from disk.

        Only call this while no resolution is in flight, e.g. between test
        cases or after a deploy step replaced the files.
        """
        with self._lock:
            self._tables.clear()
