"""Catalog writers.

PotCatalogWriter persists a Catalog as gettext POT templates, one per domain,
using Babel's babel.messages package. Output is diff-friendly: entries sorted,
no timestamped header, stale templates removed, so re-extracting
unchanged code yields byte-identical files.

Python 3.13+. Depends on Babel.
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from babel.messages.catalog import Catalog as BabelCatalog
from babel.messages.pofile import write_po

if TYPE_CHECKING:
    from mezzofanti.extraction.extractor import Catalog
    from mezzofanti.message import Message

__all__ = ["CatalogWriter", "PotCatalogWriter"]

logger = logging.getLogger(__name__)

# Marks entries whose msgid/msgstr are ICU templates, not printf formats.
ICU_FLAG = "icu-format"


class CatalogWriter(Protocol):
    """Persists an extracted Catalog under a destination directory."""

    def write(self, catalog: Catalog, destination: str | Path) -> tuple[Path, ...]:
        """Write catalog, replacing stale output; return the written files."""
        ...


class PotCatalogWriter:
    """Writes `<destination>/<domain>.pot` for every domain in the catalog.

    Example:
        >>> PotCatalogWriter().write(catalog, "priv/mezzofanti")
        (PosixPath('priv/mezzofanti/default.pot'),)

    Attributes:
        width: Line width for wrapped msgids (0 disables wrapping)
    """

    __slots__ = ("width",)

    def __init__(self, *, width: int = 76) -> None:
        self.width = width

    @staticmethod
    def _to_babel(domain: str, messages: tuple[Message, ...]) -> BabelCatalog:
        catalog = BabelCatalog(domain=domain, charset="utf-8", fuzzy=False)
        for message in messages:
            auto_comments = [message.comment] if message.comment else []
            if message.variables:
                auto_comments.append("variables: " + ", ".join(message.variables))
            catalog.add(
                message.text,
                string="",
                locations=[(site.file, site.line) for site in message.provenance],
                flags=(ICU_FLAG,),
                auto_comments=auto_comments,
                context=message.context or None,
            )
        return catalog

    @staticmethod
    def _check_domain(domain: str) -> None:
        if not domain or "/" in domain or "\\" in domain or ".." in domain:
            msg = f"Domain {domain!r} cannot be used as a file name"
            raise ValueError(msg)

    def render(self, domain: str, messages: tuple[Message, ...]) -> bytes:
        """Render one domain as POT bytes."""
        kept: list[Message] = []
        for message in messages:
            # An empty msgid is the PO header entry and cannot be a message
            if not message.text:
                logger.warning(
                    "Skipping message %s with empty text in domain %s",
                    message.identity,
                    domain,
                )
                continue
            kept.append(message)
        buffer = BytesIO()
        write_po(
            buffer,
            self._to_babel(domain, tuple(kept)),
            width=self.width,
            omit_header=True,
            sort_output=True,
            include_previous=False,
        )
        return buffer.getvalue()

    @staticmethod
    def clean(destination: Path, *, keep: tuple[Path, ...] = ()) -> tuple[Path, ...]:
        """Remove stale POT files from destination; return what was removed."""
        removed = tuple(p for p in sorted(destination.glob("*.pot")) if p not in keep)
        for path in removed:
            path.unlink()
        if removed:
            logger.debug("Removed %d stale templates from %s", len(removed), destination)
        return removed

    def write(self, catalog: Catalog, destination: str | Path) -> tuple[Path, ...]:
        """Write one POT file per domain.

        Every domain is validated and rendered before anything on disk is
        touched, so a rejected catalog leaves the previous output intact.

        Raises:
            OSError: If the destination cannot be created or written
            ValueError: If a domain name is unsafe as a file name
        """
        domains = catalog.domains()
        for domain in domains:
            self._check_domain(domain)
        rendered = {domain: self.render(domain, catalog.for_domain(domain)) for domain in domains}

        root = Path(destination)
        root.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for domain, content in rendered.items():
            path = root / f"{domain}.pot"
            path.write_bytes(content)
            written.append(path)
            logger.info("Wrote %s", path)
        self.clean(root, keep=tuple(written))
        return tuple(written)
