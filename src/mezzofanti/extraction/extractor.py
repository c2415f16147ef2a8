"""Codebase-wide extraction: discover units, scan them, merge one catalog.

Units are the source modules of the application AND of its dependencies,
so a library that marks messages needs no catalog of its own: the
application's extraction picks its messages up.

Merge contract:
    - Records are grouped by identity; provenance lists are unioned.
    - comment: first non-empty comment in provenance order.
    - variables: from the first site (in provenance order) that declares any.
      Sites declaring different variable sets produce a
      VariableConsistencyWarning (warnings.warn + Catalog.warnings); the
      extraction still succeeds.
    - Every choice depends only on the set of records, never on the order in
      which units were scanned, so the merge is commutative and associative
      and units may be scanned in parallel.
    - Output is sorted by (domain, identity): unchanged input always yields
      the same Catalog.

Python 3.13+.
"""

from __future__ import annotations

import importlib.util
import logging
import warnings
from collections import defaultdict
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from mezzofanti.errors import ScanUnitFailure, VariableConsistencyWarning
from mezzofanti.extraction.scanner import scan_file
from mezzofanti.identity import MessageId
from mezzofanti.message import Message

__all__ = [
    "Catalog",
    "Extractor",
    "ScanUnit",
    "discover_units",
    "merge_exports",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, order=True)
class ScanUnit:
    """One source module to scan."""

    module: str
    """Dotted module name."""

    path: Path
    """Source file."""


@dataclass(frozen=True, slots=True)
class Catalog:
    """The deduplicated result of one extraction run.

    Attributes:
        messages: Merged messages sorted by (domain, identity)
        warnings: Variable consistency warnings raised during the merge
        failures: Units that could not be scanned, sorted by unit name
    """

    messages: tuple[Message, ...] = ()
    warnings: tuple[VariableConsistencyWarning, ...] = field(default=(), compare=False)
    failures: tuple[ScanUnitFailure, ...] = field(default=(), compare=False)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)

    def domains(self) -> tuple[str, ...]:
        """Return the distinct domains, sorted."""
        return tuple(sorted({message.domain for message in self.messages}))

    def for_domain(self, domain: str) -> tuple[Message, ...]:
        """Return the messages of one domain, in catalog order."""
        return tuple(message for message in self.messages if message.domain == domain)

    def get(self, identity: MessageId) -> Message | None:
        """Return the message with the given identity, if present."""
        for message in self.messages:
            if message.identity == identity:
                return message
        return None

    @property
    def ok(self) -> bool:
        """True when every unit was scanned."""
        return not self.failures


def _first_site(message: Message) -> tuple[object, ...]:
    # Records without provenance sort last; ties broken on content so the
    # choice never depends on input order.
    site = min(message.provenance) if message.provenance else None
    return (site is None, site or (), message.comment, message.variables)


def _merge_group(
    records: list[Message],
) -> tuple[Message, VariableConsistencyWarning | None]:
    ordered = sorted(records, key=_first_site)
    head = ordered[0]
    comment = next((r.comment for r in ordered if r.comment), "")
    variables = next((r.variables for r in ordered if r.variables), ())

    variants = tuple(dict.fromkeys(r.variables for r in ordered if r.variables))
    warning = None
    if len({frozenset(v) for v in variants}) > 1:
        warning = VariableConsistencyWarning(head.identity, head.text, variants)

    provenance = tuple(sorted({site for r in ordered for site in r.provenance}))
    merged = Message(
        head.text,
        domain=head.domain,
        context=head.context,
        comment=comment,
        variables=variables,
        provenance=provenance,
    )
    return merged, warning


def merge_exports(
    exports: Iterable[Iterable[Message]],
) -> tuple[tuple[Message, ...], tuple[VariableConsistencyWarning, ...]]:
    """Merge per-unit exports into sorted, deduplicated messages.

    Args:
        exports: One iterable of messages per unit (e.g. registry.export())

    Returns:
        (messages sorted by (domain, identity), consistency warnings sorted by
        identity)
    """
    groups: dict[MessageId, list[Message]] = defaultdict(list)
    for export in exports:
        for message in export:
            groups[message.identity].append(message)

    merged: list[Message] = []
    found: list[VariableConsistencyWarning] = []
    for identity in sorted(groups):
        message, warning = _merge_group(groups[identity])
        merged.append(message)
        if warning is not None:
            found.append(warning)

    merged.sort(key=lambda m: (m.domain, m.identity))
    return tuple(merged), tuple(found)


def _module_name(package: str, package_dir: Path, path: Path) -> str:
    parts = list(path.relative_to(package_dir).with_suffix("").parts)
    if parts[-1] == "__init__":
        parts.pop()
    return ".".join([package, *parts])


def discover_units(
    packages: Iterable[str],
) -> tuple[tuple[ScanUnit, ...], tuple[ScanUnitFailure, ...]]:
    """Enumerate the source modules of the named top-level packages or modules.

    Uses importlib.util.find_spec, which locates a top-level package without
    executing it. Packages without Python source (namespace-less extension
    modules, zip imports) are reported as failures.

    Args:
        packages: Importable names, e.g. ("myapp", "some_dependency")

    Returns:
        (units sorted by module name, failures for unresolvable packages)
    """
    units: set[ScanUnit] = set()
    failures: list[ScanUnitFailure] = []
    for package in dict.fromkeys(packages):
        try:
            spec = importlib.util.find_spec(package)
        except (ImportError, ValueError) as e:
            failures.append(ScanUnitFailure(package, "", f"{type(e).__name__}: {e}"))
            continue
        if spec is None:
            failures.append(ScanUnitFailure(package, "", "package not found"))
            continue

        if spec.submodule_search_locations:
            for location in spec.submodule_search_locations:
                package_dir = Path(location)
                for path in sorted(package_dir.rglob("*.py")):
                    units.add(ScanUnit(_module_name(package, package_dir, path), path))
        elif spec.origin and spec.origin.endswith(".py"):
            units.add(ScanUnit(package, Path(spec.origin)))
        else:
            failures.append(ScanUnitFailure(package, spec.origin or "", "no Python source"))
    return tuple(sorted(units)), tuple(failures)


class Extractor:
    """Scans units and merges their registries into one Catalog.

    Example:
        >>> units, failures = discover_units(["myapp", "mylib"])
        >>> catalog = Extractor(units, root=".", failures=failures).extract_all()
        >>> PotCatalogWriter().write(catalog, "priv/mezzofanti")

    Attributes:
        units: Units to scan
        root: Project root; provenance paths are relative to it
        max_workers: Scan threads (1 scans sequentially)
    """

    __slots__ = ("_failures", "max_workers", "root", "units")

    def __init__(
        self,
        units: Iterable[ScanUnit],
        *,
        root: str | Path = ".",
        max_workers: int = 1,
        failures: Iterable[ScanUnitFailure] = (),
    ) -> None:
        """Initialize extractor.

        Args:
            units: Units to scan
            root: Project root for relative provenance paths
            max_workers: Number of scan threads
            failures: Failures found before scanning (e.g. by discover_units),
                reported alongside scan failures
        """
        if max_workers < 1:
            msg = f"max_workers must be >= 1, got {max_workers}"
            raise ValueError(msg)
        self.units = tuple(units)
        self.root = Path(root)
        self.max_workers = max_workers
        self._failures = tuple(failures)

    def _scan(self, unit: ScanUnit) -> tuple[Message, ...] | ScanUnitFailure:
        try:
            return scan_file(unit.path, root=self.root, module=unit.module).export()
        except ScanUnitFailure as e:
            logger.warning("%s", e)
            return e

    def extract_all(self) -> Catalog:
        """Scan every unit and merge the results.

        Units that fail to scan are skipped and reported in Catalog.failures;
        the rest of the catalog is still built. Consistency warnings are both
        emitted through the warnings module and returned in Catalog.warnings.
        """
        if self.max_workers > 1 and len(self.units) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                results = list(pool.map(self._scan, self.units))
        else:
            results = [self._scan(unit) for unit in self.units]

        exports = [r for r in results if not isinstance(r, ScanUnitFailure)]
        failures = [*self._failures, *(r for r in results if isinstance(r, ScanUnitFailure))]
        messages, found = merge_exports(exports)

        for warning in found:
            logger.warning("%s", warning)
            warnings.warn(warning, stacklevel=2)

        logger.info(
            "Extracted %d messages from %d units (%d failed)",
            len(messages),
            len(exports),
            len(failures),
        )
        return Catalog(
            messages=messages,
            warnings=found,
            failures=tuple(sorted(failures, key=lambda f: (f.unit, f.path))),
        )
