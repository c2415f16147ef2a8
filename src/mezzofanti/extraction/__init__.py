"""Static extraction pipeline.

Two phases:
    1. scanner: one MessageRegistry per source module, built from the AST
    2. extractor: registries of every unit (application and dependencies)
       merged into one deduplicated Catalog

writer persists the Catalog as gettext POT templates.
"""

from .extractor import Catalog, Extractor, ScanUnit, discover_units, merge_exports
from .registry import MessageRegistry
from .scanner import scan_file, scan_source
from .writer import CatalogWriter, PotCatalogWriter

__all__ = [
    "Catalog",
    "CatalogWriter",
    "Extractor",
    "MessageRegistry",
    "PotCatalogWriter",
    "ScanUnit",
    "discover_units",
    "merge_exports",
    "scan_file",
    "scan_source",
]
