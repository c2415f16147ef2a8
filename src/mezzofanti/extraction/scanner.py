"""Static discovery of translate() call sites.

Walks a module's AST, without importing or executing it, and synthesizes one
Message per extractable call to the marking entry point. The scanner tracks
how the entry point was imported, so all of these are recognized:

    from mezzofanti import translate            translate("...")
    from mezzofanti import translate as _       _("...")
    import mezzofanti                           mezzofanti.translate("...")
    import mezzofanti as m                      m.translate("...")

A call is extractable when its text, domain and context are string literals
(implicit concatenation of literals counts). Other calls are skipped with a
warning naming the file and line; they still work at runtime but can never be
translated.

Declared variables come from a literal `variables={...}` dict or a
`variables=dict(...)` call; otherwise they are the template's placeholders.

Python 3.13+.
"""

from __future__ import annotations

import ast
import logging
from pathlib import Path

from mezzofanti.constants import DEFAULT_CONTEXT, DEFAULT_DOMAIN, MARKER_MODULE, MARKER_NAME
from mezzofanti.errors import FormatError, ScanUnitFailure
from mezzofanti.extraction.registry import MessageRegistry
from mezzofanti.formatting import extract_placeholders
from mezzofanti.message import Message, Provenance

__all__ = ["scan_file", "scan_source"]

logger = logging.getLogger(__name__)

# Modules that export the marking entry point.
_MARKER_MODULES = frozenset((MARKER_MODULE, f"{MARKER_MODULE}.translator"))
_IDENTITY_KEYWORDS = (("domain", DEFAULT_DOMAIN), ("context", DEFAULT_CONTEXT))


def _literal_str(node: ast.expr | None) -> str | None:
    match node:
        case ast.Constant(value=str(value)):
            return value
        case _:
            return None


class _ImportCollector(ast.NodeVisitor):
    """Collects the local names bound to the marker and to its module."""

    def __init__(self) -> None:
        self.functions: set[str] = set()
        self.modules: set[str] = set()

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            if alias.name in _MARKER_MODULES:
                # `import mezzofanti.translator` binds the top-level package
                self.modules.add(alias.asname or MARKER_MODULE)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        if node.level or node.module not in _MARKER_MODULES:
            return
        for alias in node.names:
            if alias.name in (MARKER_NAME, "*"):
                self.functions.add(alias.asname or MARKER_NAME)


class _CallSiteVisitor(ast.NodeVisitor):
    """Registers a Message for every extractable marker call."""

    def __init__(
        self,
        registry: MessageRegistry,
        *,
        filename: str,
        functions: set[str],
        modules: set[str],
    ) -> None:
        self.registry = registry
        self.filename = filename
        self.functions = functions
        self.modules = modules
        self.skipped = 0

    def is_marker(self, func: ast.expr) -> bool:
        match func:
            case ast.Name(id=name):
                return name in self.functions
            case ast.Attribute(value=ast.Name(id=owner), attr=attr):
                return attr == MARKER_NAME and owner in self.modules
            case ast.Attribute(
                value=ast.Attribute(value=ast.Name(id=owner), attr="translator"), attr=attr
            ):
                return attr == MARKER_NAME and owner in self.modules
            case _:
                return False

    def skip(self, node: ast.Call, reason: str) -> None:
        self.skipped += 1
        logger.warning(
            "%s:%d: skipping non-extractable message: %s", self.filename, node.lineno, reason
        )

    def visit_Call(self, node: ast.Call) -> None:
        if self.is_marker(node.func):
            self.record(node)
        self.generic_visit(node)

    def record(self, node: ast.Call) -> None:
        keywords = {kw.arg: kw.value for kw in node.keywords if kw.arg is not None}
        if any(kw.arg is None for kw in node.keywords):
            self.skip(node, "**kwargs may override domain or context")
            return

        text_node = node.args[0] if node.args else keywords.get("text")
        text = _literal_str(text_node)
        if text is None:
            self.skip(node, "text is not a string literal")
            return
        if not text:
            self.skip(node, "text is empty")
            return

        fields: dict[str, str] = {}
        for name, default in _IDENTITY_KEYWORDS:
            if name not in keywords:
                fields[name] = default
                continue
            value = _literal_str(keywords[name])
            if value is None:
                self.skip(node, f"{name} is not a string literal")
                return
            fields[name] = value

        comment = ""
        if "comment" in keywords:
            literal = _literal_str(keywords["comment"])
            if literal is None:
                logger.debug("%s:%d: ignoring non-literal comment", self.filename, node.lineno)
            else:
                comment = literal

        site = Provenance(self.filename, node.lineno, self.registry.unit)
        self.registry.register(
            Message(
                text,
                domain=fields["domain"],
                context=fields["context"],
                comment=comment,
                variables=self.declared_variables(text, keywords.get("variables"), node),
                provenance=(site,),
            )
        )

    def declared_variables(
        self, text: str, node: ast.expr | None, call: ast.Call
    ) -> tuple[str, ...]:
        match node:
            case ast.Dict(keys=keys) if keys and all(_literal_str(k) is not None for k in keys):
                return tuple(_literal_str(k) or "" for k in keys)
            case ast.Call(func=ast.Name(id="dict"), args=[], keywords=kws) if all(
                kw.arg is not None for kw in kws
            ):
                return tuple(kw.arg for kw in kws if kw.arg is not None)
            case _:
                try:
                    return extract_placeholders(text)
                except FormatError as e:
                    logger.warning("%s:%d: %s", self.filename, call.lineno, e)
                    return ()


def scan_source(source: str, *, filename: str, module: str) -> MessageRegistry:
    """Scan Python source and return its unit registry.

    Args:
        source: Module source code
        filename: Path recorded in provenance (relative to the project root)
        module: Dotted module name of the unit

    Raises:
        ScanUnitFailure: If the source cannot be parsed
    """
    try:
        tree = ast.parse(source, filename=filename)
    except (SyntaxError, ValueError) as e:
        raise ScanUnitFailure(module, filename, f"{type(e).__name__}: {e}") from e

    imports = _ImportCollector()
    imports.visit(tree)
    registry = MessageRegistry(module)
    if not imports.functions and not imports.modules:
        return registry

    visitor = _CallSiteVisitor(
        registry, filename=filename, functions=imports.functions, modules=imports.modules
    )
    visitor.visit(tree)
    logger.debug(
        "Scanned %s: %d messages, %d skipped call sites", module, len(registry), visitor.skipped
    )
    return registry


def scan_file(path: str | Path, *, root: str | Path, module: str) -> MessageRegistry:
    """Read and scan one source file.

    Args:
        path: Source file
        root: Project root; provenance records the path relative to it (or the
            absolute path if the file lives outside the root)
        module: Dotted module name of the unit

    Raises:
        ScanUnitFailure: If the file cannot be read, decoded or parsed
    """
    file_path = Path(path)
    try:
        relative = file_path.resolve().relative_to(Path(root).resolve()).as_posix()
    except ValueError:
        relative = file_path.resolve().as_posix()
    try:
        source = file_path.read_bytes().decode("utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise ScanUnitFailure(module, relative, f"{type(e).__name__}: {e}") from e
    return scan_source(source, filename=relative, module=module)
