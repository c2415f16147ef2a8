"""Nesting limit for template parsing and rendering.

Plural and select branches may contain further arguments, so both the parser
and the formatter recurse once per nesting level. DepthGuard bounds that
recursion and reports excess nesting as FormatError.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mezzofanti.constants import MAX_NESTING_DEPTH
from mezzofanti.errors import FormatError

__all__ = ["DepthGuard"]


@dataclass(slots=True)
class DepthGuard:
    """Context manager counting nested arguments.

    Usage:
        guard = DepthGuard(template=source)
        with guard:
            self.parse_options(...)

    Not frozen: current_depth goes up on __enter__ and down on __exit__.
    Use one guard per parse or render call.

    Attributes:
        template: Template reported in the FormatError
        max_depth: Maximum allowed nesting
        current_depth: Current nesting
    """

    template: str = ""
    max_depth: int = MAX_NESTING_DEPTH
    current_depth: int = field(default=0, init=False)

    def __enter__(self) -> DepthGuard:
        # Check before incrementing; __exit__ does not run when __enter__ raises
        if self.current_depth >= self.max_depth:
            msg = f"Template nesting exceeds {self.max_depth} levels"
            raise FormatError(msg, template=self.template)
        self.current_depth += 1
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.current_depth -= 1
