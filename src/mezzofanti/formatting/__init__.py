"""Template formatting.

The Formatter protocol is the seam between resolution and rendering.
MessageFormatter is the default implementation: an ICU MessageFormat subset
(simple, number, date, time, plural, selectordinal and select arguments)
backed by Babel's CLDR data.
"""

from .formatter import Formatter, MessageFormatter, select_plural_category
from .parser import extract_placeholders, parse_template

__all__ = [
    "Formatter",
    "MessageFormatter",
    "extract_placeholders",
    "parse_template",
    "select_plural_category",
]
