"""Translation backends.

Exactly zero or one backend is active per process. With none configured,
Mezzofanti runs in pass-through mode and renders source texts.
"""

from .base import Backend
from .gettext import GettextBackend
from .memory import InMemoryBackend

__all__ = [
    "Backend",
    "GettextBackend",
    "InMemoryBackend",
]
