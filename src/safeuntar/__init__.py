"""safeuntar — Contained TAR extraction for Python.

Every entry stays under the extraction root.  Zero dependencies.
Python 3.10+.
"""

from __future__ import annotations

__title__ = "safeuntar"
__version__ = "0.1"
__author__ = "Artur Barseghyan <artur.barseghyan@gmail.com>"
__copyright__ = "2026 Artur Barseghyan"
__license__ = "MIT"

from safeuntar._entries import Entry, iter_entries
from safeuntar._events import EntryType, SecurityEvent
from safeuntar._exceptions import (
    InsecureLinkError,
    MalformedArchiveError,
    MemberNotFoundError,
    SafeuntarError,
    WrongEntryTypeError,
)

# Deferred imports: _core pulls in every other module, so it is loaded
# only when one of its names is first requested.
_CORE_NAMES = (
    "TarExtractor",
    "extract_file_from_tar",
    "extract_tar",
    "read_file",
    "safe_extract",
)


def __getattr__(name: str) -> object:
    if name in _CORE_NAMES:
        from safeuntar import _core

        for core_name in _CORE_NAMES:
            globals()[core_name] = getattr(_core, core_name)
        return globals()[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Core
    "TarExtractor",
    "extract_tar",
    "extract_file_from_tar",
    "safe_extract",
    "read_file",
    # Entries
    "Entry",
    "EntryType",
    "iter_entries",
    # Exceptions
    "SafeuntarError",
    "InsecureLinkError",
    "MemberNotFoundError",
    "WrongEntryTypeError",
    "MalformedArchiveError",
    # Events
    "SecurityEvent",
]
