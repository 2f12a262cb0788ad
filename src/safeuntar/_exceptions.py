"""Exception hierarchy for safeuntar.

Library-specific exceptions inherit from ``SafeuntarError`` so callers can
catch the package's own error surface with a single ``except`` clause.
Ordinary filesystem failures are not wrapped: they surface as the
built-in ``OSError`` family.
"""

from __future__ import annotations

__author__ = "Artur Barseghyan <artur.barseghyan@gmail.com>"
__copyright__ = "2026 Artur Barseghyan"
__license__ = "MIT"


class SafeuntarError(Exception):
    """Base exception for all safeuntar errors."""


class InsecureLinkError(SafeuntarError):
    """An entry's resolved path escapes the extraction root.

    Raised for every entry type (regular files and directories as well
    as symlinks and hardlinks) whose name, joined onto the root and
    lexically normalised, lands outside it.  Also raised for a hardlink
    whose source path escapes the root.
    """

    def __init__(self, name: str, reason: str = "escapes extraction root") -> None:
        super().__init__(f"Insecure entry {name!r}: {reason}")
        self.name = name


class MemberNotFoundError(SafeuntarError, LookupError):
    """No entry with the requested name exists in the archive."""

    def __init__(self, name: str) -> None:
        super().__init__(f"File {name!r} not found in archive")
        self.name = name


class WrongEntryTypeError(SafeuntarError):
    """The requested entry exists but is not a regular file."""

    def __init__(self, name: str, entry_type: object) -> None:
        super().__init__(f"Entry {name!r} is not a regular file ({entry_type})")
        self.name = name
        self.entry_type = entry_type


class MalformedArchiveError(SafeuntarError):
    """The archive stream is structurally invalid.

    Raised for unreadable headers, truncated streams, and regular-file
    entries whose content ends before the declared size.
    """
