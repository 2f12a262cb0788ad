"""Entry types and security event dataclass for safeuntar."""

from __future__ import annotations

__author__ = "Artur Barseghyan <artur.barseghyan@gmail.com>"
__copyright__ = "2026 Artur Barseghyan"
__license__ = "MIT"

from dataclasses import dataclass
from enum import Enum


class EntryType(Enum):
    """Kinds of archive entries the extractor distinguishes.

    ``DIRECTORY``
        Created with provisional permissions; final mode is deferred.
    ``REGULAR_FILE``
        Content is streamed to disk (or into memory).
    ``SYMLINK``
        Created verbatim; the target is not validated.
    ``HARDLINK``
        Linked to an already extracted source inside the root.
    ``OTHER``
        Devices, FIFOs and anything unrecognised.  Silently skipped.
    """

    DIRECTORY = "directory"
    REGULAR_FILE = "regular_file"
    SYMLINK = "symlink"
    HARDLINK = "hardlink"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """Immutable record of a security event detected during extraction.

    Deliberately excludes filenames, paths, and member names so that
    forwarding an event to a third-party service does not leak
    confidential filesystem information.
    """

    event_type: str
    """Type identifier, e.g. ``"symlink_violation"``."""

    entry_type: EntryType
    """Declared type of the offending entry."""

    timestamp: float
    """``time.time()`` at the moment of detection."""
