"""Content streaming: copy exactly ``size`` bytes of a regular-file entry.

Reads are chunked so that large members never sit in memory when they
are written to disk.  A content stream that ends early, or that the
decoder cannot read, is reported as ``MalformedArchiveError``.
"""

from __future__ import annotations

__author__ = "Artur Barseghyan <artur.barseghyan@gmail.com>"
__copyright__ = "2026 Artur Barseghyan"
__license__ = "MIT"
__all__ = (
    "copy_member",
    "read_member",
)

import io
import logging
import tarfile
from collections.abc import Iterator
from typing import BinaryIO

from safeuntar._entries import Entry
from safeuntar._exceptions import MalformedArchiveError

log = logging.getLogger("safeuntar")

# Chunk size for streaming extraction.
_CHUNK_SIZE = 65536


def _iter_chunks(entry: Entry) -> Iterator[bytes]:
    """Yield the content of *entry* in chunks, exactly ``entry.size`` bytes."""
    remaining = entry.size
    if remaining <= 0:
        return
    if entry.fileobj is None:
        raise MalformedArchiveError(
            f"Entry {entry.name!r} declares {entry.size} bytes but has no content"
        )

    while remaining > 0:
        try:
            chunk = entry.fileobj.read(min(_CHUNK_SIZE, remaining))
        except (tarfile.TarError, EOFError) as exc:
            raise MalformedArchiveError(
                f"Archive stream error while reading {entry.name!r}: {exc}"
            ) from exc
        if not chunk:
            raise MalformedArchiveError(
                f"Content of {entry.name!r} ended {remaining} bytes early"
            )
        remaining -= len(chunk)
        yield chunk


def copy_member(entry: Entry, out: BinaryIO) -> int:
    """Copy the content of *entry* into *out* and return the byte count."""
    written = 0
    for chunk in _iter_chunks(entry):
        out.write(chunk)
        written += len(chunk)
    log.debug("Wrote %d bytes for %r", written, entry.name)
    return written


def read_member(entry: Entry) -> bytes:
    """Read the content of *entry* into memory."""
    buf = io.BytesIO()
    copy_member(entry, buf)
    return buf.getvalue()
