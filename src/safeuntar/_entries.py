"""Archive entries and the forward-only adapter over ``tarfile``.

The extractor never parses the tar wire format itself.  It consumes a
stream of ``Entry`` records, one at a time, in archive order.
``iter_entries`` builds that stream from an open ``tarfile.TarFile``
(stream modes such as ``"r|*"`` included), so compression framing stays
entirely inside the standard library decoder.
"""

from __future__ import annotations

__author__ = "Artur Barseghyan <artur.barseghyan@gmail.com>"
__copyright__ = "2026 Artur Barseghyan"
__license__ = "MIT"
__all__ = (
    "Entry",
    "iter_entries",
)

import tarfile
from collections.abc import Iterator
from dataclasses import dataclass
from typing import BinaryIO

from safeuntar._events import EntryType
from safeuntar._exceptions import MalformedArchiveError


@dataclass(frozen=True, slots=True)
class Entry:
    """One archive record.

    ``fileobj`` is the content stream of a ``REGULAR_FILE`` entry and is
    ``None`` for every other type.  It may be read exactly once, and only
    before the next entry is pulled from the source.
    """

    name: str
    type: EntryType
    linkname: str = ""
    mode: int = 0o644
    size: int = 0
    mtime: float | None = None
    uid: int = 0
    gid: int = 0
    fileobj: BinaryIO | None = None


def _entry_type(info: tarfile.TarInfo) -> EntryType:
    # isreg() covers REGTYPE, AREGTYPE, CONTTYPE and GNU sparse files.
    if info.isreg():
        return EntryType.REGULAR_FILE
    if info.isdir():
        return EntryType.DIRECTORY
    if info.issym():
        return EntryType.SYMLINK
    if info.islnk():
        return EntryType.HARDLINK
    return EntryType.OTHER


def iter_entries(tf: tarfile.TarFile) -> Iterator[Entry]:
    """Yield an ``Entry`` for every member of *tf*, in archive order.

    Uses a ``next()`` loop rather than ``getmembers()`` so that stream
    mode archives are read strictly forward.

    :raises MalformedArchiveError: If the decoder fails on a header.
    """
    while True:
        try:
            info = tf.next()
        except (tarfile.TarError, EOFError) as exc:
            # EOFError is raised directly by the gzip/bz2/lzma
            # decompressor when the stream is truncated.
            raise MalformedArchiveError(str(exc)) from exc
        if info is None:
            return

        entry_type = _entry_type(info)
        fileobj = tf.extractfile(info) if entry_type is EntryType.REGULAR_FILE else None
        yield Entry(
            name=info.name,
            type=entry_type,
            linkname=info.linkname,
            mode=info.mode,
            size=info.size,
            mtime=info.mtime,
            uid=info.uid,
            gid=info.gid,
            fileobj=fileobj,
        )
