"""Deferred directory metadata.

Tar archives may declare a directory before or after the files placed
inside it, and writing a file forces its parents into existence with a
provisional mode.  Directory permissions are therefore collected during
extraction and applied once at the end, so the last declaration for a
path wins regardless of entry order.
"""

from __future__ import annotations

__author__ = "Artur Barseghyan <artur.barseghyan@gmail.com>"
__copyright__ = "2026 Artur Barseghyan"
__license__ = "MIT"
__all__ = ("DeferredDirectoryModes",)

import logging
import os
import stat
from pathlib import Path

log = logging.getLogger("safeuntar")


class DeferredDirectoryModes:
    """Pending directory modes, keyed by validated destination path.

    Iteration follows first-seen order; re-recording a path overwrites
    its mode (and timestamp) without moving it.
    """

    def __init__(self) -> None:
        self._pending: dict[Path, tuple[int, float | None]] = {}
        self._flushed = False

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, path: object) -> bool:
        return path in self._pending

    def record(self, path: Path, mode: int, mtime: float | None = None) -> None:
        """Remember *mode* (and optionally *mtime*) as final for *path*."""
        if self._flushed:
            raise RuntimeError("Directory modes have already been applied")
        self._pending[path] = (stat.S_IMODE(mode), mtime)

    def items(self) -> list[tuple[Path, int]]:
        """Return ``(path, mode)`` pairs in application order."""
        return [(path, mode) for path, (mode, _) in self._pending.items()]

    def flush(self) -> None:
        """Apply every pending mode, in recorded order.

        May be called only once.  Timestamps come after ``chmod`` so a
        later permission change does not disturb them.
        """
        if self._flushed:
            raise RuntimeError("Directory modes have already been applied")
        self._flushed = True

        for path, (mode, mtime) in self._pending.items():
            os.chmod(path, mode)
            if mtime is not None:
                os.utime(path, (mtime, mtime))
            log.debug("Applied mode %o to %s", mode, path)
        self._pending.clear()
