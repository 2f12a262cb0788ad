"""Entry dispatch: materialise an archive entry stream onto a directory.

``extract_tar`` walks the entries in archive order, runs each one
through the whitelist and the Sandbox, and dispatches on its type.
``extract_file_from_tar`` scans the same kind of stream for a single
regular file and returns its content without touching the filesystem.
"""

from __future__ import annotations

__author__ = "Artur Barseghyan <artur.barseghyan@gmail.com>"
__copyright__ = "2026 Artur Barseghyan"
__license__ = "MIT"
__all__ = (
    "TarExtractor",
    "extract_file_from_tar",
    "extract_tar",
    "read_file",
    "safe_extract",
)

import logging
import os
import stat
import tarfile
import time
from collections.abc import Callable, Collection, Iterable
from pathlib import Path
from typing import BinaryIO

from safeuntar._entries import Entry, iter_entries
from safeuntar._events import EntryType, SecurityEvent
from safeuntar._exceptions import (
    InsecureLinkError,
    MalformedArchiveError,
    MemberNotFoundError,
    WrongEntryTypeError,
)
from safeuntar._modes import DeferredDirectoryModes
from safeuntar._sandbox import (
    clean_member_name,
    normalise_whitelist,
    resolve_link_source,
    resolve_member_path,
    resolve_root,
)
from safeuntar._streamer import copy_member, read_member

log = logging.getLogger("safeuntar.security")

# Mode for directories created before their own entry is seen.
PROVISIONAL_DIR_MODE = 0o755


# ---- environment-variable configuration helpers ----------------------------
# Each helper reads the relevant SAFEUNTAR_* variable and returns its typed
# value, falling back to *fallback* on absence or parse failure.


def _env_bool(name: str, fallback: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return fallback
    return raw.lower() not in ("0", "false", "no", "off", "")


# Module-level defaults evaluated once at import time.
_DEFAULT_PRESERVE_OWNERSHIP: bool = _env_bool("SAFEUNTAR_PRESERVE_OWNERSHIP", False)
_DEFAULT_RESTORE_TIMESTAMPS: bool = _env_bool("SAFEUNTAR_RESTORE_TIMESTAMPS", True)


class TarExtractor:
    """Materialise archive entries under an existing extraction root.

    :param preserve_ownership: ``lchown`` every created object to the
        archived UID/GID (usually requires root).
    :param restore_timestamps: Restore archived mtimes on regular files
        and directories.
    :param on_security_event: Optional callback invoked once for every
        entry rejected by the containment check.
    """

    def __init__(
        self,
        *,
        preserve_ownership: bool = _DEFAULT_PRESERVE_OWNERSHIP,
        restore_timestamps: bool = _DEFAULT_RESTORE_TIMESTAMPS,
        on_security_event: Callable[[SecurityEvent], None] | None = None,
    ) -> None:
        self._preserve_ownership = preserve_ownership
        self._restore_timestamps = restore_timestamps
        self._on_security_event = on_security_event

    def extract(
        self,
        entries: Iterable[Entry],
        destination: str | os.PathLike[str],
        whitelist: Collection[str] | None = None,
    ) -> None:
        """Extract *entries* under *destination*.

        Stops at the first error.  Whatever was written before the
        error stays on disk.

        :raises InsecureLinkError: If any entry would land outside
            *destination*.
        :raises OSError: On any filesystem failure, including a hardlink
            whose source has not been extracted yet.
        """
        root = resolve_root(destination)
        pending_dirs = DeferredDirectoryModes()
        # Keys are cleaned once per run.
        allowed = normalise_whitelist(whitelist)

        for entry in entries:
            if allowed is not None and clean_member_name(entry.name) not in allowed:
                log.debug("Skipping %r: not whitelisted", entry.name)
                continue
            self._extract_one(entry, root, pending_dirs)

        # --- deferred directory metadata (after all entries extracted) ---
        pending_dirs.flush()

    # ---- internal ----------------------------------------------------------

    def _extract_one(
        self,
        entry: Entry,
        root: Path,
        pending_dirs: DeferredDirectoryModes,
    ) -> None:
        """Run Sandbox, then type dispatch, for a single entry."""
        try:
            dest_path, source_path = _resolve_entry(root, entry)
        except InsecureLinkError:
            self._fire_event(entry)
            raise

        if entry.type is EntryType.OTHER:
            log.debug("Skipping %r: unsupported entry type", entry.name)
            return

        _make_dirs(root, dest_path.parent if dest_path != root else root)

        match entry.type:
            case EntryType.DIRECTORY:
                # Deferred chmod/utime would otherwise follow the link.
                if dest_path.is_symlink():
                    dest_path.unlink()
                _make_dirs(root, dest_path)
                self._apply_ownership(entry, dest_path)
                pending_dirs.record(
                    dest_path,
                    entry.mode,
                    entry.mtime if self._restore_timestamps else None,
                )
            case EntryType.REGULAR_FILE:
                self._write_file(entry, dest_path)
            case EntryType.SYMLINK:
                _remove_existing(dest_path)
                os.symlink(entry.linkname, dest_path)
                self._apply_ownership(entry, dest_path)
            case EntryType.HARDLINK:
                if source_path is None or not os.path.lexists(source_path):
                    raise FileNotFoundError(
                        f"Hardlink source {entry.linkname!r} for {entry.name!r} "
                        "has not been extracted"
                    )
                if source_path == dest_path:
                    # A self-link is already satisfied by the source.
                    log.debug("Skipping %r: hardlink to itself", entry.name)
                    return
                _remove_existing(dest_path)
                os.link(source_path, dest_path)

        log.debug("Extracted %s %r", entry.type.value, entry.name)

    def _write_file(self, entry: Entry, dest_path: Path) -> None:
        # Never write through a symlink left at the destination.
        if dest_path.is_symlink():
            dest_path.unlink()

        with open(dest_path, "wb") as out:
            copy_member(entry, out)
            self._apply_ownership(entry, dest_path)
            # chmod after chown: chown can clear setuid/setgid bits.
            os.chmod(dest_path, stat.S_IMODE(entry.mode))

        if self._restore_timestamps and entry.mtime is not None:
            os.utime(dest_path, (entry.mtime, entry.mtime))

    def _apply_ownership(self, entry: Entry, dest_path: Path) -> None:
        if self._preserve_ownership:
            os.lchown(dest_path, entry.uid, entry.gid)

    def _fire_event(self, entry: Entry) -> None:
        """Invoke the on_security_event callback if configured."""
        if self._on_security_event is None:
            return

        event = SecurityEvent(
            event_type=_event_type_for(entry),
            entry_type=entry.type,
            timestamp=time.time(),
        )
        try:
            self._on_security_event(event)
        except Exception:
            log.exception("on_security_event callback raised an exception")


def _resolve_entry(root: Path, entry: Entry) -> tuple[Path, Path | None]:
    """Return the destination path and, for hardlinks, the source path."""
    dest_path = resolve_member_path(root, entry.name)
    if entry.type is EntryType.HARDLINK:
        return dest_path, resolve_link_source(root, entry.name, entry.linkname)
    return dest_path, None


def _make_dirs(root: Path, path: Path) -> None:
    """Create *path* and its missing ancestors below *root*.

    Unlike ``os.makedirs``, every newly created level gets the
    provisional mode, intermediate ones included.
    """
    current = root
    for part in path.relative_to(root).parts:
        current = current / part
        try:
            os.mkdir(current, PROVISIONAL_DIR_MODE)
        except FileExistsError:
            if not current.is_dir():
                raise


def _remove_existing(path: Path) -> None:
    """Remove a non-directory object at *path*, if any.

    Directories are left in place; the subsequent link call then fails
    with an ordinary ``OSError``.
    """
    if path.is_symlink() or (path.exists() and not path.is_dir()):
        path.unlink()


def _event_type_for(entry: Entry) -> str:
    """Derive a security event type string from the entry."""
    match entry.type:
        case EntryType.SYMLINK:
            return "symlink_violation"
        case EntryType.HARDLINK:
            return "hardlink_violation"
        case EntryType.DIRECTORY:
            return "directory_violation"
        case _:
            return "path_traversal"


def extract_tar(
    entries: Iterable[Entry],
    destination: str | os.PathLike[str],
    whitelist: Collection[str] | None = None,
    **kwargs: object,
) -> None:
    """Extract *entries* under the existing directory *destination*.

    *whitelist*, when given and non-empty, restricts extraction to the
    listed archive-relative paths.  Keyword arguments are forwarded to
    the ``TarExtractor`` constructor.
    """
    TarExtractor(**kwargs).extract(entries, destination, whitelist)  # type: ignore[arg-type]


def extract_file_from_tar(entries: Iterable[Entry], target: str) -> bytes:
    """Return the content of the regular file *target* from *entries*.

    The first entry named *target* decides the outcome; symlinks are
    never followed.

    :raises WrongEntryTypeError: If that entry is not a regular file.
    :raises MemberNotFoundError: If no entry is named *target*.
    """
    wanted = clean_member_name(target)
    for entry in entries:
        if clean_member_name(entry.name) != wanted:
            continue
        if entry.type is not EntryType.REGULAR_FILE:
            raise WrongEntryTypeError(target, entry.type.value)
        return read_member(entry)
    raise MemberNotFoundError(target)


# ---- convenience openers ---------------------------------------------------


def _open_stream(archive: str | os.PathLike[str] | BinaryIO) -> tarfile.TarFile:
    try:
        if isinstance(archive, (str, os.PathLike)):
            return tarfile.open(archive, mode="r|*")
        return tarfile.open(fileobj=archive, mode="r|*")
    except tarfile.TarError as exc:
        raise MalformedArchiveError(str(exc)) from exc


def safe_extract(
    archive: str | os.PathLike[str] | BinaryIO,
    destination: str | os.PathLike[str],
    whitelist: Collection[str] | None = None,
    **kwargs: object,
) -> None:
    """Extract the tar archive *archive* (any compression) to *destination*.

    All keyword arguments are forwarded to the ``TarExtractor`` constructor.
    """
    with _open_stream(archive) as tf:
        extract_tar(iter_entries(tf), destination, whitelist, **kwargs)


def read_file(archive: str | os.PathLike[str] | BinaryIO, target: str) -> bytes:
    """Return the content of the regular file *target* inside *archive*."""
    with _open_stream(archive) as tf:
        return extract_file_from_tar(iter_entries(tf), target)
