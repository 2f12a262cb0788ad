"""The Sandbox: lexical containment checks and the path whitelist.

Every candidate extraction path is joined onto the extraction root and
lexically normalised.  The result must be the root itself or lie
strictly underneath it.  Nothing on disk is consulted: a symlink planted
earlier in the archive and later used as a parent directory is not
detected here.
"""

from __future__ import annotations

__author__ = "Artur Barseghyan <artur.barseghyan@gmail.com>"
__copyright__ = "2026 Artur Barseghyan"
__license__ = "MIT"
__all__ = (
    "clean_member_name",
    "is_whitelisted",
    "normalise_whitelist",
    "resolve_link_source",
    "resolve_member_path",
    "resolve_root",
)

import logging
import os
import posixpath
from collections.abc import Collection
from pathlib import Path

from safeuntar._exceptions import InsecureLinkError

log = logging.getLogger("safeuntar.security")


# ---- extraction root -------------------------------------------------------


def resolve_root(destination: str | os.PathLike[str]) -> Path:
    """Return *destination* as a normalised absolute ``Path``.

    The root is owned by the caller and must already exist.

    :raises FileNotFoundError: If *destination* does not exist.
    :raises NotADirectoryError: If *destination* is not a directory.
    """
    root = os.path.abspath(os.fspath(destination))
    if not os.path.exists(root):
        raise FileNotFoundError(f"Extraction root does not exist: {root!r}")
    if not os.path.isdir(root):
        raise NotADirectoryError(f"Extraction root is not a directory: {root!r}")
    return Path(root)


# ---- path resolution -------------------------------------------------------


def _contained(root: str, name: str) -> str | None:
    # Leading slashes are dropped so absolute names nest under the root.
    candidate = os.path.normpath(os.path.join(root, name.lstrip("/")))
    prefix = root if root.endswith(os.sep) else root + os.sep
    if candidate == root or candidate.startswith(prefix):
        return candidate
    return None


def resolve_member_path(root: Path, name: str) -> Path:
    """Resolve the archive-relative *name* against *root*.

    *root* must already be normalised (see ``resolve_root``).

    :raises InsecureLinkError: If the normalised path escapes *root*.
    """
    candidate = _contained(str(root), name)
    if candidate is None:
        log.warning("Entry escapes extraction root: %r", name)
        raise InsecureLinkError(name)
    return Path(candidate)


def resolve_link_source(root: Path, name: str, linkname: str) -> Path:
    """Resolve a hardlink's *linkname* against *root*.

    Hardlink sources are archive-relative, like entry names.  A source
    outside *root* is rejected on behalf of the entry *name*.

    :raises InsecureLinkError: If the source escapes *root*.
    """
    candidate = _contained(str(root), linkname)
    if candidate is None:
        log.warning("Hardlink %r points outside extraction root: %r", name, linkname)
        raise InsecureLinkError(name, f"hardlink source {linkname!r} escapes root")
    return Path(candidate)


# ---- whitelist -------------------------------------------------------------


def clean_member_name(name: str) -> str:
    """Lexically clean an archive-relative name (``folder/`` -> ``folder``)."""
    if not name:
        return name
    return posixpath.normpath(name)


def normalise_whitelist(whitelist: Collection[str] | None) -> frozenset[str] | None:
    """Clean every whitelist key the same way entry names are cleaned.

    Returns ``None`` for "extract everything" (``None`` or empty input).
    """
    if whitelist is None or len(whitelist) == 0:
        return None
    return frozenset(clean_member_name(key) for key in whitelist)


def is_whitelisted(whitelist: Collection[str] | None, name: str) -> bool:
    """Return ``True`` if the entry *name* is eligible for extraction.

    ``None`` and an empty collection both mean "extract everything".
    Otherwise membership is exact after both sides are cleaned
    (``folder/`` and ``folder`` are the same path): no prefixes, no
    globs, and ancestors of a listed path are not implicitly included.
    """
    allowed = normalise_whitelist(whitelist)
    return allowed is None or clean_member_name(name) in allowed
