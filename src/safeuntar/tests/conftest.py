"""Archive factory fixtures for safeuntar tests.

Every fixture generates a real, crafted archive programmatically using
Python's ``tarfile`` module.  No mocks, no stubs.
"""

from __future__ import annotations

__author__ = "Artur Barseghyan <artur.barseghyan@gmail.com>"
__copyright__ = "2026 Artur Barseghyan"
__license__ = "MIT"

import gzip
import io
import tarfile

import pytest

# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _tar_bytes(callback, *, mode: str = "w") -> bytes:
    """Create a TAR archive in memory via *callback(tf)* and return bytes."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode=mode) as tf:
        callback(tf)
    return buf.getvalue()


def _write_to_path(tmp_path, name: str, data: bytes) -> str:
    p = tmp_path / name
    p.write_bytes(data)
    return str(p)


def _add_regular(tf, name: str, content: bytes, *, mode: int = 0o644) -> None:
    info = tarfile.TarInfo(name=name)
    info.size = len(content)
    info.mode = mode
    tf.addfile(info, io.BytesIO(content))


def _add_dir(tf, name: str, mode: int) -> None:
    info = tarfile.TarInfo(name=name)
    info.type = tarfile.DIRTYPE
    info.mode = mode
    tf.addfile(info)


def _add_symlink(tf, name: str, target: str) -> None:
    info = tarfile.TarInfo(name=name)
    info.type = tarfile.SYMTYPE
    info.linkname = target
    tf.addfile(info)


def _add_hardlink(tf, name: str, target: str) -> None:
    info = tarfile.TarInfo(name=name)
    info.type = tarfile.LNKTYPE
    info.linkname = target
    tf.addfile(info)


def _base_links(tf) -> None:
    _add_regular(tf, "hello.txt", b"hello")
    _add_symlink(tf, "link.txt", "hello.txt")


# ---------------------------------------------------------------------------
# destination
# ---------------------------------------------------------------------------


@pytest.fixture()
def dest(tmp_path):
    """An existing, empty extraction root one level below ``tmp_path``."""
    d = tmp_path / "out"
    d.mkdir()
    return d


# ---------------------------------------------------------------------------
# insecure archives
# ---------------------------------------------------------------------------


@pytest.fixture()
def insecure_symlink_archive(tmp_path):
    """Valid entries followed by a symlink named ``../etc/secret.conf``."""

    def build(tf):
        _base_links(tf)
        _add_symlink(tf, "../etc/secret.conf", "secret.conf")

    return _write_to_path(tmp_path, "insecure_symlink.tar", _tar_bytes(build))


@pytest.fixture()
def insecure_hardlink_archive(tmp_path):
    """Valid entries followed by a hardlink named ``../etc/secret.conf``."""

    def build(tf):
        _base_links(tf)
        _add_hardlink(tf, "../etc/secret.conf", "secret.conf")

    return _write_to_path(tmp_path, "insecure_hardlink.tar", _tar_bytes(build))


@pytest.fixture()
def traversal_archive(tmp_path):
    """Archive with a regular file entry ``../../evil.txt``."""

    def build(tf):
        _add_regular(tf, "../../evil.txt", b"pwned")

    return _write_to_path(tmp_path, "traversal.tar", _tar_bytes(build))


@pytest.fixture()
def hardlink_external_archive(tmp_path):
    """Archive with a hardlink whose source lies outside the root."""

    def build(tf):
        _add_hardlink(tf, "evil_link.txt", "../outside.txt")

    return _write_to_path(tmp_path, "hardlink_external.tar", _tar_bytes(build))


# ---------------------------------------------------------------------------
# hardlink archives
# ---------------------------------------------------------------------------


@pytest.fixture()
def hardlink_internal_archive(tmp_path):
    """Archive with a valid internal hardlink (source first)."""

    def build(tf):
        _add_regular(tf, "original.txt", b"original content\n")
        _add_hardlink(tf, "copy.txt", "original.txt")

    return _write_to_path(tmp_path, "hardlink_internal.tar", _tar_bytes(build))


@pytest.fixture()
def hardlink_forward_ref_archive(tmp_path):
    """Archive where the hardlink appears before its source."""

    def build(tf):
        _add_hardlink(tf, "link_first.txt", "target_later.txt")
        _add_regular(tf, "target_later.txt", b"target content\n")

    return _write_to_path(tmp_path, "hardlink_forward.tar", _tar_bytes(build))


# ---------------------------------------------------------------------------
# directory archives
# ---------------------------------------------------------------------------


@pytest.fixture()
def folders_archive(tmp_path):
    """Files and directory entries intermixed, directories declared late."""

    def build(tf):
        _add_regular(tf, "deep/folder/foo.txt", b"foo")
        _add_dir(tf, "deep/folder/", 0o747)
        _add_regular(tf, "deep/folder/bar.txt", b"bar")
        _add_symlink(tf, "deep/folder2/symlink.txt", "deep/folder/foo.txt")
        _add_dir(tf, "deep/folder2/", 0o747)
        _add_regular(tf, "deep/folder2/bar.txt", b"bar")
        _add_dir(tf, "deep/deep/folder", 0o755)
        _add_dir(tf, "deep/deep/", 0o747)

    return _write_to_path(tmp_path, "folders.tar", _tar_bytes(build))


@pytest.fixture()
def redeclared_dir_archive(tmp_path):
    """The same directory declared twice with different modes."""

    def build(tf):
        _add_dir(tf, "data/", 0o755)
        _add_regular(tf, "data/file.txt", b"x")
        _add_dir(tf, "data/", 0o747)

    return _write_to_path(tmp_path, "redeclared.tar", _tar_bytes(build))


# ---------------------------------------------------------------------------
# whitelist / single-file archives
# ---------------------------------------------------------------------------


def _folder_entries(tf) -> None:
    _add_dir(tf, "folder/", 0o747)
    _add_regular(tf, "folder/foo.txt", b"foo")
    _add_regular(tf, "folder/bar.txt", b"bar")
    _add_symlink(tf, "folder/symlink.txt", "folder/foo.txt")


@pytest.fixture()
def folder_archive(tmp_path):
    """``folder/`` with two files and a symlink."""
    return _write_to_path(tmp_path, "folder.tar", _tar_bytes(_folder_entries))


@pytest.fixture()
def folder_gz_archive(tmp_path):
    """The ``folder_archive`` content, gzip-compressed."""
    gz_data = gzip.compress(_tar_bytes(_folder_entries))
    return _write_to_path(tmp_path, "folder.tar.gz", gz_data)


# ---------------------------------------------------------------------------
# special entry types
# ---------------------------------------------------------------------------


@pytest.fixture()
def fifo_archive(tmp_path):
    """Archive containing a FIFO and a character device next to a file."""

    def build(tf):
        info = tarfile.TarInfo(name="my_fifo")
        info.type = tarfile.FIFOTYPE
        tf.addfile(info)
        info = tarfile.TarInfo(name="dev_null")
        info.type = tarfile.CHRTYPE
        info.devmajor = 1
        info.devminor = 3
        tf.addfile(info)
        _add_regular(tf, "readme.txt", b"still here\n")

    return _write_to_path(tmp_path, "fifo.tar", _tar_bytes(build))


@pytest.fixture()
def executable_archive(tmp_path):
    """Archive with an executable file and a read-only file."""

    def build(tf):
        _add_regular(tf, "bin/run.sh", b"#!/bin/sh\n", mode=0o755)
        _add_regular(tf, "etc/readonly.conf", b"ro", mode=0o444)

    return _write_to_path(tmp_path, "executable.tar", _tar_bytes(build))


@pytest.fixture()
def timestamp_archive(tmp_path):
    """Archive with fixed mtimes on a file and a directory."""

    def build(tf):
        info = tarfile.TarInfo(name="stamped/")
        info.type = tarfile.DIRTYPE
        info.mode = 0o755
        info.mtime = 1_000_000
        tf.addfile(info)
        info = tarfile.TarInfo(name="stamped/old.txt")
        info.size = 3
        info.mtime = 500_000
        tf.addfile(info, io.BytesIO(b"old"))

    return _write_to_path(tmp_path, "timestamps.tar", _tar_bytes(build))


# ---------------------------------------------------------------------------
# truncated archive
# ---------------------------------------------------------------------------


@pytest.fixture()
def truncated_archive(tmp_path):
    """A .tar.gz archive truncated mid-member."""

    def build(tf):
        _add_regular(tf, "zeros.bin", b"\x00" * 100_000)

    gz_data = gzip.compress(_tar_bytes(build), compresslevel=1)
    return _write_to_path(tmp_path, "truncated.tar.gz", gz_data[: len(gz_data) // 2])
