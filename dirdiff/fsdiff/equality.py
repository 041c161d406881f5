# Copyright Red Hat
#
# dirdiff/fsdiff/equality.py - Directory diff entry equality
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Equality tests for pairs of directory entries of the same kind.
"""
from typing import Dict, Optional, Tuple, Union
from hashlib import blake2b
import logging
import os

from dirdiff import (
    DIRDIFF_SUBSYSTEM_FSDIFF,
    DirdiffIOError,
    DirdiffPermissionError,
)

from .filetypes import EntryKind
from .options import DiffOptions
from .treewalk import FsEntry

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_fsdiff(msg, *args, **kwargs):
    """A wrapper for fsdiff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIRDIFF_SUBSYSTEM_FSDIFF}, **kwargs)


#: Read size for content comparison.
CHUNK_SIZE = 64 * 1024

#: Digest size in bytes for the "digest" comparison method.
DIGEST_SIZE = 64

_DigestKey = Tuple[int, int, int, int]


def _read_error(
    err: OSError, path: str
) -> Union[DirdiffPermissionError, DirdiffIOError]:
    """
    Map an ``OSError`` raised reading ``path`` onto a dirdiff exception.
    """
    path = os.fsdecode(err.filename) if err.filename else path
    reason = err.strerror or str(err)
    if isinstance(err, PermissionError):
        return DirdiffPermissionError(f"Error reading '{path}': {reason}")
    return DirdiffIOError(f"Error reading '{path}': {reason}")


class EqualityOracle:
    """
    Decide whether two entries of the same kind have equal content.

    The tests are applied in a fixed order: regular files of different size
    are different; two entries with the same device and inode are the same;
    special files are the same if their device numbers are equal; symbolic
    links are the same if their targets are equal; and regular files are
    the same if their contents are equal. In paranoid mode the size and
    inode tests are skipped for regular files.
    """

    def __init__(self, options: Optional[DiffOptions] = None):
        """
        Initialise a new ``EqualityOracle``.

        :param options: The comparison options in effect.
        :type options: ``Optional[DiffOptions]``
        """
        options = options or DiffOptions()
        self.paranoid: bool = options.paranoid
        self.compare_method: str = options.compare_method
        self._digests: Dict[_DigestKey, bytes] = {}

    def same(self, a: FsEntry, b: FsEntry) -> bool:
        """
        Test whether ``a`` and ``b`` are equal.

        :param a: An entry from the first tree.
        :type a: ``FsEntry``
        :param b: An entry of the same kind from the second tree.
        :type b: ``FsEntry``
        :returns: ``True`` if the entries are equal.
        :rtype: ``bool``
        :raises ValueError: If the entry kinds differ.
        :raises DirdiffPermissionError: If an entry cannot be read.
        :raises DirdiffIOError: On any other read failure.
        """
        if a.kind is not b.kind:
            raise ValueError(
                f"Cannot compare {a.kind.description} '{a.path}' with "
                f"{b.kind.description} '{b.path}'"
            )

        shortcuts = not (self.paranoid and a.kind is EntryKind.REGULAR)

        if shortcuts and a.kind is EntryKind.REGULAR and a.size != b.size:
            return False

        if shortcuts and (a.dev, a.ino) == (b.dev, b.ino):
            return True

        if a.kind.is_special:
            return a.rdev == b.rdev

        if a.kind is EntryKind.SYMLINK:
            try:
                return a.symlink_target == b.symlink_target
            except OSError as err:
                raise _read_error(err, a.path) from err

        if a.kind is EntryKind.REGULAR:
            if self.compare_method == "digest":
                return self._digest(a) == self._digest(b)
            return self._compare_bytes(a, b)

        # Directories are compared by the tree comparator.
        raise ValueError(f"Cannot compare {a.kind.description} contents: '{a.path}'")

    def _compare_bytes(self, a: FsEntry, b: FsEntry) -> bool:
        """
        Compare the contents of two regular files chunk by chunk.
        """
        _log_debug_fsdiff("Comparing contents of %s and %s", a.path, b.path)
        try:
            with open(a.path, "rb") as fa, open(b.path, "rb") as fb:
                while True:
                    chunk_a = fa.read(CHUNK_SIZE)
                    chunk_b = fb.read(CHUNK_SIZE)
                    if chunk_a != chunk_b:
                        return False
                    if not chunk_a:
                        return True
        except OSError as err:
            raise _read_error(err, a.path) from err

    def _digest(self, entry: FsEntry) -> bytes:
        """
        Return the BLAKE2b digest of a regular file, computing it on first use.
        """
        key = (entry.dev, entry.ino, entry.size, entry.mtime_ns)
        if key in self._digests:
            return self._digests[key]
        _log_debug_fsdiff("Calculating content digest for %s", entry.path)
        hasher = blake2b(digest_size=DIGEST_SIZE)
        try:
            with open(entry.path, "rb") as fp:
                while chunk := fp.read(CHUNK_SIZE):
                    hasher.update(chunk)
        except OSError as err:
            raise _read_error(err, entry.path) from err
        digest = hasher.digest()
        self._digests[key] = digest
        return digest


__all__ = [
    "CHUNK_SIZE",
    "DIGEST_SIZE",
    "EqualityOracle",
]
