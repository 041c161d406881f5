# Copyright Red Hat
#
# dirdiff/fsdiff/filetypes.py - Directory diff entry classification
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory entry kind classification.
"""
from enum import Enum
import logging
import stat
import os

from dirdiff import DIRDIFF_SUBSYSTEM_FSDIFF

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_fsdiff(msg, *args, **kwargs):
    """A wrapper for fsdiff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIRDIFF_SUBSYSTEM_FSDIFF}, **kwargs)


class EntryKind(Enum):
    """
    The closed set of file system entry kinds.
    """

    BLOCK_DEVICE = "block_device"
    CHAR_DEVICE = "char_device"
    DIRECTORY = "directory"
    FIFO = "fifo"
    REGULAR = "regular"
    SOCKET = "socket"
    SYMLINK = "symlink"
    UNKNOWN = "unknown"

    @property
    def description(self) -> str:
        """
        A human readable description of this kind.

        :returns: A lower case description string.
        :rtype: ``str``
        """
        return _KIND_DESCRIPTIONS[self]

    @property
    def is_special(self) -> bool:
        """
        True for kinds that are compared by device number.

        :returns: ``True`` for devices, FIFOs, sockets and unknown kinds.
        :rtype: ``bool``
        """
        return self not in (EntryKind.DIRECTORY, EntryKind.REGULAR, EntryKind.SYMLINK)


_KIND_DESCRIPTIONS = {
    EntryKind.BLOCK_DEVICE: "block device",
    EntryKind.CHAR_DEVICE: "character device",
    EntryKind.DIRECTORY: "directory",
    EntryKind.FIFO: "FIFO/pipe",
    EntryKind.REGULAR: "regular file",
    EntryKind.SOCKET: "socket",
    EntryKind.SYMLINK: "symbolic link",
    EntryKind.UNKNOWN: "unknown",
}

_MODE_TESTS = (
    (stat.S_ISREG, EntryKind.REGULAR),
    (stat.S_ISDIR, EntryKind.DIRECTORY),
    (stat.S_ISLNK, EntryKind.SYMLINK),
    (stat.S_ISBLK, EntryKind.BLOCK_DEVICE),
    (stat.S_ISCHR, EntryKind.CHAR_DEVICE),
    (stat.S_ISFIFO, EntryKind.FIFO),
    (stat.S_ISSOCK, EntryKind.SOCKET),
)


def classify_mode(st_mode: int) -> EntryKind:
    """
    Map an ``st_mode`` value onto an ``EntryKind``.

    :param st_mode: The mode field of an ``os.stat_result``.
    :type st_mode: ``int``
    :returns: The entry kind for ``st_mode``.
    :rtype: ``EntryKind``
    """
    for test, kind in _MODE_TESTS:
        if test(st_mode):
            return kind
    return EntryKind.UNKNOWN


def classify_path(path: str) -> EntryKind:
    """
    Classify the file system object at ``path`` without following a
    trailing symbolic link.

    :param path: The path to classify.
    :type path: ``str``
    :returns: The entry kind for ``path``.
    :rtype: ``EntryKind``
    :raises OSError: If ``path`` cannot be examined.
    """
    kind = classify_mode(os.lstat(path).st_mode)
    _log_debug_fsdiff("Classified %s as %s", path, kind.description)
    return kind


__all__ = [
    "EntryKind",
    "classify_mode",
    "classify_path",
]
