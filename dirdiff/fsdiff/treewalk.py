# Copyright Red Hat
#
# dirdiff/fsdiff/treewalk.py - Directory diff entry snapshots and scanning
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory entry snapshots and directory scanning support for fsdiff.
"""
from typing import Any, Dict, Optional
import logging
import os

from dirdiff import DIRDIFF_SUBSYSTEM_FSDIFF

from .filetypes import EntryKind, classify_mode

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_fsdiff(msg, *args, **kwargs):
    """A wrapper for fsdiff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIRDIFF_SUBSYSTEM_FSDIFF}, **kwargs)


def join_relpath(relpath: str, name: str) -> str:
    """
    Append ``name`` to the tree relative path ``relpath``.

    :param relpath: A path relative to a tree root, or "" for the root.
    :type relpath: ``str``
    :param name: The entry name to append.
    :type name: ``str``
    :returns: The joined relative path, without a leading separator.
    :rtype: ``str``
    """
    return f"{relpath}/{name}" if relpath else name


def printable_path(path: str) -> str:
    """
    Return ``path`` in a form that can always be encoded for output.

    Names that are not valid UTF-8 are decoded by ``os.scandir()`` with
    lone surrogates; their raw bytes are shown as ``\\xNN`` escapes.

    :param path: A file name or relative path.
    :type path: ``str``
    :returns: The printable path.
    :rtype: ``str``
    """
    return os.fsencode(path).decode("utf-8", "backslashreplace")


class FsEntry:
    """
    Representation of a single directory entry for comparison: an
    ``lstat()`` snapshot that never follows symbolic links.
    """

    def __init__(
        self,
        path: str,
        relpath: str = "",
        stat_info: Optional[os.stat_result] = None,
        error: Optional[OSError] = None,
    ):
        """
        Initialise a new ``FsEntry`` object.

        :param path: The full path to the entry.
        :type path: ``str``
        :param relpath: The path relative to the tree root ("" for a root).
        :type relpath: ``str``
        :param stat_info: An ``os.stat_result`` for this entry, or ``None``
                          if the entry could not be examined.
        :type stat_info: ``Optional[os.stat_result]``
        :param error: The ``OSError`` raised examining this entry.
        :type error: ``Optional[OSError]``
        """
        #: The full path to this entry
        self.path: str = path
        #: The path relative to the tree root
        self.relpath: str = relpath
        #: The base name of this entry
        self.name: str = os.path.basename(relpath) or os.path.basename(
            path.rstrip(os.sep)
        )
        #: An ``os.stat_result`` for this path, or ``None`` on error
        self.stat: Optional[os.stat_result] = stat_info
        #: The error raised by ``lstat()``, if any
        self.error: Optional[OSError] = error
        #: The kind of this entry
        self.kind: EntryKind = (
            classify_mode(stat_info.st_mode) if stat_info else EntryKind.UNKNOWN
        )
        self._symlink_target: Optional[bytes] = None

    @classmethod
    def from_path(cls, path: str, relpath: str = "") -> "FsEntry":
        """
        Take an ``lstat()`` snapshot of ``path``.

        :param path: The path to examine.
        :type path: ``str``
        :param relpath: The path relative to the tree root.
        :type relpath: ``str``
        :returns: A new ``FsEntry`` for ``path``.
        :rtype: ``FsEntry``
        :raises OSError: If ``path`` cannot be examined.
        """
        return cls(path, relpath, stat_info=os.lstat(path))

    def __repr__(self):
        return f"FsEntry({self.path!r}, {self.relpath!r}, kind={self.kind.name})"

    def __str__(self):
        """
        Return a string representation of this ``FsEntry`` object.

        :returns: A human readable representation of this ``FsEntry``.
        :rtype: ``str``
        """
        desc = self.kind.description
        if self.error:
            desc += f" ({self.error.strerror or self.error})"
        return f"{self.relpath or self.path}: {desc}"

    @property
    def readable(self) -> bool:
        """
        True if this entry was examined successfully.
        """
        return self.error is None and self.stat is not None

    @property
    def size(self) -> int:
        """The entry size returned by ``lstat()``."""
        return self.stat.st_size if self.stat else 0

    @property
    def dev(self) -> int:
        """The device containing this entry."""
        return self.stat.st_dev if self.stat else 0

    @property
    def ino(self) -> int:
        """The inode number of this entry."""
        return self.stat.st_ino if self.stat else 0

    @property
    def rdev(self) -> int:
        """The device number of a device special file."""
        return self.stat.st_rdev if self.stat else 0

    @property
    def mtime_ns(self) -> int:
        """The modification time in nanoseconds."""
        return self.stat.st_mtime_ns if self.stat else 0

    @property
    def is_dir(self) -> bool:
        """
        True if this ``FsEntry`` is a directory.

        :returns: ``True`` if this ``FsEntry`` corresponds to a directory or
                  ``False`` otherwise.
        :rtype: ``bool``
        """
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        """
        True if this ``FsEntry`` is a regular file.

        :returns: ``True`` if this ``FsEntry`` corresponds to a regular file or
                  ``False`` otherwise.
        :rtype: ``bool``
        """
        return self.kind is EntryKind.REGULAR

    @property
    def is_symlink(self) -> bool:
        """
        True if this ``FsEntry`` is a symlink.

        :returns: ``True`` if this ``FsEntry`` corresponds to a symlink or
                  ``False`` otherwise.
        :rtype: ``bool``
        """
        return self.kind is EntryKind.SYMLINK

    @property
    def symlink_target(self) -> Optional[bytes]:
        """
        The raw target of a symbolic link, read on first access.

        :returns: The link target as bytes, or ``None`` for other kinds.
        :rtype: ``Optional[bytes]``
        :raises OSError: If the link cannot be read.
        """
        if not self.is_symlink:
            return None
        if self._symlink_target is None:
            self._symlink_target = os.readlink(os.fsencode(self.path))
        return self._symlink_target

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``FsEntry`` object into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "name": self.name,
            "path": self.path,
            "relpath": self.relpath,
            "kind": self.kind.value,
            "size": self.size,
            "error": str(self.error) if self.error else None,
        }


def scan_dir(path: str, relpath: str = "") -> Dict[str, FsEntry]:
    """
    Snapshot every entry of the directory at ``path``.

    Entries whose ``lstat()`` fails are still returned, with
    ``kind == EntryKind.UNKNOWN`` and ``error`` set.

    :param path: The directory to scan.
    :type path: ``str``
    :param relpath: The relative path of the directory within its tree.
    :type relpath: ``str``
    :returns: A dictionary mapping entry names to ``FsEntry`` objects.
    :rtype: ``Dict[str, FsEntry]``
    :raises OSError: If the directory cannot be listed.
    """
    entries: Dict[str, FsEntry] = {}
    with os.scandir(path) as it:
        for dirent in it:
            entry_relpath = join_relpath(relpath, dirent.name)
            try:
                stat_info = dirent.stat(follow_symlinks=False)
            except OSError as err:
                _log_debug_fsdiff("Could not stat %s: %s", dirent.path, err)
                entries[dirent.name] = FsEntry(dirent.path, entry_relpath, error=err)
                continue
            entries[dirent.name] = FsEntry(
                dirent.path, entry_relpath, stat_info=stat_info
            )
    _log_debug_fsdiff("Scanned %d entries from %s", len(entries), path)
    return entries


__all__ = [
    "FsEntry",
    "join_relpath",
    "printable_path",
    "scan_dir",
]
