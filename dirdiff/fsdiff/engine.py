# Copyright Red Hat
#
# dirdiff/fsdiff/engine.py - Directory diff comparison engine
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory tree comparison engine and results.
"""
from typing import Any, Callable, Dict, Iterator, List, Optional, Union
import logging
import json
import os

from dirdiff import (
    DIRDIFF_SUBSYSTEM_FSDIFF,
    DirdiffError,
    DirdiffNotADirectoryError,
    os_error_to_dirdiff,
)
from dirdiff.progress import TermControl

from .difftypes import DiffType, PruneReason, Side
from .equality import EqualityOracle
from .options import DiffOptions
from .patterns import PatternFilter
from .treewalk import FsEntry, printable_path, scan_dir

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_fsdiff(msg, *args, **kwargs):
    """A wrapper for fsdiff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIRDIFF_SUBSYSTEM_FSDIFF}, **kwargs)


#: Name of the synthetic node representing the pair of tree roots.
ROOT_NAME = "<root>"


class DiffNode:
    """
    A single difference between the two trees. Directory pairs whose
    contents differ carry the differences found below them as children.
    """

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        diff_type: DiffType,
        name: str,
        relpath: str,
        depth: int,
        missing_from: Optional[Side] = None,
        is_dir: bool = False,
        children: Optional[List["DiffNode"]] = None,
        pruned: Optional[PruneReason] = None,
        a_path: Optional[str] = None,
        b_path: Optional[str] = None,
        error: Optional[str] = None,
    ):
        """
        Initialise a new ``DiffNode``.

        :param diff_type: The type of difference.
        :type diff_type: ``DiffType``
        :param name: The base name of the differing entry.
        :type name: ``str``
        :param relpath: The path relative to the tree roots.
        :type relpath: ``str``
        :param depth: The depth of the entry (the roots are at depth 0).
        :type depth: ``int``
        :param missing_from: For ``DiffType.MISSING``, the tree that lacks
                             the entry.
        :type missing_from: ``Optional[Side]``
        :param is_dir: ``True`` for a pair of directories.
        :type is_dir: ``bool``
        :param children: Differences found below a directory pair.
        :type children: ``Optional[List[DiffNode]]``
        :param pruned: The reason a differing directory was not descended.
        :type pruned: ``Optional[PruneReason]``
        :param a_path: The path of the directory in the first tree.
        :type a_path: ``Optional[str]``
        :param b_path: The path of the directory in the second tree.
        :type b_path: ``Optional[str]``
        :param error: A description of the failure for unreadable entries.
        :type error: ``Optional[str]``
        """
        if diff_type == DiffType.MISSING and missing_from is None:
            raise ValueError("DiffType.MISSING requires a missing_from side")
        self.diff_type: DiffType = diff_type
        self.name: str = name
        self.relpath: str = relpath
        self.depth: int = depth
        self.missing_from: Optional[Side] = missing_from
        self.is_dir: bool = is_dir
        self.children: List["DiffNode"] = children or []
        self.pruned: Optional[PruneReason] = pruned
        self.a_path: Optional[str] = a_path
        self.b_path: Optional[str] = b_path
        self.error: Optional[str] = error

    def __repr__(self) -> str:
        return (
            f"DiffNode({self.diff_type}, {self.name!r}, {self.relpath!r}, "
            f"{self.depth}, missing_from={self.missing_from}, "
            f"is_dir={self.is_dir}, children=[{len(self.children)}], "
            f"pruned={self.pruned}, error={self.error!r})"
        )

    def __str__(self) -> str:
        desc = self.diff_type.value
        if self.only_in:
            desc += f" (only in {self.only_in.value} tree)"
        if self.pruned:
            desc += f" (pruned: {self.pruned.value})"
        if self.error:
            desc += f" ({self.error})"
        return f"{self.relpath or self.name}: {desc}"

    @property
    def only_in(self) -> Optional[Side]:
        """
        For ``DiffType.MISSING``, the tree that contains the entry.

        :returns: The side holding the entry, or ``None``.
        :rtype: ``Optional[Side]``
        """
        return self.missing_from.other if self.missing_from else None

    def walk(self) -> Iterator["DiffNode"]:
        """
        Iterate over the children of this node, depth first.
        """
        pending = list(reversed(self.children))
        while pending:
            node = pending.pop()
            yield node
            pending.extend(reversed(node.children))

    def _fields(self) -> Dict[str, Any]:
        return {
            "diff_type": self.diff_type.value,
            "name": self.name,
            "relpath": self.relpath,
            "depth": self.depth,
            "is_dir": self.is_dir,
            "missing_from": self.missing_from.value if self.missing_from else None,
            "only_in": self.only_in.value if self.only_in else None,
            "pruned": self.pruned.value if self.pruned else None,
            "error": self.error,
            "children": [],
        }

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``DiffNode`` into a dictionary representation suitable
        for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        result = self._fields()
        pending = [(self, result)]
        while pending:
            node, node_dict = pending.pop()
            for child in node.children:
                child_dict = child._fields()
                node_dict["children"].append(child_dict)
                pending.append((child, child_dict))
        return result


class DiffResults:
    """Container for directory diff results with formatting methods."""

    def __init__(
        self,
        nodes: List[DiffNode],
        path_a: str,
        path_b: str,
        options: Optional[DiffOptions] = None,
    ):
        self._nodes = nodes
        self.path_a = path_a
        self.path_b = path_b
        self.options = options or DiffOptions()

    def __repr__(self) -> str:
        """
        Return a machine-readable representation of this instance.

        :returns: ``DiffResults`` constructor style string.
        :rtype: ``str``
        """
        return f"DiffResults([...], {self.path_a!r}, {self.path_b!r}, {self.options!r})"

    # List-like interface
    def __iter__(self) -> Iterator[DiffNode]:
        """
        Implement iter(self).
        """
        return iter(self._nodes)

    def __len__(self):
        """
        Implement len(self).
        """
        return len(self._nodes)

    def __getitem__(self, index: int) -> DiffNode:
        """
        Return self[index]

        :param index: The index to return.
        :type index: ``int``
        """
        return self._nodes[index]

    def root(self) -> Optional[DiffNode]:
        """
        Return a synthetic node for the pair of roots holding the top level
        differences, or ``None`` if there are no differences.

        :returns: The root ``DiffNode`` or ``None``.
        :rtype: ``Optional[DiffNode]``
        """
        if not self._nodes:
            return None
        return DiffNode(
            DiffType.CONTENT_DIFFERS,
            ROOT_NAME,
            "",
            0,
            is_dir=True,
            children=self._nodes,
            a_path=self.path_a,
            b_path=self.path_b,
        )

    def walk(self) -> Iterator[DiffNode]:
        """
        Iterate over all nodes in these results, depth first.
        """
        for node in self._nodes:
            yield node
            yield from node.walk()

    def _count(self, diff_type: DiffType) -> int:
        return sum(1 for node in self.walk() if node.diff_type == diff_type)

    # Summary properties
    @property
    def missing(self) -> int:
        """
        Return the number of entries present in only one tree.

        :returns: Count of ``DiffType.MISSING`` nodes.
        :rtype: ``int``
        """
        return self._count(DiffType.MISSING)

    @property
    def type_mismatches(self) -> int:
        """
        Return the number of entries whose kind differs between trees.

        :returns: Count of ``DiffType.TYPE_MISMATCH`` nodes.
        :rtype: ``int``
        """
        return self._count(DiffType.TYPE_MISMATCH)

    @property
    def content_differs(self) -> int:
        """
        Return the number of entries whose content differs, including
        directories.

        :returns: Count of ``DiffType.CONTENT_DIFFERS`` nodes.
        :rtype: ``int``
        """
        return self._count(DiffType.CONTENT_DIFFERS)

    @property
    def unreadable(self) -> int:
        """
        Return the number of entries that could not be compared.

        :returns: Count of ``DiffType.UNREADABLE`` nodes.
        :rtype: ``int``
        """
        return self._count(DiffType.UNREADABLE)

    # Output formats
    def paths(self) -> List[str]:
        """
        Return a list of relative paths that differ in this ``DiffResults``.

        :returns: Path list.
        :rtype: ``List[str]``
        """
        return [printable_path(node.relpath) for node in self.walk()]

    def json(self, pretty: bool = False) -> str:
        """
        Return JSON representation of the ``DiffNode`` content of this
        instance.

        :param pretty: Indent the JSON output.
        :type pretty: ``bool``
        :returns: JSON string description of the differences.
        :rtype: ``str``
        """
        dicts = [node.to_dict() for node in self._nodes]
        return json.dumps(dicts, indent=4 if pretty else None)

    def tree(
        self,
        color: str = "auto",
        legend: bool = True,
        term_control: Optional[TermControl] = None,
    ) -> str:
        """
        Render a ``DiffTree`` of this ``DiffResults`` instance.

        :param color: A string to control color tree rendering: "auto",
                      "always", or "never".
        :type color: ``str``
        :param legend: Include the legend block.
        :type legend: ``bool``
        :param term_control: An optional ``TermControl`` instance to use for
                             formatting. The supplied instance overrides any
                             ``color`` argument if set.
        :type term_control: ``Optional[TermControl]``
        :returns: A string representation of a difference tree
        :rtype: ``str``
        """
        # pylint: disable=import-outside-toplevel
        from .tree import DiffTree

        tree = DiffTree(self, color=color, term_control=term_control)
        return tree.render(legend=legend)


class _DirPair:
    """
    A pair of directories whose entries are being compared.
    """

    # pylint: disable=too-many-arguments,too-few-public-methods
    def __init__(
        self,
        a: Union[FsEntry, str],
        b: Union[FsEntry, str],
        depth: int,
        entries_a: Dict[str, FsEntry],
        entries_b: Dict[str, FsEntry],
    ):
        self.a = a
        self.b = b
        self.depth = depth
        self.entries_a = entries_a
        self.entries_b = entries_b
        self.names = iter(sorted(entries_a.keys() | entries_b.keys()))
        #: Differences found so far, in name order.
        self.nodes: List[DiffNode] = []


class DiffEngine:
    """
    Core class for generating directory tree comparisons.

    Both trees are walked together depth first. Directory pairs are only
    reported if something below them differs; pruned directory pairs are
    checked with a fast path that stops at the first difference.
    """

    def __init__(
        self,
        options: Optional[DiffOptions] = None,
        pattern_filter: Optional[PatternFilter] = None,
        oracle: Optional[EqualityOracle] = None,
        progress: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialise a new ``DiffEngine`` instance.

        :param options: The comparison options.
        :type options: ``Optional[DiffOptions]``
        :param pattern_filter: The ignore and prune filter to apply. Built
                               from ``options`` if not given.
        :type pattern_filter: ``Optional[PatternFilter]``
        :param oracle: The entry equality oracle. Built from ``options`` if
                       not given.
        :type oracle: ``Optional[EqualityOracle]``
        :param progress: An optional callable invoked with the relative path
                         of each entry pair as it is compared.
        :type progress: ``Optional[Callable[[str], None]]``
        """
        self.options = options or DiffOptions()
        self.pattern_filter = pattern_filter or PatternFilter.from_options(
            self.options
        )
        self.oracle = oracle or EqualityOracle(self.options)
        self.progress = progress
        self.compared = 0

    def _scan(self, path: str, relpath: str) -> Dict[str, FsEntry]:
        """
        Scan the directory at ``path`` dropping ignored entries.

        :raises DirdiffError: If the directory cannot be listed.
        """
        try:
            entries = scan_dir(path, relpath)
        except OSError as err:
            raise os_error_to_dirdiff(
                err, f"Error listing directory '{path}'"
            ) from err
        return {
            name: entry
            for name, entry in entries.items()
            if not self.pattern_filter.ignored(entry.relpath)
        }

    def _open_pair(
        self,
        dir_a: Union[FsEntry, str],
        dir_b: Union[FsEntry, str],
        depth: int,
        relpath: str,
    ) -> _DirPair:
        """
        Scan a pair of directories ready for comparison of their entries.

        :raises DirdiffError: If either directory cannot be listed.
        """
        path_a = dir_a.path if isinstance(dir_a, FsEntry) else dir_a
        path_b = dir_b.path if isinstance(dir_b, FsEntry) else dir_b

        _log_debug_fsdiff("Comparing directories %s and %s", path_a, path_b)
        entries_a = self._scan(path_a, relpath)
        entries_b = self._scan(path_b, relpath)
        return _DirPair(dir_a, dir_b, depth, entries_a, entries_b)

    def compare(
        self,
        dir_a: Union[FsEntry, str],
        dir_b: Union[FsEntry, str],
        depth: int = 0,
        relpath: str = "",
    ) -> List[DiffNode]:
        """
        Compare the contents of two directories.

        The trees are walked depth first using an explicit stack of open
        directory pairs, so the depth of the trees is not limited by the
        interpreter recursion limit.

        :param dir_a: The directory from the first tree.
        :type dir_a: ``Union[FsEntry, str]``
        :param dir_b: The directory from the second tree.
        :type dir_b: ``Union[FsEntry, str]``
        :param depth: The depth of the directory pair (0 for the roots).
        :type depth: ``int``
        :param relpath: The relative path of the directory pair.
        :type relpath: ``str``
        :returns: The differences found, in name order. An empty list means
                  the directories are equal.
        :rtype: ``List[DiffNode]``
        :raises DirdiffError: If either directory cannot be listed.
        """
        top = self._open_pair(dir_a, dir_b, depth, relpath)
        stack = [top]
        while stack:
            pair = stack[-1]
            name = next(pair.names, None)
            if name is None:
                stack.pop()
                if stack and pair.nodes:
                    stack[-1].nodes.append(
                        self._dir_node(pair.a, pair.b, pair.depth, children=pair.nodes)
                    )
                continue

            result = self._compare_entries(
                pair.entries_a.get(name), pair.entries_b.get(name), pair.depth + 1
            )
            if isinstance(result, _DirPair):
                stack.append(result)
            elif result is not None:
                pair.nodes.append(result)
        return top.nodes

    # pylint: disable=too-many-return-statements
    def _compare_entries(
        self, a: Optional[FsEntry], b: Optional[FsEntry], depth: int
    ) -> Union[DiffNode, _DirPair, None]:
        """
        Compare a pair of entries with the same name.

        :param a: The entry from the first tree, or ``None``.
        :type a: ``Optional[FsEntry]``
        :param b: The entry from the second tree, or ``None``.
        :type b: ``Optional[FsEntry]``
        :param depth: The depth of the entries.
        :type depth: ``int``
        :returns: A ``DiffNode`` if the entries differ, ``None`` if they are
                  equal, or an opened directory pair to descend into.
        :rtype: ``Union[DiffNode, _DirPair, None]``
        """
        entry = a or b
        name, relpath = entry.name, entry.relpath

        self.compared += 1
        if self.progress:
            self.progress(relpath)

        if a is None or b is None:
            missing_from = Side.FIRST if a is None else Side.SECOND
            return DiffNode(
                DiffType.MISSING, name, relpath, depth, missing_from=missing_from
            )

        for side in (a, b):
            if not side.readable:
                return self._unreadable(side, depth, side.error)

        if a.kind is not b.kind:
            return DiffNode(DiffType.TYPE_MISMATCH, name, relpath, depth)

        if a.is_dir:
            return self._compare_dirs(a, b, depth)

        try:
            if self.oracle.same(a, b):
                return None
        except DirdiffError as err:
            return self._unreadable(a, depth, err)

        return DiffNode(DiffType.CONTENT_DIFFERS, name, relpath, depth)

    def _compare_dirs(
        self, a: FsEntry, b: FsEntry, depth: int
    ) -> Union[DiffNode, _DirPair, None]:
        """
        Open a pair of directories for descent, or test a pruned pair.
        """
        reason = self.pattern_filter.pruned(a.relpath, depth)
        try:
            if reason is None:
                return self._open_pair(a, b, depth, a.relpath)
            if not self._differs(a.path, b.path, a.relpath):
                return None
        except DirdiffError as err:
            return self._unreadable(a, depth, err)

        _log_debug_fsdiff("Pruned %s (%s)", a.relpath, reason.value)
        return self._dir_node(a, b, depth, pruned=reason)

    @staticmethod
    def _dir_node(
        a: FsEntry,
        b: FsEntry,
        depth: int,
        children: Optional[List[DiffNode]] = None,
        pruned: Optional[PruneReason] = None,
    ) -> DiffNode:
        return DiffNode(
            DiffType.CONTENT_DIFFERS,
            a.name,
            a.relpath,
            depth,
            is_dir=True,
            children=children,
            pruned=pruned,
            a_path=a.path,
            b_path=b.path,
        )

    def _differs(self, path_a: str, path_b: str, relpath: str) -> bool:
        """
        Test whether two directories differ, stopping at the first difference.

        :raises DirdiffError: If an entry cannot be listed or read.
        """
        pending = [(path_a, path_b, relpath)]
        while pending:
            path_a, path_b, relpath = pending.pop()
            entries_a = self._scan(path_a, relpath)
            entries_b = self._scan(path_b, relpath)

            if entries_a.keys() != entries_b.keys():
                return True

            for name in sorted(entries_a):
                a, b = entries_a[name], entries_b[name]
                for side in (a, b):
                    if not side.readable:
                        raise os_error_to_dirdiff(
                            side.error, f"Error examining '{side.path}'"
                        )
                if a.kind is not b.kind:
                    return True
                if a.is_dir:
                    pending.append((a.path, b.path, a.relpath))
                elif not self.oracle.same(a, b):
                    return True
        return False

    @staticmethod
    def _unreadable(
        entry: FsEntry, depth: int, err: Optional[Exception]
    ) -> DiffNode:
        """
        Build a ``DiffType.UNREADABLE`` node for ``entry``.
        """
        if isinstance(err, OSError):
            reason = err.strerror or str(err)
        else:
            reason = str(err)
        _log_debug_fsdiff("Could not compare %s: %s", entry.relpath, reason)
        return DiffNode(
            DiffType.UNREADABLE,
            entry.name,
            entry.relpath,
            depth,
            is_dir=entry.is_dir,
            error=reason,
        )


def _root_entry(path: str) -> FsEntry:
    """
    Examine a comparison root, following a symbolic link to a directory.

    :raises DirdiffError: If ``path`` does not exist or cannot be examined.
    """
    try:
        return FsEntry(path, "", stat_info=os.stat(path))
    except OSError as err:
        raise os_error_to_dirdiff(err, f"Cannot access '{path}'") from err


def compare_roots(
    path_a: str,
    path_b: str,
    options: Optional[DiffOptions] = None,
    engine: Optional[DiffEngine] = None,
) -> DiffResults:
    """
    Compare the trees rooted at ``path_a`` and ``path_b``.

    Two non-directory roots of the same kind are compared directly as a
    single pair.

    :param path_a: The first root path.
    :type path_a: ``str``
    :param path_b: The second root path.
    :type path_b: ``str``
    :param options: The comparison options.
    :type options: ``Optional[DiffOptions]``
    :param engine: An optional pre-configured ``DiffEngine``.
    :type engine: ``Optional[DiffEngine]``
    :returns: The comparison results.
    :rtype: ``DiffResults``
    :raises DirdiffNotFoundError: If a root does not exist.
    :raises DirdiffNotADirectoryError: If the roots are not both directories
                                       and not of the same kind.
    :raises DirdiffPermissionError: If a root directory cannot be read.
    :raises DirdiffIOError: On any other failure accessing a root.
    """
    engine = engine or DiffEngine(options)
    options = engine.options

    root_a = _root_entry(path_a)
    root_b = _root_entry(path_b)

    if not (root_a.is_dir and root_b.is_dir):
        if root_a.kind is not root_b.kind:
            not_dir = root_b if root_a.is_dir else root_a
            raise DirdiffNotADirectoryError(
                f"Not a directory: '{not_dir.path}' is a {not_dir.kind.description}"
            )
        _log_debug_fsdiff(
            "Comparing %s roots %s and %s", root_a.kind.description, path_a, path_b
        )
        nodes = []
        if not engine.oracle.same(root_a, root_b):
            name = os.path.basename(os.path.normpath(path_a))
            nodes.append(DiffNode(DiffType.CONTENT_DIFFERS, name, name, 1))
        return DiffResults(nodes, path_a, path_b, options)

    # Listing errors at the roots are fatal.
    nodes = engine.compare(root_a, root_b, 0, "")
    return DiffResults(nodes, path_a, path_b, options)


__all__ = [
    "DiffEngine",
    "DiffNode",
    "DiffResults",
    "ROOT_NAME",
    "compare_roots",
]
