# Copyright Red Hat
#
# dirdiff/fsdiff/patterns.py - Directory diff ignore and prune patterns
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Ignore and prune pattern matching.

Patterns use shell glob notation matched in pathname mode: the pattern and
the relative path are split on "/" and matched component by component, so
that ``*``, ``?`` and ``[...]`` never match a "/". A pattern component that
is exactly ``**`` matches zero or more whole path components.
"""
from typing import Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING
from fnmatch import fnmatchcase
import logging

from dirdiff import DIRDIFF_SUBSYSTEM_FSDIFF, DirdiffPatternError

from .difftypes import PruneReason

if TYPE_CHECKING:
    from .options import DiffOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_fsdiff(msg, *args, **kwargs):
    """A wrapper for fsdiff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIRDIFF_SUBSYSTEM_FSDIFF}, **kwargs)


#: Built-in prune patterns for version control metadata directories.
DEFAULT_PRUNE_PATTERNS = (".git", "**/.git")

#: Pattern component matching any number of path components.
_ANY_COMPONENTS = "**"


def _check_brackets(pattern: str, component: str):
    """
    Check that every bracket expression in ``component`` is terminated.

    :param pattern: The complete pattern, for error reporting.
    :type pattern: ``str``
    :param component: One "/" separated component of ``pattern``.
    :type component: ``str``
    :raises DirdiffPatternError: If a "[" has no matching "]".
    """
    i = 0
    n = len(component)
    while i < n:
        if component[i] != "[":
            i += 1
            continue
        j = i + 1
        if j < n and component[j] in "!^":
            j += 1
        # A "]" immediately after the opening bracket is a literal member.
        if j < n and component[j] == "]":
            j += 1
        while j < n and component[j] != "]":
            j += 1
        if j >= n:
            raise DirdiffPatternError(
                f"Invalid pattern '{pattern}': unterminated bracket expression"
            )
        i = j + 1


class Pattern:
    """
    A single compiled pathname glob pattern.
    """

    def __init__(self, pattern: str):
        """
        Compile ``pattern``.

        :param pattern: A glob pattern relative to the tree roots. A leading
                        "/" is accepted and ignored.
        :type pattern: ``str``
        :raises DirdiffPatternError: If ``pattern`` is malformed.
        """
        if not pattern:
            raise DirdiffPatternError("Invalid pattern: empty pattern")
        if "\0" in pattern:
            raise DirdiffPatternError(
                f"Invalid pattern {pattern!r}: contains NUL character"
            )
        parts = [part for part in pattern.lstrip("/").split("/") if part]
        if not parts:
            raise DirdiffPatternError(f"Invalid pattern '{pattern}': no components")
        for part in parts:
            _check_brackets(pattern, part)
        self.pattern: str = pattern
        self.parts: Tuple[str, ...] = tuple(parts)

    def __repr__(self):
        return f"Pattern({self.pattern!r})"

    def __str__(self):
        return self.pattern

    def match(self, relpath: str) -> bool:
        """
        Test whether ``relpath`` matches this pattern.

        :param relpath: A "/" separated path relative to the tree roots.
        :type relpath: ``str``
        :returns: ``True`` if the whole of ``relpath`` matches.
        :rtype: ``bool``
        """
        path_parts = tuple(part for part in relpath.split("/") if part)
        return _match_parts(self.parts, path_parts)


def _match_parts(pattern: Sequence[str], path: Sequence[str]) -> bool:
    """
    Match pattern components against path components.
    """
    if not pattern:
        return not path
    if pattern[0] == _ANY_COMPONENTS:
        rest = pattern[1:]
        return any(_match_parts(rest, path[i:]) for i in range(len(path) + 1))
    if not path:
        return False
    return fnmatchcase(path[0], pattern[0]) and _match_parts(pattern[1:], path[1:])


def compile_patterns(patterns: Iterable[str]) -> List[Pattern]:
    """
    Compile a sequence of pattern strings.

    :param patterns: The pattern strings to compile.
    :type patterns: ``Iterable[str]``
    :returns: A list of compiled ``Pattern`` objects.
    :rtype: ``List[Pattern]``
    :raises DirdiffPatternError: If any pattern is malformed.
    """
    return [Pattern(pattern) for pattern in patterns]


class PatternFilter:
    """
    Decide which relative paths are ignored and which differing directories
    are pruned (reported without descending).
    """

    def __init__(
        self,
        ignore_patterns: Iterable[str] = (),
        prune_patterns: Iterable[str] = (),
        max_depth: Optional[int] = None,
        default_prune: bool = True,
    ):
        """
        Initialise a new ``PatternFilter``.

        :param ignore_patterns: Patterns for paths excluded from comparison.
        :type ignore_patterns: ``Iterable[str]``
        :param prune_patterns: Patterns for directories not descended into.
        :type prune_patterns: ``Iterable[str]``
        :param max_depth: Prune directories deeper than this, or ``None``.
        :type max_depth: ``Optional[int]``
        :param default_prune: Apply ``DEFAULT_PRUNE_PATTERNS``.
        :type default_prune: ``bool``
        :raises DirdiffPatternError: If any pattern is malformed.
        """
        self.ignore_patterns: List[Pattern] = compile_patterns(ignore_patterns)
        self.prune_patterns: List[Pattern] = compile_patterns(prune_patterns)
        self.default_patterns: List[Pattern] = (
            compile_patterns(DEFAULT_PRUNE_PATTERNS) if default_prune else []
        )
        self.max_depth: Optional[int] = max_depth
        _log_debug_fsdiff(
            "Initialised PatternFilter: ignore=%s prune=%s default=%s max_depth=%s",
            [str(p) for p in self.ignore_patterns],
            [str(p) for p in self.prune_patterns],
            default_prune,
            max_depth,
        )

    @classmethod
    def from_options(cls, options: "DiffOptions") -> "PatternFilter":
        """
        Build a ``PatternFilter`` from a ``DiffOptions`` instance.

        :param options: The comparison options.
        :type options: ``DiffOptions``
        :returns: A new ``PatternFilter``.
        :rtype: ``PatternFilter``
        """
        return cls(
            ignore_patterns=options.ignore_patterns,
            prune_patterns=options.prune_patterns,
            max_depth=options.max_depth,
            default_prune=options.default_prune,
        )

    def ignored(self, relpath: str) -> bool:
        """
        Test whether ``relpath`` is excluded from comparison.

        :param relpath: A path relative to the tree roots.
        :type relpath: ``str``
        :returns: ``True`` if any ignore pattern matches.
        :rtype: ``bool``
        """
        return any(pattern.match(relpath) for pattern in self.ignore_patterns)

    def pruned(self, relpath: str, depth: int) -> Optional[PruneReason]:
        """
        Test whether the differing directory ``relpath`` at ``depth`` should
        be reported without descending into it.

        :param relpath: A directory path relative to the tree roots.
        :type relpath: ``str``
        :param depth: The depth of the directory (the roots' children are at
                      depth 1).
        :type depth: ``int``
        :returns: The reason for pruning, or ``None`` if not pruned.
        :rtype: ``Optional[PruneReason]``
        """
        if any(pattern.match(relpath) for pattern in self.default_patterns):
            return PruneReason.DEFAULT
        if any(pattern.match(relpath) for pattern in self.prune_patterns):
            return PruneReason.PATTERN
        if self.max_depth is not None and depth > self.max_depth:
            return PruneReason.DEPTH
        return None


__all__ = [
    "DEFAULT_PRUNE_PATTERNS",
    "Pattern",
    "PatternFilter",
    "compile_patterns",
]
