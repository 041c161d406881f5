# Copyright Red Hat
#
# dirdiff/fsdiff/tree.py - Directory diff tree renderer
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory diff tree rendering
"""
from typing import List, Optional, Tuple, TYPE_CHECKING
import logging

from dirdiff import DIRDIFF_SUBSYSTEM_FSDIFF

from ..progress import TermControl
from .difftypes import DiffType, PruneReason, Side
from .treewalk import printable_path

if TYPE_CHECKING:
    from .engine import DiffNode, DiffResults

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_fsdiff(msg, *args, **kwargs):
    """A wrapper for fsdiff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIRDIFF_SUBSYSTEM_FSDIFF}, **kwargs)


#: Output when the two trees are equal.
NO_DIFFERENCES = "No differences."

#: Indentation for each level below the roots.
INDENT = "|  "


class DiffTree:
    """Top level interface for rendering difference trees"""

    def __init__(
        self,
        results: "DiffResults",
        color: str = "auto",
        term_control: Optional[TermControl] = None,
    ):
        """
        Initialise a new ``DiffTree`` object.

        :param results: The comparison results to render.
        :type results: ``DiffResults``
        :param color: A string to control color tree rendering: "auto",
                      "always", or "never".
        :type color: ``str``
        :param term_control: An optional ``TermControl`` instance to use for
                             formatting. The supplied instance overrides any
                             ``color`` argument if set.
        :type term_control: ``Optional[TermControl]``
        """
        self.results = results

        # Set up color modes
        self.term_control: TermControl = term_control or TermControl(color=color)

        tc = self.term_control
        self.marker_map = {
            DiffType.TYPE_MISMATCH: (tc.BLUE, "!"),
            DiffType.CONTENT_DIFFERS: (tc.YELLOW, "?"),
            DiffType.UNREADABLE: (tc.MAGENTA, "~"),
        }
        self.missing_map = {
            Side.FIRST: (tc.RED, "-"),
            Side.SECOND: (tc.GREEN, "+"),
        }

    def get_marker(self, node: "DiffNode") -> Tuple[str, str]:
        """
        Return the color and marker character for ``node``.

        :param node: The difference node to generate a marker for.
        :type node: ``DiffNode``
        :returns: A ``(color, marker)`` tuple.
        :rtype: ``Tuple[str, str]``
        """
        if node.diff_type == DiffType.MISSING:
            return self.missing_map[node.only_in]
        return self.marker_map[node.diff_type]

    def legend(self) -> str:
        """
        Return the legend block explaining the change markers.

        :returns: The legend text, ending with the "Diff:" header.
        :rtype: ``str``
        """
        tc = self.term_control
        entries = [
            (tc.RED, "-", "exists only in 1st tree"),
            (tc.GREEN, "+", "exists only in 2nd tree"),
            (tc.BLUE, "!", "types differ (directory vs file)"),
            (tc.YELLOW, "?", "contents differ"),
            (tc.MAGENTA, "~", "could not compare"),
        ]
        lines = [
            f"\t{color}{marker} foo{tc.NORMAL} - {desc}"
            for color, marker, desc in entries
        ]
        return "Legend:" + "\n".join(lines) + "\nDiff:"

    def node_line(self, node: "DiffNode") -> str:
        """
        Return the output line for ``node`` alone.

        :param node: The node to render.
        :type node: ``DiffNode``
        :returns: The indented, marked line.
        :rtype: ``str``
        """
        normal = self.term_control.NORMAL
        color, marker = self.get_marker(node)
        prefix = INDENT * node.depth
        label = f"{prefix}{color}{marker} {printable_path(node.name)}{normal}"

        if node.diff_type == DiffType.UNREADABLE:
            return f"{label} (could not compare: {node.error})"
        if node.pruned == PruneReason.DEFAULT:
            return f"{label} (not descending)"
        if node.pruned is not None:
            return f"{label} (pruned; different)"
        if node.children:
            return f"{label}:"
        return label

    def render_node(self, node: "DiffNode", lines: List[str]):
        """
        Append the rendered lines for ``node`` and its children to ``lines``.

        :param node: The node to render.
        :type node: ``DiffNode``
        :param lines: The list of output lines.
        :type lines: ``List[str]``
        """
        pending = [node]
        while pending:
            node = pending.pop()
            lines.append(self.node_line(node))
            pending.extend(reversed(node.children))

    def render(self, legend: bool = True) -> str:
        """
        Render the difference tree.

        :param legend: Include the legend block before the tree.
        :type legend: ``bool``
        :returns: The rendered tree, or ``NO_DIFFERENCES`` if the trees are
                  equal.
        :rtype: ``str``
        """
        root = self.results.root()
        if root is None:
            return NO_DIFFERENCES

        lines = [self.legend()] if legend else []
        self.render_node(root, lines)
        _log_debug_fsdiff("Rendered %d difference tree lines", len(lines))
        return "\n".join(lines)


__all__ = [
    "DiffTree",
    "INDENT",
    "NO_DIFFERENCES",
]
