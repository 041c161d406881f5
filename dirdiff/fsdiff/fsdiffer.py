# Copyright Red Hat
#
# dirdiff/fsdiff/fsdiffer.py - Directory diff top-level interface
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Top-level fsdiff interface.
"""
from typing import List, Optional, TextIO
import logging

from dirdiff.progress import ProgressFactory, ThrobberBase

from .engine import DiffEngine, DiffResults, compare_roots
from .equality import EqualityOracle
from .gitdiff import write_patches
from .options import DiffOptions
from .patterns import PatternFilter

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


class FsDiffer:
    """
    Top-level interface for generating directory tree comparisons.
    """

    def __init__(
        self,
        options: Optional[DiffOptions] = None,
        term_stream: Optional[TextIO] = None,
    ):
        """
        Initialise a new ``FsDiffer`` to compute directory tree differences.

        :param options: Options to control this ``FsDiffer`` instance.
        :type options: ``DiffOptions``
        :param term_stream: The stream for the progress indicator. Defaults
                            to ``sys.stderr``.
        :type term_stream: ``Optional[TextIO]``
        :raises DirdiffPatternError: If an ignore or prune pattern is
                                     malformed.
        """
        options = options or DiffOptions()
        self.options: DiffOptions = options
        self.pattern_filter: PatternFilter = PatternFilter.from_options(options)
        self.oracle: EqualityOracle = EqualityOracle(options)
        self.term_stream: Optional[TextIO] = term_stream
        #: Patch files written by the last call to ``compare_roots()``
        self.patches: List[str] = []

    def compare_roots(self, path_a: str, path_b: str) -> DiffResults:
        """
        Compare two directory trees and return diff results.

        :param path_a: The first (left hand) tree to compare.
        :type path_a: ``str``
        :param path_b: The second (right hand) tree to compare.
        :type path_b: ``str``
        :returns: The diff results for the comparison.
        :rtype: ``DiffResults``
        :raises DirdiffError: If either root cannot be compared.
        """
        throbber: ThrobberBase = ProgressFactory.get_throbber(
            "Comparing", quiet=self.options.quiet, term_stream=self.term_stream
        )

        def _throb(relpath: str):
            if not throbber.started:
                throbber.start()
            throbber.throb(relpath)

        engine = DiffEngine(
            self.options,
            pattern_filter=self.pattern_filter,
            oracle=self.oracle,
            progress=_throb,
        )

        _log_debug("Comparing trees %s and %s", path_a, path_b)
        try:
            results = compare_roots(path_a, path_b, engine=engine)
        finally:
            if throbber.started:
                throbber.end(f"compared {engine.compared} entries")

        _log_info(
            "Found %d differences between %s and %s (%d missing, "
            "%d type mismatches, %d content differences, %d unreadable)",
            len(list(results.walk())),
            path_a,
            path_b,
            results.missing,
            results.type_mismatches,
            results.content_differs,
            results.unreadable,
        )

        self.patches = []
        if self.options.git_diff_depth is not None:
            self.patches = write_patches(
                results, self.options.git_diff_depth, self.options.patch_dir
            )
        return results


__all__ = [
    "FsDiffer",
]
