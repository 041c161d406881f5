# Copyright Red Hat
#
# dirdiff/fsdiff/__init__.py - Directory diff comparison package
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory diff package.

Provides recursive comparison of two directory trees: entry classification,
content equality, ignore and prune patterns, the tree comparison engine,
text rendering and patch generation. The main entry points are ``FsDiffer``
and ``DiffOptions``.
"""
from .difftypes import DiffType, PruneReason, Side
from .engine import DiffEngine, DiffNode, DiffResults, compare_roots
from .equality import EqualityOracle
from .filetypes import EntryKind, classify_mode, classify_path
from .fsdiffer import FsDiffer
from .options import DiffOptions
from .patterns import PatternFilter
from .tree import DiffTree
from .treewalk import FsEntry

__all__ = [
    "DiffEngine",
    "DiffNode",
    "DiffOptions",
    "DiffResults",
    "DiffTree",
    "DiffType",
    "EntryKind",
    "EqualityOracle",
    "FsDiffer",
    "FsEntry",
    "PatternFilter",
    "PruneReason",
    "Side",
    "classify_mode",
    "classify_path",
    "compare_roots",
]
