# Copyright Red Hat
#
# dirdiff/fsdiff/difftypes.py - Directory diff types
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory diff types
"""
from enum import Enum


class DiffType(Enum):
    """
    Enum for different difference types.
    """

    MISSING = "missing"
    TYPE_MISMATCH = "type_mismatch"
    CONTENT_DIFFERS = "content_differs"
    UNREADABLE = "unreadable"


class Side(Enum):
    """
    Enum for the two trees being compared.
    """

    FIRST = "first"
    SECOND = "second"

    @property
    def other(self) -> "Side":
        """
        The opposite side to this one.

        :returns: ``Side.SECOND`` for ``Side.FIRST`` and vice versa.
        :rtype: ``Side``
        """
        return Side.SECOND if self is Side.FIRST else Side.FIRST


class PruneReason(Enum):
    """
    Enum for the reasons a differing directory is not descended into.
    """

    #: Built-in version control directory prune patterns.
    DEFAULT = "default"
    #: A user supplied prune pattern.
    PATTERN = "pattern"
    #: The directory lies beyond the maximum depth.
    DEPTH = "depth"


__all__ = [
    "DiffType",
    "PruneReason",
    "Side",
]
