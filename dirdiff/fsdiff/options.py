# Copyright Red Hat
#
# dirdiff/fsdiff/options.py - Directory diff options
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory comparison options.
"""
from dataclasses import dataclass, field, fields
from typing import Optional, Tuple, Union, TYPE_CHECKING
from argparse import Namespace
import logging

from dirdiff import DirdiffArgumentError
from dirdiff.progress import COLOR_MODES

if TYPE_CHECKING:
    from dirdiff.config import DirdiffConfig

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Content comparison methods understood by ``EqualityOracle``.
COMPARE_METHODS = ("bytes", "digest")

#: Output formats understood by ``DiffResults``.
OUTPUT_FORMATS = ("tree", "paths", "json")

#: Options whose values are pattern lists merged from configuration.
_PATTERN_FIELDS = ("ignore_patterns", "prune_patterns")


@dataclass(frozen=True)
class DiffOptions:
    """
    Directory comparison options.
    """

    #: Relative path patterns to exclude from the comparison (glob notation)
    ignore_patterns: Tuple[str, ...] = field(default_factory=tuple)
    #: Directory patterns that are reported but not descended (glob notation)
    prune_patterns: Tuple[str, ...] = field(default_factory=tuple)
    #: Apply the built-in version control prune patterns
    default_prune: bool = True
    #: Prune directories deeper than this depth (``None`` for unlimited)
    max_depth: Optional[int] = None
    #: Write a patch for each differing directory pair at this depth
    git_diff_depth: Optional[int] = None
    #: Directory receiving generated patch files
    patch_dir: str = "."
    #: Color mode for tree output
    color: str = "auto"
    #: Print the legend before tree output
    legend: bool = True
    #: Do not output progress or status updates
    quiet: bool = False
    #: Always compare full file contents
    paranoid: bool = False
    #: Method used to compare regular file contents
    compare_method: str = "bytes"
    #: Output format for the comparison results
    output_format: str = "tree"

    def __post_init__(self):
        """
        Validate option values.

        :raises DirdiffArgumentError: If an option value is out of range.
        """
        if self.compare_method not in COMPARE_METHODS:
            raise DirdiffArgumentError(
                f"Invalid compare method: {self.compare_method} "
                f"(expected one of {', '.join(COMPARE_METHODS)})"
            )
        if self.output_format not in OUTPUT_FORMATS:
            raise DirdiffArgumentError(
                f"Invalid output format: {self.output_format} "
                f"(expected one of {', '.join(OUTPUT_FORMATS)})"
            )
        if self.color not in COLOR_MODES:
            raise DirdiffArgumentError(
                f"Invalid color mode: {self.color} "
                f"(expected one of {', '.join(COLOR_MODES)})"
            )
        if self.max_depth is not None and self.max_depth < 0:
            raise DirdiffArgumentError(
                f"Invalid maximum depth: {self.max_depth} (must be >= 0)"
            )
        if self.git_diff_depth is not None and self.git_diff_depth < 0:
            raise DirdiffArgumentError(
                f"Invalid git diff depth: {self.git_diff_depth} (must be >= 0)"
            )

    def __str__(self):
        """
        Return a human readable string representation of this
        ``DiffOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        items = [
            (key, " ".join(val) if isinstance(val, tuple) else val)
            for key, val in self.__dict__.items()
        ]
        return "\n".join(f"{key}={val}" for key, val in items)

    @classmethod
    def from_cmd_args(
        cls, cmd_args: Namespace, config: Optional["DirdiffConfig"] = None
    ) -> "DiffOptions":
        """
        Initialise DiffOptions from command line arguments.

        Construct a new ``DiffOptions`` object from the command line
        arguments in ``cmd_args``. Arguments that are absent or ``None`` take
        their value from ``config``, if given, and otherwise keep the
        ``DiffOptions`` default. Pattern lists from ``config`` and
        ``cmd_args`` are concatenated.

        :param cmd_args: The command line selection arguments.
        :type cmd_args: ``Namespace``
        :param config: Optional configuration file defaults.
        :type config: ``Optional[DirdiffConfig]``
        :returns: A new ``DiffOptions`` instance
        :rtype: ``DiffOptions``
        """

        def get_value(name: str) -> Union[bool, int, Optional[str], Tuple[str, ...]]:
            """
            Get a value from ``cmd_args``, converting lists to tuples.

            :param name: The name of the argument.
            :type name: ``str``
            :returns: The argument converted to a tuple if appropriate.
            :rtype: ``Union[bool, int, str, Optional[str], Tuple[str, ...]]``
            """
            attr = getattr(cmd_args, name, None)
            conf = getattr(config, name, None) if config is not None else None
            if name in _PATTERN_FIELDS:
                return tuple(conf or ()) + tuple(attr or ())
            if attr is None:
                return conf
            if isinstance(attr, list):
                return tuple(attr)
            return attr

        kwargs = {}
        for name in (f.name for f in fields(cls)):
            value = get_value(name)
            if value is not None:
                kwargs[name] = value
        options = cls(**kwargs)
        _log_debug("Initialised DiffOptions from arguments: %s", repr(options))
        return options


__all__ = [
    "COMPARE_METHODS",
    "DiffOptions",
    "OUTPUT_FORMATS",
]
