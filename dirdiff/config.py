# Copyright Red Hat
#
# dirdiff/config.py - Directory diff configuration file support
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Configuration file support for dir-diff.

Defaults for the comparison options may be given in an INI-style file::

    [Global]
    IgnorePatterns = *.o, build
    PrunePatterns = node_modules
    DefaultPrune = yes
    MaxDepth = 4
    Color = auto
    CompareMethod = digest
"""
from configparser import ConfigParser, Error as ConfigParserError
from dataclasses import dataclass, field
from typing import List, Optional
from os.path import exists, expanduser, join as path_join
import logging
import os

from dirdiff import DirdiffArgumentError
from dirdiff.progress import COLOR_MODES
from dirdiff.fsdiff.options import COMPARE_METHODS

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Configuration directory name below ``$XDG_CONFIG_HOME``
_DIRDIFF_CFG_DIR = "dir-diff"

#: Configuration file name
_DIRDIFF_CFG_FILE = "dir-diff.conf"

_DIRDIFF_CFG_GLOBAL = "Global"
_DIRDIFF_CFG_IGNORE_PATTERNS = "IgnorePatterns"
_DIRDIFF_CFG_PRUNE_PATTERNS = "PrunePatterns"
_DIRDIFF_CFG_DEFAULT_PRUNE = "DefaultPrune"
_DIRDIFF_CFG_MAX_DEPTH = "MaxDepth"
_DIRDIFF_CFG_COLOR = "Color"
_DIRDIFF_CFG_COMPARE_METHOD = "CompareMethod"


def default_config_path() -> str:
    """
    Return the path of the default configuration file.

    :returns: ``$XDG_CONFIG_HOME/dir-diff/dir-diff.conf``, or the same file
              below ``~/.config`` if ``XDG_CONFIG_HOME`` is unset.
    :rtype: ``str``
    """
    config_home = os.environ.get("XDG_CONFIG_HOME") or expanduser("~/.config")
    return path_join(config_home, _DIRDIFF_CFG_DIR, _DIRDIFF_CFG_FILE)


def _split_patterns(value: str) -> List[str]:
    return [pattern.strip() for pattern in value.split(",") if pattern.strip()]


@dataclass
class DirdiffConfig:
    """
    Configuration file defaults. ``None`` values are not set in the file.
    """

    ignore_patterns: List[str] = field(default_factory=list)
    prune_patterns: List[str] = field(default_factory=list)
    default_prune: Optional[bool] = None
    max_depth: Optional[int] = None
    color: Optional[str] = None
    compare_method: Optional[str] = None

    # pylint: disable=too-many-branches
    @classmethod
    def from_file(cls, config_file: Optional[str] = None) -> "DirdiffConfig":
        """
        Load ``DirdiffConfig`` from an INI-style configuration file located at
        ``config_file``.

        :param config_file: path to dir-diff.conf, or ``None`` to use the
                            default location.
        :type config_file: ``Optional[str]``.
        :returns: A ``DirdiffConfig`` instance initialised from
                  ``config_file``.
        :rtype: ``DirdiffConfig``
        :raises DirdiffArgumentError: If the file or a value is malformed.
        """
        config_file = config_file or default_config_path()

        if not exists(config_file):
            return DirdiffConfig()

        _log_debug("Loading configuration from '%s'", config_file)
        # Patterns may contain "%".
        cfg = ConfigParser(interpolation=None)
        try:
            cfg.read([config_file])
        except ConfigParserError as err:
            raise DirdiffArgumentError(
                f"Malformed configuration file '{config_file}': {err}"
            ) from err

        config = DirdiffConfig()
        if not cfg.has_section(_DIRDIFF_CFG_GLOBAL):
            return config

        section = cfg[_DIRDIFF_CFG_GLOBAL]

        def _bad_value(key: str, err) -> DirdiffArgumentError:
            return DirdiffArgumentError(
                f"Invalid {key} value in '{config_file}': {err}"
            )

        if _DIRDIFF_CFG_IGNORE_PATTERNS in section:
            config.ignore_patterns = _split_patterns(
                section[_DIRDIFF_CFG_IGNORE_PATTERNS]
            )
        if _DIRDIFF_CFG_PRUNE_PATTERNS in section:
            config.prune_patterns = _split_patterns(
                section[_DIRDIFF_CFG_PRUNE_PATTERNS]
            )
        if _DIRDIFF_CFG_DEFAULT_PRUNE in section:
            try:
                config.default_prune = section.getboolean(_DIRDIFF_CFG_DEFAULT_PRUNE)
            except ValueError as err:
                raise _bad_value(_DIRDIFF_CFG_DEFAULT_PRUNE, err) from err
        if _DIRDIFF_CFG_MAX_DEPTH in section:
            try:
                config.max_depth = section.getint(_DIRDIFF_CFG_MAX_DEPTH)
            except ValueError as err:
                raise _bad_value(_DIRDIFF_CFG_MAX_DEPTH, err) from err
            if config.max_depth < 0:
                raise _bad_value(
                    _DIRDIFF_CFG_MAX_DEPTH, f"{config.max_depth} (must be >= 0)"
                )
        if _DIRDIFF_CFG_COLOR in section:
            color = section[_DIRDIFF_CFG_COLOR].strip()
            if color not in COLOR_MODES:
                raise _bad_value(_DIRDIFF_CFG_COLOR, color)
            config.color = color
        if _DIRDIFF_CFG_COMPARE_METHOD in section:
            method = section[_DIRDIFF_CFG_COMPARE_METHOD].strip()
            if method not in COMPARE_METHODS:
                raise _bad_value(_DIRDIFF_CFG_COMPARE_METHOD, method)
            config.compare_method = method

        _log_debug("Loaded configuration: %s", config)
        return config


__all__ = [
    "DirdiffConfig",
    "default_config_path",
]
