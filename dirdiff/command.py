# Copyright Red Hat
#
# dirdiff/command.py - Directory diff command interface
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``dirdiff.command`` module provides both the dir-diff command line
interface infrastructure, and a simple procedural interface to the
``dirdiff`` library modules.

The procedural interface is used by the ``dir-diff`` command line tool,
and may be used by application programs, or interactively in the
Python shell by users who do not require all the features present
in the dirdiff object API.
"""
from argparse import ArgumentParser, ArgumentTypeError
from typing import Optional
from os.path import basename, exists
import logging
import sys

from dirdiff import (
    DirdiffError,
    DirdiffNotFoundError,
    DIRDIFF_DEBUG_COMMAND,
    DIRDIFF_DEBUG_FSDIFF,
    DIRDIFF_DEBUG_PROGRESS,
    DIRDIFF_DEBUG_ALL,
    DIRDIFF_SUBSYSTEM_COMMAND,
    SubsystemFilter,
    set_debug_mask,
    ProgressAwareHandler,
    __version__,
)
from dirdiff.config import DirdiffConfig
from dirdiff.progress import COLOR_MODES, TermControl
from .fsdiff import DiffOptions, DiffResults, FsDiffer
from .fsdiff.options import COMPARE_METHODS, OUTPUT_FORMATS

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIRDIFF_SUBSYSTEM_COMMAND}, **kwargs)


_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None

#: Message for a missing PATH argument.
_MISSING_PATHS = "Missing positional argument(s): <path> <path>"


class DirdiffArgumentParser(ArgumentParser):
    """
    An ``ArgumentParser`` that exits with status 1 on usage errors.
    """

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _non_negative_int(value: str) -> int:
    """
    Argument type for depth values.
    """
    try:
        depth = int(value)
    except ValueError as err:
        raise ArgumentTypeError(f"invalid depth value: '{value}'") from err
    if depth < 0:
        raise ArgumentTypeError(f"depth must be >= 0: '{value}'")
    return depth


def diff_trees(
    path_a: str,
    path_b: str,
    options: Optional[DiffOptions] = None,
) -> DiffResults:
    """
    Compare two directory trees.

    :param path_a: The first tree to compare.
    :type path_a: ``str``
    :param path_b: The second tree to compare.
    :type path_b: ``str``
    :param options: Options controlling the comparison.
    :type options: ``Optional[DiffOptions]``
    :returns: The comparison results.
    :rtype: ``DiffResults``
    """
    differ = FsDiffer(options=options)
    return differ.compare_roots(path_a, path_b)


def print_results(results: DiffResults, options: DiffOptions):
    """
    Print comparison results in the format selected by ``options``.

    :param results: The comparison results to print.
    :type results: ``DiffResults``
    :param options: The options used for the comparison.
    :type options: ``DiffOptions``
    """
    if options.output_format == "paths":
        if results:
            print("\n".join(results.paths()))
    elif options.output_format == "json":
        print(results.json(pretty=True))
    else:
        term_control = TermControl(color=options.color)
        print(results.tree(legend=options.legend, term_control=term_control))


def _diff_cmd(cmd_args):
    """
    Directory diff command handler.

    Compare the two directory trees named on the command line.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    if len(cmd_args.paths) < 2:
        print(_MISSING_PATHS, file=sys.stderr)
        return 1

    if cmd_args.config and not exists(cmd_args.config):
        raise DirdiffNotFoundError(f"Configuration file not found: {cmd_args.config}")

    config = DirdiffConfig.from_file(cmd_args.config)
    options = DiffOptions.from_cmd_args(cmd_args, config=config)
    _log_debug_command("Effective options:\n%s", options)

    path_a, path_b = cmd_args.paths
    results = diff_trees(path_a, path_b, options)
    print_results(results, options)
    return 0


def setup_logging(cmd_args):
    """
    Set up dirdiff logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    dirdiff_log = logging.getLogger("dirdiff")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    dirdiff_log.setLevel(level)
    if dirdiff_log.hasHandlers():
        dirdiff_log.handlers.clear()

    # Subsystem log filtering
    _dirdiff_subsystem_filter = SubsystemFilter("dirdiff")

    # Main console handler
    _CONSOLE_HANDLER = ProgressAwareHandler()

    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(_dirdiff_subsystem_filter)

    dirdiff_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down dirdiff logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "command": DIRDIFF_DEBUG_COMMAND,
        "fsdiff": DIRDIFF_DEBUG_FSDIFF,
        "progress": DIRDIFF_DEBUG_PROGRESS,
        "all": DIRDIFF_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _add_diff_args(parser):
    """
    Add directory diff arguments.
    """
    parser.add_argument(
        "paths",
        metavar="PATH",
        type=str,
        nargs="*",
        help="The directory trees to compare",
    )
    parser.add_argument(
        "-i",
        "--ignore",
        dest="ignore_patterns",
        metavar="PATTERN",
        action="append",
        help="Exclude relative paths matching PATTERN (may be repeated)",
    )
    parser.add_argument(
        "-p",
        "--prune",
        dest="prune_patterns",
        metavar="PATTERN",
        action="append",
        help="Do not descend into differing directories matching PATTERN "
        "(may be repeated)",
    )
    parser.add_argument(
        "--no-default-prune",
        dest="default_prune",
        action="store_const",
        const=False,
        default=None,
        help="Descend into version control directories such as .git",
    )
    parser.add_argument(
        "-m",
        "--max-depth",
        metavar="N",
        type=_non_negative_int,
        help="Do not descend into directories deeper than N",
    )
    parser.add_argument(
        "-g",
        "--git-diff",
        dest="git_diff_depth",
        metavar="N",
        type=_non_negative_int,
        help="Write a 'git diff --no-index' patch for each differing "
        "directory pair at depth N (0 for the trees themselves)",
    )
    parser.add_argument(
        "--patch-dir",
        metavar="DIR",
        type=str,
        help="Directory to write patch files to (default: current directory)",
    )
    parser.add_argument(
        "--color",
        choices=list(COLOR_MODES),
        help="Override automatic color detection",
    )
    parser.add_argument(
        "--no-legend",
        dest="legend",
        action="store_false",
        help="Do not print the legend before the difference tree",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not display the progress indicator",
    )
    parser.add_argument(
        "--paranoid",
        action="store_true",
        help="Always compare the full contents of regular files",
    )
    parser.add_argument(
        "--compare-method",
        choices=list(COMPARE_METHODS),
        help="Method used to compare regular file contents (default: bytes)",
    )
    parser.add_argument(
        "-o",
        "--output-format",
        choices=list(OUTPUT_FORMATS),
        default="tree",
        help="Output format for the differences (default: tree)",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        type=str,
        help="Read option defaults from FILE",
    )
    parser.set_defaults(func=_diff_cmd)


def main(args):
    """
    Main entry point for dir-diff.
    """
    parser = DirdiffArgumentParser(
        description="Compute the difference between the specified paths.",
        prog=basename(args[0]),
    )

    # Global arguments
    parser.add_argument(
        "-d",
        "--debug",
        metavar="DEBUGOPTS",
        type=str,
        help="A list of debug options to enable (command,fsdiff,progress,all)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        help="Enable verbose output",
        action="count",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        help="Report the version number of dir-diff",
        version=f"%(prog)s {__version__}",
    )

    _add_diff_args(parser)

    cmd_args = parser.parse_args(args[1:])

    if len(cmd_args.paths) > 2:
        parser.error(f"unrecognized arguments: {' '.join(cmd_args.paths[2:])}")

    status = 1

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        return status

    setup_logging(cmd_args)

    _log_debug_command("Parsed %s", " ".join(args[1:]))

    if cmd_args.debug:
        status = cmd_args.func(cmd_args)
    else:
        try:
            status = cmd_args.func(cmd_args)
        except KeyboardInterrupt:  # pragma: no cover
            _log_info("Exiting on user cancel")
        except DirdiffError as err:
            _log_error("Command failed: %s", err)

    shutdown_logging()
    return status


# vim: set et ts=4 sw=4 :
