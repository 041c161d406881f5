# Copyright Red Hat
#
# dirdiff/_dirdiff.py - Directory diff global definitions
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level dirdiff package.
"""
from typing import Optional, TextIO, Union, TYPE_CHECKING
import logging
import weakref
import sys

if TYPE_CHECKING:
    from .progress import ThrobberBase

_log = logging.getLogger("dirdiff")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Dirdiff debugging subsystem mask
DIRDIFF_DEBUG_COMMAND = 1
DIRDIFF_DEBUG_FSDIFF = 2
DIRDIFF_DEBUG_PROGRESS = 4
DIRDIFF_DEBUG_ALL = DIRDIFF_DEBUG_COMMAND | DIRDIFF_DEBUG_FSDIFF | DIRDIFF_DEBUG_PROGRESS

# Dirdiff debugging subsystem names
DIRDIFF_SUBSYSTEM_COMMAND = "dirdiff.command"
DIRDIFF_SUBSYSTEM_FSDIFF = "dirdiff.fsdiff"
DIRDIFF_SUBSYSTEM_PROGRESS = "dirdiff.progress"

_DEBUG_MASK_TO_SUBSYSTEM = {
    DIRDIFF_DEBUG_COMMAND: DIRDIFF_SUBSYSTEM_COMMAND,
    DIRDIFF_DEBUG_FSDIFF: DIRDIFF_SUBSYSTEM_FSDIFF,
    DIRDIFF_DEBUG_PROGRESS: DIRDIFF_SUBSYSTEM_PROGRESS,
}

_debug_subsystems = set()

# Registry of active progress instances: uses a WeakSet so we don't prevent
# garbage collection.
_active_progress: weakref.WeakSet = weakref.WeakSet()


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        # Always pass non-DEBUG messages.
        if record.levelno != logging.DEBUG:
            return True

        # Always pass DEBUG messages that aren't for a specific subsystem.
        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``dirdiff`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    dirdiff_log = logging.getLogger("dirdiff")

    for handler in dirdiff_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``dirdiff`` package.

    :param mask: the logical OR of the ``DIRDIFF_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > DIRDIFF_DEBUG_ALL:
        raise ValueError(f"Invalid dirdiff debug mask: {mask}")

    enabled_subsystems = []
    for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items():
        if mask & flag:
            enabled_subsystems.append(subsystem_name)

    dirdiff_log = logging.getLogger("dirdiff")
    for handler in dirdiff_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


def register_progress(progress: "ThrobberBase"):
    """Register a progress instance for log coordination."""
    _active_progress.add(progress)
    progress.registered = True


def unregister_progress(progress: "ThrobberBase"):
    """Unregister a progress instance."""
    _active_progress.discard(progress)
    progress.registered = False


def notify_log_output(stream: TextIO):
    """
    Notify progress instances that log output occurred on stream.

    Called by ProgressAwareHandler after emitting a record.

    :param stream: The stream that received output.
    :type stream: ``TextIO``
    """
    if stream not in (sys.stdout, sys.stderr):
        return
    for progress in list(_active_progress):
        if hasattr(progress, "reset_position"):
            progress.reset_position()


class ProgressAwareHandler(logging.StreamHandler):
    """
    A logging handler that coordinates with active throbber instances.

    After emitting a log record, notifies any throbbers writing to the same
    stream so they do not erase the log message on their next frame.
    """

    def __init__(self, stream: Optional[TextIO] = None, **kwargs):
        super().__init__(stream=stream or sys.stderr, **kwargs)

    def emit(self, record):
        try:
            msg = self.format(record)
            self.stream.write(msg + "\n")
            self.stream.flush()
            # Notify after write completes
            notify_log_output(self.stream)
        except Exception:  # pylint: disable=broad-exception-caught
            self.handleError(record)


#
# Dirdiff exception types
#


class DirdiffError(Exception):
    """
    Base class for directory diff errors.
    """


class DirdiffNotFoundError(DirdiffError):
    """
    A path given for comparison does not exist.
    """


class DirdiffNotADirectoryError(DirdiffError):
    """
    A path given for comparison is not a directory where one is required.
    """


class DirdiffPermissionError(DirdiffError):
    """
    Listing a directory or reading a file was denied.
    """


class DirdiffIOError(DirdiffError):
    """
    Any other error reading from the file system during comparison.
    """


class DirdiffPatternError(DirdiffError):
    """
    A malformed ignore or prune pattern was given.
    """


class DirdiffArgumentError(DirdiffError):
    """
    An invalid option or configuration value was given.
    """


class DirdiffCalloutError(DirdiffError):
    """
    An error calling out to an external program.
    """

    def __init__(self, msg: str, status: Optional[int] = None, stderr: str = ""):
        """
        Initialise a new ``DirdiffCalloutError`` exception.

        :param msg: A description of the failed call.
        :param status: The exit status of the program, if it ran.
        :param stderr: The error output of the program, if any.
        """
        self.status, self.stderr = status, stderr
        super().__init__(msg)


def os_error_to_dirdiff(
    err: OSError, what: str
) -> Union[DirdiffNotFoundError, DirdiffPermissionError, DirdiffIOError]:
    """
    Map an ``OSError`` raised while accessing ``what`` onto the dirdiff
    exception hierarchy.

    :param err: The operating system error.
    :type err: ``OSError``
    :param what: A short description of the failed access.
    :type what: ``str``
    :returns: A ``DirdiffError`` instance for ``err``.
    """
    reason = err.strerror or str(err)
    if isinstance(err, FileNotFoundError):
        return DirdiffNotFoundError(f"{what}: {reason}")
    if isinstance(err, PermissionError):
        return DirdiffPermissionError(f"{what}: {reason}")
    return DirdiffIOError(f"{what}: {reason}")


__all__ = [
    "DIRDIFF_DEBUG_COMMAND",
    "DIRDIFF_DEBUG_FSDIFF",
    "DIRDIFF_DEBUG_PROGRESS",
    "DIRDIFF_DEBUG_ALL",
    # Debug logging - subsystem name interface
    "SubsystemFilter",
    "DIRDIFF_SUBSYSTEM_COMMAND",
    "DIRDIFF_SUBSYSTEM_FSDIFF",
    "DIRDIFF_SUBSYSTEM_PROGRESS",
    "set_debug_mask",
    "get_debug_mask",
    # Progress log callbacks
    "register_progress",
    "unregister_progress",
    "notify_log_output",
    "ProgressAwareHandler",
    "DirdiffError",
    "DirdiffNotFoundError",
    "DirdiffNotADirectoryError",
    "DirdiffPermissionError",
    "DirdiffIOError",
    "DirdiffPatternError",
    "DirdiffArgumentError",
    "DirdiffCalloutError",
    "os_error_to_dirdiff",
]
