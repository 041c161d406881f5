# Copyright Red Hat
#
# dirdiff/fsdiff/gitdiff.py - Directory diff patch generation
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Patch generation for differing directory pairs using ``git diff --no-index``.
"""
from subprocess import run, TimeoutExpired
from typing import List, Tuple, TYPE_CHECKING
from hashlib import sha256
import logging
import os

from dirdiff import DIRDIFF_SUBSYSTEM_FSDIFF, DirdiffCalloutError

from .difftypes import DiffType

if TYPE_CHECKING:
    from .engine import DiffResults

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_fsdiff(msg, *args, **kwargs):
    """A wrapper for fsdiff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": DIRDIFF_SUBSYSTEM_FSDIFF}, **kwargs)


#: Timeout for the git diff program
_GIT_DIFF_TIMEOUT = int(os.getenv("DIRDIFF_GIT_DIFF_TIMEOUT", "300"))

#: The git executable to run
_GIT_CMD = "git"

#: Exit status values meaning "no differences" and "differences found".
_GIT_DIFF_OK = (0, 1)

#: Number of hex digits of the path digest used in patch file names.
_PATCH_HASH_LEN = 12


def patch_file_name(path_a: str, path_b: str) -> str:
    """
    Return the patch file name for the pair ``path_a``, ``path_b``.

    The name combines both base names with a digest of the full paths so
    that pairs with the same base names do not collide.

    :param path_a: The directory from the first tree.
    :type path_a: ``str``
    :param path_b: The directory from the second tree.
    :type path_b: ``str``
    :returns: A file name ending in ".patch".
    :rtype: ``str``
    """
    base_a = os.path.basename(os.path.normpath(path_a))
    base_b = os.path.basename(os.path.normpath(path_b))
    digest = sha256(
        os.fsencode(path_a) + b"\0" + os.fsencode(path_b)
    ).hexdigest()[:_PATCH_HASH_LEN]
    return f"{base_a}-{base_b}-{digest}.patch"


def write_patch(path_a: str, path_b: str, patch_dir: str = ".") -> str:
    """
    Run ``git diff --no-index`` on a pair of paths and write the output to
    a patch file in ``patch_dir``.

    :param path_a: The directory from the first tree.
    :type path_a: ``str``
    :param path_b: The directory from the second tree.
    :type path_b: ``str``
    :param patch_dir: The directory to write the patch file to.
    :type patch_dir: ``str``
    :returns: The path of the written patch file.
    :rtype: ``str``
    :raises DirdiffCalloutError: If git cannot be run, times out, fails, or
                                 the patch cannot be written.
    """
    git_diff_cmd = [_GIT_CMD, "diff", "--no-index", "--binary", "--", path_a, path_b]
    _log_debug_fsdiff("Running %s", " ".join(git_diff_cmd))
    try:
        result = run(
            git_diff_cmd,
            check=False,
            capture_output=True,
            timeout=_GIT_DIFF_TIMEOUT,
        )
    except FileNotFoundError as err:
        raise DirdiffCalloutError(
            f"git not found while comparing '{path_a}' and '{path_b}': {err}"
        ) from err
    except TimeoutExpired as err:
        raise DirdiffCalloutError(
            f"Timed out running git diff for '{path_a}' and '{path_b}': {err}"
        ) from err

    if result.returncode not in _GIT_DIFF_OK:
        stderr = result.stderr.decode("utf8", errors="replace").strip()
        raise DirdiffCalloutError(
            f"git diff failed for '{path_a}' and '{path_b}' "
            f"(status {result.returncode}): {stderr}",
            status=result.returncode,
            stderr=stderr,
        )

    patch_path = os.path.join(patch_dir, patch_file_name(path_a, path_b))
    try:
        with open(patch_path, "wb") as fp:
            fp.write(result.stdout)
    except OSError as err:
        raise DirdiffCalloutError(
            f"Failed to write patch file '{patch_path}': {err}"
        ) from err

    _log_info("Wrote patch for '%s' and '%s' to %s", path_a, path_b, patch_path)
    return patch_path


def patch_targets(results: "DiffResults", depth: int) -> List[Tuple[str, str]]:
    """
    Return the differing directory pairs at ``depth``.

    :param results: The comparison results.
    :type results: ``DiffResults``
    :param depth: The depth to select (0 for the roots themselves).
    :type depth: ``int``
    :returns: A list of ``(path_a, path_b)`` tuples.
    :rtype: ``List[Tuple[str, str]]``
    """
    root = results.root()
    if root is None:
        return []
    if depth == 0:
        return [(root.a_path, root.b_path)]
    return [
        (node.a_path, node.b_path)
        for node in results.walk()
        if node.depth == depth
        and node.is_dir
        and node.diff_type == DiffType.CONTENT_DIFFERS
    ]


def write_patches(
    results: "DiffResults", depth: int, patch_dir: str = "."
) -> List[str]:
    """
    Write a patch for each differing directory pair at ``depth``.

    Failures are logged and do not stop the remaining patches.

    :param results: The comparison results.
    :type results: ``DiffResults``
    :param depth: The depth to select (0 for the roots themselves).
    :type depth: ``int``
    :param patch_dir: The directory to write patch files to.
    :type patch_dir: ``str``
    :returns: The paths of the patch files written.
    :rtype: ``List[str]``
    """
    written = []
    for path_a, path_b in patch_targets(results, depth):
        try:
            written.append(write_patch(path_a, path_b, patch_dir))
        except DirdiffCalloutError as err:
            _log_error("Patch generation failed: %s", err)
    return written


__all__ = [
    "patch_file_name",
    "patch_targets",
    "write_patch",
    "write_patches",
]
