# Copyright Red Hat
#
# tests/test_dirdiff.py - dirdiff package unit tests
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import MagicMock
from io import StringIO
import logging
import sys

import dirdiff

log = logging.getLogger()


def _record(level, subsystem=None):
    record = logging.LogRecord("dirdiff.test", level, __file__, 1, "msg", None, None)
    if subsystem is not None:
        record.subsystem = subsystem
    return record


class DirdiffTestsSimple(unittest.TestCase):
    """Test dirdiff module"""

    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)

    def tearDown(self):
        log.debug("Tearing down (%s)", self._testMethodName)
        dirdiff.set_debug_mask(0)

    def test_version(self):
        self.assertTrue(dirdiff.__version__)

    def test_set_debug_mask(self):
        dirdiff.set_debug_mask(dirdiff.DIRDIFF_DEBUG_ALL)
        self.assertEqual(dirdiff.get_debug_mask(), dirdiff.DIRDIFF_DEBUG_ALL)

    def test_set_debug_mask_bad_mask(self):
        with self.assertRaises(ValueError):
            dirdiff.set_debug_mask(dirdiff.DIRDIFF_DEBUG_ALL + 1)
        with self.assertRaises(ValueError):
            dirdiff.set_debug_mask(-1)

    def test_SubsystemFilter(self):
        # Start with no subsystems enabled
        dirdiff.set_debug_mask(0)
        sf = dirdiff.SubsystemFilter("dirdiff")
        self.assertEqual(sf.enabled_subsystems, set())
        # Enable a couple and ensure new filters initialise from cache
        dirdiff.set_debug_mask(dirdiff.DIRDIFF_DEBUG_COMMAND | dirdiff.DIRDIFF_DEBUG_FSDIFF)
        sf2 = dirdiff.SubsystemFilter("dirdiff")
        self.assertIn(dirdiff.DIRDIFF_SUBSYSTEM_COMMAND, sf2.enabled_subsystems)
        self.assertIn(dirdiff.DIRDIFF_SUBSYSTEM_FSDIFF, sf2.enabled_subsystems)
        self.assertNotIn(dirdiff.DIRDIFF_SUBSYSTEM_PROGRESS, sf2.enabled_subsystems)

    def test_SubsystemFilter_filter(self):
        dirdiff.set_debug_mask(dirdiff.DIRDIFF_DEBUG_FSDIFF)
        sf = dirdiff.SubsystemFilter("dirdiff")
        self.assertTrue(sf.filter(_record(logging.INFO, dirdiff.DIRDIFF_SUBSYSTEM_COMMAND)))
        self.assertTrue(sf.filter(_record(logging.DEBUG)))
        self.assertTrue(sf.filter(_record(logging.DEBUG, dirdiff.DIRDIFF_SUBSYSTEM_FSDIFF)))
        self.assertFalse(sf.filter(_record(logging.DEBUG, dirdiff.DIRDIFF_SUBSYSTEM_PROGRESS)))

    def test_ProgressAwareHandler_emit(self):
        stream = StringIO()
        handler = dirdiff.ProgressAwareHandler(stream=stream)
        handler.setFormatter(logging.Formatter("%(levelname)s - %(message)s"))
        handler.emit(_record(logging.WARNING))
        self.assertEqual(stream.getvalue(), "WARNING - msg\n")

    def test_notify_log_output(self):
        progress = MagicMock()
        dirdiff.register_progress(progress)
        self.assertTrue(progress.registered)
        try:
            dirdiff.notify_log_output(StringIO())
            progress.reset_position.assert_not_called()
            dirdiff.notify_log_output(sys.stderr)
            progress.reset_position.assert_called_once()
        finally:
            dirdiff.unregister_progress(progress)
        self.assertFalse(progress.registered)

    def test_os_error_to_dirdiff(self):
        cases = [
            (FileNotFoundError(2, "No such file or directory"), dirdiff.DirdiffNotFoundError),
            (PermissionError(13, "Permission denied"), dirdiff.DirdiffPermissionError),
            (OSError(5, "Input/output error"), dirdiff.DirdiffIOError),
        ]
        for err, exc_class in cases:
            with self.subTest(err=err):
                exc = dirdiff.os_error_to_dirdiff(err, "Cannot access '/x'")
                self.assertIsInstance(exc, exc_class)
                self.assertIsInstance(exc, dirdiff.DirdiffError)
                self.assertEqual(str(exc), f"Cannot access '/x': {err.strerror}")

    def test_DirdiffCalloutError(self):
        err = dirdiff.DirdiffCalloutError("git failed", status=128, stderr="fatal")
        self.assertEqual(str(err), "git failed")
        self.assertEqual(err.status, 128)
        self.assertEqual(err.stderr, "fatal")
        self.assertIsInstance(err, dirdiff.DirdiffError)

    def test_exception_hierarchy(self):
        for exc_class in (
            dirdiff.DirdiffNotFoundError,
            dirdiff.DirdiffNotADirectoryError,
            dirdiff.DirdiffPermissionError,
            dirdiff.DirdiffIOError,
            dirdiff.DirdiffPatternError,
            dirdiff.DirdiffArgumentError,
        ):
            self.assertTrue(issubclass(exc_class, dirdiff.DirdiffError))
