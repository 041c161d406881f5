# Copyright Red Hat
#
# tests/test_config.py - Configuration file tests
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import patch
import tempfile
import os

from dirdiff import DirdiffArgumentError
from dirdiff.config import DirdiffConfig, default_config_path
from dirdiff.fsdiff.options import DiffOptions

from tests import MockArgs


class TestDirdiffConfig(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "dir-diff.conf")

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, text):
        with open(self.path, "w", encoding="utf8") as fp:
            fp.write(text)

    def test_default_config_path(self):
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": "/cfg"}):
            self.assertEqual(default_config_path(), "/cfg/dir-diff/dir-diff.conf")
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": "", "HOME": "/home/u"}):
            self.assertEqual(
                default_config_path(), "/home/u/.config/dir-diff/dir-diff.conf"
            )

    def test_missing_file(self):
        config = DirdiffConfig.from_file(self.path)
        self.assertEqual(config, DirdiffConfig())

    def test_no_global_section(self):
        self._write("[Other]\nMaxDepth = 3\n")
        self.assertEqual(DirdiffConfig.from_file(self.path), DirdiffConfig())

    def test_all_keys(self):
        self._write(
            "[Global]\n"
            "IgnorePatterns = *.o, build ,\n"
            "PrunePatterns = node_modules\n"
            "DefaultPrune = no\n"
            "MaxDepth = 4\n"
            "Color = force\n"
            "CompareMethod = digest\n"
        )
        config = DirdiffConfig.from_file(self.path)
        self.assertEqual(config.ignore_patterns, ["*.o", "build"])
        self.assertEqual(config.prune_patterns, ["node_modules"])
        self.assertIs(config.default_prune, False)
        self.assertEqual(config.max_depth, 4)
        self.assertEqual(config.color, "force")
        self.assertEqual(config.compare_method, "digest")

    def test_percent_in_patterns(self):
        self._write("[Global]\nIgnorePatterns = 100%*, %(name)s\n")
        config = DirdiffConfig.from_file(self.path)
        self.assertEqual(config.ignore_patterns, ["100%*", "%(name)s"])

    def test_bad_values(self):
        cases = [
            "DefaultPrune = maybe",
            "MaxDepth = deep",
            "MaxDepth = -2",
            "Color = purple",
            "CompareMethod = guess",
        ]
        for line in cases:
            with self.subTest(line=line):
                self._write(f"[Global]\n{line}\n")
                with self.assertRaises(DirdiffArgumentError):
                    DirdiffConfig.from_file(self.path)

    def test_malformed_file(self):
        self._write("this is not an ini file\n")
        with self.assertRaises(DirdiffArgumentError):
            DirdiffConfig.from_file(self.path)

    def test_options_from_config(self):
        self._write(
            "[Global]\nIgnorePatterns = *.o\nMaxDepth = 2\nColor = never\n"
        )
        config = DirdiffConfig.from_file(self.path)
        args = MockArgs()
        args.ignore_patterns = ["*.tmp"]
        options = DiffOptions.from_cmd_args(args, config=config)
        self.assertEqual(options.ignore_patterns, ("*.o", "*.tmp"))
        self.assertEqual(options.max_depth, 2)
        self.assertEqual(options.color, "never")

    def test_command_line_overrides_config(self):
        self._write("[Global]\nMaxDepth = 2\nDefaultPrune = no\n")
        config = DirdiffConfig.from_file(self.path)
        args = MockArgs()
        args.max_depth = 5
        options = DiffOptions.from_cmd_args(args, config=config)
        self.assertEqual(options.max_depth, 5)
        self.assertIs(options.default_prune, False)
