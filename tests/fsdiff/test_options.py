# Copyright Red Hat
#
# tests/fsdiff/test_options.py - Directory diff options tests
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from argparse import Namespace
import dataclasses

from dirdiff import DirdiffArgumentError
from dirdiff.config import DirdiffConfig
from dirdiff.fsdiff.options import DiffOptions


class TestDiffOptions(unittest.TestCase):
    def test_defaults(self):
        opts = DiffOptions()
        self.assertEqual(opts.ignore_patterns, ())
        self.assertEqual(opts.prune_patterns, ())
        self.assertTrue(opts.default_prune)
        self.assertIsNone(opts.max_depth)
        self.assertIsNone(opts.git_diff_depth)
        self.assertEqual(opts.patch_dir, ".")
        self.assertEqual(opts.color, "auto")
        self.assertTrue(opts.legend)
        self.assertFalse(opts.quiet)
        self.assertFalse(opts.paranoid)
        self.assertEqual(opts.compare_method, "bytes")
        self.assertEqual(opts.output_format, "tree")

    def test_frozen(self):
        opts = DiffOptions()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            opts.quiet = True

    def test_str(self):
        opts = DiffOptions(ignore_patterns=("a", "b"), quiet=True)
        text = str(opts)
        self.assertIn("ignore_patterns=a b", text)
        self.assertIn("quiet=True", text)

    def test_invalid_values(self):
        for kwargs in (
            {"compare_method": "md5"},
            {"output_format": "xml"},
            {"color": "sometimes"},
            {"max_depth": -1},
            {"git_diff_depth": -2},
        ):
            with self.subTest(**kwargs):
                with self.assertRaises(DirdiffArgumentError):
                    DiffOptions(**kwargs)

    def test_color_aliases_accepted(self):
        for color in ("auto", "always", "force", "never", "off"):
            self.assertEqual(DiffOptions(color=color).color, color)

    def test_from_cmd_args(self):
        args = Namespace(
            ignore_patterns=["*.o"],
            prune_patterns=None,
            default_prune=None,
            max_depth=2,
            git_diff_depth=None,
            patch_dir=None,
            color="never",
            legend=False,
            quiet=True,
            paranoid=True,
            compare_method="digest",
            output_format="json",
        )
        opts = DiffOptions.from_cmd_args(args)
        self.assertEqual(opts.ignore_patterns, ("*.o",))
        self.assertEqual(opts.prune_patterns, ())
        self.assertTrue(opts.default_prune)
        self.assertEqual(opts.max_depth, 2)
        self.assertEqual(opts.patch_dir, ".")
        self.assertEqual(opts.color, "never")
        self.assertFalse(opts.legend)
        self.assertTrue(opts.quiet)
        self.assertTrue(opts.paranoid)
        self.assertEqual(opts.compare_method, "digest")
        self.assertEqual(opts.output_format, "json")

    def test_from_cmd_args_missing_attributes(self):
        opts = DiffOptions.from_cmd_args(Namespace(quiet=True))
        self.assertTrue(opts.quiet)
        self.assertEqual(opts.compare_method, "bytes")

    def test_from_cmd_args_with_config(self):
        config = DirdiffConfig(
            ignore_patterns=["*.tmp"],
            prune_patterns=["vendor"],
            default_prune=False,
            max_depth=5,
            color="always",
            compare_method="digest",
        )
        args = Namespace(
            ignore_patterns=["*.o"],
            prune_patterns=None,
            default_prune=None,
            max_depth=1,
            color=None,
            compare_method=None,
        )
        opts = DiffOptions.from_cmd_args(args, config=config)
        # Patterns are concatenated, config first.
        self.assertEqual(opts.ignore_patterns, ("*.tmp", "*.o"))
        self.assertEqual(opts.prune_patterns, ("vendor",))
        # Unset arguments take config values.
        self.assertFalse(opts.default_prune)
        self.assertEqual(opts.color, "always")
        self.assertEqual(opts.compare_method, "digest")
        # Command line overrides config.
        self.assertEqual(opts.max_depth, 1)
