# Copyright Red Hat
#
# tests/fsdiff/test_treewalk.py - Entry snapshot and scanning tests
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import patch
import os

from dirdiff.fsdiff.filetypes import EntryKind
from dirdiff.fsdiff.treewalk import FsEntry, join_relpath, printable_path, scan_dir

from ._util import TreePair, make_entry


class TestJoinRelpath(unittest.TestCase):
    def test_join(self):
        self.assertEqual(join_relpath("", "a"), "a")
        self.assertEqual(join_relpath("a", "b"), "a/b")
        self.assertEqual(join_relpath("a/b", "c"), "a/b/c")


class TestPrintablePath(unittest.TestCase):
    def test_plain_unchanged(self):
        self.assertEqual(printable_path("src/main.c"), "src/main.c")

    def test_undecodable_bytes_escaped(self):
        name = os.fsdecode(b"dir/bad\xffname")
        self.assertEqual(printable_path(name), "dir/bad\\xffname")
        printable_path(name).encode("utf-8")


class TestFsEntry(unittest.TestCase):
    def test_from_stat(self):
        entry = make_entry("/root/a/file", "sub/file", size=10, ino=7, dev=3)
        self.assertEqual(entry.name, "file")
        self.assertEqual(entry.relpath, "sub/file")
        self.assertIs(entry.kind, EntryKind.REGULAR)
        self.assertEqual(entry.size, 10)
        self.assertEqual(entry.ino, 7)
        self.assertEqual(entry.dev, 3)
        self.assertTrue(entry.is_file)
        self.assertFalse(entry.is_dir)
        self.assertTrue(entry.readable)
        self.assertIsNone(entry.symlink_target)

    def test_root_name_from_path(self):
        entry = make_entry("/tmp/tree/", "")
        self.assertEqual(entry.name, "tree")

    def test_error_entry(self):
        err = PermissionError(13, "Permission denied")
        entry = FsEntry("/x/y", "y", error=err)
        self.assertIs(entry.kind, EntryKind.UNKNOWN)
        self.assertFalse(entry.readable)
        self.assertEqual(entry.size, 0)
        self.assertIn("Permission denied", str(entry))

    def test_to_dict(self):
        entry = make_entry("/root/a/file", "file", size=5)
        d = entry.to_dict()
        self.assertEqual(d["name"], "file")
        self.assertEqual(d["kind"], "regular")
        self.assertEqual(d["size"], 5)
        self.assertIsNone(d["error"])

    def test_symlink_target_lazy(self):
        with TreePair({"l": ("link", "target")}) as trees:
            entry = FsEntry.from_path(os.path.join(trees.a, "l"), "l")
            self.assertTrue(entry.is_symlink)
            with patch("dirdiff.fsdiff.treewalk.os.readlink") as mock_readlink:
                mock_readlink.return_value = b"target"
                self.assertEqual(entry.symlink_target, b"target")
                self.assertEqual(entry.symlink_target, b"target")
                mock_readlink.assert_called_once()

    def test_symlink_target_bytes(self):
        with TreePair({"l": ("link", "../some/where")}) as trees:
            entry = FsEntry.from_path(os.path.join(trees.a, "l"), "l")
            self.assertEqual(entry.symlink_target, b"../some/where")


class TestScanDir(unittest.TestCase):
    def test_scan(self):
        layout = {"f": "data", "d": {"g": "x"}, "l": ("link", "f")}
        with TreePair(layout) as trees:
            entries = scan_dir(trees.a, "top")
            self.assertEqual(set(entries), {"f", "d", "l"})
            self.assertIs(entries["f"].kind, EntryKind.REGULAR)
            self.assertIs(entries["d"].kind, EntryKind.DIRECTORY)
            self.assertIs(entries["l"].kind, EntryKind.SYMLINK)
            self.assertEqual(entries["f"].relpath, "top/f")
            self.assertEqual(entries["f"].path, os.path.join(trees.a, "f"))

    def test_scan_root_relpath(self):
        with TreePair({"f": "data"}) as trees:
            entries = scan_dir(trees.a)
            self.assertEqual(entries["f"].relpath, "f")

    def test_scan_missing_raises(self):
        with TreePair() as trees:
            with self.assertRaises(FileNotFoundError):
                scan_dir(os.path.join(trees.a, "missing"))

    def test_scan_not_a_directory_raises(self):
        with TreePair({"f": "data"}) as trees:
            with self.assertRaises(NotADirectoryError):
                scan_dir(os.path.join(trees.a, "f"))
