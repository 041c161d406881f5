# Copyright Red Hat
#
# tests/fsdiff/test_equality.py - Equality oracle tests
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import patch
import stat
import os

from dirdiff import DirdiffIOError, DirdiffPermissionError
from dirdiff.fsdiff.equality import CHUNK_SIZE, EqualityOracle
from dirdiff.fsdiff.options import DiffOptions
from dirdiff.fsdiff.treewalk import FsEntry

from ._util import TreePair, make_entry


def _entries(trees, name):
    return (
        FsEntry.from_path(os.path.join(trees.a, name), name),
        FsEntry.from_path(os.path.join(trees.b, name), name),
    )


class TestEqualityOracle(unittest.TestCase):
    def test_kind_mismatch_raises(self):
        a = make_entry("/a/x", "x")
        b = make_entry("/b/x", "x", mode=stat.S_IFDIR | 0o755)
        with self.assertRaises(ValueError):
            EqualityOracle().same(a, b)

    def test_size_differs(self):
        a = make_entry("/a/x", "x", size=1, ino=1)
        b = make_entry("/b/x", "x", size=2, ino=2)
        with patch("builtins.open") as mock_open:
            self.assertFalse(EqualityOracle().same(a, b))
            mock_open.assert_not_called()

    def test_same_inode(self):
        a = make_entry("/a/x", "x", ino=9, dev=1)
        b = make_entry("/b/x", "x", ino=9, dev=1)
        with patch("builtins.open") as mock_open:
            self.assertTrue(EqualityOracle().same(a, b))
            mock_open.assert_not_called()

    def test_special_files_compare_rdev(self):
        mode = stat.S_IFCHR | 0o660
        a = make_entry("/a/c", "c", mode=mode, ino=1, rdev=0x0103)
        b = make_entry("/b/c", "c", mode=mode, ino=2, rdev=0x0103)
        c = make_entry("/b/c", "c", mode=mode, ino=3, rdev=0x0105)
        oracle = EqualityOracle()
        self.assertTrue(oracle.same(a, b))
        self.assertFalse(oracle.same(a, c))

    def test_fifos_equal(self):
        with TreePair() as trees:
            os.mkfifo(os.path.join(trees.a, "p"))
            os.mkfifo(os.path.join(trees.b, "p"))
            a, b = _entries(trees, "p")
            self.assertTrue(EqualityOracle().same(a, b))

    def test_symlinks(self):
        with TreePair(
            {"l": ("link", "t1"), "m": ("link", "same")},
            {"l": ("link", "t2"), "m": ("link", "same")},
        ) as trees:
            oracle = EqualityOracle()
            self.assertFalse(oracle.same(*_entries(trees, "l")))
            self.assertTrue(oracle.same(*_entries(trees, "m")))

    def test_equal_size_last_byte_differs(self):
        data = b"x" * (CHUNK_SIZE + 10)
        with TreePair({"f": data + b"a"}, {"f": data + b"b"}) as trees:
            for method in ("bytes", "digest"):
                with self.subTest(method=method):
                    oracle = EqualityOracle(DiffOptions(compare_method=method))
                    self.assertFalse(oracle.same(*_entries(trees, "f")))

    def test_equal_contents(self):
        data = os.urandom(3 * CHUNK_SIZE + 1)
        with TreePair({"f": data}, {"f": data}) as trees:
            for method in ("bytes", "digest"):
                with self.subTest(method=method):
                    oracle = EqualityOracle(DiffOptions(compare_method=method))
                    self.assertTrue(oracle.same(*_entries(trees, "f")))

    def test_zero_byte_files_equal(self):
        with TreePair({"f": ""}, {"f": ""}) as trees:
            self.assertTrue(EqualityOracle().same(*_entries(trees, "f")))

    def test_digest_memoised(self):
        with TreePair({"f": "abc", "g": "abd"}, {"f": "abc", "g": "abd"}) as trees:
            oracle = EqualityOracle(DiffOptions(compare_method="digest"))
            a, b = _entries(trees, "f")
            self.assertTrue(oracle.same(a, b))
            self.assertEqual(len(oracle._digests), 2)
            with patch("builtins.open") as mock_open:
                self.assertTrue(oracle.same(a, b))
                mock_open.assert_not_called()

    def test_paranoid_skips_inode_shortcut(self):
        a = make_entry("/nonexistent/a/x", "x", ino=9, dev=1)
        b = make_entry("/nonexistent/b/x", "x", ino=9, dev=1)
        oracle = EqualityOracle(DiffOptions(paranoid=True))
        # Contents are read, so the missing files surface as an error.
        with self.assertRaises(DirdiffIOError):
            oracle.same(a, b)

    def test_paranoid_skips_size_shortcut(self):
        with TreePair({"f": "short"}, {"f": "longer"}) as trees:
            a, b = _entries(trees, "f")
            oracle = EqualityOracle(DiffOptions(paranoid=True))
            with patch.object(
                oracle, "_compare_bytes", return_value=False
            ) as mock_compare:
                self.assertFalse(oracle.same(a, b))
                mock_compare.assert_called_once_with(a, b)

    def test_permission_error(self):
        with TreePair({"f": "aaa"}, {"f": "bbb"}) as trees:
            a, b = _entries(trees, "f")
            with patch("builtins.open", side_effect=PermissionError(13, "Permission denied")):
                with self.assertRaises(DirdiffPermissionError):
                    EqualityOracle().same(a, b)

    def test_other_read_error(self):
        with TreePair({"f": "aaa"}, {"f": "bbb"}) as trees:
            a, b = _entries(trees, "f")
            with patch("builtins.open", side_effect=OSError(5, "Input/output error")):
                with self.assertRaises(DirdiffIOError):
                    EqualityOracle(DiffOptions(compare_method="digest")).same(a, b)

    def test_symlink_read_error(self):
        a = make_entry("/nonexistent/a/l", "l", mode=stat.S_IFLNK | 0o777, ino=1)
        b = make_entry("/nonexistent/b/l", "l", mode=stat.S_IFLNK | 0o777, ino=2)
        with self.assertRaises(DirdiffIOError):
            EqualityOracle().same(a, b)

    def test_directories_raise(self):
        mode = stat.S_IFDIR | 0o755
        a = make_entry("/a/d", "d", mode=mode, ino=1)
        b = make_entry("/b/d", "d", mode=mode, ino=2)
        with self.assertRaises(ValueError):
            EqualityOracle().same(a, b)
