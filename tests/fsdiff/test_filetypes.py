# Copyright Red Hat
#
# tests/fsdiff/test_filetypes.py - Entry classification tests
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import tempfile
import stat
import os

from dirdiff.fsdiff.filetypes import EntryKind, classify_mode, classify_path


class TestClassifyMode(unittest.TestCase):
    def test_all_kinds(self):
        cases = [
            (stat.S_IFREG | 0o644, EntryKind.REGULAR),
            (stat.S_IFDIR | 0o755, EntryKind.DIRECTORY),
            (stat.S_IFLNK | 0o777, EntryKind.SYMLINK),
            (stat.S_IFBLK | 0o660, EntryKind.BLOCK_DEVICE),
            (stat.S_IFCHR | 0o660, EntryKind.CHAR_DEVICE),
            (stat.S_IFIFO | 0o644, EntryKind.FIFO),
            (stat.S_IFSOCK | 0o755, EntryKind.SOCKET),
        ]
        for mode, kind in cases:
            with self.subTest(kind=kind):
                self.assertIs(classify_mode(mode), kind)

    def test_unknown(self):
        self.assertIs(classify_mode(0), EntryKind.UNKNOWN)

    def test_descriptions(self):
        self.assertEqual(EntryKind.REGULAR.description, "regular file")
        self.assertEqual(EntryKind.DIRECTORY.description, "directory")
        self.assertEqual(EntryKind.SYMLINK.description, "symbolic link")
        for kind in EntryKind:
            self.assertTrue(kind.description)

    def test_is_special(self):
        self.assertFalse(EntryKind.REGULAR.is_special)
        self.assertFalse(EntryKind.DIRECTORY.is_special)
        self.assertFalse(EntryKind.SYMLINK.is_special)
        self.assertTrue(EntryKind.FIFO.is_special)
        self.assertTrue(EntryKind.CHAR_DEVICE.is_special)
        self.assertTrue(EntryKind.UNKNOWN.is_special)


class TestClassifyPath(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_file_and_dir(self):
        path = os.path.join(self.root, "f")
        with open(path, "w", encoding="utf8") as fp:
            fp.write("x")
        self.assertIs(classify_path(path), EntryKind.REGULAR)
        self.assertIs(classify_path(self.root), EntryKind.DIRECTORY)

    def test_symlink_to_directory_is_symlink(self):
        link = os.path.join(self.root, "link")
        os.symlink(self.root, link)
        self.assertIs(classify_path(link), EntryKind.SYMLINK)

    def test_fifo(self):
        path = os.path.join(self.root, "fifo")
        os.mkfifo(path)
        self.assertIs(classify_path(path), EntryKind.FIFO)

    def test_missing_raises(self):
        with self.assertRaises(FileNotFoundError):
            classify_path(os.path.join(self.root, "nope"))
