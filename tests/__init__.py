# Copyright Red Hat
#
# tests/__init__.py - Directory diff test package
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
import logging

log = logging.getLogger()
log.setLevel(logging.DEBUG)
formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
file_handler = logging.FileHandler("test.log")
file_handler.setFormatter(formatter)
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
log.addHandler(file_handler)
log.addHandler(console_handler)


class MockArgs(object):
    paths = []
    debug = None
    verbose = 0
    ignore_patterns = None
    prune_patterns = None
    default_prune = None
    max_depth = None
    git_diff_depth = None
    patch_dir = None
    color = None
    legend = True
    quiet = True
    paranoid = False
    compare_method = None
    output_format = "tree"
    config = None
