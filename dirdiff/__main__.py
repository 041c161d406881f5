# Copyright Red Hat
#
# dirdiff/__main__.py - Directory diff CLI driver
#
# This file is part of the dir-diff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
CLI entry point for dir-diff.
"""
import sys

from dirdiff.command import main


def run():
    """
    Run the ``dir-diff`` command with the process arguments.
    """
    sys.exit(main(sys.argv))


if __name__ == "__main__":
    run()
