"""
Filesystem tools for LLFS.

This module contains the directory walker that enumerates entries under the
search roots and scores them against classified search terms.
"""
