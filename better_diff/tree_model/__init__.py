"""Change-tree projection: build from ``FileDiff`` lists, flatten, filter.

Directory rows aggregate descendant line counters and change kinds.
"""

from __future__ import annotations

from .build import build_file_tree, filter_tree, flatten_tree, toggle_directory, visible_rows
from .types import TreeNode

__all__ = [
    "TreeNode",
    "build_file_tree",
    "filter_tree",
    "flatten_tree",
    "toggle_directory",
    "visible_rows",
]
