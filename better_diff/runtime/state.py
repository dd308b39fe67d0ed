"""Session state owned by the reducer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..diff.types import DEFAULT_DIFF_CONTEXT, CommitSummary, DiffMode, FileDiff, ViewMode
from ..tree_model import TreeNode, visible_rows


class Panel(Enum):
    FILE_TREE = "file_tree"
    DIFF = "diff"


@dataclass
class SessionState:
    files: list[FileDiff] = field(default_factory=list)
    diff_files: list[FileDiff] = field(default_factory=list)
    commits: list[CommitSummary] = field(default_factory=list)
    file_tree: list[TreeNode] = field(default_factory=list)
    selected_index: int = 0
    scroll_offset: int = 0
    diff_scroll: int = 0
    panel: Panel = Panel.FILE_TREE
    diff_mode: DiffMode = DiffMode.UNSTAGED
    view_mode: ViewMode = ViewMode.DIFF_ONLY
    diff_context: int = DEFAULT_DIFF_CONTEXT
    search_mode: bool = False
    search_query: str = ""
    last_fingerprint: str = ""
    vim_pending_g: bool = False
    show_help: bool = False
    last_error: str | None = None
    root_path: str = ""
    branch: str = ""
    default_branch: str = ""
    width: int = 80
    height: int = 24
    watch_enabled: bool = False
    quitting: bool = False

    def tree_rows(self) -> list[TreeNode]:
        """Flattened tree rows as displayed, with the search filter applied."""
        return visible_rows(self.file_tree, self.search_query)

    def selected_node(self) -> TreeNode | None:
        rows = self.tree_rows()
        if 0 <= self.selected_index < len(rows):
            return rows[self.selected_index]
        return None

    def selected_diff_files(self) -> list[FileDiff]:
        """Diffs for the selected file row; every match in branch compare."""
        node = self.selected_node()
        if node is None or node.is_dir:
            return []
        matching: list[FileDiff] = []
        for file_diff in self.diff_files:
            if file_diff.path != node.path:
                continue
            matching.append(file_diff)
            if self.diff_mode is not DiffMode.BRANCH_COMPARE:
                break
        return matching
