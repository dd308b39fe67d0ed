"""Tree node datatype for the changed-files pane."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..diff.types import ChangeKind


@dataclass
class TreeNode:
    """One directory or file in the change tree.

    Directory counters are sums over descendants. Nodes are looked up by
    ``path``; children never point back at their parent.
    """

    name: str
    path: str
    is_dir: bool
    is_expanded: bool = False
    children: list[TreeNode] = field(default_factory=list)
    change_kind: ChangeKind = ChangeKind.MODIFIED
    lines_added: int = 0
    lines_removed: int = 0
    depth: int = 0
