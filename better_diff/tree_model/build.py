"""Build, flatten, filter and toggle the change tree."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from ..diff.types import ChangeKind, FileDiff
from .types import TreeNode


@dataclass
class _DirBucket:
    path: str
    name: str
    files: list[FileDiff] = field(default_factory=list)
    subdirs: dict[str, _DirBucket] = field(default_factory=dict)


@dataclass
class _Summary:
    lines_added: int = 0
    lines_removed: int = 0
    has_added: bool = False
    has_deleted: bool = False
    has_other: bool = False

    def add(self, lines_added: int, lines_removed: int, kind: ChangeKind) -> None:
        self.lines_added += lines_added
        self.lines_removed += lines_removed
        if kind is ChangeKind.ADDED:
            self.has_added = True
        elif kind is ChangeKind.DELETED:
            self.has_deleted = True
        else:
            self.has_other = True

    def change_kind(self) -> ChangeKind:
        if self.has_added and not (self.has_deleted or self.has_other):
            return ChangeKind.ADDED
        if self.has_deleted and not (self.has_added or self.has_other):
            return ChangeKind.DELETED
        return ChangeKind.MODIFIED


def _split_path(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


def _bucket_files(files: Iterable[FileDiff]) -> _DirBucket:
    root = _DirBucket(path="", name="")
    for file_diff in files:
        parts = _split_path(file_diff.path)
        if not parts:
            continue
        current = root
        for idx, part in enumerate(parts[:-1]):
            child = current.subdirs.get(part)
            if child is None:
                child = _DirBucket(path="/".join(parts[: idx + 1]), name=part)
                current.subdirs[part] = child
            current = child
        current.files.append(file_diff)
    return root


def _build_nodes(bucket: _DirBucket, depth: int) -> tuple[list[TreeNode], _Summary]:
    nodes: list[TreeNode] = []
    summary = _Summary()

    for name in sorted(bucket.subdirs):
        subdir = bucket.subdirs[name]
        children, child_summary = _build_nodes(subdir, depth + 1)
        kind = child_summary.change_kind()
        summary.add(child_summary.lines_added, child_summary.lines_removed, kind)
        nodes.append(
            TreeNode(
                name=subdir.name,
                path=subdir.path,
                is_dir=True,
                is_expanded=True,
                children=children,
                change_kind=kind,
                lines_added=child_summary.lines_added,
                lines_removed=child_summary.lines_removed,
                depth=depth,
            )
        )

    for file_diff in sorted(bucket.files, key=lambda f: f.path):
        summary.add(file_diff.lines_added, file_diff.lines_removed, file_diff.change_kind)
        nodes.append(
            TreeNode(
                name=_split_path(file_diff.path)[-1],
                path=file_diff.path,
                is_dir=False,
                change_kind=file_diff.change_kind,
                lines_added=file_diff.lines_added,
                lines_removed=file_diff.lines_removed,
                depth=depth,
            )
        )
    return nodes, summary


def build_file_tree(files: Iterable[FileDiff]) -> list[TreeNode]:
    """Build root nodes from changed files: directories first, then files."""
    nodes, _summary = _build_nodes(_bucket_files(files), 0)
    if len(nodes) == 1 and nodes[0].is_dir:
        nodes[0].is_expanded = True
    return nodes


def flatten_tree(nodes: list[TreeNode]) -> list[TreeNode]:
    """Return visible rows in pre-order, entering only expanded directories."""
    rows: list[TreeNode] = []

    def walk(level: list[TreeNode], depth: int) -> None:
        for node in level:
            node.depth = depth
            rows.append(node)
            if node.is_dir and node.is_expanded:
                walk(node.children, depth + 1)

    walk(nodes, 0)
    return rows


def filter_tree(nodes: list[TreeNode], query: str) -> list[TreeNode]:
    """Project ``nodes`` onto entries matching ``query`` (case-insensitive).

    A file survives when its name or full path contains the query. A
    directory survives when any descendant survives or its own name matches;
    surviving directories are copies forced open, so the source tree keeps
    its expansion state.
    """
    if not query:
        return nodes
    needle = query.lower()

    def keep(level: list[TreeNode]) -> list[TreeNode]:
        kept: list[TreeNode] = []
        for node in level:
            if node.is_dir:
                children = keep(node.children)
                if children or needle in node.name.lower():
                    kept.append(replace(node, is_expanded=True, children=children))
            elif needle in node.name.lower() or needle in node.path.lower():
                kept.append(node)
        return kept

    return keep(nodes)


def toggle_directory(nodes: list[TreeNode], path: str) -> bool:
    """Flip ``is_expanded`` on the directory at ``path``; False when absent."""
    for node in nodes:
        if not node.is_dir:
            continue
        if node.path == path:
            node.is_expanded = not node.is_expanded
            return True
        if toggle_directory(node.children, path):
            return True
    return False


def visible_rows(nodes: list[TreeNode], query: str = "") -> list[TreeNode]:
    return flatten_tree(filter_tree(nodes, query))
