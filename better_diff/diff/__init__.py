"""Diff engine: value types, the line differ, and the per-mode assembler."""

from __future__ import annotations

from .assembler import (
    aggregate_by_path,
    assemble_diffs,
    assemble_file_diff,
    changed_files,
    load_branch_compare,
    merge_diff_stats,
    total_stats,
)
from .hunks import DiffComputationError, compute_hunks, count_line_stats, split_lines, trim_leading_context
from .types import (
    DEFAULT_DIFF_CONTEXT,
    WHOLE_FILE_CONTEXT,
    ChangeKind,
    CommitSummary,
    DiffLine,
    DiffMode,
    FileDiff,
    Hunk,
    LineKind,
    ViewMode,
)

__all__ = [
    "DEFAULT_DIFF_CONTEXT",
    "WHOLE_FILE_CONTEXT",
    "ChangeKind",
    "CommitSummary",
    "DiffComputationError",
    "DiffLine",
    "DiffMode",
    "FileDiff",
    "Hunk",
    "LineKind",
    "ViewMode",
    "aggregate_by_path",
    "assemble_diffs",
    "assemble_file_diff",
    "changed_files",
    "compute_hunks",
    "count_line_stats",
    "load_branch_compare",
    "merge_diff_stats",
    "split_lines",
    "total_stats",
    "trim_leading_context",
]
