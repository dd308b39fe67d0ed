"""Screen geometry and the diff-pane line layout used for scrolling."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from ..diff.types import FileDiff

HEADER_ROWS = 2
HEADER_SEARCH_ROWS = 1
FOOTER_ROWS = 1
PANEL_BORDER_ROWS = 2
TREE_WIDTH_RATIO = 3
LINE_NUMBER_WIDTH = 4
HELP_MODAL_MAX_WIDTH = 60
HELP_MODAL_MAX_HEIGHT = 30
HELP_MODAL_PADDING = 4

BRANCH_HEADER_LINES = 2
FILE_SEPARATOR_LINES = 2


def content_height(total_height: int, search_row: bool) -> int:
    header = HEADER_ROWS + (HEADER_SEARCH_ROWS if search_row else 0)
    return max(1, total_height - header - FOOTER_ROWS)


def panel_content_height(panel_height: int) -> int:
    return max(0, panel_height - PANEL_BORDER_ROWS)


def visible_content_rows(total_height: int) -> int:
    """Rows inside a panel, used for paging and cursor follow."""
    return max(1, total_height - HEADER_ROWS - FOOTER_ROWS - PANEL_BORDER_ROWS)


def file_tree_width(total_width: int) -> int:
    return total_width // TREE_WIDTH_RATIO


def diff_panel_width(total_width: int) -> int:
    return total_width - file_tree_width(total_width)


def help_modal_dimensions(screen_width: int, screen_height: int) -> tuple[int, int]:
    width = min(HELP_MODAL_MAX_WIDTH, screen_width - HELP_MODAL_PADDING)
    height = min(HELP_MODAL_MAX_HEIGHT, screen_height - HELP_MODAL_PADDING)
    return width, height


@dataclass(frozen=True)
class DiffLayout:
    total_lines: int
    hunk_starts: list[int] = field(default_factory=list)


def compute_diff_layout(files: Sequence[FileDiff], branch_compare: bool) -> DiffLayout:
    """Map the rendered diff pane to line numbers.

    Counts the branch-compare header, blank plus separator between files,
    one header per file, and one separator row before each hunk's lines.
    A file without hunks takes one message row.
    """
    if not files:
        # Branch header plus the empty-state message.
        return DiffLayout(total_lines=BRANCH_HEADER_LINES + 1 if branch_compare else 1)

    line = BRANCH_HEADER_LINES if branch_compare else 0
    hunk_starts: list[int] = []
    for idx, file_diff in enumerate(files):
        if idx > 0:
            line += FILE_SEPARATOR_LINES
        line += 1
        if not file_diff.hunks:
            line += 1
            continue
        for hunk in file_diff.hunks:
            hunk_starts.append(line)
            line += 1 + len(hunk.lines)
    return DiffLayout(total_lines=line, hunk_starts=hunk_starts)
