"""Compose the full screen from ``SessionState``.

Produces exactly ``state.height`` ANSI-styled rows: header, optional search
row, the tree and diff panels side by side, and the footer. The help modal
is drawn over the result when visible. The diff pane emits rows in the same
order ``compute_diff_layout`` counts them, so hunk jumps land on separators.
"""

from __future__ import annotations

from ..ansi import clip_ansi_line, fit_ansi_line
from ..diff.assembler import total_stats
from ..diff.types import (
    DIFF_MODE_LABELS,
    VIEW_MODE_LABELS,
    ChangeKind,
    DiffMode,
    FileDiff,
    LineKind,
    ViewMode,
)
from ..runtime.layout import (
    LINE_NUMBER_WIDTH,
    compute_diff_layout,
    content_height,
    diff_panel_width,
    file_tree_width,
    panel_content_height,
)
from ..runtime.state import Panel, SessionState
from ..tree_model import TreeNode
from ..ui_theme import DEFAULT_THEME, UITheme
from .help import overlay_help
from .highlight import SyntaxHighlighter, sanitize_terminal_text

APP_NAME = "better_diff"
CHANGE_SYMBOLS = {
    ChangeKind.MODIFIED: "●",
    ChangeKind.ADDED: "+",
    ChangeKind.DELETED: "-",
    ChangeKind.RENAMED: "→",
}
NO_SELECTION_MESSAGE = "Select a file to view diff"
NO_HUNKS_MESSAGE = "No diff content available (binary file or no changes)"
NO_CHANGES_MESSAGE = "No changes"


def _change_color(kind: ChangeKind, theme: UITheme) -> str:
    if kind is ChangeKind.ADDED:
        return theme.tree_added
    if kind is ChangeKind.DELETED:
        return theme.tree_deleted
    if kind is ChangeKind.RENAMED:
        return theme.tree_renamed
    return theme.tree_modified


def _stats_text(added: int, removed: int) -> str:
    parts = []
    if added:
        parts.append(f"+{added}")
    if removed:
        parts.append(f"-{removed}")
    return " ".join(parts)


def search_row_visible(state: SessionState) -> bool:
    return state.search_mode or bool(state.search_query)


def render_header(state: SessionState, width: int, theme: UITheme) -> list[str]:
    reset = theme.reset
    parts = [f"{theme.header_title}{APP_NAME}{reset}"]
    if state.branch:
        parts.append(f"{theme.header_path}{sanitize_terminal_text(state.branch)}{reset}")
    if state.root_path:
        parts.append(f"{theme.header_path}{sanitize_terminal_text(state.root_path)}{reset}")
    parts.append(f"{theme.header_mode}[{DIFF_MODE_LABELS[state.diff_mode]}]{reset}")
    parts.append(f"{theme.header_mode}[{VIEW_MODE_LABELS[state.view_mode]}]{reset}")
    if state.view_mode is ViewMode.DIFF_ONLY:
        parts.append(f"{theme.header_path}context: {state.diff_context}{reset}")
    rows = [
        clip_ansi_line(" ".join(parts), width),
        f"{theme.divider}{'─' * width}{reset}",
    ]
    if search_row_visible(state):
        cursor = "█" if state.search_mode else ""
        rows.append(clip_ansi_line(f"{theme.search_prompt}/{reset}{state.search_query}{cursor}", width))
    return rows


def format_tree_row(node: TreeNode, width: int, selected: bool, theme: UITheme) -> str:
    indent = "  " * node.depth
    if node.is_dir:
        marker = "▼ " if node.is_expanded else "▶ "
    else:
        marker = "  "
    symbol = CHANGE_SYMBOLS[node.change_kind]
    stats = _stats_text(node.lines_added, node.lines_removed)
    name = sanitize_terminal_text(node.name)

    if selected:
        plain = f"{indent}{marker}{symbol} {name}" + (f" {stats}" if stats else "")
        return f"{theme.tree_selected}{fit_ansi_line(plain, width)}{theme.reset}"

    name_color = theme.tree_dir if node.is_dir else _change_color(node.change_kind, theme)
    row = f"{indent}{marker}{name_color}{symbol} {name}{theme.reset}"
    if stats:
        row += f" {theme.tree_stats}{stats}{theme.reset}"
    return fit_ansi_line(row, width)


def render_tree_lines(state: SessionState, width: int, rows: int, theme: UITheme) -> list[str]:
    nodes = state.tree_rows()
    if not nodes:
        return [f"{theme.diff_message}{NO_CHANGES_MESSAGE}{theme.reset}"]
    start = max(0, min(state.scroll_offset, len(nodes) - 1))
    if state.selected_index >= start + rows:
        start = state.selected_index - rows + 1
    tree_active = state.panel is Panel.FILE_TREE
    return [
        format_tree_row(node, width, tree_active and start + offset == state.selected_index, theme)
        for offset, node in enumerate(nodes[start : start + rows])
    ]


def _line_number(value: int) -> str:
    return f"{value:>{LINE_NUMBER_WIDTH}}" if value > 0 else " " * LINE_NUMBER_WIDTH


def _file_header(file_diff: FileDiff, theme: UITheme) -> str:
    color = _change_color(file_diff.change_kind, theme)
    symbol = CHANGE_SYMBOLS[file_diff.change_kind]
    row = f"{color}{symbol}{theme.reset} {theme.diff_file_header}{sanitize_terminal_text(file_diff.path)}{theme.reset}"
    stats = _stats_text(file_diff.lines_added, file_diff.lines_removed)
    if stats:
        row += f" {theme.tree_stats}{stats}{theme.reset}"
    return row


def render_diff_lines(
    state: SessionState,
    width: int,
    theme: UITheme,
    highlighter: SyntaxHighlighter,
) -> list[str]:
    """Every row of the diff pane before scrolling is applied."""
    reset = theme.reset
    lines: list[str] = []
    if state.diff_mode is DiffMode.BRANCH_COMPARE:
        base = state.default_branch or "default branch"
        lines.append(
            f"{theme.branch_header}Comparing {sanitize_terminal_text(state.branch)} against {base}{reset}"
        )
        count = len(state.commits)
        noun = "commit" if count == 1 else "commits"
        lines.append(f"{theme.header_path}{count} {noun} ahead of {base}{reset}")

    files = state.selected_diff_files()
    if not files:
        lines.append(f"{theme.diff_message}{NO_SELECTION_MESSAGE}{reset}")
        return lines

    for idx, file_diff in enumerate(files):
        if idx > 0:
            lines.append("")
            lines.append(f"{theme.divider}{'─' * width}{reset}")
        lines.append(_file_header(file_diff, theme))
        if not file_diff.hunks:
            lines.append(f"{theme.diff_message}{NO_HUNKS_MESSAGE}{reset}")
            continue
        for hunk in file_diff.hunks:
            lines.append(
                f"{theme.diff_hunk}@@ -{hunk.old_start},{hunk.old_count} "
                f"+{hunk.new_start},{hunk.new_count} @@{reset}"
            )
            for line in hunk.lines:
                numbers = (
                    f"{theme.diff_line_number}{_line_number(line.old_line_number)} "
                    f"{_line_number(line.new_line_number)}{reset} "
                )
                if line.kind is LineKind.ADDED:
                    body = (
                        f"{theme.diff_added_marker}+{reset} "
                        f"{theme.diff_added}{sanitize_terminal_text(line.content)}{reset}"
                    )
                elif line.kind is LineKind.REMOVED:
                    body = (
                        f"{theme.diff_removed_marker}-{reset} "
                        f"{theme.diff_removed}{sanitize_terminal_text(line.content)}{reset}"
                    )
                else:
                    body = f"{theme.diff_context} {reset} {highlighter.highlight(line.content, file_diff.path)}"
                lines.append(numbers + body)
    return lines


def _boxed(lines: list[str], width: int, height: int, active: bool, theme: UITheme) -> list[str]:
    if width < 2 or height < 2:
        return [" " * max(0, width)] * max(0, height)
    color = theme.border_active if active else theme.border
    inner_w = width - 2
    inner_h = panel_content_height(height)
    body = lines[:inner_h] + [""] * max(0, inner_h - len(lines))
    boxed = [f"{color}╭{'─' * inner_w}╮{theme.reset}"]
    for line in body:
        boxed.append(f"{color}│{theme.reset}{fit_ansi_line(line, inner_w)}{color}│{theme.reset}")
    boxed.append(f"{color}╰{'─' * inner_w}╯{theme.reset}")
    return boxed


def scroll_percent(state: SessionState) -> int | None:
    total = compute_diff_layout(state.selected_diff_files(), state.diff_mode is DiffMode.BRANCH_COMPARE).total_lines
    if total <= 0:
        return None
    return (state.diff_scroll * 100) // total


def render_footer(state: SessionState, width: int, theme: UITheme) -> str:
    reset = theme.reset
    hints = [
        f"{theme.footer_key}[↑↓]{reset}{theme.footer} Navigate",
        f"{theme.footer_key}[Enter]{reset}{theme.footer} Select/Expand",
        f"{theme.footer_key}[Tab]{reset}{theme.footer} Switch Panel",
        f"{theme.footer_key}[s]{reset}{theme.footer} Mode",
        f"{theme.footer_key}[?]{reset}{theme.footer} Help",
        f"{theme.footer_key}[q]{reset}{theme.footer} Quit",
    ]
    if state.panel is Panel.DIFF:
        percent = scroll_percent(state)
        if percent is not None:
            hints.append(f"{theme.footer_scroll}Scroll: {percent}%{reset}")
    count, added, removed = total_stats(state.files)
    noun = "file" if count == 1 else "files"
    hints.append(f"{theme.footer}{count} {noun} +{added} -{removed}{reset}")
    if state.last_error:
        hints.append(f"{theme.error}{sanitize_terminal_text(state.last_error)}{reset}")
    return clip_ansi_line(f"{theme.footer} • {reset}".join(hints), width)


def render_screen(
    state: SessionState,
    theme: UITheme | None = None,
    highlighter: SyntaxHighlighter | None = None,
) -> list[str]:
    active = theme or DEFAULT_THEME
    painter = highlighter or SyntaxHighlighter(enabled=False)
    width = max(1, state.width)
    height = max(1, state.height)

    header = render_header(state, width, active)
    panel_height = content_height(height, search_row_visible(state))
    inner_rows = panel_content_height(panel_height)

    tree_w = file_tree_width(width)
    diff_w = diff_panel_width(width)
    tree_box = _boxed(
        render_tree_lines(state, max(0, tree_w - 2), inner_rows, active),
        tree_w,
        panel_height,
        state.panel is Panel.FILE_TREE,
        active,
    )
    diff_lines = render_diff_lines(state, max(0, diff_w - 2), active, painter)
    scroll = max(0, min(state.diff_scroll, len(diff_lines)))
    diff_box = _boxed(
        diff_lines[scroll : scroll + inner_rows],
        diff_w,
        panel_height,
        state.panel is Panel.DIFF,
        active,
    )
    body = [left + right for left, right in zip(tree_box, diff_box)]

    screen = (header + body + [render_footer(state, width, active)])[:height]
    screen += [""] * (height - len(screen))
    if state.show_help:
        screen = overlay_help(screen, width, height, active)
    return screen
