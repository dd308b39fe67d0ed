"""The reducer: apply one event to ``SessionState`` and return a command.

``update`` mutates the state in place and returns it with at most one
command (a ``Batch`` counts as one). It never touches the repository, the
watcher, or the terminal; those effects run in the runtime.
"""

from __future__ import annotations

from collections.abc import Callable

from ..diff.assembler import aggregate_by_path, merge_diff_stats
from ..diff.types import DEFAULT_DIFF_CONTEXT, DiffMode, ViewMode, next_diff_mode
from ..fingerprint import branch_compare_fingerprint, files_and_diffs_fingerprint
from ..tree_model import build_file_tree, toggle_directory
from .events import (
    Batch,
    ChangeDetected,
    CheckForChanges,
    ClearError,
    Command,
    CommitsLoaded,
    DiffsLoaded,
    Error,
    Event,
    FilesLoaded,
    FilesystemChanged,
    GitInfoLoaded,
    HideHelp,
    KeyPressed,
    LoadAllDiffs,
    LoadBranchCompareDiff,
    LoadCommitsAhead,
    LoadDiff,
    LoadFiles,
    LoadGitInfo,
    Quit,
    ShowHelp,
    SingleDiffLoaded,
    WaitForChange,
    WatcherStopped,
    WindowResized,
)
from .layout import DiffLayout, compute_diff_layout, visible_content_rows
from .state import Panel, SessionState

QUIT_KEYS = frozenset({"q", "CTRL_C"})
HELP_KEY = "?"


def init(state: SessionState) -> Command:
    """Commands issued once at startup."""
    return Batch((LoadGitInfo(), *_reload_by_mode(state).commands))


def update(state: SessionState, event: Event) -> tuple[SessionState, Command | None]:
    if isinstance(event, KeyPressed):
        return state, _handle_key(state, event.key)
    if isinstance(event, WindowResized):
        state.width = event.width
        state.height = event.height
        return state, None
    if isinstance(event, GitInfoLoaded):
        state.root_path = event.root_path
        state.branch = event.branch
        state.default_branch = event.default_branch
        return state, WaitForChange() if state.watch_enabled else None
    if isinstance(event, FilesystemChanged):
        check = _check_for_changes(state)
        if not state.watch_enabled:
            return state, check
        return state, Batch((check, WaitForChange()))
    if isinstance(event, FilesLoaded):
        _apply_files_loaded(state, event)
        return state, None
    if isinstance(event, DiffsLoaded):
        _apply_diffs_loaded(state, event)
        return state, None
    if isinstance(event, CommitsLoaded):
        state.commits = list(event.commits)
        state.last_error = None
        return state, None
    if isinstance(event, SingleDiffLoaded):
        _upsert_diff(state, event)
        return state, None
    if isinstance(event, ChangeDetected):
        return state, _apply_change_detected(state, event)
    if isinstance(event, WatcherStopped):
        state.watch_enabled = False
        state.last_error = f"file watcher stopped: {event.error}"
        return state, None
    if isinstance(event, Error):
        state.last_error = event.message
        return state, None
    if isinstance(event, ClearError):
        state.last_error = None
        return state, None
    if isinstance(event, ShowHelp):
        state.show_help = True
        return state, None
    if isinstance(event, HideHelp):
        state.show_help = False
        return state, None
    raise TypeError(f"unhandled event: {event!r}")


# Reload commands


def _reload_by_mode(state: SessionState) -> Batch:
    if state.diff_mode is DiffMode.BRANCH_COMPARE:
        return Batch((LoadCommitsAhead(), LoadBranchCompareDiff(state.view_mode, state.diff_context)))
    return Batch(
        (
            LoadFiles(state.diff_mode),
            LoadAllDiffs(state.diff_mode, state.view_mode, state.diff_context),
        )
    )


def _reload_diffs(state: SessionState) -> Command:
    if state.diff_mode is DiffMode.BRANCH_COMPARE:
        return Batch((LoadCommitsAhead(), LoadBranchCompareDiff(state.view_mode, state.diff_context)))
    return LoadAllDiffs(state.diff_mode, state.view_mode, state.diff_context)


def _check_for_changes(state: SessionState) -> CheckForChanges:
    return CheckForChanges(state.diff_mode, state.view_mode, state.diff_context, state.last_fingerprint)


# Async results


def _rebuild_tree(state: SessionState) -> None:
    state.file_tree = build_file_tree(state.files)


def _apply_files_loaded(state: SessionState, event: FilesLoaded) -> None:
    state.files = list(event.files)
    state.last_error = None
    if state.diff_mode is not DiffMode.BRANCH_COMPARE and state.diff_files:
        state.files = merge_diff_stats(state.files, state.diff_files)
    state.last_fingerprint = files_and_diffs_fingerprint(state.files, state.diff_files)
    _rebuild_tree(state)


def _apply_diffs_loaded(state: SessionState, event: DiffsLoaded) -> None:
    state.diff_files = list(event.files)
    state.last_error = None
    if state.diff_mode is DiffMode.BRANCH_COMPARE:
        state.last_fingerprint = branch_compare_fingerprint(state.diff_files, state.commits)
        state.files = aggregate_by_path(state.diff_files)
    else:
        state.files = merge_diff_stats(state.files, state.diff_files)
        state.last_fingerprint = files_and_diffs_fingerprint(state.files, state.diff_files)
    _rebuild_tree(state)
    if state.selected_index >= len(state.tree_rows()):
        state.selected_index = 0
        state.scroll_offset = 0


def _upsert_diff(state: SessionState, event: SingleDiffLoaded) -> None:
    file_diff = event.file
    if file_diff is None or not file_diff.path:
        return
    for idx, existing in enumerate(state.diff_files):
        if existing.path == file_diff.path:
            state.diff_files[idx] = file_diff
            return
    state.diff_files.append(file_diff)


def _apply_change_detected(state: SessionState, event: ChangeDetected) -> Command:
    state.last_fingerprint = event.fingerprint
    if state.diff_mode is not DiffMode.BRANCH_COMPARE and event.files is not None:
        state.files = list(event.files)
        _rebuild_tree(state)
    state.diff_files = []
    return _reload_diffs(state)


# Keys


def _handle_key(state: SessionState, key: str) -> Command | None:
    if state.search_mode:
        _handle_search_key(state, key)
        return None

    if key != "g":
        state.vim_pending_g = False
    if state.show_help and key != HELP_KEY and key not in QUIT_KEYS:
        return None

    action = _KEY_ACTIONS.get(key)
    if action is None:
        return None
    return action(state, key)


def _reset_tree_cursor(state: SessionState) -> None:
    state.selected_index = 0
    state.scroll_offset = 0


def _handle_search_key(state: SessionState, key: str) -> None:
    if key in {"ESC", "CTRL_C"}:
        state.search_mode = False
        state.search_query = ""
        _reset_tree_cursor(state)
        return
    if key == "ENTER":
        state.search_mode = False
        _reset_tree_cursor(state)
        return
    if key == "BACKSPACE":
        if state.search_query:
            state.search_query = state.search_query[:-1]
            _reset_tree_cursor(state)
        return
    if len(key) == 1 and 32 <= ord(key) <= 126:
        state.search_query += key
        _reset_tree_cursor(state)


def _visible_rows(state: SessionState) -> int:
    return visible_content_rows(state.height)


def _diff_layout(state: SessionState) -> DiffLayout:
    return compute_diff_layout(state.selected_diff_files(), state.diff_mode is DiffMode.BRANCH_COMPARE)


def _can_move_diff_cursor(state: SessionState) -> bool:
    return state.view_mode is ViewMode.WHOLE_FILE or state.panel is Panel.DIFF


def _quit(state: SessionState, _key: str) -> Command:
    state.quitting = True
    return Quit()


def _toggle_help(state: SessionState, _key: str) -> None:
    state.show_help = not state.show_help


def _move_tree(state: SessionState, delta: int) -> None:
    max_index = len(state.tree_rows()) - 1
    if max_index < 0:
        _reset_tree_cursor(state)
        return
    state.selected_index = max(0, min(max_index, state.selected_index + delta))
    rows = _visible_rows(state)
    if state.selected_index < state.scroll_offset:
        state.scroll_offset = state.selected_index
    elif state.selected_index >= state.scroll_offset + rows:
        state.scroll_offset = state.selected_index - rows + 1


def _max_diff_scroll(state: SessionState) -> int:
    return max(0, _diff_layout(state).total_lines - _visible_rows(state))


def _scroll_diff(state: SessionState, delta: int) -> None:
    if delta < 0:
        state.diff_scroll = max(0, state.diff_scroll + delta)
    elif delta == 1:
        if state.diff_scroll < _max_diff_scroll(state):
            state.diff_scroll += 1
    else:
        state.diff_scroll = min(state.diff_scroll + delta, _max_diff_scroll(state))


def _jump_to_next_hunk(state: SessionState) -> None:
    starts = _diff_layout(state).hunk_starts
    if not starts:
        return
    state.diff_scroll = next((start for start in starts if start > state.diff_scroll), starts[-1])


def _jump_to_prev_hunk(state: SessionState) -> None:
    starts = _diff_layout(state).hunk_starts
    if not starts:
        return
    state.diff_scroll = next((start for start in reversed(starts) if start < state.diff_scroll), starts[0])


def _up(state: SessionState, key: str) -> None:
    if state.panel is not Panel.DIFF:
        _move_tree(state, -1)
    elif key == "k" and state.view_mode is ViewMode.DIFF_ONLY:
        _jump_to_prev_hunk(state)
    else:
        _scroll_diff(state, -1)


def _down(state: SessionState, key: str) -> None:
    if state.panel is not Panel.DIFF:
        _move_tree(state, 1)
    elif key == "j" and state.view_mode is ViewMode.DIFF_ONLY:
        _jump_to_next_hunk(state)
    else:
        _scroll_diff(state, 1)


def _page_up(state: SessionState, _key: str) -> None:
    if state.panel is Panel.DIFF:
        _scroll_diff(state, -_visible_rows(state))
    else:
        _move_tree(state, -_visible_rows(state))


def _page_down(state: SessionState, _key: str) -> None:
    if state.panel is Panel.DIFF:
        _scroll_diff(state, _visible_rows(state))
    else:
        _move_tree(state, _visible_rows(state))


def _vim_top(state: SessionState, _key: str) -> None:
    if not _can_move_diff_cursor(state):
        return
    if state.vim_pending_g:
        state.diff_scroll = 0
        state.vim_pending_g = False
        return
    state.vim_pending_g = True


def _vim_bottom(state: SessionState, _key: str) -> None:
    if _can_move_diff_cursor(state):
        state.diff_scroll = _max_diff_scroll(state)


def _toggle_panel(state: SessionState, _key: str) -> None:
    if state.view_mode is ViewMode.WHOLE_FILE:
        return
    state.panel = Panel.DIFF if state.panel is Panel.FILE_TREE else Panel.FILE_TREE


def _select(state: SessionState, _key: str) -> Command | None:
    if state.panel is not Panel.FILE_TREE:
        return None
    node = state.selected_node()
    if node is None:
        return None
    if node.is_dir:
        toggle_directory(state.file_tree, node.path)
        return None
    state.diff_scroll = 0
    if state.diff_mode is DiffMode.BRANCH_COMPARE:
        return None
    return LoadDiff(node.path, state.diff_mode, state.view_mode, state.diff_context)


def _cycle_mode(state: SessionState, _key: str) -> Command:
    state.diff_mode = next_diff_mode(state.diff_mode)
    state.selected_index = 0
    state.scroll_offset = 0
    state.diff_scroll = 0
    state.diff_files = []
    state.files = []
    state.commits = []
    state.file_tree = []
    state.search_query = ""
    state.search_mode = False
    return _reload_by_mode(state)


def _toggle_view_mode(state: SessionState, _key: str) -> Command:
    if state.view_mode is ViewMode.DIFF_ONLY:
        state.view_mode = ViewMode.WHOLE_FILE
        state.panel = Panel.DIFF
    else:
        state.view_mode = ViewMode.DIFF_ONLY
    state.diff_scroll = 0
    state.diff_files = []
    state.search_query = ""
    state.search_mode = False
    return _reload_diffs(state)


def _widen_context(state: SessionState, _key: str) -> Command | None:
    if state.view_mode is not ViewMode.DIFF_ONLY:
        return None
    state.diff_context += DEFAULT_DIFF_CONTEXT
    return _reload_diffs(state)


def _reset_context(state: SessionState, _key: str) -> Command | None:
    if state.view_mode is not ViewMode.DIFF_ONLY:
        return None
    state.diff_context = DEFAULT_DIFF_CONTEXT
    return _reload_diffs(state)


def _enter_search(state: SessionState, _key: str) -> None:
    if state.panel is Panel.FILE_TREE and state.view_mode is ViewMode.DIFF_ONLY:
        state.search_mode = True


_KEY_ACTIONS: dict[str, Callable[[SessionState, str], Command | None]] = {
    "q": _quit,
    "CTRL_C": _quit,
    "UP": _up,
    "k": _up,
    "DOWN": _down,
    "j": _down,
    "PGUP": _page_up,
    "PGDN": _page_down,
    "g": _vim_top,
    "G": _vim_bottom,
    "TAB": _toggle_panel,
    "ENTER": _select,
    " ": _select,
    "s": _cycle_mode,
    "f": _toggle_view_mode,
    "o": _widen_context,
    "O": _reset_context,
    HELP_KEY: _toggle_help,
    "/": _enter_search,
}
