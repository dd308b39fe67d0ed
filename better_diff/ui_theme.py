"""UI palettes for the diff viewer chrome.

A theme only covers the interface colors (tree, diff markers, header,
footer, help). Syntax highlighting style is a separate setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    divider: str
    border: str
    border_active: str
    header_title: str
    header_path: str
    header_mode: str
    tree_dir: str
    tree_file: str
    tree_modified: str
    tree_added: str
    tree_deleted: str
    tree_renamed: str
    tree_selected: str
    tree_stats: str
    search_prompt: str
    diff_added: str
    diff_added_marker: str
    diff_removed: str
    diff_removed_marker: str
    diff_context: str
    diff_hunk: str
    diff_file_header: str
    diff_line_number: str
    diff_message: str
    branch_header: str
    footer: str
    footer_key: str
    footer_scroll: str
    error: str
    help_heading: str
    help_key: str
    help_dim: str
    help_modal_title: str
    help_modal_border: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    divider="\033[38;5;237m",
    border="\033[38;5;237m",
    border_active="\033[34m",
    header_title="\033[1;34m",
    header_path="\033[38;5;243m",
    header_mode="\033[1;33m",
    tree_dir="\033[1;34m",
    tree_file="\033[37m",
    tree_modified="\033[33m",
    tree_added="\033[32m",
    tree_deleted="\033[31m",
    tree_renamed="\033[36m",
    tree_selected="\033[48;5;235m",
    tree_stats="\033[38;5;243m",
    search_prompt="\033[1;38;5;81m",
    diff_added="\033[1;38;5;86m",
    diff_added_marker="\033[1;38;5;46m",
    diff_removed="\033[1;38;5;196m",
    diff_removed_marker="\033[1;38;5;160m",
    diff_context="\033[38;5;241m",
    diff_hunk="\033[1;38;5;240m",
    diff_file_header="\033[1;38;5;252m",
    diff_line_number="\033[38;5;239m",
    diff_message="\033[3;38;5;243m",
    branch_header="\033[1;38;5;214m",
    footer="\033[38;5;243m",
    footer_key="\033[1;34m",
    footer_scroll="\033[33m",
    error="\033[1;31m",
    help_heading="\033[1;38;5;81m",
    help_key="\033[38;5;229m",
    help_dim="\033[2;38;5;250m",
    help_modal_title="\033[1;38;5;45m",
    help_modal_border="\033[38;5;45m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    divider="\033[2;38;5;31m",
    border="\033[38;5;24m",
    border_active="\033[38;5;45m",
    header_title="\033[1;38;5;45m",
    header_path="\033[38;5;110m",
    header_mode="\033[1;38;5;153m",
    tree_dir="\033[1;38;5;45m",
    tree_file="\033[38;5;252m",
    tree_modified="\033[38;5;215m",
    tree_added="\033[38;5;84m",
    tree_deleted="\033[38;5;203m",
    tree_renamed="\033[38;5;117m",
    tree_selected="\033[48;5;24m",
    tree_stats="\033[38;5;73m",
    search_prompt="\033[1;38;5;45m",
    diff_added="\033[38;5;84m",
    diff_added_marker="\033[1;38;5;84m",
    diff_removed="\033[38;5;203m",
    diff_removed_marker="\033[1;38;5;203m",
    diff_context="\033[38;5;110m",
    diff_hunk="\033[1;38;5;31m",
    diff_file_header="\033[1;38;5;153m",
    diff_line_number="\033[38;5;24m",
    diff_message="\033[3;38;5;110m",
    branch_header="\033[1;38;5;39m",
    footer="\033[38;5;110m",
    footer_key="\033[1;38;5;45m",
    footer_scroll="\033[38;5;153m",
    error="\033[1;38;5;203m",
    help_heading="\033[1;38;5;45m",
    help_key="\033[38;5;153m",
    help_dim="\033[2;38;5;110m",
    help_modal_title="\033[1;38;5;39m",
    help_modal_border="\033[38;5;39m",
)

PLAIN_THEME = UITheme(**{name: "" for name in UITheme.__dataclass_fields__ if name != "name"}, name="plain")

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
