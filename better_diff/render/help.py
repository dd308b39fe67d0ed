"""Key binding table and the centred help modal.

Rendering helpers here are presentation-only and side-effect free.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..ansi import fit_ansi_line
from ..runtime.layout import help_modal_dimensions
from ..ui_theme import DEFAULT_THEME, UITheme

HELP_TITLE = "Keyboard Shortcuts"
HELP_FOOTER = "Press ? to close"


@dataclass(frozen=True)
class KeyBinding:
    key: str
    action: str
    section: str


KEY_BINDINGS: tuple[KeyBinding, ...] = (
    KeyBinding("up/k", "Move up", "Navigation"),
    KeyBinding("down/j", "Move down", "Navigation"),
    KeyBinding("pgup", "Page up", "Navigation"),
    KeyBinding("pgdown", "Page down", "Navigation"),
    KeyBinding("j/k", "Jump between hunks (Diff Only, diff panel)", "Navigation"),
    KeyBinding("gg", "Jump to top (diff/whole file)", "Navigation"),
    KeyBinding("G", "Jump to bottom (diff/whole file)", "Navigation"),
    KeyBinding("o", "Expand surrounding context (Diff Only)", "Navigation"),
    KeyBinding("O", "Reset surrounding context (Diff Only)", "Navigation"),
    KeyBinding("enter/space", "Select file / Expand directory", "Actions"),
    KeyBinding("s", "Toggle unstaged/staged/branch compare", "Actions"),
    KeyBinding("f", "Toggle diff/whole file view", "Actions"),
    KeyBinding("/", "Filter files (file tree, Diff Only)", "Actions"),
    KeyBinding("tab", "Switch between file tree and diff", "Panels"),
    KeyBinding("q/ctrl+c", "Quit application", "System"),
    KeyBinding("?", "Show/hide this help screen", "System"),
)


def help_body_lines(theme: UITheme | None = None) -> list[str]:
    """Title, bindings grouped by section, and the close hint."""
    active = theme or DEFAULT_THEME
    reset = active.reset
    lines = [f"{active.help_modal_title}{HELP_TITLE}{reset}", ""]
    section = ""
    for binding in KEY_BINDINGS:
        if binding.section != section:
            section = binding.section
            lines.append("")
            lines.append(f"{active.help_heading}{section}{reset}")
        lines.append(f"{active.help_key} {binding.key:<12}{reset} {binding.action}")
    lines.append("")
    lines.append(f"{active.help_dim}{HELP_FOOTER}{reset}")
    return lines


def overlay_help(screen: list[str], width: int, height: int, theme: UITheme | None = None) -> list[str]:
    """Return ``screen`` with the help modal drawn over its centre rows."""
    active = theme or DEFAULT_THEME
    modal_w, modal_h = help_modal_dimensions(width, height)
    if modal_w < 4 or modal_h < 3:
        return screen
    inner_w = modal_w - 2
    inner_h = modal_h - 2
    border = active.help_modal_border
    reset = active.reset

    body = help_body_lines(active)[:inner_h]
    body += [""] * (inner_h - len(body))
    modal = [f"{border}╭{'─' * inner_w}╮{reset}"]
    for line in body:
        modal.append(f"{border}│{reset}{fit_ansi_line(' ' + line, inner_w)}{border}│{reset}")
    modal.append(f"{border}╰{'─' * inner_w}╯{reset}")

    top = max(0, (height - len(modal)) // 2)
    left = " " * max(0, (width - modal_w) // 2)
    out = list(screen)
    for offset, row in enumerate(modal):
        idx = top + offset
        if idx < len(out):
            out[idx] = left + row
    return out
