"""Read-only JSON settings.

Looked up in the platform config directory first, then in
``~/.config/better_diff.json``. All access is defensive: a missing or
malformed file, or a bad value for a single key, falls back to the default
for that key.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .diff.types import DEFAULT_DIFF_CONTEXT

APP_NAME = "better_diff"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
LEGACY_CONFIG_PATH = Path.home() / ".config" / "better_diff.json"
CONFIG_PATH = DEFAULT_CONFIG_PATH
DEFAULT_STYLE = "monokai"
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


@dataclass(frozen=True)
class Settings:
    theme: str | None = None
    style: str = DEFAULT_STYLE
    no_color: bool = False
    diff_context: int = DEFAULT_DIFF_CONTEXT
    log_level: str = DEFAULT_LOG_LEVEL


def _config_path() -> Path:
    """Return the preferred config path, falling back to the legacy location when only it exists."""
    if CONFIG_PATH.exists():
        return CONFIG_PATH
    if CONFIG_PATH == DEFAULT_CONFIG_PATH and LEGACY_CONFIG_PATH.exists():
        return LEGACY_CONFIG_PATH
    return CONFIG_PATH


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads((path or _config_path()).read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def load_settings(path: Path | None = None) -> Settings:
    data = load_config(path)

    theme = data.get("theme")
    style = data.get("style")
    no_color = data.get("no_color")
    context = data.get("diff_context")
    level = data.get("log_level")

    return Settings(
        theme=theme if isinstance(theme, str) and theme.strip() else None,
        style=style.strip() if isinstance(style, str) and style.strip() else DEFAULT_STYLE,
        no_color=no_color if isinstance(no_color, bool) else False,
        # bool is an int subclass; reject it explicitly.
        diff_context=(
            context
            if isinstance(context, int) and not isinstance(context, bool) and context >= 0
            else DEFAULT_DIFF_CONTEXT
        ),
        log_level=level.upper() if isinstance(level, str) and level.upper() in LOG_LEVELS else DEFAULT_LOG_LEVEL,
    )
