"""Session runtime: state, reducer, command execution, and the event loop.

``run_app`` is imported lazily so the reducer and its types can be used
without pulling in the terminal bootstrap.
"""

from __future__ import annotations


def run_app(*args, **kwargs):
    """Lazily import the session entrypoint to avoid package-import cycles."""
    from .app import run_app as _run_app

    return _run_app(*args, **kwargs)


__all__ = ["run_app"]
