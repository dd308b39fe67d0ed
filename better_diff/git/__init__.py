"""Git repository access through the ``git`` executable."""

from __future__ import annotations

from .errors import GitError, NotARepositoryError, ReadFailureError, ReferenceMissingError, SizeLimitExceededError
from .repository import GitRepository, resolve_git_paths

__all__ = [
    "GitError",
    "GitRepository",
    "NotARepositoryError",
    "ReadFailureError",
    "ReferenceMissingError",
    "SizeLimitExceededError",
    "resolve_git_paths",
]
