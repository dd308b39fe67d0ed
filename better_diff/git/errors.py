"""Error taxonomy for repository access."""

from __future__ import annotations


class GitError(Exception):
    pass


class NotARepositoryError(GitError):
    """The starting directory is not inside a git working tree."""


class ReferenceMissingError(GitError):
    """HEAD, the default branch, or a commit tip could not be resolved."""


class ReadFailureError(GitError):
    """A blob, index entry, or worktree file could not be read."""


class SizeLimitExceededError(GitError):
    def __init__(self, path: str, size: int, limit: int) -> None:
        super().__init__(f"file {path} too large to diff ({size} > {limit})")
        self.path = path
        self.size = size
        self.limit = limit
