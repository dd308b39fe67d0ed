"""Change detection: recompute the fingerprint and report only real changes."""

from __future__ import annotations

import logging

from .diff.assembler import Repository, assemble_diffs, changed_files, merge_diff_stats
from .diff.types import DiffMode, ViewMode
from .fingerprint import branch_compare_fingerprint, files_and_diffs_fingerprint
from .git.errors import GitError
from .runtime.events import ChangeDetected

logger = logging.getLogger(__name__)


class ChangeDetector:
    """Runs the same pipeline as the loaders and compares fingerprints."""

    def __init__(self, repo: Repository) -> None:
        self.repo = repo

    def check(
        self,
        mode: DiffMode,
        view_mode: ViewMode,
        context: int,
        last_fingerprint: str,
    ) -> ChangeDetected | None:
        try:
            if mode is DiffMode.BRANCH_COMPARE:
                commits = self.repo.commits_ahead_of_default()
                diffs = assemble_diffs(self.repo, mode, view_mode, context)
                fingerprint = branch_compare_fingerprint(diffs, commits)
                files = None
                extra: dict[str, object] = {}
            else:
                diffs = assemble_diffs(self.repo, mode, view_mode, context)
                files = merge_diff_stats(changed_files(self.repo, mode), diffs)
                fingerprint = files_and_diffs_fingerprint(files, diffs)
                extra = {"file_count": len(files)}
        except GitError as exc:
            logger.error("check for changes", exc_info=exc, extra={"fields": {"mode": mode.value}})
            return None

        if fingerprint == last_fingerprint:
            return None

        logger.info(
            "repository changes detected",
            extra={"fields": {"previous_hash": last_fingerprint, "new_hash": fingerprint, **extra}},
        )
        return ChangeDetected(fingerprint=fingerprint, files=files)
