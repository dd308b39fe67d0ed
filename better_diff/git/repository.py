"""Repository adapter over the ``git`` executable.

Exposes mode-specific path listings and old/new byte streams so the rest of
the program never deals with git's object model directly. All blob reads are
byte-exact; worktree reads follow symlinks the way git stores them.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable
from pathlib import Path

from ..diff.types import (
    MAX_COMMITS_AHEAD,
    MAX_FILE_SIZE,
    ChangedPath,
    ChangeKind,
    CommitSummary,
    DiffMode,
    FileContents,
)
from .errors import GitError, NotARepositoryError, ReadFailureError, ReferenceMissingError, SizeLimitExceededError
from .status import StatusEntry, change_kind_for_mode, is_relevant_change, parse_porcelain_z

logger = logging.getLogger(__name__)

GIT_COMMAND_TIMEOUT_SECONDS = 30.0
DEFAULT_BRANCH_CANDIDATES = ("main", "master", "develop")
_LOG_RECORD_START = "\x1e"
_LOG_FIELD_SEP = "\x1f"


class _StopWalk(Exception):
    pass


def resolve_git_paths(start: Path, timeout_seconds: float = GIT_COMMAND_TIMEOUT_SECONDS) -> tuple[Path, Path]:
    """Resolve repository root and git-dir for ``start``.

    Raises ``NotARepositoryError`` if git is unavailable or ``start`` is not
    inside a working tree.
    """
    try:
        proc = subprocess.run(
            ["git", "-C", str(start), "rev-parse", "--show-toplevel", "--git-dir"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise NotARepositoryError(f"failed to run git in {start}: {exc}") from exc

    lines = [line.strip() for line in proc.stdout.splitlines() if line.strip()]
    if proc.returncode != 0 or len(lines) < 2:
        raise NotARepositoryError(f"not a git repository: {start}")

    repo_root = Path(lines[0]).resolve()
    git_dir_raw = Path(lines[1])
    git_dir = git_dir_raw if git_dir_raw.is_absolute() else (Path(start) / git_dir_raw)
    return repo_root, git_dir.resolve()


class GitRepository:
    def __init__(self, root: Path, git_dir: Path, timeout_seconds: float = GIT_COMMAND_TIMEOUT_SECONDS) -> None:
        self.root = root
        self.git_dir = git_dir
        self.timeout_seconds = timeout_seconds

    @classmethod
    def open(cls, start: Path) -> GitRepository:
        root, git_dir = resolve_git_paths(start)
        return cls(root, git_dir)

    def root_path(self) -> str:
        return str(self.root)

    # git plumbing

    def _run(self, args: list[str]) -> subprocess.CompletedProcess[bytes]:
        try:
            return subprocess.run(
                ["git", "-C", str(self.root), *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=False,
                timeout=self.timeout_seconds,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise GitError(f"git {' '.join(args)} failed: {exc}") from exc

    def _run_text(self, args: list[str]) -> str | None:
        proc = self._run(args)
        if proc.returncode != 0:
            return None
        return proc.stdout.decode("utf-8", errors="replace")

    def _resolve_commit(self, rev: str) -> str | None:
        out = self._run_text(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"])
        if not out:
            return None
        return out.strip() or None

    def head_commit(self) -> str | None:
        return self._resolve_commit("HEAD")

    def _status_entries(self) -> list[StatusEntry]:
        proc = self._run(["status", "--porcelain=v1", "-z", "--untracked-files=all"])
        if proc.returncode != 0:
            message = proc.stderr.decode("utf-8", errors="replace").strip()
            raise GitError(f"failed to get git status: {message}")
        return parse_porcelain_z(proc.stdout.decode("utf-8", errors="surrogateescape"))

    def _read_blob(self, object_name: str, path: str) -> bytes | None:
        """Return blob bytes for ``object_name`` (``:path`` or ``rev:path``), or None when absent.

        A name that resolves but cannot be read raises ``ReadFailureError``.
        """
        proc = self._run(["cat-file", "blob", object_name])
        if proc.returncode != 0:
            if self._run_text(["rev-parse", "--verify", "--quiet", object_name]) is None:
                return None
            message = proc.stderr.decode("utf-8", errors="replace").strip()
            raise ReadFailureError(f"failed to read {path} from {object_name}: {message}")
        _enforce_size_limit(path, len(proc.stdout))
        return proc.stdout

    def _read_worktree(self, path: str) -> bytes | None:
        target = self.root / path
        try:
            if target.is_symlink():
                return os.readlink(target).encode("utf-8", errors="surrogateescape")
            size = target.stat().st_size
            _enforce_size_limit(path, size)
            return target.read_bytes()
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            return None
        except OSError as exc:
            raise ReadFailureError(f"failed to read {path} from worktree: {exc}") from exc

    # branch info

    def current_branch_or_short_hash(self) -> str:
        """Return the checked-out branch name, or a 7-char hash when detached."""
        out = self._run_text(["symbolic-ref", "--quiet", "--short", "HEAD"])
        if out and out.strip():
            return out.strip()
        head = self.head_commit()
        if head is None:
            raise ReferenceMissingError("failed to get HEAD reference")
        return head[:7]

    def _find_branch_commit(self, branch: str) -> str | None:
        for ref in (f"refs/heads/{branch}", f"refs/remotes/origin/{branch}"):
            commit = self._resolve_commit(ref)
            if commit is not None:
                return commit
        return None

    def default_branch_name(self) -> str:
        for branch in DEFAULT_BRANCH_CANDIDATES:
            if self._find_branch_commit(branch) is not None:
                return branch
        return DEFAULT_BRANCH_CANDIDATES[0]

    def default_branch_commit(self) -> str | None:
        return self._find_branch_commit(self.default_branch_name())

    def merge_base(self, first: str, second: str) -> str | None:
        out = self._run_text(["merge-base", first, second])
        if not out:
            return None
        return out.strip() or None

    # change listings

    def list_changes(self, mode: DiffMode) -> list[ChangedPath]:
        """List changed paths for ``mode``, sorted by path."""
        if mode is DiffMode.BRANCH_COMPARE:
            return [ChangedPath(path, ChangeKind.MODIFIED) for path in self.branch_compare_files()]
        if mode is DiffMode.STAGED and self.head_commit() is None:
            logger.warning("skip staged listing: HEAD not available")
            return []

        changes: dict[str, ChangedPath] = {}
        for entry in self._status_entries():
            if not entry.path or not is_relevant_change(entry, mode):
                continue
            changes[entry.path] = ChangedPath(entry.path, change_kind_for_mode(entry, mode))
        return [changes[path] for path in sorted(changes)]

    def read_contents(
        self,
        path: str,
        mode: DiffMode,
        change_kind: ChangeKind = ChangeKind.MODIFIED,
    ) -> FileContents:
        """Return old/new bytes for ``path`` under ``mode``.

        Unstaged compares index to worktree, staged compares the committed tip
        to the index. A side that does not exist is empty bytes. Raises
        ``SizeLimitExceededError`` when either side exceeds the size cap and
        ``ReadFailureError`` when an existing object cannot be read.
        """
        if mode is DiffMode.BRANCH_COMPARE:
            return self.read_branch_compare_contents(path)
        if mode is DiffMode.STAGED:
            old = self._read_blob(f"HEAD:{path}", path)
            new = self._read_blob(f":{path}", path)
        else:
            old = self._read_blob(f":{path}", path)
            new = self._read_worktree(path)
            if old is None and change_kind is ChangeKind.MODIFIED and new is not None:
                change_kind = ChangeKind.ADDED
        return FileContents(
            old=old or b"",
            new=new or b"",
            change_kind=change_kind,
            old_exists=old is not None,
            new_exists=new is not None,
        )

    # branch compare

    def commits_ahead_of_default(self) -> list[CommitSummary]:
        """Commits on the current tip that the default branch lacks.

        Walks in committer-time order from the tip and stops at the merge
        base. Without a merge base the walk is capped at 50 commits.
        """
        current = self.current_branch_or_short_hash()
        default = self.default_branch_name()
        if current == default:
            return []

        head = self.head_commit()
        if head is None:
            logger.warning("skip commits ahead: HEAD not available")
            return []
        default_commit = self._find_branch_commit(default)
        if default_commit is None:
            logger.warning("skip commits ahead: default branch unavailable", extra={"fields": {"branch": default}})
            return []

        base = self.merge_base(head, default_commit)
        commits: list[CommitSummary] = []

        def visit(commit: CommitSummary) -> None:
            if commit.hash == base:
                raise _StopWalk
            commits.append(commit)

        limit = None if base is not None else MAX_COMMITS_AHEAD
        found_base = self._walk_commits(head, visit, limit)
        if not found_base and len(commits) > MAX_COMMITS_AHEAD:
            del commits[MAX_COMMITS_AHEAD:]
        return commits

    def _walk_commits(self, tip: str, visit: Callable[[CommitSummary], None], limit: int | None) -> bool:
        """Feed commits reachable from ``tip`` to ``visit``; True when it stopped the walk."""
        args = [
            "git",
            "-C",
            str(self.root),
            "log",
            "--date-order",
            "--date=format:%Y-%m-%d %H:%M",
            f"--format={_LOG_RECORD_START}%H{_LOG_FIELD_SEP}%an{_LOG_FIELD_SEP}%ad{_LOG_FIELD_SEP}%B",
        ]
        if limit is not None:
            args.append(f"--max-count={limit}")
        args.append(tip)

        try:
            proc = subprocess.Popen(args, stdout=subprocess.PIPE, stderr=subprocess.DEVNULL)
        except OSError as exc:
            raise GitError(f"failed to get commit log: {exc}") from exc

        assert proc.stdout is not None
        try:
            for raw in proc.stdout:
                line = raw.decode("utf-8", errors="replace")
                if not line.startswith(_LOG_RECORD_START):
                    continue
                fields = line[1:].rstrip("\n").split(_LOG_FIELD_SEP, 3)
                if len(fields) < 4:
                    continue
                commit_hash, author, date, subject = fields
                visit(
                    CommitSummary(
                        hash=commit_hash,
                        short_hash=commit_hash[:7],
                        author=author,
                        message=subject,
                        date=date,
                    )
                )
        except _StopWalk:
            return True
        finally:
            if proc.poll() is None:
                proc.kill()
            proc.stdout.close()
            proc.wait()
        return False

    def _branch_compare_bases(self) -> tuple[str, str] | None:
        head = self.head_commit()
        if head is None:
            logger.warning("skipping branch compare: HEAD not available")
            return None
        base = self.default_branch_commit()
        if base is None:
            logger.warning("skipping branch compare: default branch commit unavailable")
            return None
        return base, head

    def branch_compare_files(self) -> list[str]:
        """Paths differing between default tip and current tip, plus worktree changes."""
        bases = self._branch_compare_bases()
        if bases is None:
            return []
        base, head = bases

        paths: set[str] = set()
        proc = self._run(["diff", "--name-only", "--no-renames", "-z", base, head])
        if proc.returncode == 0:
            paths.update(p for p in proc.stdout.decode("utf-8", errors="surrogateescape").split("\0") if p)
        else:
            logger.warning("branch compare: falling back to worktree status paths")

        for entry in self._status_entries():
            if entry.is_ignored or not entry.path:
                continue
            paths.add(entry.path)
            if entry.orig_path:
                paths.add(entry.orig_path)
        return sorted(paths)

    def read_branch_compare_contents(self, path: str, base_commit: str | None = None) -> FileContents:
        """Return default-tip bytes vs worktree bytes with explicit existence flags."""
        if base_commit is None:
            base_commit = self.default_branch_commit()
        old = self._read_blob(f"{base_commit}:{path}", path) if base_commit else None
        new = self._read_worktree(path)

        if old is None and new is not None:
            kind = ChangeKind.ADDED
        elif old is not None and new is None:
            kind = ChangeKind.DELETED
        else:
            kind = ChangeKind.MODIFIED
        return FileContents(
            old=old or b"",
            new=new or b"",
            change_kind=kind,
            old_exists=old is not None,
            new_exists=new is not None,
        )


def _enforce_size_limit(path: str, size: int) -> None:
    if size <= MAX_FILE_SIZE:
        return
    logger.warning(
        "file too large to diff",
        extra={"fields": {"file": path, "size": size, "max": MAX_FILE_SIZE}},
    )
    raise SizeLimitExceededError(path, size, MAX_FILE_SIZE)
