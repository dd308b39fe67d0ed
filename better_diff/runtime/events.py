"""Events applied by the reducer and commands it hands back to the runtime.

Both are frozen dataclasses. A command is a side-effect descriptor: the
runtime executes it off the UI thread and feeds the resulting event back.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..diff.types import CommitSummary, DiffMode, FileDiff, ViewMode


# Events


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class WindowResized:
    width: int
    height: int


@dataclass(frozen=True)
class GitInfoLoaded:
    root_path: str
    branch: str
    default_branch: str = ""


@dataclass(frozen=True)
class FilesLoaded:
    files: tuple[FileDiff, ...]


@dataclass(frozen=True)
class DiffsLoaded:
    files: tuple[FileDiff, ...]


@dataclass(frozen=True)
class CommitsLoaded:
    commits: tuple[CommitSummary, ...]


@dataclass(frozen=True)
class SingleDiffLoaded:
    file: FileDiff | None


@dataclass(frozen=True)
class ChangeDetected:
    """Emitted when the recomputed fingerprint differs from the last one.

    ``files`` is None in branch-compare mode, where the file list is derived
    from the reloaded diffs instead.
    """

    fingerprint: str
    files: list[FileDiff] | None = None


@dataclass(frozen=True)
class FilesystemChanged:
    """The watcher saw a relevant change; a fingerprint check should follow."""


@dataclass(frozen=True)
class WatcherStopped:
    error: str


@dataclass(frozen=True)
class Error:
    message: str


@dataclass(frozen=True)
class ClearError:
    pass


@dataclass(frozen=True)
class ShowHelp:
    pass


@dataclass(frozen=True)
class HideHelp:
    pass


Event = (
    KeyPressed
    | WindowResized
    | GitInfoLoaded
    | FilesLoaded
    | DiffsLoaded
    | CommitsLoaded
    | SingleDiffLoaded
    | ChangeDetected
    | FilesystemChanged
    | WatcherStopped
    | Error
    | ClearError
    | ShowHelp
    | HideHelp
)


# Commands


@dataclass(frozen=True)
class LoadGitInfo:
    pass


@dataclass(frozen=True)
class LoadFiles:
    mode: DiffMode


@dataclass(frozen=True)
class LoadAllDiffs:
    mode: DiffMode
    view_mode: ViewMode
    context: int


@dataclass(frozen=True)
class LoadDiff:
    path: str
    mode: DiffMode
    view_mode: ViewMode
    context: int


@dataclass(frozen=True)
class LoadCommitsAhead:
    pass


@dataclass(frozen=True)
class LoadBranchCompareDiff:
    view_mode: ViewMode
    context: int


@dataclass(frozen=True)
class WaitForChange:
    pass


@dataclass(frozen=True)
class CheckForChanges:
    mode: DiffMode
    view_mode: ViewMode
    context: int
    last_fingerprint: str


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Batch:
    commands: tuple[Command, ...]


Command = (
    LoadGitInfo
    | LoadFiles
    | LoadAllDiffs
    | LoadDiff
    | LoadCommitsAhead
    | LoadBranchCompareDiff
    | WaitForChange
    | CheckForChanges
    | Quit
    | Batch
)
