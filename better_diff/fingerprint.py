"""Content fingerprints used to decide whether a reload is a real change.

Hashes are 64-bit FNV-1a rendered as lowercase hex. Inputs are sorted first,
so enumeration order never changes the result.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .diff.types import CommitSummary, FileDiff

FNV64_OFFSET_BASIS = 0xCBF29CE484222325
FNV64_PRIME = 0x100000001B3
_MASK64 = 0xFFFFFFFFFFFFFFFF
EMPTY_FINGERPRINT = "empty"


class Fnv1a64:
    """Incremental FNV-1a 64-bit hasher."""

    def __init__(self) -> None:
        self.value = FNV64_OFFSET_BASIS

    def update(self, data: bytes) -> None:
        value = self.value
        for byte in data:
            value ^= byte
            value = (value * FNV64_PRIME) & _MASK64
        self.value = value

    def update_text(self, text: str) -> None:
        self.update(text.encode("utf-8", errors="surrogateescape"))

    def hexdigest(self) -> str:
        return format(self.value, "x")


def fnv1a64(data: bytes) -> str:
    hasher = Fnv1a64()
    hasher.update(data)
    return hasher.hexdigest()


def _sorted_files(files: Iterable[FileDiff]) -> list[FileDiff]:
    return sorted(files, key=lambda f: (f.path, f.change_kind.value))


def _write_summary(hasher: Fnv1a64, file_diff: FileDiff) -> None:
    hasher.update_text(
        f"{file_diff.path}|{file_diff.change_kind.value}|{file_diff.lines_added}|{file_diff.lines_removed}\n"
    )


def files_fingerprint(files: Sequence[FileDiff]) -> str:
    """Hash ``(path, kind, added, removed)`` tuples only."""
    if not files:
        return EMPTY_FINGERPRINT
    hasher = Fnv1a64()
    for file_diff in _sorted_files(files):
        _write_summary(hasher, file_diff)
    return hasher.hexdigest()


def diffs_fingerprint(files: Sequence[FileDiff]) -> str:
    """Hash file summaries plus every hunk header and line."""
    if not files:
        return EMPTY_FINGERPRINT
    hasher = Fnv1a64()
    for file_diff in _sorted_files(files):
        _write_summary(hasher, file_diff)
        for hunk in file_diff.hunks:
            hasher.update_text(f"@@{hunk.old_start},{hunk.old_count},{hunk.new_start},{hunk.new_count}\n")
            for line in hunk.lines:
                hasher.update_text(f"{line.kind.value}|{line.content}\n")
    return hasher.hexdigest()


def files_and_diffs_fingerprint(files: Sequence[FileDiff], diffs: Sequence[FileDiff]) -> str:
    hasher = Fnv1a64()
    hasher.update_text("files=" + files_fingerprint(files))
    hasher.update_text("|diffs=" + diffs_fingerprint(diffs))
    return hasher.hexdigest()


def branch_compare_fingerprint(diffs: Sequence[FileDiff], commits: Sequence[CommitSummary]) -> str:
    base = diffs_fingerprint(diffs)
    if not commits:
        return base
    hasher = Fnv1a64()
    hasher.update_text(base)
    for commit in commits:
        hasher.update_text("|" + commit.hash)
    return hasher.hexdigest()
