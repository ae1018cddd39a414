"""Changed-line index for a commit range."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping

from lintscope_core.errors import DiffUnavailable
from lintscope_core.models import CommitRange

logger = logging.getLogger(__name__)

_HUNK_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+(?P<start>\d+)(?:,\d+)? @@")
_EMPTY: frozenset[int] = frozenset()


class DiffIndex(Mapping):
    """Read-only mapping of repository-relative path -> changed head-side line numbers.

    Looking up a path that is not part of the diff returns an empty set instead of
    raising; use ``in`` to tell "not in the diff" apart from "no added lines".
    """

    def __init__(self, lines_by_path: Mapping[str, set[int]] | None = None):
        self._lines = {path: frozenset(lines) for path, lines in (lines_by_path or {}).items()}

    def __getitem__(self, path: str) -> frozenset[int]:
        return self._lines.get(path, _EMPTY)

    def __contains__(self, path: object) -> bool:
        return path in self._lines

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __repr__(self) -> str:
        return f"DiffIndex({dict(self._lines)!r})"

    @property
    def paths(self) -> list[str]:
        return list(self._lines)


def parse_unified_diff(diff_text: str) -> dict[str, set[int]]:
    """Map each file in a unified diff to the head-side line numbers it adds.

    Removed lines have no head-side number and are not represented. Files deleted
    in the head revision (``+++ /dev/null``) are left out entirely. A file whose
    hunks only remove lines is present with an empty set.
    """
    result: dict[str, set[int]] = {}
    current: set[int] | None = None
    file_line: int | None = None

    for line in diff_text.splitlines():
        if line.startswith("diff --git"):
            current, file_line = None, None
            continue
        # File headers only appear between "diff --git" and the first hunk; inside a
        # hunk, "--- x" / "+++ x" are content lines for "-- x" / "++ x".
        if file_line is None and line.startswith("--- "):
            continue
        if file_line is None and line.startswith("+++ "):
            target = line[4:].strip()
            if target == "/dev/null":
                current = None
            else:
                path = target[2:] if target.startswith("b/") else target
                current = result.setdefault(path, set())
            file_line = None
            continue
        if line.startswith("@@"):
            match = _HUNK_RE.match(line)
            file_line = int(match.group("start")) if match else None
            continue

        if current is None or file_line is None:
            continue
        if line.startswith("+"):
            current.add(file_line)
            file_line += 1
        elif line.startswith("-") or line.startswith("\\"):
            pass  # removed line or "\ No newline at end of file"
        else:
            file_line += 1

    return result


def build_diff_index(vcs, commit_range: CommitRange) -> DiffIndex:
    """Ask the version control service for the changed lines of ``commit_range``.

    There is no best-effort fallback: any failure becomes DiffUnavailable and
    aborts the run before a linter is started.
    """
    try:
        lines_by_path = vcs.diff_index(commit_range.base, commit_range.head)
    except Exception as e:
        raise DiffUnavailable(
            f"Could not compute diff for {commit_range.base}...{commit_range.head}: {e}"
        ) from e

    index = DiffIndex(lines_by_path)
    logger.debug("Diff index for %s...%s covers %d file(s)", commit_range.base, commit_range.head, len(index))
    return index
