"""Value objects shared by the filter, renderer and reconciler.

All report types are frozen. Transformations (merge, filter) build new values
instead of mutating counters, and ``offense_count`` is always derived from the
file list, so the summary can never disagree with the offenses it describes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    @classmethod
    def parse(cls, value: str | None) -> Severity:
        """Normalise a linter-native severity name.

        rubocop reports ``refactor`` and ``convention`` in addition to the four
        levels used here; both are style noise and map to ``warning``, as does
        anything unrecognised.
        """
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.WARNING


@dataclass(frozen=True)
class CommitRange:
    base: str
    head: str

    @property
    def is_single(self) -> bool:
        return self.base == self.head


@dataclass(frozen=True)
class Offense:
    path: str
    line: int
    severity: Severity
    rule_id: str
    message: str
    column: int | None = None


@dataclass(frozen=True)
class FileOffenses:
    """The offenses a linter reported for one inspected file, in report order."""

    path: str
    offenses: tuple[Offense, ...] = ()


@dataclass(frozen=True)
class ReportSummary:
    offense_count: int
    file_count: int
    inspected_file_count: int


@dataclass(frozen=True)
class LintReport:
    files: tuple[FileOffenses, ...] = ()
    target_file_count: int = 0
    inspected_file_count: int = 0
    tools: tuple[str, ...] = ()  # e.g. ("rubocop 1.56.0", "haml-lint 0.51.0")

    @classmethod
    def empty(cls) -> LintReport:
        return cls()

    @property
    def summary(self) -> ReportSummary:
        return ReportSummary(
            offense_count=sum(len(f.offenses) for f in self.files),
            file_count=self.target_file_count,
            inspected_file_count=self.inspected_file_count,
        )

    @property
    def offenses(self) -> list[Offense]:
        return [o for f in self.files for o in f.offenses]

    def to_dict(self) -> dict:
        summary = self.summary
        return {
            "summary": {
                "offense_count": summary.offense_count,
                "file_count": summary.file_count,
                "inspected_file_count": summary.inspected_file_count,
            },
            "tools": list(self.tools),
            "files": [
                {
                    "path": f.path,
                    "offenses": [
                        {
                            "line": o.line,
                            "column": o.column,
                            "severity": o.severity.value,
                            "rule_id": o.rule_id,
                            "message": o.message,
                        }
                        for o in f.offenses
                    ],
                }
                for f in self.files
            ],
        }


class CommentKind(str, Enum):
    CURRENT = "current"
    CONTINUATION = "continuation"
    UNRELATED = "unrelated"


@dataclass(frozen=True)
class BotComment:
    """An existing thread comment, classified at read time from its body."""

    id: int
    body: str
    kind: CommentKind


@dataclass
class CheckResult:
    """Outcome of one lint check run, returned to the job runner."""

    offense_count: int
    posted: bool
    messages: list[str] = field(default_factory=list)
    cleanup_failures: list = field(default_factory=list)
