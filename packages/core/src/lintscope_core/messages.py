"""Render a filtered report into one or more comment bodies."""

from __future__ import annotations

from lintscope_core.models import CommitRange, LintReport, Offense, Severity
from lintscope_core.reconciler import CommentMarkers

# GitHub rejects issue comments longer than 65536 characters.
GITHUB_COMMENT_LIMIT = 65535

_SEVERITY_EMOJI = {
    Severity.FATAL: ":skull:",
    Severity.ERROR: ":bomb:",
    Severity.WARNING: ":warning:",
    Severity.INFO: ":information_source:",
}

SUCCESS_LINE = "Everything looks fine. :star:"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def format_offense(offense: Offense) -> str:
    location = f"Line {offense.line}"
    if offense.column is not None:
        location += f", Col {offense.column}"
    rule = f"[{offense.rule_id}] " if offense.rule_id else ""
    return f"- [ ] {_SEVERITY_EMOJI[offense.severity]} - {location} - {rule}{offense.message}"


class MessageBuilder:
    def __init__(
        self,
        markers: CommentMarkers | None = None,
        max_chars: int = GITHUB_COMMENT_LIMIT,
        post_success_comment: bool = True,
    ):
        self.markers = markers or CommentMarkers()
        self.max_chars = max_chars
        self.post_success_comment = post_success_comment

    def header_lines(self, report: LintReport, commit_range: CommitRange) -> list[str]:
        if commit_range.is_single:
            checked = f"{self.markers.header} {commit_range.head[:7]}"
        else:
            checked = f"{self.markers.header} {commit_range.base[:7]}...{commit_range.head[:7]}"
        tools = ", ".join(report.tools) if report.tools else "no applicable linters"
        summary = report.summary
        return [
            f"{checked} with {tools}",
            f"**{_plural(summary.file_count, 'file')} checked, "
            f"{_plural(summary.offense_count, 'offense')} detected**",
        ]

    def body_lines(self, report: LintReport) -> list[str]:
        lines: list[str] = []
        for file in report.files:
            if not file.offenses:
                continue
            lines.append("")
            lines.append(f"**{file.path}**")
            lines.extend(format_offense(o) for o in file.offenses)
        return lines

    def build(self, report: LintReport, commit_range: CommitRange) -> list[str]:
        """Return the comment bodies to post, in order. Empty means post nothing."""
        if report.summary.offense_count == 0:
            if not self.post_success_comment:
                return []
            return self.paginate(self.header_lines(report, commit_range) + ["", SUCCESS_LINE])
        return self.paginate(self.header_lines(report, commit_range) + self.body_lines(report))

    def paginate(self, lines: list[str]) -> list[str]:
        """Pack lines into bodies of at most ``max_chars``, never splitting a line.

        Every body after the first opens with the continuation marker so the next
        run can find and remove it.
        """
        pages: list[list[str]] = [[]]
        size = 0
        for line in lines:
            line = self._fit(line)
            added = len(line) + (1 if pages[-1] else 0)
            if pages[-1] and size + added > self.max_chars:
                pages.append([self.markers.continuation_line()])
                size = len(pages[-1][0])
                added = len(line) + 1
            pages[-1].append(line)
            size += added
        return ["\n".join(page) for page in pages]

    def _fit(self, line: str) -> str:
        # Leave room for the continuation marker line on overflow pages.
        room = self.max_chars - len(self.markers.continuation_line()) - 1
        if len(line) <= room:
            return line
        return line[: max(room - 3, 0)] + "..."
