"""Combine lint reports and narrow them to the lines a commit range touched."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from lintscope_core.models import FileOffenses, LintReport, Offense, Severity

logger = logging.getLogger(__name__)

DEFAULT_SEVERE = frozenset({Severity.ERROR, Severity.FATAL})

UNCHANGED_FILES_POLICIES = ("drop", "keep")


def merge(*reports: LintReport) -> LintReport:
    """Concatenate reports in order and sum their counters.

    File lists are not de-duplicated: each linter owns a disjoint set of file
    types, so the same path never appears in two inputs. With no reports this
    returns the empty report.
    """
    files: list[FileOffenses] = []
    tools: list[str] = []
    target = inspected = 0
    for report in reports:
        files.extend(report.files)
        tools.extend(report.tools)
        target += report.target_file_count
        inspected += report.inspected_file_count
    return LintReport(files=tuple(files), target_file_count=target, inspected_file_count=inspected, tools=tuple(tools))


def parse_severities(names: Iterable[Severity | str]) -> frozenset[Severity]:
    """Parse a configured severe set, rejecting names that are not severities.

    Unlike ``Severity.parse`` (which reads linter output and maps unknown names to
    warning), a typo here would silently demote a severity, so it is an error.
    """
    parsed = set()
    for name in names:
        if isinstance(name, Severity):
            parsed.add(name)
            continue
        try:
            parsed.add(Severity(str(name).lower()))
        except ValueError:
            choices = ", ".join(s.value for s in Severity)
            raise ValueError(f"Unknown severity: {name!r}. Choose from {choices}.") from None
    return frozenset(parsed)



def keep_offense(offense: Offense, changed_lines: frozenset[int] | set[int], severe: frozenset[Severity]) -> bool:
    return offense.severity in severe or offense.line in changed_lines


def filter_report(
    report: LintReport,
    index: Mapping[str, Iterable[int]],
    severe: Iterable[Severity | str] = DEFAULT_SEVERE,
    unchanged_files: str = "drop",
) -> LintReport:
    """Keep an offense iff it is severe or sits on a changed line of its file.

    Severe offenses survive regardless of position because an untouched line can
    still be broken by the change. Files left with no offenses stay in the result
    to record that they were inspected.

    ``unchanged_files`` decides what happens to files the linter reported but the
    diff does not mention (config files a linter scans on its own, say): "drop"
    keeps only their severe offenses, "keep" keeps all of them.
    """
    if unchanged_files not in UNCHANGED_FILES_POLICIES:
        raise ValueError(f"Unknown unchanged_files policy: {unchanged_files!r}. Choose 'drop' or 'keep'.")

    severe_set = parse_severities(severe)
    filtered: list[FileOffenses] = []

    for file in report.files:
        if file.path not in index and unchanged_files == "keep":
            filtered.append(file)
            continue
        changed = frozenset(index.get(file.path, ()))
        kept = tuple(o for o in file.offenses if keep_offense(o, changed, severe_set))
        if len(kept) != len(file.offenses):
            logger.debug("%s: kept %d of %d offense(s)", file.path, len(kept), len(file.offenses))
        filtered.append(FileOffenses(path=file.path, offenses=kept))

    return LintReport(
        files=tuple(filtered),
        target_file_count=report.target_file_count,
        inspected_file_count=report.inspected_file_count,
        tools=report.tools,
    )
