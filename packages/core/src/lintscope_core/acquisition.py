"""Run one linter over the changed files of a revision."""

from __future__ import annotations

import logging

from lintscope_core.errors import LinterExecutionFailed
from lintscope_core.models import LintReport

logger = logging.getLogger(__name__)


def acquire_report(linter, candidate_paths, revision: str, vcs, runner) -> LintReport:
    """Lint ``candidate_paths`` as of ``revision`` and return the parsed report.

    The linter runs inside ``vcs.with_checkout`` so the working copy is restored
    whatever happens. Linters exit non-zero both when they find offenses and when
    they crash; only a non-zero exit with something on stderr counts as a crash.
    """
    files = [p for p in candidate_paths if linter.handles(p)]
    if not files:
        logger.info("No files for %s in this range; skipping.", linter.NAME)
        return LintReport.empty()

    def _run():
        return runner.run(linter.COMMAND, linter.build_args(files), cwd=vcs.path)

    result = vcs.with_checkout(revision, _run)

    if result.exit_status != 0 and result.stderr.strip():
        raise LinterExecutionFailed(linter.NAME, result.stderr)

    report = linter.parse(result.stdout)
    logger.info(
        "%s inspected %d file(s), %d offense(s)",
        linter.NAME,
        report.summary.inspected_file_count,
        report.summary.offense_count,
    )
    return report
