"""Lint check run: diff index → linters → merge/filter → render → reconcile."""

from __future__ import annotations

import logging

from rich.console import Console

from lintscope_core.acquisition import acquire_report
from lintscope_core.config import DEFAULT_CONFIG
from lintscope_core.diff_index import build_diff_index
from lintscope_core.linters.haml_lint import HamlLintLinter
from lintscope_core.linters.rubocop import RubocopLinter
from lintscope_core.messages import MessageBuilder
from lintscope_core.models import CheckResult, CommitRange
from lintscope_core.reconciler import CommentMarkers, CommentReconciler
from lintscope_core.result_filter import UNCHANGED_FILES_POLICIES, filter_report, merge, parse_severities

console = Console()
logger = logging.getLogger(__name__)


def get_linter(name: str, config: dict):
    if name == "rubocop":
        return RubocopLinter(config_path=config.get("rubocop_config"))
    if name == "haml-lint":
        return HamlLintLinter()
    raise ValueError(f"Unknown linter: {name!r}. Choose 'rubocop' or 'haml-lint'.")


class LintChecker:
    """Runs one lint check for a discussion and syncs its comment thread.

    The collaborators are injected: ``vcs`` provides ``diff_index`` and
    ``with_checkout``, ``runner`` runs linter processes, and ``discussion`` lists
    and writes comments. Nothing is kept between runs; the comment thread is the
    only persistent state.
    """

    def __init__(self, vcs, runner, discussion, config: dict | None = None, linters: list | None = None):
        self.config = {**DEFAULT_CONFIG, **(config or {})}
        if self.config["unchanged_files"] not in UNCHANGED_FILES_POLICIES:
            raise ValueError(
                f"Unknown unchanged_files policy: {self.config['unchanged_files']!r}. Choose 'drop' or 'keep'."
            )
        self.severe = parse_severities(self.config["severe_severities"])
        self.vcs = vcs
        self.runner = runner
        self.linters = linters if linters is not None else [get_linter(n, self.config) for n in self.config["linters"]]

        markers = CommentMarkers(
            header=self.config["comment_header"],
            continuation=self.config["continuation_marker"],
        )
        self.builder = MessageBuilder(
            markers=markers,
            max_chars=self.config["max_comment_chars"],
            post_success_comment=self.config["post_success_comment"],
        )
        self.reconciler = CommentReconciler(
            discussion,
            markers=markers,
            policy=self.config["policy"],
            struck_lines=self.config["struck_lines"],
        )

    def run(self, discussion_id, commit_range: CommitRange, shadow: bool = False) -> CheckResult:
        """Lint ``commit_range`` and make ``discussion_id``'s thread show the result.

        Raises DiffUnavailable, LinterExecutionFailed or CommentPostFailed on fatal
        errors. In shadow mode the messages are rendered but nothing is posted.
        """
        index = build_diff_index(self.vcs, commit_range)
        console.print(f"[cyan]{len(index)} file(s) changed in {commit_range.base[:7]}...{commit_range.head[:7]}[/cyan]")

        reports = [
            acquire_report(linter, index.paths, commit_range.head, self.vcs, self.runner) for linter in self.linters
        ]
        filtered = filter_report(
            merge(*reports),
            index,
            severe=self.severe,
            unchanged_files=self.config["unchanged_files"],
        )
        offense_count = filtered.summary.offense_count
        messages = self.builder.build(filtered, commit_range)

        if shadow:
            console.print(f"[bold]Shadow run: {offense_count} offense(s), {len(messages)} comment(s) not posted.[/bold]")
            return CheckResult(offense_count=offense_count, posted=False, messages=messages)

        logger.info("Updating #%s with %d lint comment(s)", discussion_id, len(messages))
        outcome = self.reconciler.reconcile(discussion_id, messages)

        return CheckResult(
            offense_count=offense_count,
            posted=outcome.posted > 0,
            messages=messages,
            cleanup_failures=outcome.failures,
        )
