"""Tests for the end-to-end lint check run."""

import json
import types
from unittest.mock import MagicMock

import pytest

from lintscope_core.checker import LintChecker, get_linter
from lintscope_core.errors import CommentPostFailed, DiffUnavailable, LinterExecutionFailed
from lintscope_core.linters.haml_lint import HamlLintLinter
from lintscope_core.linters.rubocop import RubocopLinter
from lintscope_core.models import CommitRange
from lintscope_core.vcs.process import ProcessResult

RANGE = CommitRange(base="a" * 40, head="b" * 40)
HUMAN = "Please also update the changelog."


def rubocop_output(offenses):
    return json.dumps(
        {
            "metadata": {"rubocop_version": "1.56.0"},
            "files": [
                {
                    "path": "app/user.rb",
                    "offenses": [
                        {"severity": sev, "message": "msg", "cop_name": "Cop/X", "location": {"line": line, "column": 1}}
                        for line, sev in offenses
                    ],
                }
            ],
            "summary": {"offense_count": len(offenses), "target_file_count": 1, "inspected_file_count": 1},
        }
    )


HAML_OUTPUT = json.dumps(
    {
        "metadata": {"hamllint_version": "0.51.0"},
        "files": [
            {
                "path": "app/show.haml",
                "offenses": [{"severity": "warning", "message": "long", "linter_name": "LineLength", "location": {"line": 2}}],
            }
        ],
        "summary": {"offense_count": 1, "target_file_count": 1, "inspected_file_count": 1},
    }
)


class FakeVcs:
    def __init__(self, diff, fail=None):
        self.path = "/repo"
        self._diff = diff
        self._fail = fail
        self.checkouts = []

    def diff_index(self, base, head):
        if self._fail:
            raise self._fail
        return self._diff

    def with_checkout(self, revision, fn):
        self.checkouts.append(revision)
        return fn()


class FakeRunner:
    def __init__(self, results):
        self.results = results
        self.commands = []

    def run(self, command, args, cwd):
        self.commands.append(command)
        return self.results[command]


class FakeDiscussion:
    def __init__(self, bodies=(), fail_create=False):
        self.comments = [types.SimpleNamespace(id=i, body=b) for i, b in enumerate(bodies, 1)]
        self.fail_create = fail_create

    def list_comments(self, discussion_id):
        return list(self.comments)

    def create_comments(self, discussion_id, bodies):
        if self.fail_create:
            raise RuntimeError("502 Bad Gateway")
        next_id = max((c.id for c in self.comments), default=0) + 1
        for offset, body in enumerate(bodies):
            self.comments.append(types.SimpleNamespace(id=next_id + offset, body=body))

    def edit_comment(self, comment_id, body):
        for c in self.comments:
            if c.id == comment_id:
                c.body = body

    def delete_comments(self, comment_ids):
        self.comments = [c for c in self.comments if c.id not in comment_ids]

    def bodies(self):
        return [c.body for c in self.comments]


def make_checker(diff, results, discussion=None, config=None, vcs=None):
    vcs = vcs or FakeVcs(diff)
    runner = FakeRunner(results)
    discussion = discussion or FakeDiscussion()
    return LintChecker(vcs, runner, discussion, config=config), vcs, runner, discussion


class TestGetLinter:
    def test_known(self):
        assert isinstance(get_linter("rubocop", {"rubocop_config": "x.yml"}), RubocopLinter)
        assert isinstance(get_linter("haml-lint", {}), HamlLintLinter)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown linter"):
            get_linter("eslint", {})


class TestRun:
    def test_filters_merges_and_posts(self):
        results = {
            "rubocop": ProcessResult(1, rubocop_output([(3, "convention"), (4, "warning"), (40, "error")]), ""),
            "haml-lint": ProcessResult(65, HAML_OUTPUT, ""),
        }
        checker, vcs, runner, discussion = make_checker(
            {"app/user.rb": {3}, "app/show.haml": {2}}, results, FakeDiscussion([HUMAN])
        )

        result = checker.run(12, RANGE)

        assert result.offense_count == 3
        assert result.posted is True
        assert runner.commands == ["rubocop", "haml-lint"]
        assert vcs.checkouts == ["b" * 40, "b" * 40]
        assert discussion.bodies()[0] == HUMAN
        body = discussion.bodies()[1]
        assert "with rubocop 1.56.0, haml-lint 0.51.0" in body
        assert "Line 3" in body and "Line 40" in body and "Line 4," not in body

    def test_rerun_does_not_duplicate(self):
        results = {"rubocop": ProcessResult(1, rubocop_output([(3, "warning")]), "")}
        discussion = FakeDiscussion([HUMAN])
        checker, *_ = make_checker({"app/user.rb": {3}}, results, discussion, config={"linters": ["rubocop"]})

        checker.run(12, RANGE)
        first = discussion.bodies()
        checker.run(12, RANGE)

        live = [b for b in discussion.bodies() if b.startswith("Checked commits")]
        assert live == [first[1]]
        assert discussion.bodies()[1].startswith("~~Checked commits")

    def test_replace_policy(self):
        results = {"rubocop": ProcessResult(0, rubocop_output([]), "")}
        discussion = FakeDiscussion(["Checked commits old...old with rubocop\n**x**", HUMAN])
        checker, *_ = make_checker(
            {"app/user.rb": {1}}, results, discussion, config={"policy": "replace", "linters": ["rubocop"]}
        )
        checker.run(12, RANGE)
        assert discussion.bodies()[0] == HUMAN
        assert len(discussion.bodies()) == 2

    def test_no_findings_without_success_comment_only_cleans(self):
        results = {"rubocop": ProcessResult(0, rubocop_output([(9, "warning")]), "")}
        discussion = FakeDiscussion(["Checked commits old...old with rubocop\n**1 offense**\nmore"])
        checker, *_ = make_checker(
            {"app/user.rb": {1}}, results, discussion, config={"post_success_comment": False, "linters": ["rubocop"]}
        )

        result = checker.run(12, RANGE)

        assert result.offense_count == 0
        assert result.posted is False
        assert discussion.bodies() == ["~~Checked commits old...old with rubocop\n**1 offense**~~"]

    def test_empty_diff_skips_linters(self):
        checker, vcs, runner, discussion = make_checker({}, {})
        result = checker.run(12, RANGE)
        assert runner.commands == []
        assert vcs.checkouts == []
        assert result.offense_count == 0
        assert "0 offenses detected" in discussion.bodies()[0]

    def test_diff_failure_aborts_before_linting(self):
        vcs = FakeVcs({}, fail=RuntimeError("unknown revision"))
        discussion = FakeDiscussion(["Checked commits old"])
        checker, _, runner, _ = make_checker({}, {}, discussion, vcs=vcs)

        with pytest.raises(DiffUnavailable):
            checker.run(12, RANGE)
        assert runner.commands == []
        assert discussion.bodies() == ["Checked commits old"]

    def test_linter_crash_aborts_without_touching_thread(self):
        results = {"rubocop": ProcessResult(2, "", "undefined method `cop_config'")}
        discussion = FakeDiscussion(["Checked commits old"])
        checker, *_ = make_checker({"app/user.rb": {1}}, results, discussion, config={"linters": ["rubocop"]})

        with pytest.raises(LinterExecutionFailed, match="cop_config"):
            checker.run(12, RANGE)
        assert discussion.bodies() == ["Checked commits old"]

    def test_post_failure_surfaces(self):
        results = {"rubocop": ProcessResult(0, rubocop_output([]), "")}
        checker, *_ = make_checker(
            {"app/user.rb": {1}}, results, FakeDiscussion(fail_create=True), config={"linters": ["rubocop"]}
        )
        with pytest.raises(CommentPostFailed):
            checker.run(12, RANGE)

    def test_shadow_mode_does_not_touch_thread(self):
        results = {"rubocop": ProcessResult(0, rubocop_output([(1, "warning")]), "")}
        discussion = MagicMock()
        checker, *_ = make_checker({"app/user.rb": {1}}, results, discussion, config={"linters": ["rubocop"]})

        result = checker.run(12, RANGE, shadow=True)

        assert result.posted is False
        assert result.offense_count == 1
        assert len(result.messages) == 1
        discussion.list_comments.assert_not_called()
        discussion.create_comments.assert_not_called()

    def test_unchanged_files_policy_from_config(self):
        results = {"rubocop": ProcessResult(0, rubocop_output([(3, "warning")]), "")}
        checker, *_ = make_checker(
            {"app/user.rb": set(), "Gemfile": {1}},
            results,
            config={"linters": ["rubocop"], "unchanged_files": "keep"},
        )
        # app/user.rb is in the diff, so "keep" does not apply to it.
        assert checker.run(12, RANGE).offense_count == 0

    def test_explicit_linters_override_config(self):
        linter = MagicMock()
        linter.NAME = "custom"
        linter.handles.return_value = False
        checker = LintChecker(FakeVcs({"a.rb": {1}}), FakeRunner({}), FakeDiscussion(), linters=[linter])
        assert checker.linters == [linter]
        assert checker.run(1, RANGE).offense_count == 0


def test_invalid_unchanged_files_policy_rejected_up_front():
    with pytest.raises(ValueError, match="unchanged_files"):
        LintChecker(FakeVcs({}), FakeRunner({}), FakeDiscussion(), config={"unchanged_files": "ignore"})


def test_invalid_reconcile_policy_rejected_up_front():
    with pytest.raises(ValueError, match="policy"):
        LintChecker(FakeVcs({}), FakeRunner({}), FakeDiscussion(), config={"policy": "append"})


def test_misspelled_severe_severity_rejected_up_front():
    with pytest.raises(ValueError, match="fatl"):
        LintChecker(FakeVcs({}), FakeRunner({}), FakeDiscussion(), config={"severe_severities": ["error", "fatl"]})
