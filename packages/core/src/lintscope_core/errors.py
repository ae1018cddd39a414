"""Error taxonomy for a lint check run.

Fatal errors (everything except CommentCleanupFailed) abort the run and carry the
underlying diagnostic text so the CLI can print it verbatim.
"""

from __future__ import annotations


class LintScopeError(Exception):
    """Base class for all lintscope errors."""


class DiffUnavailable(LintScopeError):
    """The changed-line index for the commit range could not be computed."""


class LinterExecutionFailed(LintScopeError):
    """A linter process crashed or produced output that could not be parsed."""

    def __init__(self, linter: str, output: str):
        self.linter = linter
        self.output = output
        super().__init__(f"{linter} failed:\n{output}")


class CommentCleanupFailed(LintScopeError):
    """An old bot comment could not be edited or deleted. Collected, never raised."""

    def __init__(self, comment_id, action: str, reason: str):
        self.comment_id = comment_id
        self.action = action
        self.reason = reason
        super().__init__(f"Could not {action} comment {comment_id}: {reason}")


class CommentPostFailed(LintScopeError):
    """New comments could not be posted to the discussion."""
