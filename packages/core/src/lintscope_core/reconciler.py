"""Keep exactly one live copy of the bot's findings on a discussion thread.

Remote comments carry no type tag, so every run re-derives each comment's kind
from the first line of its body (see CommentMarkers.classify). Two cleanup
policies are supported:

  strike:  strike through each previous result, keeping its first lines as an
             audit trail, and delete its continuation pages.
  replace: delete previous results and continuation pages outright.

Either way old comments are cleaned up before new ones are posted, and comments
the bot did not write are never edited or deleted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lintscope_core.errors import CommentCleanupFailed, CommentPostFailed
from lintscope_core.models import BotComment, CommentKind

logger = logging.getLogger(__name__)

POLICIES = ("strike", "replace")

DEFAULT_HEADER = "Checked commits"
DEFAULT_CONTINUATION = "...continued"


@dataclass(frozen=True)
class CommentMarkers:
    """Leading marker text that identifies this check's comments."""

    header: str = DEFAULT_HEADER
    continuation: str = DEFAULT_CONTINUATION

    def classify(self, body: str | None) -> CommentKind:
        first_line = (body or "").split("\n", 1)[0].strip()
        if not first_line:
            return CommentKind.UNRELATED
        if first_line.startswith(self.header):
            return CommentKind.CURRENT
        if self.continuation in first_line:
            return CommentKind.CONTINUATION
        return CommentKind.UNRELATED

    def continuation_line(self) -> str:
        return f"**{self.continuation}**"


def strike(body: str, keep_lines: int = 2) -> str:
    """Return the struck-through, truncated form of an outdated result comment."""
    kept = "\n".join(body.split("\n")[:keep_lines]).strip()
    return f"~~{kept}~~"


@dataclass
class ReconcileResult:
    edited: list = field(default_factory=list)
    deleted: list = field(default_factory=list)
    posted: int = 0
    failures: list[CommentCleanupFailed] = field(default_factory=list)


class CommentReconciler:
    def __init__(self, discussion, markers: CommentMarkers | None = None, policy: str = "strike", struck_lines: int = 2):
        if policy not in POLICIES:
            raise ValueError(f"Unknown reconciliation policy: {policy!r}. Choose 'strike' or 'replace'.")
        self.discussion = discussion
        self.markers = markers or CommentMarkers()
        self.policy = policy
        self.struck_lines = struck_lines

    def find_bot_comments(self, discussion_id) -> list[BotComment]:
        """List the thread and return only this check's comments, in thread order."""
        found = []
        for comment in self.discussion.list_comments(discussion_id):
            kind = self.markers.classify(comment.body)
            if kind is not CommentKind.UNRELATED:
                found.append(BotComment(id=comment.id, body=comment.body, kind=kind))
        return found

    def reconcile(self, discussion_id, messages: list[str]) -> ReconcileResult:
        """Replace the previous bot output on ``discussion_id`` with ``messages``.

        Cleanup failures are logged and collected; posting failures raise
        CommentPostFailed. When ``messages`` is empty only the cleanup happens.
        """
        result = ReconcileResult()
        existing = self.find_bot_comments(discussion_id)

        current = [c for c in existing if c.kind is CommentKind.CURRENT]
        continuations = [c for c in existing if c.kind is CommentKind.CONTINUATION]

        if self.policy == "strike":
            to_edit, to_delete = current, continuations
        else:
            to_edit, to_delete = [], current + continuations

        for comment in to_edit:
            self._cleanup(result, comment, "edit")
        for comment in to_delete:
            self._cleanup(result, comment, "delete")

        if messages:
            try:
                self.discussion.create_comments(discussion_id, list(messages))
            except Exception as e:
                raise CommentPostFailed(f"Could not post {len(messages)} comment(s) to #{discussion_id}: {e}") from e
            result.posted = len(messages)

        logger.info(
            "Reconciled #%s: %d struck, %d deleted, %d posted, %d cleanup failure(s)",
            discussion_id,
            len(result.edited),
            len(result.deleted),
            result.posted,
            len(result.failures),
        )
        return result

    def _cleanup(self, result: ReconcileResult, comment: BotComment, action: str) -> None:
        try:
            if action == "edit":
                self.discussion.edit_comment(comment.id, strike(comment.body, self.struck_lines))
                result.edited.append(comment.id)
            else:
                self.discussion.delete_comments([comment.id])
                result.deleted.append(comment.id)
        except Exception as e:
            failure = CommentCleanupFailed(comment.id, action, str(e))
            logger.warning("%s", failure)
            result.failures.append(failure)
