"""DiscussionService backed by GitHub issue comments on a pull request.

Pull request conversation comments are issue comments in the GitHub API, so
everything here goes through ``Repository.get_issue``. Comment objects fetched
by list_comments are cached by id; edit and delete reuse them rather than
re-fetching each one.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class GitHubDiscussionService:
    def __init__(self, repo):
        self._repo = repo
        self._comments: dict[int, object] = {}

    def _issue(self, number: int):
        return self._repo.get_issue(number)

    def list_comments(self, discussion_id: int) -> list:
        comments = list(self._issue(discussion_id).get_comments())
        for comment in comments:
            self._comments[comment.id] = comment
        return comments

    def create_comments(self, discussion_id: int, bodies: list[str]) -> None:
        issue = self._issue(discussion_id)
        for body in bodies:
            comment = issue.create_comment(body)
            logger.debug("Created comment %s on #%s", getattr(comment, "id", "?"), discussion_id)

    def _comment(self, comment_id: int):
        try:
            return self._comments[comment_id]
        except KeyError:
            raise KeyError(f"Comment {comment_id} was not listed by this service") from None

    def edit_comment(self, comment_id: int, body: str) -> None:
        self._comment(comment_id).edit(body)

    def delete_comments(self, comment_ids: list[int]) -> None:
        for comment_id in comment_ids:
            self._comment(comment_id).delete()
            self._comments.pop(comment_id, None)
