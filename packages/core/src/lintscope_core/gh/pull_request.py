from __future__ import annotations

from github import Github

from lintscope_core.models import CommitRange


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_commit_range(pr) -> CommitRange:
    """Return the range a PR's lint check covers: the base branch tip to the PR head."""
    return CommitRange(base=pr.base.sha, head=pr.head.sha)
