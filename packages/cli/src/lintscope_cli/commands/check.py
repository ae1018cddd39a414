"""check command: lint a pull request and reconcile its lint comments."""

from __future__ import annotations

import click
from github import GithubException
from rich.console import Console

from lintscope_core.checker import LintChecker
from lintscope_core.errors import LintScopeError
from lintscope_core.gh.discussion import GitHubDiscussionService
from lintscope_core.gh.pull_request import get_commit_range, get_pull, get_repo
from lintscope_core.models import CommitRange
from lintscope_core.vcs.git import GitRepository
from lintscope_core.vcs.process import ProcessRunner

console = Console()


@click.command("check")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.option(
    "--workdir",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    show_default=True,
    help="Local git working copy of the repository (must contain both commits).",
)
@click.option("--base", default=None, help="Base commit. Defaults to the PR's base SHA.")
@click.option("--head", default=None, help="Head commit. Defaults to the PR's head SHA.")
@click.option(
    "--policy",
    type=click.Choice(["strike", "replace"]),
    default=None,
    help="How to clean up previous lint comments. Overrides config file.",
)
@click.option(
    "--linter",
    "linters",
    multiple=True,
    type=click.Choice(["rubocop", "haml-lint"]),
    help="Linter to run (repeatable). Overrides config file.",
)
@click.option(
    "--config",
    "config_path",
    default=".lintscope.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="LINTSCOPE_CONFIG",
)
@click.option("--shadow", "-s", is_flag=True, help="Dry-run mode: print comments without posting to GitHub.")
def check_cmd(
    repo: str,
    pr_number: int,
    workdir: str,
    base: str | None,
    head: str | None,
    policy: str | None,
    linters: tuple[str, ...],
    config_path: str,
    shadow: bool,
):
    """Lint the lines a pull request changed and update its lint comment.

    Error and fatal offenses are reported wherever they are; everything else
    only on lines the pull request touched.

    \b
    Required environment variables:
      GITHUB_TOKEN   GitHub personal access token (or use gh CLI)
    """
    from lintscope_cli.auth import resolve_github_token
    from lintscope_core.config import load_config

    config = load_config(config_path, cli_overrides={"policy": policy, "linters": list(linters) or None})

    token = resolve_github_token(config.get("github_token"))
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )

    try:
        this_repo = get_repo(repo, token=token)
        this_pr = get_pull(this_repo, pr_number)
    except GithubException as e:
        raise click.ClickException(f"PR #{pr_number} not found in {repo}: {e}")

    pr_range = get_commit_range(this_pr)
    commit_range = CommitRange(base=base or pr_range.base, head=head or pr_range.head)

    try:
        checker = LintChecker(
            vcs=GitRepository(
                workdir,
                timeout=config["git_timeout"],
                lock_timeout=config["checkout_lock_timeout"],
            ),
            runner=ProcessRunner(timeout=config["process_timeout"]),
            discussion=GitHubDiscussionService(this_repo),
            config=config,
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    try:
        result = checker.run(pr_number, commit_range, shadow=shadow)
    except LintScopeError as e:
        raise click.ClickException(str(e))
    except GithubException as e:
        raise click.ClickException(f"GitHub API error while updating #{pr_number}: {e}")

    if shadow:
        for body in result.messages:
            console.print(body, markup=False, highlight=False)
            console.print()
        return

    for failure in result.cleanup_failures:
        console.print(f"[yellow]Warning: {failure}[/yellow]")
    if result.posted:
        console.print(f"[green]Posted lint results to #{pr_number}: {result.offense_count} offense(s).[/green]")
    else:
        console.print(f"[green]No comment posted to #{pr_number}; old lint comments cleaned up.[/green]")
