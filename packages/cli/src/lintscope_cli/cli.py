"""CLI entry point for lintscope.

Commands:
  check: lint a pull request's commit range and update its comment thread
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from lintscope_cli.commands.check import check_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("lintscope"),
    prog_name="lintscope",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def main(verbose: bool):
    """Diff-scoped lint results for GitHub pull requests."""
    _configure_logging(verbose)


main.add_command(check_cmd)
