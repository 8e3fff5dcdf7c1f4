"""Command-line entry point: one auto-merge pass over open dependency PRs."""

from __future__ import annotations

import logging
import sys

import click
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .config import ConfigurationError, load_config
from .display import console, display_summary
from .github_api import GitHubAPIError, GitHubClient
from .output import write_json
from .runner import AutoMerger

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )
    # keep urllib3 at INFO even with --debug
    logging.getLogger("urllib3").setLevel(logging.INFO)


def _fail(message: str) -> None:
    console.print(f"[red]Error: {escape(message)}[/red]")
    sys.exit(1)


@click.command()
@click.version_option(version=__version__, prog_name="bump-merger")
@click.option("--token", default=None, help="GitHub token (or set GITHUB_TOKEN / GH_TOKEN).")
@click.option("--repo", default=None, help="Repository as owner/name (or set GITHUB_REPOSITORY).")
@click.option(
    "--auto-merge", envvar="INPUT_AUTO_MERGE", default=None,
    help="Highest bump merged automatically: major, minor (default) or patch.",
)
@click.option(
    "--merge-method", envvar="INPUT_MERGE_METHOD", default=None,
    help="merge (default), squash or rebase.",
)
@click.option(
    "--pr-author", envvar="INPUT_PR_AUTHOR", default=None,
    help="Only consider PRs opened by this login (default: dependabot[bot]).",
)
@click.option("--debug", is_flag=True, default=False, help="Verbose logging (or set INPUT_DEBUG).")
@click.option("--dry-run", is_flag=True, default=False, help="Decide but do not approve or merge.")
@click.option("--json-out", default=None, help="Write the run summary as JSON to this path.")
def main(
    token: str | None,
    repo: str | None,
    auto_merge: str | None,
    merge_method: str | None,
    pr_author: str | None,
    debug: bool,
    dry_run: bool,
    json_out: str | None,
):
    """Approve and merge green dependency-update pull requests."""
    _configure_logging(debug)

    try:
        config = load_config(
            token=token,
            repository=repo,
            auto_merge=auto_merge,
            merge_method=merge_method,
            pr_author=pr_author,
            debug=debug,
            dry_run=dry_run,
        )
    except ConfigurationError as error:
        _fail(str(error))
    _configure_logging(config.debug)
    logger.debug("Configuration: %r", config)

    client = GitHubClient(config.token, config.repository)
    try:
        pull_requests = client.list_open_pull_requests()
    except GitHubAPIError as error:
        _fail(str(error))

    summary = AutoMerger(config, client, client).run(pull_requests)
    display_summary(summary, title=f"Dependency PRs in {config.repository.full_name}")

    if json_out:
        path = write_json(json_out, summary)
        console.print(f"\nRun summary written to [cyan]{escape(str(path))}[/cyan]")


if __name__ == "__main__":
    main()
