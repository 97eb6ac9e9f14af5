"""CLI entrypoint for eco-stats."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
import httpx
from rich.logging import RichHandler

from . import __version__
from .aggregator import DEFAULT_TOP_N
from .collector import DEFAULT_COURTESY_DELAY


def _configure_logging(verbose: bool, debug: bool) -> None:
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=debug, show_path=debug)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def _resolve_max_repos(value: int | None) -> int | None:
    """Negative values (the historical -1) mean no limit."""
    if value is None or value < 0:
        return None
    return value


@click.command()
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    required=True,
    show_envvar=True,
    help="GitHub personal access token",
)
@click.option(
    "--topic",
    envvar="TOPIC",
    default="json-schema",
    show_default=True,
    show_envvar=True,
    help="GitHub topic that defines the ecosystem",
)
@click.option(
    "--max-repos",
    envvar="MAX_REPOS",
    type=int,
    default=None,
    show_envvar=True,
    help="Stop after this many repositories (default: all; -1 also means all)",
)
@click.option(
    "--data-dir",
    envvar="DATA_DIR",
    default="./data",
    show_default=True,
    show_envvar=True,
    type=click.Path(file_okay=False),
    help="Directory holding dated snapshots and history.json",
)
@click.option(
    "--top-n",
    default=DEFAULT_TOP_N,
    show_default=True,
    type=click.IntRange(min=0),
    help="Number of top repositories kept per language",
)
@click.option(
    "--delay",
    default=DEFAULT_COURTESY_DELAY,
    show_default=True,
    type=click.FloatRange(min=0),
    help="Pause in seconds after each repository",
)
@click.option(
    "--stage-dir",
    default=None,
    type=click.Path(file_okay=False),
    help="Also copy the JSON data files into this dashboard directory",
)
@click.option(
    "--api-url",
    default=None,
    help="GitHub Enterprise API base URL",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    default=False,
    help="Disable SSL verification (self-signed certs)",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log progress")
@click.option("--debug", is_flag=True, default=False, help="Log every request")
@click.version_option(version=__version__)
def main(
    token: str,
    topic: str,
    max_repos: int | None,
    data_dir: str,
    top_n: int,
    delay: float,
    stage_dir: str | None,
    api_url: str | None,
    no_ssl_verify: bool,
    verbose: bool,
    debug: bool,
) -> None:
    """Snapshot metrics for every GitHub repository tagged with a topic.

    \b
    Each run writes DATA_DIR/YYYY-MM-DD.json and rebuilds
    DATA_DIR/history.json from all snapshots.

    \b
    Examples:
      eco-stats --topic json-schema
      eco-stats --topic json-schema --max-repos 50 --data-dir ./data
      eco-stats --stage-dir dashboard/dist/data
    """
    _configure_logging(verbose, debug)

    from .orchestrator import run

    try:
        asyncio.run(
            run(
                token=token,
                topic=topic,
                max_results=_resolve_max_repos(max_repos),
                data_dir=data_dir,
                top_n=top_n,
                delay=delay,
                stage_dir=stage_dir,
                api_url=api_url,
                verify_ssl=not no_ssl_verify,
            )
        )
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        if status in (401, 403):
            click.echo("Error: Authentication failed. Check your --token or $GITHUB_TOKEN.", err=True)
        else:
            click.echo(f"Error: GitHub API returned {status}.", err=True)
        sys.exit(1)
    except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
        click.echo(f"Error: Could not connect to GitHub API. {exc}", err=True)
        sys.exit(1)
    except Exception as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
