"""Command-line entry point for github-review-stats."""

import sys
import logging
from datetime import datetime

import click

from . import __version__
from .api_client import GitHubAPIClient
from .cache import CacheStore
from .config import Settings
from .exceptions import CorruptCache, ProtocolError, RequestRejected
from .output import OutputFormatter
from .stats import VALID_STATES, compute_stats
from .sync import RepositorySynchronizer


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s: %(message)s',
        datefmt='%m/%d/%Y %I:%M:%S %p'
    )


@click.command()
@click.argument('repository')
@click.option('-c', '--cached-only', is_flag=True, help="Don't query GitHub, only use cached data.")
@click.option('--pages', type=click.IntRange(min=1), default=None,
              help="Fetch at most this many pages of pull requests (default: MAX_PAGES or 1).")
@click.option('--state', 'state_filter', type=click.Choice(VALID_STATES), default=None,
              help="Count pull requests in this state (default: STATE_FILTER or closed).")
@click.option('--since', type=click.DateTime(formats=['%Y-%m-%d']), default=None,
              help="Only count pull requests updated on or after this date.")
@click.option('--cache-dir', default=None, help="Directory holding cache files (default: CACHE_DIR or .).")
@click.version_option(__version__, prog_name='github-review-stats')
def main(repository, cached_only, pages, state_filter, since, cache_dir):
    """Tally pull request review outcomes per reviewer for REPOSITORY (owner/name)."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    segments = repository.split('/')
    if len(segments) != 2 or any(segment in ('', '.', '..') for segment in segments):
        raise click.UsageError("you must specify a GitHub repository as owner/name")

    pages = pages or settings.max_pages
    state_filter = state_filter or settings.state_filter
    cache_dir = cache_dir or settings.cache_dir

    try:
        store = CacheStore.load(repository, cache_dir)
    except CorruptCache as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    formatter = OutputFormatter()

    if not cached_only:
        client = GitHubAPIClient(settings.token, settings.api_url)
        synchronizer = RepositorySynchronizer(store, client)
        try:
            complete = synchronizer.synchronize(pages)
        except ProtocolError as e:
            click.echo(f"Error: unexpected response from GitHub: {e}", err=True)
            sys.exit(1)
        except RequestRejected as e:
            click.echo(f"Error: GitHub rejected the request, check the repository name and token: {e}", err=True)
            sys.exit(1)

        if synchronizer.stopped_before_fetch:
            # Nothing was fetched, so the cache is as complete as it was before
            formatter.print_cached_notice(store, synchronizer.last_rate_limit)
        elif not complete:
            formatter.print_incomplete(store, synchronizer.last_rate_limit)
            return

    stats = compute_stats(store, state_filter, since)
    if not stats:
        click.echo("No review activity found.")
        return
    formatter.print_tally(stats)
