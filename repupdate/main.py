"""
repupdate — CLI Entry Point

Usage:
    repupdate [--hosts hosts.yml] [--dry-run] [--force] [--only NAME ...]
    repupdate --scrub              # backup, then delete orphaned backups
    repupdate --scrub-only         # only delete orphaned backups
    repupdate --list HOST [-v]     # list repositories of one host

Exit codes:
    0  everything succeeded
    1  some repository could not be created, updated or pushed
    2  configuration error, backup host unreachable, or scrub error
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import click
import yaml
from dotenv import find_dotenv, load_dotenv

from .config.loader import DEFAULT_HOSTS_FILE, load_host_config
from .errors import EXIT_FATAL, EXIT_OK, EXIT_PARTIAL_FAILURE, ConfigError, HostError
from .engine.run import RunOptions, run
from .hosts.registry import HostRegistry
from .logging_config import setup_logging
from .mirror.git_sync import GitMirror

logger = logging.getLogger(__name__)


def run_list(registry: HostRegistry, host_name: str, verbose: bool = False) -> int:
    """Print the repositories of one host on stdout."""
    host = registry.get(host_name)
    if host is None:
        click.echo(f"{host_name}: host not found", err=True)
        return EXIT_PARTIAL_FAILURE

    try:
        repositories = host.list_repositories()
    except HostError as e:
        logger.error(f"{host_name}: failed to fetch repositories: {e.message}")
        return EXIT_FATAL

    for repository in repositories:
        if verbose:
            click.echo("---")
            click.echo(yaml.safe_dump(repository.to_dict(), sort_keys=False).rstrip())
        else:
            click.echo(repository.name)

    return EXIT_OK


@click.command(context_settings={"help_option_names": ["--help"]})
@click.option(
    "-h", "--hosts", "hosts_file",
    default=DEFAULT_HOSTS_FILE, show_default=True,
    help="Host config file",
)
@click.option("-n", "--dry-run", is_flag=True, help="Do not perform actions on repositories")
@click.option("-f", "--force", is_flag=True, help="Force push to backup repositories")
@click.option("-l", "--list", "list_host", metavar="HOST", help="List discovered repositories of HOST")
@click.option("-o", "--only", multiple=True, metavar="NAME", help="Only consider specific repositories")
@click.option("-s", "--scrub", is_flag=True, help="Remove repositories not present in source")
@click.option("-S", "--scrub-only", is_flag=True, help="Only remove repositories not present in source")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose mode")
@click.option("-j", "--jobs", default=1, show_default=True, type=click.IntRange(min=1),
              help="Hosts listed concurrently during discovery")
@click.option("--log-format", type=click.Choice(["text", "json"]), default=None,
              help="Log output format (default: LOG_FORMAT or text)")
def cli(
    hosts_file: str,
    dry_run: bool,
    force: bool,
    list_host: Optional[str],
    only: Tuple[str, ...],
    scrub: bool,
    scrub_only: bool,
    verbose: bool,
    jobs: int,
    log_format: Optional[str],
) -> None:
    """Back up repositories from source git hosts to backup git hosts."""
    # Tokens referenced by token_env may live in a local .env
    load_dotenv(find_dotenv(usecwd=True))
    setup_logging("DEBUG" if verbose else None, log_format)

    try:
        registry = HostRegistry.from_config(load_host_config(hosts_file))
    except ConfigError as e:
        logger.error(str(e))
        raise SystemExit(EXIT_FATAL)

    if list_host is not None:
        raise SystemExit(run_list(registry, list_host, verbose))

    options = RunOptions(
        dry_run=dry_run,
        force=force,
        only=list(only),
        scrub=scrub,
        scrub_only=scrub_only,
        jobs=jobs,
    )
    raise SystemExit(run(registry, options, GitMirror()))


if __name__ == "__main__":
    cli()
