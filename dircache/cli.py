"""
Command-line interface for dircache.

This module provides CLI commands for inspecting a mirrored directory:
- snapshot: Load a directory once and list what the cache holds
- watch: Follow a directory and print cache notifications as they happen
"""

import asyncio
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import click

from dircache.cache import CacheState, DirectoryCache
from dircache.config import CacheConfig, get_settings
from dircache.events import CacheEvent
from dircache.exceptions import DirectoryCacheException

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def describe_content(content: Any) -> tuple[str, Optional[int]]:
    """Return a (type, size) pair describing cached content."""
    if content is None:
        return "none", None
    if isinstance(content, bytes):
        return "bytes", len(content)
    if isinstance(content, str):
        return "text", len(content.encode('utf-8'))
    return "json", len(json.dumps(content).encode('utf-8'))


def build_config(raw: bool, debounce: Optional[int]) -> CacheConfig:
    """Cache configuration from settings plus command-line overrides."""
    config = CacheConfig.from_settings(get_settings())
    if raw:
        config = replace(config, json_parsing=False)
    if debounce is not None:
        config = replace(config, watch=replace(config.watch, debounce_ms=debounce))
    return config


async def _close(cache: DirectoryCache) -> None:
    watcher = cache.watcher
    cache.stop()
    wait_closed = getattr(watcher, "wait_closed", None)
    if wait_closed is not None:
        await wait_closed()


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def cli(verbose: bool):
    """
    dircache CLI.

    Command-line tools for mirroring a directory in memory.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")
    else:
        logging.getLogger().setLevel(get_settings().log_level)


@cli.command('snapshot')
@click.option(
    '--directory', '-d',
    required=True,
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    help='Directory to load'
)
@click.option(
    '--pattern', '-p',
    default=None,
    help='Only cache names matching this regular expression'
)
@click.option(
    '--raw',
    is_flag=True,
    help='Keep JSON files as text instead of decoding them'
)
@click.option(
    '--json',
    'output_json',
    is_flag=True,
    help='Output the snapshot as JSON'
)
def snapshot_command(directory: Path, pattern: Optional[str], raw: bool, output_json: bool):
    """
    Load a directory once and list the cached entries.

    Examples:

        \b
        # List everything in ./data
        python -m dircache.cli snapshot -d ./data

        \b
        # Only JSON files, as machine-readable output
        python -m dircache.cli snapshot -d ./data -p '\\.json$' --json
    """
    async def run_snapshot():
        cache = DirectoryCache(directory, filter=pattern, config=build_config(raw, None))
        try:
            await cache.init()
        except DirectoryCacheException as e:
            click.echo(click.style(f"Error loading {directory}: {e.message}", fg='red'), err=True)
            return 1

        try:
            entries = []
            for name in sorted(cache.get_filenames()):
                kind, size = describe_content(cache.get_file(name))
                entries.append({"name": name, "type": kind, "size": size})

            if output_json:
                click.echo(json.dumps({
                    "directory": str(directory),
                    "files": entries,
                    "stats": cache.stats(),
                }, indent=2))
            else:
                click.echo(click.style(f"{directory}", fg='blue', bold=True))
                for entry in entries:
                    size = "-" if entry["size"] is None else f"{entry['size']} bytes"
                    click.echo(f"  {entry['name']:<40} {entry['type']:<6} {size}")
                click.echo()
                click.echo(f"{len(entries)} entries")
            return 0
        finally:
            await _close(cache)

    exit_code = asyncio.run(run_snapshot())
    raise SystemExit(exit_code)


@cli.command('watch')
@click.option(
    '--directory', '-d',
    required=True,
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    help='Directory to follow'
)
@click.option(
    '--pattern', '-p',
    default=None,
    help='Only cache names matching this regular expression'
)
@click.option(
    '--raw',
    is_flag=True,
    help='Keep JSON files as text instead of decoding them'
)
@click.option(
    '--debounce',
    type=click.IntRange(1, 60_000),
    default=None,
    help='Watcher debounce in milliseconds (default: from config)'
)
def watch_command(directory: Path, pattern: Optional[str], raw: bool, debounce: Optional[int]):
    """
    Follow a directory and print cache notifications.

    Runs until interrupted with Ctrl-C.

    Examples:

        \b
        # Follow ./data
        python -m dircache.cli watch -d ./data

        \b
        # Follow only text files with a short debounce
        python -m dircache.cli watch -d ./data -p '\\.txt$' --debounce 200
    """
    def on_change(label: str, color: str):
        def handler(name: str, content: Any):
            kind, size = describe_content(content)
            size_text = "" if size is None else f" ({size} bytes)"
            click.echo(click.style(f"{label:<8}", fg=color) + f" {name} [{kind}]{size_text}")
        return handler

    def on_error(error: Exception):
        click.echo(click.style(f"error    {error}", fg='red'), err=True)

    async def run_watch():
        cache = DirectoryCache(directory, filter=pattern, config=build_config(raw, debounce))
        cache.on(CacheEvent.ADDED, on_change("added", 'green'))
        cache.on(CacheEvent.UPDATED, on_change("updated", 'yellow'))
        cache.on(CacheEvent.DELETED, on_change("deleted", 'red'))
        cache.on(CacheEvent.ERROR, on_error)

        try:
            await cache.init()
        except DirectoryCacheException as e:
            click.echo(click.style(f"Error watching {directory}: {e.message}", fg='red'), err=True)
            return 1

        click.echo(f"Watching {directory} ({len(cache)} entries). Press Ctrl-C to stop.")
        try:
            await asyncio.Event().wait()
        finally:
            if cache.state is not CacheState.STOPPED:
                await _close(cache)
        return 0

    try:
        exit_code = asyncio.run(run_watch())
    except KeyboardInterrupt:
        click.echo("Stopped.")
        exit_code = 0
    raise SystemExit(exit_code)


if __name__ == '__main__':
    cli()
