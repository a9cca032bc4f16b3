"""
CLI commands for folio.

Provides the interactive shell and read-only queries over a saved history.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from folio import __version__
from folio.config import config
from folio.logging import initialize_logging_from_config
from folio.shell import DocumentShell
from folio.version_control import (
    DocumentStore,
    HistoryStorage,
    PersistenceError,
    VersionControlError,
    render_branches,
    render_log,
    render_patch,
)

history_option = click.option(
    "--history-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="History file (default: FOLIO_HISTORY_FILE or history.json)",
)


def _open_store(history_file: Optional[Path]) -> DocumentStore:
    """Load a saved history into a new store."""
    storage = _storage(history_file)
    store = DocumentStore(
        compression_threshold=config.store.compression_threshold,
        default_branch=config.store.default_branch,
    )
    try:
        store.restore(storage.load())
    except (VersionControlError, PersistenceError) as e:
        raise click.ClickException(str(e)) from e
    return store


def _storage(history_file: Optional[Path]) -> HistoryStorage:
    return HistoryStorage(
        history_file or config.store.history_path,
        default_branch=config.store.default_branch,
    )


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(
        ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"],
        case_sensitive=False,
    ),
    default=None,
    help="Logging level (default: FOLIO_LOG_LEVEL)",
)
@click.version_option(version=__version__)
def cli(log_level: Optional[str]):
    """Versioned document engine."""
    initialize_logging_from_config(config.logging, level=log_level)


@cli.command()
@history_option
@click.option("--load/--no-load", default=False, help="Load the history file on start")
def shell(history_file: Optional[Path], load: bool):
    """
    Start an interactive document session.

    Example:
        folio shell --history-file notes.json --load
    """
    session = DocumentShell(storage=_storage(history_file))
    if load:
        session.execute_command("load")
    session.run()


@cli.command()
@history_option
@click.option("--limit", type=int, default=None, help="Maximum number of versions")
def log(history_file: Optional[Path], limit: Optional[int]):
    """Show the history of the current branch, newest first."""
    store = _open_store(history_file)
    Console().print(render_log(store.log(limit), title=f"Branch {store.current_branch}"))


@cli.command()
@history_option
@click.argument("version_id", type=int, required=False)
def show(history_file: Optional[Path], version_id: Optional[int]):
    """Print the content of a version (default: current head)."""
    store = _open_store(history_file)
    try:
        content = store.show(version_id)
    except VersionControlError as e:
        raise click.ClickException(str(e)) from e
    click.echo(content)


@cli.command()
@history_option
@click.argument("from_version", type=int)
@click.argument("to_version", type=int)
@click.option("--plain", is_flag=True, help="Print bracket notation instead of colors")
def diff(history_file: Optional[Path], from_version: int, to_version: int, plain: bool):
    """Show the positional diff between two versions."""
    store = _open_store(history_file)
    try:
        patch = store.diff(from_version, to_version)
    except VersionControlError as e:
        raise click.ClickException(str(e)) from e

    if plain:
        click.echo(patch.format())
    else:
        Console().print(render_patch(patch))


@cli.command()
@history_option
def branches(history_file: Optional[Path]):
    """List branches and the version each points to."""
    store = _open_store(history_file)
    Console().print(render_branches(store.list_branches(), store.current_branch))


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
