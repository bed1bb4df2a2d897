"""Main entry point for the url-readers CLI.

Provides a Typer-based CLI for inspecting configured readers and reading
files or trees through them.
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from url_readers import __version__
from url_readers.config import ConfigReader, get_config_path
from url_readers.errors import UrlReaderError
from url_readers.logging_config import setup_logging
from url_readers.reading.registry import UrlReaderRegistry, build_url_readers
from url_readers.settings import settings

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="url-readers",
    help="Read files and trees from remote object stores by URL",
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"url-readers version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Console log level (defaults to URL_READERS_LOG_LEVEL)",
    ),
) -> None:
    """url-readers: read files and trees from remote object stores.

    ## Commands

    * [bold cyan]readers[/bold cyan] - List configured readers
    * [bold cyan]resolve[/bold cyan] - Show which reader handles a URL
    * [bold cyan]read[/bold cyan] - Read a single file
    * [bold cyan]read-tree[/bold cyan] - Read a directory tree
    """
    setup_logging(log_level or settings.URL_READERS_LOG_LEVEL, settings.URL_READERS_LOG_DIR)


def load_registry(config_path: Optional[Path]) -> UrlReaderRegistry:
    """Build a registry from a config file.

    An explicitly given config file must exist. Without one, the settings
    or standard location is used and a missing file means no integrations.

    Args:
        config_path: Path passed on the command line, if any

    Returns:
        The sealed registry
    """
    if config_path is not None:
        try:
            config = ConfigReader.from_file(config_path)
        except FileNotFoundError as e:
            err_console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
    else:
        try:
            config = ConfigReader.from_file(settings.URL_READERS_CONFIG)
        except FileNotFoundError:
            config = ConfigReader()
    return build_url_readers(config)


_config_option = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config file",
)


@app.command("readers")
def list_readers(config_path: Path = _config_option) -> None:
    """List configured readers in dispatch order."""
    try:
        registry = load_registry(config_path)
    except UrlReaderError as e:
        err_console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(1)

    if not len(registry):
        console.print("[yellow]No readers configured[/yellow]")
        return

    table = Table(title="URL Readers")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Reader", style="cyan")
    for index, description in enumerate(registry.describe(), start=1):
        table.add_row(str(index), description)
    console.print(table)


@app.command("resolve")
def resolve(
    url: str = typer.Argument(..., help="URL to dispatch"),
    config_path: Path = _config_option,
) -> None:
    """Show which reader is responsible for a URL."""
    try:
        registry = load_registry(config_path)
    except UrlReaderError as e:
        err_console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(1)

    reader = registry.resolve(url)
    if reader is None:
        err_console.print(f"[yellow]No reader configured for {url}[/yellow]")
        raise typer.Exit(1)
    console.print(reader.describe())


@app.command("read")
def read(
    url: str = typer.Argument(..., help="File URL"),
    output: Path = typer.Option(
        None,
        "--output",
        "-o",
        help="Write content to this file instead of stdout",
    ),
    config_path: Path = _config_option,
) -> None:
    """Read a single file."""
    try:
        registry = load_registry(config_path)
        content = asyncio.run(registry.read(url))
    except UrlReaderError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(content)
        console.print(f"[green]Wrote {len(content)} bytes to {output}[/green]")
    else:
        typer.echo(content.decode("utf-8", errors="replace"), nl=False)


@app.command("read-tree")
def read_tree(
    url: str = typer.Argument(..., help="Bucket or folder URL"),
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Target directory, or archive file with --archive",
    ),
    archive: bool = typer.Option(
        False,
        "--archive",
        "-a",
        help="Write a .tar.gz archive instead of a directory",
    ),
    config_path: Path = _config_option,
) -> None:
    """Read every file below a bucket or folder URL."""

    async def _fetch() -> str:
        response = await registry.read_tree(url)
        count = len(response)
        if archive:
            data = await response.archive()
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_bytes(data)
        else:
            await response.dir(output)
        return f"{count} files"

    try:
        registry = load_registry(config_path)
        summary = asyncio.run(_fetch())
    except UrlReaderError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Wrote {summary} to {output}[/green]")


@app.command("config-path")
def config_path_command() -> None:
    """Print the config file location."""
    console.print(str(settings.URL_READERS_CONFIG or get_config_path()))


if __name__ == "__main__":
    app()
