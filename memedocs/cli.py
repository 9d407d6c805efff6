import json
import logging
import os
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.traceback import install

from .config import load_config
from .decorators import console as error_console
from .decorators import handle_bridge_errors
from .vfs import DocumentMetadata, DocumentsBridge

# Initialize Rich Traceback for better error messages
install(show_locals=False)

# Initialize Rich Console
console = Console()

# Configure logging to use Rich's RichHandler
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True)]
)
logger = logging.getLogger("memedocs")

app = typer.Typer(help="Browse bundled image assets as a document tree")


@app.callback()
def main(
    ctx: typer.Context,
    assets: Optional[Path] = typer.Option(None, "--assets", "-a", help="Asset directory or .zip (defaults from config)"),
    prefs: Optional[Path] = typer.Option(None, "--prefs", help="Preferences file for recents (defaults from config)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose mode"),
):
    """
    memedocs - browse bundled image assets as a read-only document tree.

    Lists, searches and streams documents, and remembers which ones
    were opened recently.
    """
    ctx.obj = {"assets": assets, "prefs": prefs}
    cli_config = load_config().cli
    _set_color(cli_config.color)
    if verbose or cli_config.verbose:
        logger.setLevel(logging.DEBUG)


def _set_color(enabled: bool) -> None:
    """Turn colored output on or off; NO_COLOR in the environment always wins."""
    no_color = not enabled or bool(os.environ.get("NO_COLOR"))
    console.no_color = no_color
    error_console.no_color = no_color


def _open_bridge(ctx: typer.Context) -> DocumentsBridge:
    """Build the bridge from config, applying command-line overrides."""
    config = load_config()
    options = ctx.obj or {}
    if options.get("assets") is not None:
        config.assets.path = str(options["assets"])
    if options.get("prefs") is not None:
        config.recents.prefs_path = str(options["prefs"])
    bridge = DocumentsBridge.from_config(config)
    ctx.call_on_close(bridge.close)
    return bridge


def _format_time(millis: Optional[int]) -> str:
    if millis is None:
        return ""
    return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M")


def _print_documents(title: str, documents: List[DocumentMetadata], output_format: str) -> None:
    if output_format == "json":
        typer.echo(json.dumps([doc.to_dict() for doc in documents], indent=2))
        return

    table = Table(title=title)
    table.add_column("Name", style="green")
    table.add_column("Kind", style="magenta")
    table.add_column("MIME Type", style="blue")
    table.add_column("Opened", style="dim")
    table.add_column("ID", style="cyan")

    for doc in documents:
        name = f"{doc.display_name}/" if doc.is_directory else doc.display_name
        table.add_row(
            escape(name),
            doc.kind.value,
            doc.mime_type,
            _format_time(doc.last_modified),
            escape(doc.document_id),
        )

    console.print(table)
    console.print(f"\n[dim]{len(documents)} document(s)[/dim]")


@app.command()
def about():
    """Display information about memedocs."""
    console.print("[bold cyan]memedocs - Asset Document Browser[/bold cyan]")
    console.print("")
    console.print("Serves a folder or zip of images as a read-only document tree:")
    console.print("  • Directories inferred from asset names")
    console.print("  • Case-insensitive name search")
    console.print("  • Streaming content delivery")
    console.print("  • Persistent list of recently opened documents")
    console.print("")
    console.print("[bold]Commands:[/bold]")
    console.print("  memedocs roots                List roots")
    console.print("  memedocs ls [ID]              List a directory")
    console.print("  memedocs info <ID>            Show document metadata")
    console.print("  memedocs cat <ID>             Stream document bytes")
    console.print("  memedocs search <query>       Search by name")
    console.print("  memedocs recents              Recently opened documents")
    console.print("  memedocs serve                Start the HTTP server")
    console.print("  memedocs config               View or edit configuration")


@app.command()
@handle_bridge_errors
def roots(
    ctx: typer.Context,
    output_format: str = typer.Option("table", "--format", "-f", help="Output format (table, json)"),
):
    """List the browsable roots."""
    bridge = _open_bridge(ctx)
    root_list = bridge.list_roots()

    if output_format == "json":
        typer.echo(json.dumps([root.to_dict() for root in root_list], indent=2))
        return

    table = Table(title="Roots")
    table.add_column("Root ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Document ID", style="blue")
    table.add_column("MIME Types", style="magenta")
    table.add_column("Features", style="dim")

    for root in root_list:
        features = [
            name for name, enabled in (
                ("recents", root.supports_recents),
                ("search", root.supports_search),
                ("local", root.local_only),
            ) if enabled
        ]
        table.add_row(escape(root.root_id), escape(root.title), escape(root.document_id),
                      ", ".join(root.mime_types), ", ".join(features))

    console.print(table)


@app.command(name="ls")
@handle_bridge_errors
def list_documents(
    ctx: typer.Context,
    parent_id: Optional[str] = typer.Argument(None, help="Directory to list (default: root)"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format (table, json)"),
):
    """
    List the children of a directory.

    Examples:
        memedocs ls
        memedocs ls Memes/Cats
    """
    bridge = _open_bridge(ctx)
    if parent_id is None:
        parent_id = bridge.root_id
    _print_documents(escape(parent_id or "/"), bridge.list_children(parent_id), output_format)


@app.command()
@handle_bridge_errors
def info(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document to describe"),
):
    """Show metadata for a document."""
    bridge = _open_bridge(ctx)
    doc = bridge.get_document(document_id)
    typer.echo(json.dumps(doc.to_dict(), indent=2))


@app.command()
@handle_bridge_errors
def cat(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document to stream"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout"),
):
    """
    Stream a document's bytes to stdout or a file.

    Opening a document adds it to the recents list.

    Examples:
        memedocs cat "Memes/Cats/Grumpy Cat.jpg" -o cat.jpg
    """
    bridge = _open_bridge(ctx)

    with bridge.open_content(document_id) as handle:
        if output is not None:
            with open(output, "wb") as f:
                shutil.copyfileobj(handle, f)
        else:
            for chunk in handle.iter_chunks():
                sys.stdout.buffer.write(chunk)
            sys.stdout.buffer.flush()

    handle.transfer.join()
    if handle.transfer.error is not None:
        console.print(f"[bold red]Error:[/bold red] {handle.transfer.error}")
        raise typer.Exit(code=1)

    if output is not None:
        console.print(f"[green]Wrote {handle.transfer.bytes_copied} bytes to {output}[/green]")


@app.command()
@handle_bridge_errors
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to look for in document names"),
    root_id: Optional[str] = typer.Option(None, "--root", "-r", help="Root to search (default: configured root)"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum number of results (defaults from config)"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format (table, json)"),
):
    """
    Search documents by name.

    Matches files whose name contains the query, ignoring case.

    Examples:
        memedocs search cat
        memedocs search "good boy" --limit 5
    """
    bridge = _open_bridge(ctx)
    if root_id is None:
        root_id = bridge.root_id
    if limit is None:
        limit = load_config().cli.search_limit or None

    results = bridge.search(root_id, query, limit=limit)
    if not results and output_format != "json":
        console.print(f"[yellow]No results found for: {escape(query)}[/yellow]")
        return
    _print_documents(f"Search Results: '{escape(query)}'", results, output_format)


@app.command()
@handle_bridge_errors
def recents(
    ctx: typer.Context,
    root_id: Optional[str] = typer.Option(None, "--root", "-r", help="Root (default: configured root)"),
    clear: bool = typer.Option(False, "--clear", help="Forget all recent documents"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format (table, json)"),
):
    """List recently opened documents, most recent first."""
    bridge = _open_bridge(ctx)
    if clear:
        if not bridge.recents.clear():
            console.print("[bold red]Error:[/bold red] Failed to clear recents")
            raise typer.Exit(code=1)
        console.print("[green]Recents cleared[/green]")
        return

    if root_id is None:
        root_id = bridge.root_id
    _print_documents("Recent Documents", bridge.list_recents(root_id), output_format)


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Host to bind to (defaults from config)"),
    port: Optional[int] = typer.Option(None, "--port", help="Port to bind to (defaults from config)"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
):
    """
    Start the HTTP server exposing the document tree.

    Examples:
        memedocs --assets ./assets serve --port 8080
    """
    config = load_config()
    server_host = host if host is not None else config.server.host
    server_port = port if port is not None else config.server.port

    try:
        import uvicorn
    except ImportError:
        console.print("[red]Error: uvicorn is not installed[/red]")
        console.print("[yellow]Install with: pip install uvicorn[/yellow]")
        raise typer.Exit(code=1)

    from .server import create_app

    try:
        bridge = _open_bridge(ctx)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Serving {bridge.title} at http://{server_host}:{server_port}[/green]")
    uvicorn.run(create_app(bridge), host=server_host, port=server_port, reload=reload)


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    init: bool = typer.Option(False, "--init", help="Initialize config file with defaults"),
    set_assets_path: Optional[str] = typer.Option(None, "--assets-path", help="Set asset directory or .zip"),
    set_root_id: Optional[str] = typer.Option(None, "--root-id", help="Set root document id"),
    set_title: Optional[str] = typer.Option(None, "--title", help="Set root title"),
    set_prefs_path: Optional[str] = typer.Option(None, "--prefs-path", help="Set preferences file for recents"),
    set_capacity: Optional[int] = typer.Option(None, "--recents-capacity", help="Set maximum number of recents"),
    set_chunk_size: Optional[int] = typer.Option(None, "--chunk-size", help="Set streaming chunk size in bytes"),
    set_server_host: Optional[str] = typer.Option(None, "--server-host", help="Set web server host"),
    set_server_port: Optional[int] = typer.Option(None, "--server-port", help="Set web server port"),
    set_search_limit: Optional[int] = typer.Option(None, "--search-limit", help="Set default search result limit"),
    set_verbose: Optional[bool] = typer.Option(None, "--cli-verbose/--no-cli-verbose", help="Enable verbose output by default"),
    set_color: Optional[bool] = typer.Option(None, "--cli-color/--no-cli-color", help="Enable colored output by default"),
):
    """
    View or edit memedocs configuration.

    Configuration is stored at ~/.config/memedocs/config.json (or ~/.memedocs/config.json).

    Examples:
        memedocs config --show
        memedocs config --assets-path ~/memes.zip --title "My Memes"
    """
    from .config import ensure_config_exists, get_config_path, update_config

    if init:
        config_path = ensure_config_exists()
        console.print(f"[green]Configuration initialized at {config_path}[/green]")
        return

    has_settings = any([
        set_assets_path, set_root_id is not None, set_title, set_prefs_path,
        set_capacity, set_chunk_size, set_server_host, set_server_port,
        set_search_limit, set_verbose is not None, set_color is not None,
    ])

    if show or not has_settings:
        current = load_config()
        console.print(f"\n[bold]memedocs Configuration[/bold]")
        console.print(f"[dim]Location: {get_config_path()}[/dim]\n")
        typer.echo(json.dumps(current.to_dict(), indent=2))
        return

    update_config(
        assets_path=set_assets_path,
        root_id=set_root_id,
        title=set_title,
        prefs_path=set_prefs_path,
        recents_capacity=set_capacity,
        chunk_size=set_chunk_size,
        server_host=set_server_host,
        server_port=set_server_port,
        cli_verbose=set_verbose,
        cli_color=set_color,
        cli_search_limit=set_search_limit,
    )
    console.print(f"[green]Configuration saved to {get_config_path()}[/green]")


if __name__ == "__main__":
    app()
