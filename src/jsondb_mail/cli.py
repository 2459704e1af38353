"""Command-line interface for the collection store and the mail relay.

Usage:
    jsondb-mail serve-db --port 3002
    jsondb-mail serve-mail --port 3001
    jsondb-mail collections
    jsondb-mail stats
    jsondb-mail backup productividad
    jsondb-mail backups productividad

Every command reads ``config.ini`` (or ``--config``) through
:func:`jsondb_mail.config_loader.load_settings`; ``--db-path`` overrides the
configured store directory.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import click
from rich.console import Console
from rich.table import Table

from .config_loader import Settings, load_settings
from .errors import JsonDbMailError
from .logger import configure_logging
from .store import CollectionStore

console = Console()
err_console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    console.print_json(json.dumps(data, indent=2, default=str))


def get_store(settings: Settings) -> CollectionStore:
    """Create and initialize the store configured in ``settings``."""
    store = CollectionStore(settings.store.db_path)
    store.initialize()
    return store


@click.group()
@click.version_option(package_name="jsondb-mail")
@click.option("--config", "config_path", default=None, help="Path to config.ini.")
@click.option("--db-path", default=None, help="Override the collection store directory.")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], db_path: Optional[str]) -> None:
    """jsondb-mail: flat-file JSON store and SMTP relay services."""
    settings = load_settings(config_path)
    if db_path:
        settings.store.db_path = db_path
    configure_logging(settings.log_level)
    ctx.obj = settings


@main.command("serve-db")
@click.option("--host", "-h", default=None, help="Host to bind to.")
@click.option("--port", "-p", type=int, default=None, help="Port to listen on (default: 3002).")
@click.pass_obj
def serve_db(settings: Settings, host: Optional[str], port: Optional[int]) -> None:
    """Run the collection store HTTP service."""
    import uvicorn

    from .server import build_db_app

    host = host or settings.store.host
    port = port or settings.store.port
    console.print(f"[bold]Collection store[/bold] at http://{host}:{port} (path: {settings.store.db_path})")
    uvicorn.run(build_db_app(settings), host=host, port=port, log_config=None)


@main.command("serve-mail")
@click.option("--host", "-h", default=None, help="Host to bind to.")
@click.option("--port", "-p", type=int, default=None, help="Port to listen on (default: 3001).")
@click.pass_obj
def serve_mail(settings: Settings, host: Optional[str], port: Optional[int]) -> None:
    """Run the SMTP relay HTTP service."""
    import uvicorn

    from .server import build_mail_app

    host = host or settings.relay.host
    port = port or settings.relay.port
    console.print(
        f"[bold]Mail relay[/bold] at http://{host}:{port} "
        f"(provider: {settings.relay.smtp_host}:{settings.relay.smtp_port})"
    )
    uvicorn.run(build_mail_app(settings), host=host, port=port, log_config=None)


@main.command("collections")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_obj
def list_collections(settings: Settings, as_json: bool) -> None:
    """List collection files with size and record count."""
    try:
        collections = get_store(settings).list_collections()
    except (JsonDbMailError, OSError) as exc:
        print_error(str(exc))
        raise SystemExit(1)

    if as_json:
        print_json(collections)
        return
    if not collections:
        console.print("[dim]No collections found.[/dim]")
        return

    table = Table(title="Collections")
    table.add_column("Name", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Records", justify="right")
    for item in collections:
        table.add_row(item["name"], str(item["size"]), item["modified"], str(item["records"]))
    console.print(table)


@main.command("stats")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_obj
def show_stats(settings: Settings, as_json: bool) -> None:
    """Show aggregate store statistics."""
    try:
        stats = get_store(settings).stats()
    except (JsonDbMailError, OSError) as exc:
        print_error(str(exc))
        raise SystemExit(1)

    if as_json:
        print_json(stats)
        return
    console.print(f"[bold]Path:[/bold]          {stats['path']}")
    console.print(f"[bold]Collections:[/bold]   {stats['collections']}")
    console.print(f"[bold]Total size:[/bold]    {stats['totalSize']}")
    console.print(f"[bold]Total records:[/bold] {stats['totalRecords']}")


@main.command("backup")
@click.argument("collection")
@click.pass_obj
def backup_collection(settings: Settings, collection: str) -> None:
    """Create a backup of COLLECTION (no-op when it does not exist)."""
    try:
        target = get_store(settings).backup(collection)
    except (JsonDbMailError, OSError) as exc:
        print_error(str(exc))
        raise SystemExit(1)

    if target is None:
        console.print(f"[yellow]Collection '{collection}' does not exist, nothing to back up.[/yellow]")
        return
    print_success(f"Backup created: {target.name}")


@main.command("backups")
@click.argument("collection", required=False)
@click.pass_obj
def list_backups(settings: Settings, collection: Optional[str]) -> None:
    """List existing backups, newest first."""
    try:
        store = get_store(settings)
        if collection is not None:
            store.validate_name(collection)
        files = [(path, path.stat().st_size) for path in store.backups.list_backups(collection)]
    except (JsonDbMailError, OSError) as exc:
        print_error(str(exc))
        raise SystemExit(1)
    if not files:
        console.print("[dim]No backups found.[/dim]")
        return

    table = Table(title="Backups")
    table.add_column("File", style="cyan")
    table.add_column("Size", justify="right")
    for path, size in files:
        table.add_row(path.name, str(size))
    console.print(table)


if __name__ == "__main__":
    main()
