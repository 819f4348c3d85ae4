"""CLI for codesync."""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from .config import load_sync_config
from .core import ChangeSet
from .errors import SyncError
from .store import FileSnapshotStore
from .synchronizer import FileSynchronizer
from .utils import canonical_root


app = typer.Typer(help="""\
Detect which files in a source tree changed since the last indexing pass.
Snapshots are content-fingerprinted and persisted per root, so each check
reports only what was added, modified or removed since the previous one.""")

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _make_store(root: Path, cache_dir: Optional[Path]) -> FileSnapshotStore:
    if cache_dir is not None:
        return FileSnapshotStore(cache_dir)
    return FileSnapshotStore(load_sync_config(root).cache_dir)


def _print_changes(changes: ChangeSet, limit: int) -> None:
    """Print grouped changes, truncating long groups."""
    groups = [
        ("Added", "[green]+[/green]", changes.added),
        ("Modified", "[yellow]M[/yellow]", changes.modified),
        ("Removed", "[red]-[/red]", changes.removed),
    ]
    for label, icon, paths in groups:
        if not paths:
            continue
        console.print(f"[bold]{label}:[/bold]")
        for path in paths[:limit]:
            console.print(f"  {icon} {path}")
        if len(paths) > limit:
            console.print(f"  [dim]... and {len(paths) - limit} more[/dim]")
        console.print()


@app.command()
def check(
    root: Path = typer.Argument(Path("."), help="Directory to check"),
    ignore: Optional[List[str]] = typer.Option(None, "--ignore", "-i", help="Extra ignore pattern (repeatable)"),
    cache_dir: Optional[Path] = typer.Option(None, help="Snapshot directory (default: platform cache)"),
    limit: int = typer.Option(50, help="Maximum paths to list per group"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Scan ROOT, report changes since the last check and save the new snapshot.

    Examples:
        codesync check                 # Check the current directory
        codesync check src -i '*.log'  # Extra ignore pattern
    """
    _configure_logging(verbose)
    resolved = canonical_root(root)
    store = _make_store(resolved, cache_dir)

    try:
        sync = FileSynchronizer(resolved, ignore_patterns=ignore or [], store=store)
        sync.initialize()
        changes = sync.check_for_changes()
    except SyncError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[bold]{resolved}[/bold]\n")
    if not changes.has_changes:
        console.print("[green]✓[/green] No changes")
        return

    _print_changes(changes, limit)
    console.print(changes.summary())


@app.command()
def reset(
    root: Path = typer.Argument(Path("."), help="Directory whose snapshot to delete"),
    cache_dir: Optional[Path] = typer.Option(None, help="Snapshot directory (default: platform cache)"),
):
    """Delete the saved snapshot so the next check reports every file as added."""
    resolved = canonical_root(root)
    store = _make_store(resolved, cache_dir)

    try:
        FileSynchronizer.delete_snapshot(resolved, store=store)
    except SyncError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Snapshot for {resolved} deleted")


@app.command()
def where(
    root: Path = typer.Argument(Path("."), help="Directory to locate"),
    cache_dir: Optional[Path] = typer.Option(None, help="Snapshot directory (default: platform cache)"),
):
    """Show the storage key and snapshot file for ROOT."""
    resolved = canonical_root(root)
    store = _make_store(resolved, cache_dir)
    path = store.path_for(resolved)

    console.print(f"[bold]Root:[/bold]     {resolved}")
    console.print(f"[bold]Key:[/bold]      {store.locate(resolved)}")
    console.print(f"[bold]Snapshot:[/bold] {path}")
    if not path.exists():
        console.print("[dim]No snapshot saved yet[/dim]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
