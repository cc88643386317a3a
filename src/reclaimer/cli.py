"""CLI interface for reclaimer."""

import logging
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from reclaimer import __version__
from reclaimer.config import CONFIG_FILE, load_settings
from reclaimer.display import (
    confirm_action,
    console,
    show_buckets,
    show_group_deletion,
    show_groups,
    show_scanning_progress,
    show_settings,
    show_stats,
    show_targets,
    show_tree,
)
from reclaimer.host import detect_platform, select_path_opener
from reclaimer.models import TargetGroup, format_size
from reclaimer.scanner import expand_path
from reclaimer.session import (
    CustomScanSession,
    GroupsCompleted,
    Scanning,
    ScanError,
    SimpleScanSession,
    TreeCompleted,
)
from reclaimer.stats import StatsStore
from reclaimer.targets import DEFAULT_TARGETS, TargetsError, load_targets, targets_for_platform

app = typer.Typer(
    name="reclaimer",
    help="Find what eats your disk and reclaim the space",
    add_completion=False,
)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _targets_loader(
    targets_file: Optional[str], platform_key: str
) -> Callable[[], list[TargetGroup]]:
    def load() -> list[TargetGroup]:
        targets = load_targets(targets_file) if targets_file else DEFAULT_TARGETS
        return targets_for_platform(targets, platform_key)

    return load


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"reclaimer version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: int = typer.Option(
        0, "--verbose", "-V", count=True, help="Increase verbosity (-V info, -VV debug)"
    ),
) -> None:
    """reclaimer - find and remove what eats your disk."""
    _setup_logging(verbose)


@app.command()
def targets(
    platform: Optional[str] = typer.Option(
        None, "--platform", "-p", help="Platform key (windows, linux, macos, ios, android)"
    ),
    targets_file: Optional[str] = typer.Option(
        None, "--targets", "-t", help="YAML file with cleanup targets"
    ),
) -> None:
    """List the cleanup targets checked by 'simple'."""
    settings = load_settings()
    platform_key = platform or detect_platform()

    try:
        groups = _targets_loader(targets_file or settings.targets_file, platform_key)()
    except TargetsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    show_targets(groups, platform_key)


@app.command()
def simple(
    platform: Optional[str] = typer.Option(
        None, "--platform", "-p", help="Platform key (windows, linux, macos, ios, android)"
    ),
    targets_file: Optional[str] = typer.Option(
        None, "--targets", "-t", help="YAML file with cleanup targets"
    ),
    delete_group: Optional[str] = typer.Option(
        None, "--delete-group", help="Delete every item of this group after scanning"
    ),
    delete: Optional[str] = typer.Option(
        None, "--delete", help="Delete this item or subfolder path after scanning"
    ),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
) -> None:
    """Scan known space-consuming locations."""
    settings = load_settings()
    platform_key = platform or detect_platform()

    session = SimpleScanSession(
        _targets_loader(targets_file or settings.targets_file, platform_key),
        prober=settings.build_prober(platform_key),
        stats=StatsStore(settings.stats_file),
    )

    try:
        with show_scanning_progress() as progress:
            task = progress.add_task("Loading targets...", total=None)

            def update_progress(state) -> None:
                if isinstance(state, Scanning):
                    progress.update(task, description=f"Scanning {state.current_path}")

            session.state.subscribe(update_progress)
            try:
                session.start_scan().result()
            except KeyboardInterrupt:
                session.cancel_scan()
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(130)

        state = session.state.value
        if isinstance(state, ScanError):
            console.print(f"[red]Scan failed: {state.message}[/red]")
            raise typer.Exit(1)
        if not isinstance(state, GroupsCompleted):
            raise typer.Exit(1)

        show_groups(state.groups, platform_key)

        if delete_group:
            if not any(g.group_name == delete_group for g in state.groups):
                console.print(f"[red]No scanned group named '{delete_group}'[/red]")
                raise typer.Exit(1)
            if not yes and not confirm_action(f"Delete all items in '{delete_group}'?"):
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(0)
            outcome = session.delete_group(delete_group).result()
            show_group_deletion(outcome, delete_group)
            if not outcome.success:
                raise typer.Exit(1)

        if delete:
            if not yes and not confirm_action(f"Delete {delete}?"):
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(0)
            outcome = session.delete_item(delete).result()
            if outcome is None:
                raise typer.Exit(1)
            show_group_deletion(outcome, delete)
            if not outcome.success:
                raise typer.Exit(1)
    finally:
        session.close()


@app.command()
def custom(
    path: str = typer.Argument(..., help="Directory to map"),
    depth: int = typer.Option(2, "--depth", "-d", min=0, help="Tree levels to show"),
    delete: Optional[str] = typer.Option(
        None, "--delete", help="Delete this folder of the scanned tree"
    ),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
) -> None:
    """Map the size of every folder under PATH."""
    settings = load_settings()
    platform_key = detect_platform()

    session = CustomScanSession(
        prober=settings.build_prober(platform_key),
        stats=StatsStore(settings.stats_file),
    )
    session.set_selected_path(path)

    try:
        with show_scanning_progress() as progress:
            task = progress.add_task(f"Scanning {path}...", total=None)

            def update_progress(state) -> None:
                if isinstance(state, Scanning):
                    progress.update(task, description=f"Sizing {state.current_path}")

            session.state.subscribe(update_progress)
            try:
                session.start_scan(path).result()
            except KeyboardInterrupt:
                session.cancel_scan()
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(130)

        state = session.state.value
        if not isinstance(state, TreeCompleted):
            console.print(f"[red]Not a directory: {path}[/red]")
            raise typer.Exit(1)

        show_tree(state.root, max_depth=depth, platform_key=platform_key)
        console.print()
        show_buckets(state.root, session.top_buckets(state.root))

        if delete:
            node = session.find_node(str(expand_path(delete).absolute()))
            if node is None:
                console.print(f"[red]{delete} is not a folder of the scanned tree[/red]")
                raise typer.Exit(1)
            if not yes and not confirm_action(f"Delete {node.path} ({node.size_human})?"):
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(0)

            freed = node.size
            if not session.delete_node(node).result():
                console.print(f"  [red]✗[/red] {node.path}: could not be deleted")
                raise typer.Exit(1)
            console.print(f"  [green]✓[/green] {node.path}: {format_size(freed)} freed")
            console.print(f"[bold]{state.root.name}[/bold] is now {state.root.size_human}")
    finally:
        session.close()


@app.command()
def stats(
    reset: bool = typer.Option(False, "--reset", help="Reset the totals to zero"),
) -> None:
    """Show how much space has been reclaimed so far."""
    store = StatsStore(load_settings().stats_file)
    if reset:
        store.reset_stats()
        console.print("[green]Statistics reset[/green]")
    show_stats(store.snapshot())


@app.command()
def config() -> None:
    """Show configuration."""
    show_settings(load_settings(), CONFIG_FILE)


@app.command(name="open")
def open_path(
    path: str = typer.Argument(..., help="File or folder to reveal"),
) -> None:
    """Open a path in the system file manager."""
    expanded = expand_path(path)
    if not expanded.exists():
        console.print(f"[red]Path does not exist: {path}[/red]")
        raise typer.Exit(1)
    if not select_path_opener(detect_platform())(str(expanded)):
        raise typer.Exit(1)


@app.command()
def tui(
    path: str = typer.Argument("~", help="Directory to map"),
) -> None:
    """Browse the size tree interactively."""
    try:
        from reclaimer.tui import run_tui
    except ImportError:
        console.print("[red]TUI not available.[/red]")
        console.print("Install with: [bold]pip install reclaimer[tui][/bold]")
        raise typer.Exit(1)

    run_tui(path)


if __name__ == "__main__":
    app()
