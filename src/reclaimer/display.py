"""Rich terminal display for reclaimer."""

from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.tree import Tree

from reclaimer.config import Settings
from reclaimer.host import resolve_display_name
from reclaimer.models import (
    Bucket,
    GroupDeletion,
    GroupResult,
    ItemKind,
    StatsSnapshot,
    TargetGroup,
    TreeNode,
    format_size,
)
from reclaimer.tree import top_buckets

console = Console()

KIND_LABELS = {
    ItemKind.FILE: "file",
    ItemKind.FOLDER: "folder",
    ItemKind.FOLDER_GROUP: "folders",
}


def size_style(size_bytes: int) -> str:
    """Color for a size: red from 1 GiB, yellow from 100 MiB."""
    if size_bytes >= 1024**3:
        return "red"
    elif size_bytes >= 100 * 1024**2:
        return "yellow"
    return "green"


def styled_size(size_bytes: int) -> str:
    color = size_style(size_bytes)
    return f"[{color}]{format_size(size_bytes)}[/{color}]"


def show_targets(groups: list[TargetGroup], platform_key: str) -> None:
    """Display configured cleanup targets."""
    if not groups:
        console.print(f"[yellow]No cleanup targets for platform '{platform_key or 'unknown'}'[/yellow]")
        return

    console.print(f"[bold]Cleanup Targets ({platform_key})[/bold]\n")
    for group in groups:
        table = Table(title=group.group_name, show_header=True, header_style="bold")
        table.add_column("Name")
        table.add_column("Kind")
        table.add_column("Path")
        for target in group.items:
            table.add_row(target.name, KIND_LABELS[target.kind], target.path)
        console.print(table)
        console.print()


def show_groups(groups: list[GroupResult], platform_key: str = "") -> None:
    """Display simple-mode scan results."""
    if not groups:
        console.print("[yellow]No items found[/yellow]")
        return

    grand_total = 0
    for group in groups:
        table = Table(
            title=f"{group.group_name} - {len(group.items)} items - {format_size(group.total_size)}",
            show_header=True,
            header_style="bold",
        )
        table.add_column("Name")
        table.add_column("Size", justify="right")
        table.add_column("Path")

        for item in group.items:
            table.add_row(f"[bold]{item.name}[/bold]", styled_size(item.size), item.path)
            for sub in item.sub_items:
                name = resolve_display_name(sub.path, sub.name, platform_key)
                table.add_row(f"  [dim]└[/dim] {name}", styled_size(sub.size), f"[dim]{sub.path}[/dim]")

        console.print(table)
        console.print()
        grand_total += group.total_size

    console.print(
        Panel(
            f"[bold]Space to reclaim:[/bold] {format_size(grand_total)}",
            title="Summary",
            border_style="blue",
        )
    )


def show_group_deletion(outcome: GroupDeletion, label: str) -> None:
    """Display the result of a simple-mode deletion."""
    if outcome.success:
        console.print(f"  [green]✓[/green] {label}: {format_size(outcome.bytes_freed)} freed")
    elif outcome.bytes_freed:
        console.print(
            f"  [yellow]![/yellow] {label}: partially deleted, {format_size(outcome.bytes_freed)} freed"
        )
    else:
        console.print(f"  [red]✗[/red] {label}: could not be deleted")


def build_rich_tree(node: TreeNode, max_depth: int = 2, platform_key: str = "") -> Tree:
    """Render a size tree as a rich Tree, largest children first."""

    def _label(n: TreeNode) -> str:
        name = resolve_display_name(n.path, n.name, platform_key)
        return f"[bold]{name}[/bold] {styled_size(n.size)}"

    def _add(branch: Tree, n: TreeNode, depth: int) -> None:
        if depth >= max_depth:
            hidden = len(n.visible_children)
            if hidden:
                branch.add(f"[dim]… {hidden} more[/dim]")
            return
        for child in sorted(n.visible_children, key=lambda c: c.size, reverse=True):
            _add(branch.add(_label(child)), child, depth + 1)

    tree = Tree(_label(node), guide_style="dim")
    _add(tree, node, 0)
    return tree


def show_tree(node: TreeNode, max_depth: int = 2, platform_key: str = "") -> None:
    """Display a size tree."""
    console.print(build_rich_tree(node, max_depth=max_depth, platform_key=platform_key))


def show_buckets(node: TreeNode, buckets: list[Bucket] | None = None) -> None:
    """Display the size breakdown of a node's children."""
    buckets = top_buckets(node) if buckets is None else buckets
    if not buckets:
        console.print("[dim]No subfolders[/dim]")
        return

    total = sum(bucket.size for bucket in buckets) or 1
    bar_width = 30

    table = Table(title=f"Breakdown of {node.name}", show_header=True, header_style="bold")
    table.add_column("Folder")
    table.add_column("Size", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("")

    for bucket in buckets:
        share = bucket.size / total
        filled = int(bar_width * share)
        label = bucket.label if bucket.path else f"[dim]{bucket.label}[/dim]"
        table.add_row(
            label,
            styled_size(bucket.size),
            f"{share * 100:.0f}%",
            f"[cyan]{'█' * filled}[/cyan][dim]{'░' * (bar_width - filled)}[/dim]",
        )

    console.print(table)


def show_stats(stats: StatsSnapshot) -> None:
    """Display cumulative cleanup statistics."""
    table = Table(show_header=False, title="Cleanup Statistics")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Space freed", f"[bold green]{stats.total_cleaned_human}[/bold green]")
    table.add_row("Items deleted", str(stats.items_deleted))
    console.print(table)


def show_settings(settings: Settings, path: Path) -> None:
    """Display the active settings."""
    table = Table(show_header=True, header_style="bold", title="Settings")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        table.add_row(key, "[dim]not set[/dim]" if value is None else str(value))
    console.print(table)
    console.print(f"[dim]Config file: {path}[/dim]")


def show_scanning_progress() -> Progress:
    """Create a spinner for scans of unknown length."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def confirm_action(message: str) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message)
