"""Interactive folder-size browser for reclaimer."""

from typing import Any, Callable, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Label, Static, Tree

from reclaimer.config import load_settings
from reclaimer.host import detect_platform, resolve_display_name, select_path_opener
from reclaimer.models import TreeNode, format_size
from reclaimer.session import CustomScanSession, Idle, Scanning, SessionBusyError, TreeCompleted
from reclaimer.stats import StatsStore


class SessionUpdate(Message):
    """A session value to apply on the app thread."""

    def __init__(self, handler: Callable[[Any], None], value: Any):
        super().__init__()
        self.handler = handler
        self.value = value


class ConfirmDeleteScreen(ModalScreen[bool]):
    """Asks before a folder is permanently deleted."""

    BINDINGS = [
        Binding("y", "confirm", "Delete"),
        Binding("n", "cancel", "Keep"),
        Binding("escape", "cancel", "Keep", show=False),
    ]

    def __init__(self, node: TreeNode):
        super().__init__()
        self.node = node

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(f"[bold]Delete {self.node.path}?[/bold]")
            yield Label(f"{self.node.size_human} will be removed permanently.")
            yield Label("[dim]y: delete   n: keep[/dim]")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class ReclaimerApp(App):
    """Browse a directory's size tree and delete what is not needed."""

    TITLE = "reclaimer"
    SUB_TITLE = "Folder sizes"

    CSS = """
    #folders { width: 3fr; }
    #buckets { width: 2fr; padding: 0 1; }
    #status { height: 1; padding: 0 1; background: $panel; }
    #confirm-dialog {
        width: 60; height: auto; padding: 1 2;
        border: thick $error; background: $surface;
    }
    ConfirmDeleteScreen { align: center middle; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "rescan", "Rescan"),
        Binding("x", "delete", "Delete"),
        Binding("o", "open", "Open"),
        Binding("escape", "cancel_scan", "Cancel scan"),
    ]

    def __init__(self, root_path: str, session: Optional[CustomScanSession] = None):
        super().__init__()
        self.root_path = root_path
        self.platform_key = detect_platform()
        if session is None:
            settings = load_settings()
            session = CustomScanSession(
                prober=settings.build_prober(self.platform_key),
                stats=StatsStore(settings.stats_file),
            )
        self.session = session
        self._unsubscribe: list = []

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            yield Tree("Scanning…", id="folders")
            yield Static("", id="buckets")
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        self._unsubscribe = [
            self.session.state.subscribe(lambda state: self._dispatch(self._on_state, state)),
            self.session.busy.subscribe(lambda busy: self._dispatch(self._on_busy, busy)),
        ]
        self.action_rescan()

    def on_unmount(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self.session.close()

    def _dispatch(self, handler, value) -> None:
        # Never blocks: the worker may publish while holding the session lock
        self.post_message(SessionUpdate(handler, value))

    def on_session_update(self, message: SessionUpdate) -> None:
        message.handler(message.value)

    # -------------------------------------------------------------------------
    # Session updates
    # -------------------------------------------------------------------------

    def _on_state(self, state) -> None:
        status = self.query_one("#status", Static)
        if isinstance(state, Scanning):
            status.update(f"Sizing {state.current_path}")
        elif isinstance(state, TreeCompleted):
            status.update(f"{state.root.path}: {state.root.size_human}")
            tree = self.query_one("#folders", Tree)
            if tree.root.data is state.root:
                self._refresh_labels(tree.root)
            else:
                self._show_tree(state.root)
        elif isinstance(state, Idle):
            status.update("[dim]Idle[/dim]")

    def _on_busy(self, busy: bool) -> None:
        if busy and self.session.deleting:
            self.query_one("#status", Static).update("Deleting…")

    def _label(self, node: TreeNode) -> str:
        name = resolve_display_name(node.path, node.name, self.platform_key)
        return f"{name} [dim]{node.size_human}[/dim]"

    def _show_tree(self, root: TreeNode) -> None:
        tree = self.query_one("#folders", Tree)
        tree.reset(self._label(root), data=root)
        self._add_children(tree.root, root)
        tree.root.expand()
        self._show_buckets(root)

    def _add_children(self, widget_node, node: TreeNode) -> None:
        for child in node.visible_children:
            widget_node.add(self._label(child), data=child, allow_expand=bool(child.visible_children))

    def _refresh_labels(self, widget_node) -> None:
        for child in list(widget_node.children):
            if child.data is not None and child.data.is_deleted:
                child.remove()
            else:
                self._refresh_labels(child)
        if widget_node.data is not None:
            widget_node.set_label(self._label(widget_node.data))

    def _show_buckets(self, node: TreeNode) -> None:
        buckets = self.session.top_buckets(node)
        total = sum(bucket.size for bucket in buckets) or 1
        lines = [f"[bold]{node.name}[/bold]  {node.size_human}", ""]
        for bucket in buckets:
            share = bucket.size / total
            bar = "█" * int(20 * share)
            lines.append(f"{bucket.label[:24]:<24} {format_size(bucket.size):>11} [cyan]{bar}[/cyan]")
        if not buckets:
            lines.append("[dim]No subfolders[/dim]")
        self.query_one("#buckets", Static).update("\n".join(lines))

    # -------------------------------------------------------------------------
    # Tree widget events
    # -------------------------------------------------------------------------

    def on_tree_node_expanded(self, event: Tree.NodeExpanded) -> None:
        node = event.node.data
        if node is None:
            return
        if not event.node.children:
            self._add_children(event.node, node)
        if not self.session.is_expanded(node.path):
            self.session.toggle_expansion(node.path)

    def on_tree_node_collapsed(self, event: Tree.NodeCollapsed) -> None:
        node = event.node.data
        if node is not None and self.session.is_expanded(node.path):
            self.session.toggle_expansion(node.path)

    def on_tree_node_highlighted(self, event: Tree.NodeHighlighted) -> None:
        node = event.node.data
        if node is not None:
            self.session.select_node(node)
            self._show_buckets(node)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def action_rescan(self) -> None:
        try:
            self.session.start_scan(self.root_path)
        except SessionBusyError:
            self.notify("Wait for the deletion to finish", severity="warning")
            return
        self.session.set_selected_path(self.root_path)
        self.query_one("#folders", Tree).reset("Scanning…")

    def action_cancel_scan(self) -> None:
        if isinstance(self.session.state.value, Scanning):
            self.session.cancel_scan()
            self.query_one("#folders", Tree).reset("Cancelled")

    def action_open(self) -> None:
        node = self.session.selected_node.value
        if node is not None:
            select_path_opener(self.platform_key)(node.path)

    def action_delete(self) -> None:
        node = self.session.selected_node.value
        root = self.session.root
        if node is None or root is None:
            return
        if node is root:
            self.notify("The scanned folder itself cannot be deleted here", severity="warning")
            return
        if self.session.busy.value:
            return

        def on_answer(confirmed: bool | None) -> None:
            if confirmed:
                size = node.size
                try:
                    future = self.session.delete_node(node)
                except SessionBusyError:
                    self.notify("Wait for the scan to finish", severity="warning")
                    return
                future.add_done_callback(
                    lambda f: self._dispatch(self._after_delete, (node, size, f.result()))
                )

        self.push_screen(ConfirmDeleteScreen(node), on_answer)

    def _after_delete(self, outcome) -> None:
        node, size, success = outcome
        if success:
            self.notify(f"Deleted {node.name}, {format_size(size)} freed")
        else:
            self.notify(f"Could not delete {node.path}", severity="error")


def run_tui(root_path: str) -> None:
    """Run the interactive browser on root_path."""
    ReclaimerApp(root_path).run()
