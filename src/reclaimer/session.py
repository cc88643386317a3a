"""Scan sessions: observable state, background work and cancellation.

A session owns the result of one scan (a tree or a list of groups) and a
single background worker. Commands are issued from the caller's thread
and return futures; state changes are published through Observable
containers that presentation code subscribes to.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, Protocol, TypeVar, Union

from reclaimer.cleaner import remove_path
from reclaimer.groups import ScanCancelled
from reclaimer.groups import delete_group as delete_group_entries
from reclaimer.groups import delete_item as delete_item_entries
from reclaimer.groups import scan_groups
from reclaimer.models import Bucket, GroupDeletion, GroupResult, TargetGroup, TreeNode
from reclaimer.scanner import SizeProber, expand_path
from reclaimer.tree import build_tree, delete_node, top_buckets

log = logging.getLogger(__name__)

T = TypeVar("T")


class SessionBusyError(RuntimeError):
    """Raised when a command conflicts with work already in flight."""


class CancellationToken:
    """Cooperative cancellation flag shared with a background task."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class Observable(Generic[T]):
    """A value that notifies subscribers whenever it is set."""

    def __init__(self, value: T):
        self._value = value
        self._subscribers: list[Callable[[T], None]] = []
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(value)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe


# =============================================================================
# Scan states
# =============================================================================


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Scanning:
    current_path: str


@dataclass(frozen=True)
class TreeCompleted:
    root: TreeNode


@dataclass(frozen=True)
class GroupsCompleted:
    groups: list[GroupResult] = field(default_factory=list)


@dataclass(frozen=True)
class ScanError:
    message: str


CustomScanState = Union[Idle, Scanning, TreeCompleted]
SimpleScanState = Union[Idle, Scanning, GroupsCompleted, ScanError]


class StatsSink(Protocol):
    def add_cleaned_space(self, bytes_freed: int) -> None: ...


class _Session:
    """Shared plumbing: worker, cancellation and the busy flag."""

    def __init__(
        self,
        stats: Optional[StatsSink] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.stats = stats
        self.busy: Observable[bool] = Observable(False)
        self._executor = executor or ThreadPoolExecutor(max_workers=1)
        self._token: Optional[CancellationToken] = None
        self._lock = threading.RLock()
        self._pending = 0
        self._deleting = False

    @property
    def deleting(self) -> bool:
        """True from the moment a deletion is submitted until it finishes."""
        return self._deleting

    def _submit(self, task: Callable, *args, deleting: bool = False) -> Future:
        # Caller holds self._lock; busy covers queued work, not just running work
        self._pending += 1
        self._deleting = self._deleting or deleting
        if self._pending == 1:
            self.busy.set(True)
        try:
            return self._executor.submit(self._run_task, task, deleting, *args)
        except RuntimeError:
            self._finish_task(deleting)
            raise

    def _run_task(self, task: Callable, deleting: bool, *args):
        try:
            return task(*args)
        finally:
            with self._lock:
                self._finish_task(deleting)

    def _finish_task(self, deleting: bool) -> None:
        self._pending -= 1
        if deleting:
            self._deleting = False
        if self._pending == 0:
            self.busy.set(False)

    def _submit_scan(self, task: Callable, *args) -> Future:
        """Cancel any running scan and queue a new one; task receives the token last."""
        with self._lock:
            if self._deleting:
                raise SessionBusyError("A deletion is in progress")
            if self._token is not None:
                self._token.cancel()
            self._token = CancellationToken()
            return self._submit(task, *args, self._token)

    def _submit_delete(self, task: Callable, *args) -> Future:
        with self._lock:
            if self._pending:
                raise SessionBusyError("A scan or deletion is in progress")
            return self._submit(task, *args, deleting=True)

    def _is_current(self, token: CancellationToken) -> bool:
        return self._token is token and not token.cancelled

    def _cancel_current(self) -> None:
        with self._lock:
            if self._token is not None:
                self._token.cancel()

    def _record_freed(self, bytes_freed: int) -> None:
        if bytes_freed > 0 and self.stats is not None:
            self.stats.add_cleaned_space(bytes_freed)

    def close(self) -> None:
        """Cancel any running scan and stop the worker."""
        self._cancel_current()
        self._executor.shutdown(wait=True)


class CustomScanSession(_Session):
    """Session for building and pruning a directory size tree."""

    def __init__(
        self,
        prober: Optional[SizeProber] = None,
        stats: Optional[StatsSink] = None,
        remover: Callable[[str], bool] = remove_path,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        super().__init__(stats=stats, executor=executor)
        self.prober = prober or SizeProber()
        self.remover = remover
        self.state: Observable[CustomScanState] = Observable(Idle())
        self.selected_node: Observable[Optional[TreeNode]] = Observable(None)
        self.selected_path: Observable[str] = Observable("")
        self.expanded: Observable[frozenset[str]] = Observable(frozenset())

    @property
    def root(self) -> Optional[TreeNode]:
        state = self.state.value
        return state.root if isinstance(state, TreeCompleted) else None

    def set_selected_path(self, path: str) -> None:
        self.selected_path.set(path)

    def start_scan(self, root_path: str) -> Future:
        """Start building the tree of root_path, cancelling any running scan."""
        return self._submit_scan(self._run_scan, root_path)

    def _run_scan(self, root_path: str, token: CancellationToken) -> Optional[TreeNode]:
        directory = expand_path(root_path).absolute()
        log.info("Scanning directory %s", directory)

        if not directory.is_dir():
            log.info("%s does not exist or is not a directory", directory)
            with self._lock:
                if self._is_current(token):
                    self.state.set(Idle())
            return None

        def report(path: str) -> None:
            with self._lock:
                if self._is_current(token):
                    self.state.set(Scanning(path))

        try:
            root = build_tree(directory, token=token, progress=report, prober=self.prober)
        except Exception:
            log.exception("Error while scanning %s", directory)
            with self._lock:
                if self._is_current(token):
                    self.state.set(Idle())
            return None

        with self._lock:
            if not self._is_current(token):
                log.info("Discarding cancelled scan of %s", directory)
                return None
            log.info("Scan completed, total size %s", root.size_human)
            self.state.set(TreeCompleted(root))
            self.selected_node.set(root)
            self.expanded.set(frozenset({root.path}))
        return root

    def cancel_scan(self) -> None:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self.state.set(Idle())
            self.selected_node.set(None)
            self.expanded.set(frozenset())

    def select_node(self, node: TreeNode) -> None:
        self.selected_node.set(node)

    def toggle_expansion(self, node_path: str) -> None:
        expanded = set(self.expanded.value)
        if node_path in expanded:
            expanded.remove(node_path)
        else:
            expanded.add(node_path)
        self.expanded.set(frozenset(expanded))

    def is_expanded(self, node_path: str) -> bool:
        return node_path in self.expanded.value

    def find_node(self, path: str) -> Optional[TreeNode]:
        """Look up a node of the completed tree by absolute path."""
        root = self.root
        if root is None:
            return None
        pending = [root]
        while pending:
            node = pending.pop()
            if node.path == path:
                return node
            pending.extend(node.children)
        return None

    def top_buckets(self, node: TreeNode) -> list[Bucket]:
        return top_buckets(node)

    def delete_node(self, node: TreeNode) -> Future:
        """Delete a node in the background; the future resolves to success."""
        return self._submit_delete(self._run_delete, node)

    def _run_delete(self, node: TreeNode) -> bool:
        state = self.state.value
        if not isinstance(state, TreeCompleted):
            return False
        root = state.root

        deleted_size = node.size
        try:
            success = delete_node(root, node, remover=self.remover)
        except ValueError as e:
            log.warning("Not deleting %s: %s", node.path, e)
            return False

        if success:
            self._record_freed(deleted_size)
            with self._lock:
                # Cancelled meanwhile: the tree stays discarded
                if self.state.value is state:
                    # Same tree, new state object: observers redraw the sizes
                    self.state.set(TreeCompleted(root))
        return success


class SimpleScanSession(_Session):
    """Session for scanning and deleting declared cleanup targets."""

    def __init__(
        self,
        targets_loader: Callable[[], list[TargetGroup]],
        prober: Optional[SizeProber] = None,
        stats: Optional[StatsSink] = None,
        remover: Callable[[str], bool] = remove_path,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        super().__init__(stats=stats, executor=executor)
        self.targets_loader = targets_loader
        self.prober = prober or SizeProber()
        self.remover = remover
        self.state: Observable[SimpleScanState] = Observable(Idle())

    @property
    def groups(self) -> Optional[list[GroupResult]]:
        state = self.state.value
        return state.groups if isinstance(state, GroupsCompleted) else None

    def start_scan(self) -> Future:
        """Start scanning the configured targets, cancelling any running scan."""
        return self._submit_scan(self._run_scan)

    def _run_scan(self, token: CancellationToken) -> Optional[list[GroupResult]]:
        def report(path: str) -> None:
            with self._lock:
                if self._is_current(token):
                    self.state.set(Scanning(path))

        try:
            groups = self.targets_loader()
            results = scan_groups(groups, token=token, progress=report, prober=self.prober)
        except ScanCancelled:
            log.info("Scan cancelled")
            return None
        except Exception as e:
            log.exception("Error during scan")
            with self._lock:
                if self._is_current(token):
                    self.state.set(ScanError(str(e) or type(e).__name__))
            return None

        with self._lock:
            if not self._is_current(token):
                return None
            self.state.set(GroupsCompleted(results))
        return results

    def cancel_scan(self) -> None:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self.state.set(Idle())

    def delete_group(self, group_name: str) -> Future:
        """Delete every item of a group; the future resolves to a GroupDeletion."""
        return self._submit_delete(
            self._run_delete, lambda groups: delete_group_entries(groups, group_name, self.remover)
        )

    def delete_item(self, path: str) -> Future:
        """Delete one item or subfolder; the future resolves to a GroupDeletion."""
        return self._submit_delete(
            self._run_delete, lambda groups: delete_item_entries(groups, path, self.remover)
        )

    def _run_delete(
        self, operation: Callable[[list[GroupResult]], GroupDeletion]
    ) -> Optional[GroupDeletion]:
        state = self.state.value
        if not isinstance(state, GroupsCompleted):
            return None

        outcome = operation(state.groups)
        self._record_freed(outcome.bytes_freed)
        with self._lock:
            # Cancelled meanwhile: the results stay discarded
            if self.state.value is state:
                self.state.set(GroupsCompleted(outcome.groups))
        return outcome
