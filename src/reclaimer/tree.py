"""Custom-mode size tree: building, cascading deletion and bucketing.

The tree has one node per directory. Each node's size is measured
independently by the size prober, so a parent is never the sum of its
children. Deletion subtracts the removed size from every ancestor instead
of rescanning.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from reclaimer.cleaner import remove_path
from reclaimer.models import Bucket, TreeNode
from reclaimer.scanner import SizeProber, expand_path, list_subdirectories

log = logging.getLogger(__name__)

BUCKET_LIMIT = 10
OTHERS_LABEL = "Others"

ProgressCallback = Callable[[str], None]


def build_tree(
    root: str | Path,
    token=None,
    progress: Optional[ProgressCallback] = None,
    prober: Optional[SizeProber] = None,
) -> TreeNode:
    """
    Build the size tree of a directory, depth first.

    Cancellation is checked before descending into each child. A
    cancelled build returns the partial tree built so far; callers must
    not treat it as complete.

    Args:
        root: Directory to scan (may contain ~)
        token: Optional CancellationToken
        progress: Optional callback(path) fired before each directory is sized
        prober: SizeProber to use (defaults to a walking prober)

    Returns:
        The root TreeNode
    """
    prober = prober or SizeProber()
    root_path = expand_path(root).absolute()

    def _build(directory: Path) -> TreeNode:
        if progress:
            progress(str(directory))

        node = TreeNode(
            name=directory.name or str(directory),
            path=str(directory),
            size=prober.size(directory),
            is_directory=True,
        )

        subdirectories = sorted(list_subdirectories(directory), key=lambda p: p.name.lower())
        log.debug("Found %d subdirectories in %s", len(subdirectories), directory)

        for subdirectory in subdirectories:
            if token is not None and token.cancelled:
                log.info("Tree scan cancelled at %s", directory)
                break
            try:
                node.children.append(_build(subdirectory))
            except OSError as e:
                log.warning("Error accessing %s: %s", subdirectory, e)

        return node

    return _build(root_path)


def find_ancestors(root: TreeNode, target: TreeNode) -> Optional[list[TreeNode]]:
    """
    Find the chain of nodes from root down to target's parent.

    Nodes are matched by identity, not equality.

    Returns:
        Ancestors ordered root first (empty when target is root),
        or None if target is not in the tree
    """
    if root is target:
        return []

    for child in root.children:
        chain = find_ancestors(child, target)
        if chain is not None:
            return [root] + chain

    return None


def delete_node(
    root: TreeNode,
    node: TreeNode,
    remover: Callable[[str], bool] = remove_path,
) -> bool:
    """
    Delete a node's directory and propagate its size to every ancestor.

    The tree is only changed after the filesystem removal succeeded.

    Args:
        root: Root of the tree that owns node
        node: Node to delete
        remover: Callable that removes a path and reports success

    Returns:
        True if the directory was removed and the tree updated

    Raises:
        ValueError: If node is not part of the tree under root
    """
    ancestors = find_ancestors(root, node)
    if ancestors is None:
        raise ValueError(f"{node.path} is not part of the tree rooted at {root.path}")

    if not remover(node.path):
        return False

    delta = node.size
    node.is_deleted = True
    node.size = 0

    for ancestor in ancestors:
        if ancestor.size < delta:
            log.warning(
                "Size of %s would drop below zero (%d - %d), clamping",
                ancestor.path,
                ancestor.size,
                delta,
            )
            ancestor.size = 0
        else:
            ancestor.size -= delta

    return True


def top_buckets(node: TreeNode, limit: int = BUCKET_LIMIT) -> list[Bucket]:
    """
    Reduce a node's children to the largest few plus an "Others" bucket.

    Args:
        node: Node whose children are bucketed
        limit: Number of children kept as individual buckets

    Returns:
        Buckets ordered by size descending; ties keep discovery order
    """
    children = sorted(node.visible_children, key=lambda child: child.size, reverse=True)

    buckets = [
        Bucket(label=child.name, size=child.size, path=child.path) for child in children[:limit]
    ]

    others = children[limit:]
    if others:
        buckets.append(Bucket(label=OTHERS_LABEL, size=sum(child.size for child in others)))

    return buckets
