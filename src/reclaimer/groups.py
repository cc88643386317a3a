"""Simple-mode scanning and deletion of declared cleanup targets."""

import logging
from pathlib import Path
from typing import Callable, Optional

from reclaimer.cleaner import remove_path
from reclaimer.models import (
    CleanupTarget,
    GroupDeletion,
    GroupResult,
    ItemKind,
    ScannedItem,
    SubFolderEntry,
    TargetGroup,
)
from reclaimer.scanner import SizeProber, expand_path, list_subdirectories

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]
Remover = Callable[[str], bool]


class ScanCancelled(Exception):
    """Raised when a simple-mode scan is cancelled between items."""


def scan_target(target: CleanupTarget, prober: SizeProber) -> Optional[ScannedItem]:
    """
    Probe a single cleanup target.

    Args:
        target: Declared target
        prober: SizeProber used for folders

    Returns:
        ScannedItem, or None if the target does not exist
    """
    expanded = expand_path(target.path)
    if not expanded.exists():
        return None

    if target.kind == ItemKind.FILE:
        return ScannedItem(
            name=target.name,
            path=target.path,
            size=prober.file_size(expanded),
            kind=ItemKind.FILE,
        )

    if target.kind == ItemKind.FOLDER:
        return ScannedItem(
            name=target.name,
            path=target.path,
            size=prober.size(expanded),
            kind=ItemKind.FOLDER,
        )

    sub_items = [
        SubFolderEntry(
            name=subfolder.name,
            path=str(subfolder.absolute()),
            size=prober.size(subfolder),
        )
        for subfolder in sorted(list_subdirectories(expanded), key=lambda p: p.name.lower())
    ]
    return ScannedItem(
        name=target.name,
        path=target.path,
        size=sum(sub.size for sub in sub_items),
        kind=ItemKind.FOLDER_GROUP,
        sub_items=sub_items,
    )


def scan_groups(
    groups: list[TargetGroup],
    token=None,
    progress: Optional[ProgressCallback] = None,
    prober: Optional[SizeProber] = None,
) -> list[GroupResult]:
    """
    Scan every target of every group, one at a time, in declared order.

    Missing targets are left out, and so are groups where nothing was
    found. A target that fails to probe is logged and left out.

    Args:
        groups: Target groups for the host platform
        token: Optional CancellationToken, checked before every item
        progress: Optional callback(declared_path) fired before each item
        prober: SizeProber to use (defaults to a walking prober)

    Returns:
        GroupResults in declared order

    Raises:
        ScanCancelled: If the token was cancelled before the scan finished
    """
    prober = prober or SizeProber()
    total_items = sum(len(group.items) for group in groups)
    log.info("Scanning %d groups with %d targets", len(groups), total_items)

    results: list[GroupResult] = []

    for group in groups:
        items: list[ScannedItem] = []

        for target in group.items:
            if token is not None and token.cancelled:
                raise ScanCancelled()

            if progress:
                progress(target.path)

            try:
                scanned = scan_target(target, prober)
            except Exception as e:
                log.warning("Error scanning %s: %s", target.path, e)
                continue

            if scanned is None:
                log.debug("Not found: %s", target.path)
                continue

            log.debug("Found %s: %d bytes", scanned.name, scanned.size)
            items.append(scanned)

        if items:
            results.append(
                GroupResult(group_name=group.group_name, group_image=group.group_image, items=items)
            )

    log.info(
        "Scan completed: %d items in %d groups",
        sum(len(result.items) for result in results),
        len(results),
    )
    return results


def _matches(item: ScannedItem, path: str) -> bool:
    return item.path == path or str(expand_path(item.path)) == path


def delete_group(
    groups: list[GroupResult],
    group_name: str,
    remover: Remover = remove_path,
) -> GroupDeletion:
    """
    Delete every item of a group from disk.

    Folder groups have each subfolder removed, then the containing folder.
    Only bytes of entries whose removal succeeded are counted; the loose
    content of a folder-group container was never measured and is not.

    Args:
        groups: Current scan results (not modified)
        group_name: Name of the group to delete
        remover: Callable that removes a path and reports success

    Returns:
        GroupDeletion with the group excluded from the results
    """
    group = next((g for g in groups if g.group_name == group_name), None)
    if group is None:
        return GroupDeletion(groups=list(groups), bytes_freed=0, success=False)

    bytes_freed = 0
    failures = 0

    for item in group.items:
        if item.kind == ItemKind.FOLDER_GROUP:
            for sub in item.sub_items:
                if remover(sub.path):
                    bytes_freed += sub.size
                else:
                    failures += 1
            if expand_path(item.path).exists() and not remover(item.path):
                failures += 1
        elif remover(item.path):
            bytes_freed += item.size
        else:
            failures += 1

    if failures:
        log.warning("%d entries of %s could not be deleted", failures, group_name)

    return GroupDeletion(
        groups=[g for g in groups if g.group_name != group_name],
        bytes_freed=bytes_freed,
        success=failures == 0,
    )


def delete_item(
    groups: list[GroupResult],
    path: str,
    remover: Remover = remove_path,
) -> GroupDeletion:
    """
    Delete a single item or folder-group subfolder.

    Args:
        groups: Current scan results (not modified)
        path: Declared path of an item, or absolute path of a subfolder
        remover: Callable that removes a path and reports success

    Returns:
        GroupDeletion with updated results. On failure the results are
        returned unchanged.
    """
    deleted_size: Optional[int] = None
    for group in groups:
        for item in group.items:
            if _matches(item, path):
                deleted_size = item.size
                break
            sub = next((s for s in item.sub_items if s.path == path), None)
            if sub is not None:
                deleted_size = sub.size
                break
        if deleted_size is not None:
            break

    if deleted_size is None:
        log.warning("No scanned item matches %s", path)
        return GroupDeletion(groups=list(groups), bytes_freed=0, success=False)

    if not remover(path):
        return GroupDeletion(groups=list(groups), bytes_freed=0, success=False)

    updated_groups: list[GroupResult] = []
    for group in groups:
        updated_items: list[ScannedItem] = []
        for item in group.items:
            if _matches(item, path):
                continue
            if item.kind == ItemKind.FOLDER_GROUP:
                remaining = [s for s in item.sub_items if s.path != path]
                if len(remaining) == len(item.sub_items):
                    updated_items.append(item)
                elif remaining:
                    updated_items.append(
                        item.model_copy(
                            update={
                                "sub_items": remaining,
                                "size": sum(s.size for s in remaining),
                            }
                        )
                    )
                continue
            updated_items.append(item)

        if updated_items:
            updated_groups.append(group.model_copy(update={"items": updated_items}))

    return GroupDeletion(groups=updated_groups, bytes_freed=deleted_size, success=True)
