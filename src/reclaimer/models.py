"""Data models for reclaimer."""

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def format_size(size_bytes: int) -> str:
    """Format bytes to a human-readable string (binary units)."""
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(size_bytes)
    unit_index = 0

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    return f"{size:.2f} {units[unit_index]}"


class ItemKind(str, Enum):
    """How a cleanup target is probed."""

    FILE = "file"  # A single file
    FOLDER = "folder"  # One folder, sized as a whole
    FOLDER_GROUP = "folders"  # A folder whose subfolders are sized one by one


# =============================================================================
# Configuration input (read-only)
# =============================================================================


class CleanupTarget(BaseModel):
    """A declared cleanup target."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Human-readable name")
    path: str = Field(..., description="Declared path (supports ~ and env vars)")
    kind: ItemKind = Field(
        ...,
        validation_alias=AliasChoices("kind", "type"),
        description="How the target is probed",
    )


class TargetGroup(BaseModel):
    """A named group of cleanup targets."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    group_name: str = Field(..., validation_alias=AliasChoices("group_name", "groupName"))
    group_image: str = Field(
        "",
        validation_alias=AliasChoices("group_image", "groupImage"),
        description="Display hint, opaque to the engine",
    )
    items: list[CleanupTarget] = Field(default_factory=list)


class PlatformTargets(BaseModel):
    """Cleanup target groups keyed by host platform."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    windows: list[TargetGroup] = Field(
        default_factory=list, validation_alias=AliasChoices("windows", "windowsList")
    )
    linux: list[TargetGroup] = Field(
        default_factory=list, validation_alias=AliasChoices("linux", "linuxList")
    )
    macos: list[TargetGroup] = Field(
        default_factory=list, validation_alias=AliasChoices("macos", "macosList")
    )
    ios: list[TargetGroup] = Field(
        default_factory=list, validation_alias=AliasChoices("ios", "iosList")
    )
    android: list[TargetGroup] = Field(
        default_factory=list, validation_alias=AliasChoices("android", "androidList")
    )

    def for_platform(self, platform_key: str) -> list[TargetGroup]:
        """Groups for a platform key, empty for unknown keys."""
        if platform_key not in type(self).model_fields:
            return []
        return getattr(self, platform_key)


# =============================================================================
# Simple-mode results
# =============================================================================


class SubFolderEntry(BaseModel):
    """One subfolder of a folder-group target."""

    name: str
    path: str = Field(..., description="Absolute path")
    size: int = Field(0, ge=0)

    @property
    def size_human(self) -> str:
        return format_size(self.size)


class ScannedItem(BaseModel):
    """A cleanup target that was found on disk."""

    name: str
    path: str = Field(..., description="Declared path, as configured")
    size: int = Field(0, ge=0)
    kind: ItemKind
    sub_items: list[SubFolderEntry] = Field(
        default_factory=list,
        description="Only populated for folder groups",
    )

    @property
    def size_human(self) -> str:
        return format_size(self.size)


class GroupResult(BaseModel):
    """Scanned items of one target group."""

    group_name: str
    group_image: str = ""
    items: list[ScannedItem] = Field(default_factory=list)

    @property
    def total_size(self) -> int:
        """Combined size of every item in the group."""
        return sum(item.size for item in self.items)


class GroupDeletion(BaseModel):
    """Outcome of a simple-mode deletion."""

    groups: list[GroupResult] = Field(default_factory=list)
    bytes_freed: int = Field(0, ge=0)
    success: bool = True


# =============================================================================
# Custom-mode tree
# =============================================================================


class TreeNode(BaseModel):
    """One directory of a custom-mode size tree.

    ``size`` is the independently measured total of the directory. After
    construction it only changes through deletion deltas, never by
    resumming ``children``. Nodes hold no reference to their parent.
    """

    name: str
    path: str = Field(..., description="Absolute path")
    size: int = Field(0, ge=0)
    is_directory: bool = True
    children: list["TreeNode"] = Field(default_factory=list)
    is_deleted: bool = False

    @property
    def size_human(self) -> str:
        return format_size(self.size)

    @property
    def visible_children(self) -> list["TreeNode"]:
        """Children that have not been deleted."""
        return [child for child in self.children if not child.is_deleted]


class Bucket(BaseModel):
    """One slice of a node's size breakdown."""

    label: str
    size: int = Field(0, ge=0)
    path: Optional[str] = Field(None, description="None for the aggregated bucket")

    @property
    def size_human(self) -> str:
        return format_size(self.size)


class StatsSnapshot(BaseModel):
    """Cumulative cleanup statistics."""

    total_cleaned: int = Field(0, ge=0, description="Bytes freed across sessions")
    items_deleted: int = Field(0, ge=0, description="Successful deletions")

    @property
    def total_cleaned_human(self) -> str:
        return format_size(self.total_cleaned)
