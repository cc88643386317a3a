"""Tests for data models."""

import pytest
from pydantic import ValidationError

from reclaimer.models import (
    Bucket,
    CleanupTarget,
    GroupResult,
    ItemKind,
    PlatformTargets,
    ScannedItem,
    StatsSnapshot,
    TargetGroup,
    TreeNode,
    format_size,
)


class TestFormatSize:
    def test_bytes(self):
        assert format_size(500) == "500.00 B"

    def test_kilobytes(self):
        assert format_size(2048) == "2.00 KB"

    def test_megabytes(self):
        assert format_size(5 * 1024 * 1024) == "5.00 MB"

    def test_gigabytes(self):
        assert format_size(int(2.5 * 1024**3)) == "2.50 GB"

    def test_caps_at_terabytes(self):
        assert format_size(3 * 1024**5) == "3072.00 TB"

    def test_zero(self):
        assert format_size(0) == "0.00 B"


class TestCleanupTarget:
    def test_accepts_type_alias(self):
        target = CleanupTarget.model_validate({"name": "Cache", "path": "~/c", "type": "folders"})
        assert target.kind == ItemKind.FOLDER_GROUP

    def test_accepts_field_name(self):
        target = CleanupTarget(name="Log", path="~/x.log", kind=ItemKind.FILE)
        assert target.kind == ItemKind.FILE

    def test_rejects_unknown_kind(self):
        with pytest.raises(ValidationError):
            CleanupTarget.model_validate({"name": "x", "path": "/x", "type": "volume"})

    def test_is_frozen(self):
        target = CleanupTarget(name="Log", path="~/x.log", kind=ItemKind.FILE)
        with pytest.raises(ValidationError):
            target.name = "other"


class TestTargetGroup:
    def test_accepts_camel_case_keys(self):
        group = TargetGroup.model_validate(
            {"groupName": "Xcode", "groupImage": "xcode", "items": []}
        )
        assert group.group_name == "Xcode"
        assert group.group_image == "xcode"

    def test_image_is_optional(self):
        assert TargetGroup(group_name="G").group_image == ""


class TestPlatformTargets:
    def test_for_platform(self):
        targets = PlatformTargets(linux=[TargetGroup(group_name="G")])
        assert [g.group_name for g in targets.for_platform("linux")] == ["G"]
        assert targets.for_platform("macos") == []

    def test_unknown_platform_is_empty(self):
        assert PlatformTargets().for_platform("plan9") == []

    def test_accepts_list_suffixed_keys(self):
        targets = PlatformTargets.model_validate({"windowsList": [{"groupName": "W"}]})
        assert targets.windows[0].group_name == "W"


class TestGroupResult:
    def test_total_size(self):
        group = GroupResult(
            group_name="G",
            items=[
                ScannedItem(name="a", path="/a", size=100, kind=ItemKind.FOLDER),
                ScannedItem(name="b", path="/b", size=24, kind=ItemKind.FILE),
            ],
        )
        assert group.total_size == 124

    def test_empty_total(self):
        assert GroupResult(group_name="G").total_size == 0


class TestTreeNode:
    def test_visible_children_skip_deleted(self):
        gone = TreeNode(name="gone", path="/r/gone", size=1, is_deleted=True)
        kept = TreeNode(name="kept", path="/r/kept", size=2)
        root = TreeNode(name="r", path="/r", size=3, children=[gone, kept])

        assert root.visible_children == [kept]

    def test_size_human(self):
        assert TreeNode(name="r", path="/r", size=1024).size_human == "1.00 KB"

    def test_rejects_negative_size(self):
        with pytest.raises(ValidationError):
            TreeNode(name="r", path="/r", size=-1)


class TestSnapshots:
    def test_bucket_without_path(self):
        bucket = Bucket(label="Others", size=10)
        assert bucket.path is None
        assert bucket.size_human == "10.00 B"

    def test_stats_defaults(self):
        stats = StatsSnapshot()
        assert stats.total_cleaned == 0
        assert stats.items_deleted == 0
        assert stats.total_cleaned_human == "0.00 B"
