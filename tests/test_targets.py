"""Tests for cleanup target definitions."""

import pytest

from reclaimer.models import ItemKind
from reclaimer.targets import DEFAULT_TARGETS, TargetsError, load_targets, targets_for_platform


class TestDefaultTargets:
    @pytest.mark.parametrize("platform_key", ["macos", "linux", "windows"])
    def test_desktop_platforms_have_groups(self, platform_key):
        groups = targets_for_platform(DEFAULT_TARGETS, platform_key)
        assert groups
        for group in groups:
            assert group.group_name
            assert group.items

    def test_mobile_platforms_have_none(self):
        assert targets_for_platform(DEFAULT_TARGETS, "ios") == []
        assert targets_for_platform(DEFAULT_TARGETS, "android") == []

    def test_group_names_are_unique_per_platform(self):
        for platform_key in ("macos", "linux", "windows"):
            names = [g.group_name for g in targets_for_platform(DEFAULT_TARGETS, platform_key)]
            assert len(names) == len(set(names))

    def test_simulator_devices_are_a_folder_group(self):
        xcode = targets_for_platform(DEFAULT_TARGETS, "macos")[0]
        devices = next(t for t in xcode.items if t.name == "Simulator Devices")
        assert devices.kind == ItemKind.FOLDER_GROUP

    def test_linux_has_file_target(self):
        kinds = {
            target.kind
            for group in targets_for_platform(DEFAULT_TARGETS, "linux")
            for target in group.items
        }
        assert ItemKind.FILE in kinds


class TestLoadTargets:
    def test_loads_yaml(self, tmp_path):
        targets_file = tmp_path / "targets.yaml"
        targets_file.write_text(
            "linux:\n"
            "  - group_name: Caches\n"
            "    group_image: cache\n"
            "    items:\n"
            "      - {name: Build, type: folder, path: ~/build}\n"
            "      - {name: Devices, type: folders, path: ~/devices}\n"
        )

        targets = load_targets(targets_file)
        groups = targets.for_platform("linux")

        assert [g.group_name for g in groups] == ["Caches"]
        assert [t.kind for t in groups[0].items] == [ItemKind.FOLDER, ItemKind.FOLDER_GROUP]
        assert targets.for_platform("macos") == []

    def test_accepts_camel_case_keys(self, tmp_path):
        targets_file = tmp_path / "targets.yaml"
        targets_file.write_text(
            "macosList:\n"
            "  - groupName: Xcode\n"
            "    groupImage: xcode\n"
            "    items:\n"
            "      - {name: Derived Data, type: folder, path: ~/dd}\n"
        )

        groups = load_targets(targets_file).for_platform("macos")
        assert groups[0].group_image == "xcode"

    def test_empty_file_has_no_targets(self, tmp_path):
        targets_file = tmp_path / "targets.yaml"
        targets_file.write_text("")

        assert load_targets(targets_file).for_platform("linux") == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(TargetsError, match="Cannot read"):
            load_targets(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        targets_file = tmp_path / "targets.yaml"
        targets_file.write_text("linux: [unclosed\n")

        with pytest.raises(TargetsError, match="Invalid YAML"):
            load_targets(targets_file)

    def test_top_level_must_be_mapping(self, tmp_path):
        targets_file = tmp_path / "targets.yaml"
        targets_file.write_text("- just\n- a list\n")

        with pytest.raises(TargetsError, match="mapping"):
            load_targets(targets_file)

    def test_invalid_target_kind(self, tmp_path):
        targets_file = tmp_path / "targets.yaml"
        targets_file.write_text(
            "linux:\n"
            "  - group_name: G\n"
            "    items:\n"
            "      - {name: X, type: volume, path: /x}\n"
        )

        with pytest.raises(TargetsError, match="Invalid targets"):
            load_targets(targets_file)
