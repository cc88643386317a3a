"""Cleanup target definitions for reclaimer.

Targets are grouped by platform, then by group. A target file in YAML can
replace the built-in table::

    macos:
      - group_name: Xcode
        group_image: xcode
        items:
          - {name: Derived Data, type: folder, path: ~/Library/Developer/Xcode/DerivedData}
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from reclaimer.models import CleanupTarget, ItemKind, PlatformTargets, TargetGroup
from reclaimer.scanner import expand_path


class TargetsError(Exception):
    """Raised when a cleanup target file cannot be used."""


def _group(name: str, image: str, *items: tuple[str, ItemKind, str]) -> TargetGroup:
    return TargetGroup(
        group_name=name,
        group_image=image,
        items=[CleanupTarget(name=n, kind=kind, path=path) for n, kind, path in items],
    )


FILE = ItemKind.FILE
FOLDER = ItemKind.FOLDER
FOLDERS = ItemKind.FOLDER_GROUP

DEFAULT_TARGETS = PlatformTargets(
    macos=[
        _group(
            "Xcode",
            "xcode",
            ("Derived Data", FOLDER, "~/Library/Developer/Xcode/DerivedData"),
            ("Archives", FOLDERS, "~/Library/Developer/Xcode/Archives"),
            ("iOS Device Support", FOLDERS, "~/Library/Developer/Xcode/iOS DeviceSupport"),
            ("Simulator Devices", FOLDERS, "~/Library/Developer/CoreSimulator/Devices"),
            ("Simulator Caches", FOLDER, "~/Library/Developer/CoreSimulator/Caches"),
        ),
        _group(
            "Android",
            "android",
            ("Gradle Caches", FOLDER, "~/.gradle/caches"),
            ("Android Emulators", FOLDERS, "~/.android/avd"),
            ("Android SDK System Images", FOLDERS, "~/Library/Android/sdk/system-images"),
        ),
        _group(
            "Package Managers",
            "packages",
            ("Homebrew Cache", FOLDER, "~/Library/Caches/Homebrew"),
            ("CocoaPods Cache", FOLDER, "~/Library/Caches/CocoaPods"),
            ("npm Cache", FOLDER, "~/.npm/_cacache"),
            ("Yarn Cache", FOLDER, "~/Library/Caches/Yarn"),
            ("pip Cache", FOLDER, "~/Library/Caches/pip"),
        ),
        _group(
            "System",
            "system",
            ("User Caches", FOLDERS, "~/Library/Caches"),
            ("User Logs", FOLDER, "~/Library/Logs"),
            ("Trash", FOLDER, "~/.Trash"),
        ),
    ],
    linux=[
        _group(
            "Development",
            "development",
            ("Gradle Caches", FOLDER, "~/.gradle/caches"),
            ("Android Emulators", FOLDERS, "~/.android/avd"),
            ("Maven Repository", FOLDER, "~/.m2/repository"),
            ("Cargo Registry", FOLDER, "~/.cargo/registry"),
        ),
        _group(
            "Package Managers",
            "packages",
            ("npm Cache", FOLDER, "~/.npm/_cacache"),
            ("Yarn Cache", FOLDER, "~/.cache/yarn"),
            ("pip Cache", FOLDER, "~/.cache/pip"),
        ),
        _group(
            "System",
            "system",
            ("User Caches", FOLDERS, "~/.cache"),
            ("Thumbnails", FOLDER, "~/.cache/thumbnails"),
            ("Trash", FOLDER, "~/.local/share/Trash"),
            ("X Session Errors", FILE, "~/.xsession-errors"),
        ),
    ],
    windows=[
        _group(
            "Development",
            "development",
            ("Gradle Caches", FOLDER, "~/.gradle/caches"),
            ("Android Emulators", FOLDERS, "~/.android/avd"),
            ("npm Cache", FOLDER, "%LOCALAPPDATA%/npm-cache"),
            ("pip Cache", FOLDER, "%LOCALAPPDATA%/pip/Cache"),
        ),
        _group(
            "System",
            "system",
            ("Temporary Files", FOLDERS, "%TEMP%"),
            ("Crash Dumps", FOLDER, "%LOCALAPPDATA%/CrashDumps"),
        ),
    ],
)


def load_targets(path: str | Path) -> PlatformTargets:
    """
    Load cleanup targets from a YAML file.

    Args:
        path: YAML file (may contain ~)

    Returns:
        PlatformTargets parsed from the file

    Raises:
        TargetsError: If the file is missing, unreadable or invalid
    """
    targets_file = expand_path(path)

    try:
        with open(targets_file) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise TargetsError(f"Cannot read targets file {targets_file}: {e}") from e
    except yaml.YAMLError as e:
        raise TargetsError(f"Invalid YAML in {targets_file}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TargetsError(f"{targets_file} must contain a mapping of platforms")

    try:
        return PlatformTargets.model_validate(data)
    except ValidationError as e:
        raise TargetsError(f"Invalid targets in {targets_file}: {e}") from e


def targets_for_platform(targets: PlatformTargets, platform_key: str) -> list[TargetGroup]:
    """Target groups for a host platform key."""
    return targets.for_platform(platform_key)
