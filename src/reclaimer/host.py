"""Host platform detection and desktop integration for reclaimer."""

import logging
import plistlib
import re
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional

from reclaimer.scanner import expand_path

log = logging.getLogger(__name__)

SIMULATOR_DEVICES_MARKER = "/Library/Developer/CoreSimulator/Devices/"

# Runtime identifiers that differ from the marketing name
SIMULATOR_PLATFORM_NAMES = {
    "xrOS": "visionOS",
}

_RUNTIME_PATTERN = re.compile(r"SimRuntime\.([^-]+)-(\d+)-(\d+)")


def detect_platform(system: Optional[str] = None) -> str:
    """
    Map the running host to a cleanup-target platform key.

    Args:
        system: Platform string to map (defaults to sys.platform)

    Returns:
        One of "windows", "linux", "macos", "ios", "android", or "" if unknown
    """
    system = (system or sys.platform).lower()

    if system.startswith("win") or system == "cygwin":
        return "windows"
    if system == "darwin":
        return "macos"
    if system == "ios":
        return "ios"
    if system == "android":
        return "android"
    if system.startswith("linux") or "nix" in system or "bsd" in system:
        return "linux"
    return ""


# =============================================================================
# Opening paths in the file manager
# =============================================================================

PathOpener = Callable[[str], bool]

_OPEN_COMMANDS = {
    "macos": "open",
    "windows": "explorer.exe",
    "linux": "xdg-open",
}


def select_path_opener(platform_key: str) -> PathOpener:
    """
    Build the "open in file manager" action for a platform.

    Args:
        platform_key: Host platform key

    Returns:
        Callable(path) that returns True if the file manager was launched
    """
    command = _OPEN_COMMANDS.get(platform_key)

    def open_path(path: str) -> bool:
        if command is None:
            log.warning("Opening folders is not supported on this platform")
            return False
        try:
            subprocess.Popen([command, str(expand_path(path))])
        except OSError as e:
            log.warning("Could not open %s with %s: %s", path, command, e)
            return False
        return True

    return open_path


# =============================================================================
# Friendly folder names
# =============================================================================


def parse_simulator_runtime(runtime: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """
    Split a simulator runtime identifier into platform and version.

    Example: "com.apple.CoreSimulator.SimRuntime.iOS-17-0" -> ("iOS", "17.0")
    """
    if not runtime:
        return None, None

    match = _RUNTIME_PATTERN.search(runtime)
    if not match:
        return None, None

    platform, major, minor = match.groups()
    return SIMULATOR_PLATFORM_NAMES.get(platform, platform), f"{major}.{minor}"


def resolve_simulator_name(device_path: Path) -> Optional[str]:
    """Read "<name> (<platform> <version>)" from a simulator's device.plist."""
    plist_file = device_path / "device.plist"
    if not plist_file.is_file():
        return None

    try:
        with open(plist_file, "rb") as f:
            device = plistlib.load(f)
    except (OSError, plistlib.InvalidFileException, ValueError) as e:
        log.debug("Could not read %s: %s", plist_file, e)
        return None

    if not isinstance(device, dict):
        return None

    name = device.get("name")
    platform, version = parse_simulator_runtime(device.get("runtime"))

    if name and platform and version:
        return f"{name} ({platform} {version})"
    return name or None


def resolve_display_name(path: str, default: str, platform_key: str) -> str:
    """
    Friendlier name for special folders, used only for display.

    Args:
        path: Folder path
        default: Name to fall back to
        platform_key: Host platform key

    Returns:
        Friendly name, or default
    """
    if platform_key != "macos":
        return default

    expanded = expand_path(path)
    if SIMULATOR_DEVICES_MARKER in str(expanded) + "/":
        return resolve_simulator_name(expanded) or default

    return default
