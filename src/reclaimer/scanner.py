"""Path expansion, directory listing and size probing for reclaimer."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Optional, Protocol

log = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 300.0  # seconds


def expand_path(path: str | Path) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expanduser(os.path.expandvars(str(path))))


def list_subdirectories(path: str | Path) -> list[Path]:
    """
    List the immediate child directories of a path.

    Symbolic links are never returned, so callers cannot be led into
    cycles or outside the scanned tree. The OS order is kept as is.

    Args:
        path: Directory to list (may contain ~)

    Returns:
        Child directory paths, or an empty list if path is missing,
        not a directory or unreadable
    """
    directory = expand_path(path)
    subdirectories: list[Path] = []

    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        subdirectories.append(Path(entry.path))
                except OSError:
                    continue
    except OSError:
        return []

    return subdirectories


def get_directory_size_walk(path: str | Path) -> int:
    """
    Portable size calculation by walking the tree with os.scandir.

    Only regular files that are not symbolic links are counted. Entries
    that fail (permission denied, removed while walking) are skipped.

    Args:
        path: File or directory to size

    Returns:
        Total size in bytes
    """
    root = expand_path(path)

    if root.is_symlink():
        return 0
    if root.is_file():
        return root.stat().st_size
    if not root.is_dir():
        return 0

    total_size = 0
    pending = [root]

    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total_size += entry.stat(follow_symlinks=False).st_size
                        elif entry.is_dir(follow_symlinks=False):
                            pending.append(Path(entry.path))
                    except OSError:
                        continue
        except OSError:
            log.debug("Skipping unreadable directory %s", current)
            continue

    return total_size


# =============================================================================
# Native size probes
# =============================================================================


class NativeProbe(Protocol):
    """A fast, OS-specific directory size probe."""

    def probe(self, path: Path) -> Optional[int]:
        """Return the size in bytes, or None if the probe did not work."""
        ...


class DuProbe:
    """Size probe backed by ``du`` (Linux, macOS, BSD)."""

    def __init__(self, timeout: float = DEFAULT_PROBE_TIMEOUT):
        self.timeout = timeout

    def probe(self, path: Path) -> Optional[int]:
        # -s: summarize, -k: 1024-byte blocks, -P: never follow symlinks
        try:
            result = subprocess.run(
                ["du", "-skP", str(path)],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            log.debug("du failed for %s: %s", path, e)
            return None

        if result.returncode != 0:
            log.debug("du exited with %d for %s", result.returncode, path)
            return None

        # Output format: "12345\t/path/to/dir"
        lines = result.stdout.splitlines()
        if not lines:
            return None
        fields = lines[0].split()
        if not fields:
            return None
        try:
            size_kb = int(fields[0])
        except ValueError:
            return None

        if size_kb < 0:
            return None
        return size_kb * 1024


class PowerShellProbe:
    """Size probe backed by PowerShell (Windows)."""

    def __init__(self, timeout: float = DEFAULT_PROBE_TIMEOUT):
        self.timeout = timeout

    def probe(self, path: Path) -> Optional[int]:
        # Get-ChildItem does not follow reparse points unless -FollowSymlink is given
        literal = str(path).replace("'", "''")
        command = (
            f"(Get-ChildItem -LiteralPath '{literal}' -Recurse -Force "
            "-ErrorAction SilentlyContinue | Measure-Object -Property Length -Sum).Sum"
        )
        try:
            result = subprocess.run(
                ["powershell.exe", "-NoProfile", "-Command", command],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            log.debug("PowerShell failed for %s: %s", path, e)
            return None

        if result.returncode != 0:
            return None

        output = result.stdout.strip()
        if not output:
            # Measure-Object prints nothing for an empty folder
            return 0
        try:
            size = int(output.splitlines()[0].strip())
        except ValueError:
            return None

        return size if size >= 0 else None


def select_native_probe(
    platform_key: str,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> Optional[NativeProbe]:
    """
    Pick the native size probe for a host platform.

    Args:
        platform_key: Host platform key (see reclaimer.host.detect_platform)
        timeout: Seconds before a probe subprocess is abandoned

    Returns:
        A probe, or None when the platform has no native probe
    """
    if platform_key in ("linux", "macos"):
        return DuProbe(timeout=timeout)
    if platform_key == "windows":
        return PowerShellProbe(timeout=timeout)
    return None


class SizeProber:
    """
    Computes byte sizes of files and directories.

    Tries the native probe first and falls back to walking the tree.
    Never raises: every failure is reported as a size of 0.
    """

    def __init__(self, native_probe: Optional[NativeProbe] = None):
        self.native_probe = native_probe

    def size(self, path: str | Path) -> int:
        """Total size of a file or directory in bytes."""
        try:
            expanded = expand_path(path)
            if not os.path.lexists(expanded):
                return 0

            if self.native_probe is not None and not expanded.is_symlink():
                native_size = self.native_probe.probe(expanded)
                if native_size is not None and native_size >= 0:
                    log.debug("Sized %s natively: %d bytes", expanded, native_size)
                    return native_size
                log.debug("Native probe unavailable for %s, walking instead", expanded)

            return get_directory_size_walk(expanded)
        except Exception:
            log.warning("Could not size %s", path, exc_info=True)
            return 0

    def file_size(self, path: str | Path) -> int:
        """Byte length of a single file."""
        try:
            return expand_path(path).stat().st_size
        except OSError:
            return 0
