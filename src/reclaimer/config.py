"""User settings for reclaimer."""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from reclaimer.scanner import DEFAULT_PROBE_TIMEOUT, SizeProber, expand_path, select_native_probe
from reclaimer.stats import DEFAULT_STATS_FILE

log = logging.getLogger(__name__)

CONFIG_DIR = expand_path("~/.reclaimer")
CONFIG_FILE = CONFIG_DIR / "config.json"


class Settings(BaseModel):
    """Settings read from ~/.reclaimer/config.json."""

    use_native_probe: bool = Field(
        True, description="Size folders with du / PowerShell before walking them"
    )
    probe_timeout: float = Field(
        DEFAULT_PROBE_TIMEOUT, gt=0, description="Seconds before a native probe is abandoned"
    )
    targets_file: Optional[str] = Field(
        None, description="YAML file replacing the built-in cleanup targets"
    )
    stats_file: str = Field(DEFAULT_STATS_FILE, description="Where cleanup totals are kept")

    def build_prober(self, platform_key: str) -> SizeProber:
        """Create the size prober for this host."""
        native_probe = (
            select_native_probe(platform_key, timeout=self.probe_timeout)
            if self.use_native_probe
            else None
        )
        return SizeProber(native_probe=native_probe)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    config_file = path or CONFIG_FILE
    if not config_file.exists():
        return Settings()

    try:
        with open(config_file) as f:
            return Settings.model_validate(json.load(f))
    except (json.JSONDecodeError, OSError, ValidationError) as e:
        log.warning("Ignoring invalid config %s: %s", config_file, e)
        return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> bool:
    """Save settings to disk."""
    config_file = path or CONFIG_FILE
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w") as f:
            json.dump(settings.model_dump(), f, indent=2)
        return True
    except OSError as e:
        log.warning("Could not save config %s: %s", config_file, e)
        return False
