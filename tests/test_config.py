"""Tests for user settings."""

import json

import pytest
from pydantic import ValidationError

from reclaimer.config import Settings, load_settings, save_settings
from reclaimer.scanner import DuProbe, PowerShellProbe


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.use_native_probe is True
        assert settings.probe_timeout > 0
        assert settings.targets_file is None

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            Settings(probe_timeout=0)

    def test_build_prober_uses_native_probe(self):
        prober = Settings(probe_timeout=12).build_prober("linux")
        assert isinstance(prober.native_probe, DuProbe)
        assert prober.native_probe.timeout == 12

    def test_build_prober_on_windows(self):
        assert isinstance(Settings().build_prober("windows").native_probe, PowerShellProbe)

    def test_build_prober_without_native_probe(self):
        assert Settings(use_native_probe=False).build_prober("macos").native_probe is None


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_settings(tmp_path / "config.json") == Settings()

    def test_reads_values(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"use_native_probe": False, "targets_file": "~/t.yaml"}))

        settings = load_settings(path)
        assert settings.use_native_probe is False
        assert settings.targets_file == "~/t.yaml"

    def test_invalid_json_gives_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{oops")

        assert load_settings(path) == Settings()

    def test_invalid_values_give_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"probe_timeout": -3}))

        assert load_settings(path) == Settings()


class TestSaveSettings:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        settings = Settings(use_native_probe=False, probe_timeout=30)

        assert save_settings(settings, path) is True
        assert load_settings(path) == settings

    def test_unwritable_location(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")

        assert save_settings(Settings(), blocker / "config.json") is False
