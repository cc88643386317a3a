"""Tests for cleanup statistics."""

import json

from reclaimer.stats import StatsStore


class TestStatsStore:
    def test_missing_file_is_zero(self, tmp_path):
        snapshot = StatsStore(tmp_path / "stats.json").snapshot()
        assert snapshot.total_cleaned == 0
        assert snapshot.items_deleted == 0

    def test_add_cleaned_space_accumulates(self, tmp_path):
        store = StatsStore(tmp_path / "state" / "stats.json")

        store.add_cleaned_space(2048)
        store.add_cleaned_space(1024)

        snapshot = store.snapshot()
        assert snapshot.total_cleaned == 3072
        assert snapshot.items_deleted == 2

    def test_persists_between_instances(self, tmp_path):
        path = tmp_path / "stats.json"
        StatsStore(path).add_cleaned_space(300)

        assert StatsStore(path).snapshot().total_cleaned == 300
        assert json.loads(path.read_text())["items_deleted"] == 1

    def test_reset(self, tmp_path):
        store = StatsStore(tmp_path / "stats.json")
        store.add_cleaned_space(500)

        store.reset_stats()

        snapshot = store.snapshot()
        assert snapshot.total_cleaned == 0
        assert snapshot.items_deleted == 0

    def test_corrupt_file_is_zero(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text("{not json")

        assert StatsStore(path).snapshot().total_cleaned == 0

    def test_corrupt_file_is_overwritten(self, tmp_path):
        path = tmp_path / "stats.json"
        path.write_text('{"total_cleaned": -5}')
        store = StatsStore(path)

        store.add_cleaned_space(10)
        assert store.snapshot().total_cleaned == 10

    def test_expands_tilde(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        store = StatsStore("~/.reclaimer/stats.json")

        store.add_cleaned_space(1)
        assert (tmp_path / ".reclaimer" / "stats.json").exists()
