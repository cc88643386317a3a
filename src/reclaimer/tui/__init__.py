"""Textual browser for custom-mode scans."""

from reclaimer.tui.app import ReclaimerApp, run_tui

__all__ = ["ReclaimerApp", "run_tui"]
