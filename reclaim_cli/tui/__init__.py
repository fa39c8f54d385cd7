"""
Terminal UI.

Full-screen task dashboard built on Textual.
"""

from reclaim_cli.tui.dashboard import DashboardApp, DashboardState, run_dashboard

__all__ = ["DashboardApp", "DashboardState", "run_dashboard"]
