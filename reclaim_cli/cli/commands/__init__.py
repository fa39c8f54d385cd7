"""
CLI Commands.

Organized by resource. Task commands and the dashboard live at the top
level; event commands form the "events" group.
"""

from reclaim_cli.cli.commands import dashboard, tasks
from reclaim_cli.cli.commands.events import app as events_app

__all__ = [
    "dashboard",
    "events_app",
    "tasks",
]
