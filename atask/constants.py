"""
Constants for atask.

Status, priority and type values found in task and project frontmatter,
plus defaults shared by the config system and the CLI.
"""

# Task statuses
TASK_STATUS_OPEN = "open"
TASK_STATUS_DONE = "done"
TASK_STATUS_PAUSED = "paused"
TASK_STATUS_DELEGATED = "delegated"
TASK_STATUS_DROPPED = "dropped"

# Project statuses
PROJECT_STATUS_ACTIVE = "active"

# Priority levels
PRIORITY_P1 = "p1"
PRIORITY_P2 = "p2"
PRIORITY_P3 = "p3"

# File types
TYPE_TASK = "task"
TYPE_PROJECT = "project"

# Sorting
SORT_KEYS = ("priority", "due", "status", "id", "created", "modified")
DEFAULT_SORT = "modified"

# Display limits
MAX_TITLE_DISPLAY = 50
