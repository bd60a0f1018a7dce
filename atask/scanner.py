"""
Record source for atask.

The scanner walks a notes directory, loads task and project files and hands
them to callers as lists. Files that cannot be parsed are logged and skipped
so one broken note never hides the rest.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Tuple, Union

from atask.constants import (
    PRIORITY_P1,
    PRIORITY_P2,
    PRIORITY_P3,
    SORT_KEYS,
    TASK_STATUS_DELEGATED,
    TASK_STATUS_DONE,
    TASK_STATUS_DROPPED,
    TASK_STATUS_OPEN,
    TASK_STATUS_PAUSED,
    TYPE_PROJECT,
    TYPE_TASK,
)
from atask.frontmatter import FrontmatterError, load_note, parse_filename
from atask.models import Project, Task

logger = logging.getLogger(__name__)


class Scanner:
    """
    Finds and loads task/project files in a directory.

    Example:
        scanner = Scanner("~/notes")
        tasks = scanner.find_tasks()
        names = scanner.project_names()
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()

    def _note_paths(self) -> List[Path]:
        if not self.directory.is_dir():
            logger.warning(f"Notes directory does not exist: {self.directory}")
            return []
        return sorted(
            p for p in self.directory.glob("*.md")
            if p.is_file() and not p.name.startswith(".")
        )

    def _iter_notes(self, note_type: str) -> Iterator[Tuple[Path, dict, str, datetime]]:
        """Yield (path, metadata, body, mtime) for notes of the given type."""
        for path in self._note_paths():
            try:
                metadata, body, mod_time = load_note(path)
            except (OSError, UnicodeDecodeError, FrontmatterError) as e:
                logger.warning(f"Skipping {path.name}: {e}")
                continue

            declared = metadata.get("type")
            if declared is None:
                parts = parse_filename(path.name)
                keywords = parts[2] if parts else ()
                if note_type not in keywords:
                    continue
            elif str(declared) != note_type:
                continue

            yield path, metadata, body, mod_time

    def find_tasks(self) -> List[Task]:
        """Load every task file in the directory."""
        tasks = [
            Task.from_metadata(metadata, content=body, file_path=str(path), mod_time=mod_time)
            for path, metadata, body, mod_time in self._iter_notes(TYPE_TASK)
        ]
        logger.debug(f"Found {len(tasks)} tasks in {self.directory}")
        return tasks

    def find_projects(self) -> List[Project]:
        """Load every project file in the directory."""
        projects = [
            Project.from_metadata(metadata, content=body, file_path=str(path), mod_time=mod_time)
            for path, metadata, body, mod_time in self._iter_notes(TYPE_PROJECT)
        ]
        logger.debug(f"Found {len(projects)} projects in {self.directory}")
        return projects

    def project_names(self) -> Dict[str, str]:
        """Map project index_id (as a string, like Task.project_id) to title."""
        return {
            str(p.index_id): p.title
            for p in self.find_projects()
            if p.index_id is not None
        }


# =============================================================================
# Sorting
# =============================================================================

_PRIORITY_ORDER = {PRIORITY_P1: 1, PRIORITY_P2: 2, PRIORITY_P3: 3}

_STATUS_ORDER = {
    TASK_STATUS_OPEN: 1,
    TASK_STATUS_PAUSED: 2,
    TASK_STATUS_DELEGATED: 3,
    TASK_STATUS_DONE: 4,
    TASK_STATUS_DROPPED: 5,
}


def priority_value(priority: str) -> int:
    """Rank a priority for sorting; unknown or empty sorts last."""
    return _PRIORITY_ORDER.get(priority, 4)


def status_value(status: str) -> int:
    return _STATUS_ORDER.get(status, 6)


def _index_key(task: Task) -> Tuple[bool, int]:
    return (task.index_id is None, task.index_id or 0)


def _due_key(task: Task) -> Tuple[bool, str]:
    # Tasks without a due date go after dated ones
    return (task.due_date == "", task.due_date)


def sort_tasks(tasks: List[Task], sort_by: str = "modified", reverse: bool = False) -> List[Task]:
    """
    Return tasks in a deterministic order.

    Sort keys:
        priority  p1 first, then by due date
        due       earliest due date first, undated last
        status    open, paused, delegated, done, dropped; then priority
        id        index_id ascending
        created   id ascending (ids are time-ordered)
        modified  most recently modified first

    Ties fall back to index_id so the same input always yields the same order.

    Raises:
        ValueError: For an unknown sort key
    """
    if sort_by == "priority":
        key = lambda t: (priority_value(t.priority), _due_key(t), _index_key(t))
    elif sort_by == "due":
        key = lambda t: (_due_key(t), _index_key(t))
    elif sort_by == "status":
        key = lambda t: (status_value(t.status), priority_value(t.priority), _index_key(t))
    elif sort_by == "id":
        key = _index_key
    elif sort_by == "created":
        key = lambda t: (t.id, _index_key(t))
    elif sort_by == "modified":
        key = lambda t: (t.mod_time is None,
                         -t.mod_time.timestamp() if t.mod_time else 0.0,
                         _index_key(t))
    else:
        raise ValueError(f"Unknown sort key: {sort_by} (choose from {', '.join(SORT_KEYS)})")

    ordered = sorted(tasks, key=key)
    if reverse:
        ordered.reverse()
    return ordered
