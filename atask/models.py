"""
Record types for atask.

Tasks and projects are plain dataclasses built from the YAML frontmatter of
their markdown files. ``Task`` provides every attribute the query evaluator
reads, so task lists can be filtered directly.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from atask.constants import (
    PROJECT_STATUS_ACTIVE,
    TASK_STATUS_OPEN,
    TYPE_PROJECT,
    TYPE_TASK,
)


def _as_str(value: Any) -> str:
    """Normalize a frontmatter scalar to a string ('' when unset)."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _as_int(value: Any) -> Optional[int]:
    """Normalize a frontmatter number; None when unset or not an integer."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _as_tags(value: Any) -> List[str]:
    """Tags may be a YAML list or a space/comma separated string."""
    if not value:
        return []
    if isinstance(value, str):
        return [t for t in value.replace(",", " ").split() if t]
    return [str(t).strip() for t in value if str(t).strip()]


@dataclass
class Task:
    """
    A task loaded from a markdown file.

    Attributes:
        id: Stable identifier (ULID or legacy Denote timestamp)
        title: Task title
        index_id: Sequential number shown to the user
        status: open, done, paused, delegated or dropped
        priority: p1, p2, p3 or empty
        due_date: ISO date string or empty
        start_date: ISO date string or empty
        estimate: Effort estimate, None when unset
        project_id: index_id of the owning project, as a string
        content: Markdown body after the frontmatter
    """
    id: str = ""
    title: str = ""
    index_id: Optional[int] = None
    type: str = TYPE_TASK
    tags: List[str] = field(default_factory=list)
    created: str = ""
    modified: str = ""
    status: str = ""
    priority: str = ""
    due_date: str = ""
    start_date: str = ""
    today_date: str = ""
    estimate: Optional[int] = None
    project_id: str = ""
    area: str = ""
    assignee: str = ""
    recur: str = ""
    content: str = ""
    file_path: str = ""
    mod_time: Optional[datetime] = None

    @classmethod
    def from_metadata(cls, metadata: Dict[str, Any], content: str = "",
                      file_path: str = "", mod_time: Optional[datetime] = None) -> "Task":
        """Build a task from parsed frontmatter, applying defaults."""
        return cls(
            id=_as_str(metadata.get("id")),
            title=_as_str(metadata.get("title")),
            index_id=_as_int(metadata.get("index_id")),
            type=_as_str(metadata.get("type")) or TYPE_TASK,
            tags=_as_tags(metadata.get("tags")),
            created=_as_str(metadata.get("created")),
            modified=_as_str(metadata.get("modified")),
            status=_as_str(metadata.get("status")) or TASK_STATUS_OPEN,
            priority=_as_str(metadata.get("priority")),
            due_date=_as_str(metadata.get("due_date")),
            start_date=_as_str(metadata.get("start_date")),
            today_date=_as_str(metadata.get("today_date")),
            estimate=_as_int(metadata.get("estimate")),
            project_id=_as_str(metadata.get("project_id")),
            area=_as_str(metadata.get("area")),
            assignee=_as_str(metadata.get("assignee")),
            recur=_as_str(metadata.get("recur")),
            content=content,
            file_path=file_path,
            mod_time=mod_time,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON output, omitting empty optional fields."""
        data: Dict[str, Any] = {
            "id": self.id,
            "index_id": self.index_id,
            "title": self.title,
            "type": self.type,
            "status": self.status,
            "tags": list(self.tags),
        }
        optional = {
            "priority": self.priority,
            "due_date": self.due_date,
            "start_date": self.start_date,
            "today_date": self.today_date,
            "estimate": self.estimate,
            "project_id": self.project_id,
            "area": self.area,
            "assignee": self.assignee,
            "recur": self.recur,
            "created": self.created,
            "modified": self.modified,
            "path": self.file_path,
        }
        data.update({k: v for k, v in optional.items() if v not in ("", None)})
        return data


@dataclass
class Project:
    """A project loaded from a markdown file; tasks point at it via project_id."""
    id: str = ""
    title: str = ""
    index_id: Optional[int] = None
    type: str = TYPE_PROJECT
    tags: List[str] = field(default_factory=list)
    status: str = ""
    priority: str = ""
    due_date: str = ""
    start_date: str = ""
    area: str = ""
    content: str = ""
    file_path: str = ""
    mod_time: Optional[datetime] = None

    @classmethod
    def from_metadata(cls, metadata: Dict[str, Any], content: str = "",
                      file_path: str = "", mod_time: Optional[datetime] = None) -> "Project":
        return cls(
            id=_as_str(metadata.get("id")),
            title=_as_str(metadata.get("title")),
            index_id=_as_int(metadata.get("index_id")),
            type=_as_str(metadata.get("type")) or TYPE_PROJECT,
            tags=_as_tags(metadata.get("tags")),
            status=_as_str(metadata.get("status")) or PROJECT_STATUS_ACTIVE,
            priority=_as_str(metadata.get("priority")),
            due_date=_as_str(metadata.get("due_date")),
            start_date=_as_str(metadata.get("start_date")),
            area=_as_str(metadata.get("area")),
            content=content,
            file_path=file_path,
            mod_time=mod_time,
        )
