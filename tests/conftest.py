import pytest
from datetime import date
from pathlib import Path

from atask.models import Task
from atask.query import EvalConfig


TODAY = date(2024, 3, 15)


@pytest.fixture
def today():
    """Fixed reference day so date queries are reproducible."""
    return TODAY


@pytest.fixture
def eval_config(today):
    """Evaluation config with a 3 day horizon on the fixed day."""
    return EvalConfig(soon_horizon=3, today=today)


@pytest.fixture
def make_task():
    """Factory for tasks with only the fields a test cares about."""
    def _make(**kwargs):
        return Task(**kwargs)
    return _make


@pytest.fixture
def sample_tasks():
    """A small task list covering every field kind."""
    return [
        Task(id="01", index_id=1, title="Write quarterly report", status="open",
             priority="p1", area="work", due_date="2024-03-14", estimate=8,
             tags=["writing", "q1"], content="Hit a blocker with the numbers"),
        Task(id="02", index_id=2, title="Buy groceries", status="open",
             priority="p3", area="home", due_date="2024-03-16", estimate=1,
             tags=["errand"]),
        Task(id="03", index_id=3, title="Fix login bug", status="done",
             priority="p2", area="work", due_date="2024-03-10", project_id="7",
             tags=["bug"], content="blocker resolved"),
        Task(id="04", index_id=4, title="Plan vacation", status="paused",
             area="home", assignee="sam", recur="yearly"),
    ]


TASK_FILE = """---
title: {title}
index_id: {index_id}
type: task
status: {status}
priority: {priority}
due_date: {due_date}
area: {area}
tags: [{tags}]
---

{body}
"""

PROJECT_FILE = """---
title: {title}
index_id: {index_id}
type: project
status: active
---

Project notes.
"""


def write_task(directory: Path, name: str, **fields) -> Path:
    values = dict(title="Untitled", index_id=1, status="open", priority="p2",
                  due_date="2024-03-20", area="work", tags="", body="")
    values.update(fields)
    path = directory / name
    path.write_text(TASK_FILE.format(**values), encoding="utf-8")
    return path


def write_project(directory: Path, name: str, title: str, index_id: int) -> Path:
    path = directory / name
    path.write_text(PROJECT_FILE.format(title=title, index_id=index_id), encoding="utf-8")
    return path


@pytest.fixture
def notes_dir(tmp_path):
    """A notes directory with three tasks, one project and one broken file."""
    write_task(tmp_path, "01HQA--write-report__task.md", title="Write report",
               index_id=1, priority="p1", tags="work, writing", body="Blocked on data")
    write_task(tmp_path, "01HQB--buy-milk__task.md", title="Buy milk",
               index_id=2, priority="p3", area="home", due_date="2024-03-12")
    write_task(tmp_path, "01HQC--ship-release__task.md", title="Ship release",
               index_id=3, status="done", due_date="2024-03-01")
    write_project(tmp_path, "01HQP--launch__project.md", title="Launch", index_id=7)
    (tmp_path / "01HQX--broken__task.md").write_text("---\ntitle: [unclosed\n---\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("Just a note, no frontmatter\n", encoding="utf-8")
    return tmp_path
