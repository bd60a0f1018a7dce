"""Tests for the Task and Project records."""

from datetime import date

from atask.models import Project, Task


class TestTaskFromMetadata:
    """Building tasks from frontmatter values."""

    def test_defaults(self):
        task = Task.from_metadata({})
        assert task.status == "open"
        assert task.type == "task"
        assert task.tags == []
        assert task.index_id is None
        assert task.estimate is None
        assert task.project_id == ""

    def test_dates_become_strings(self):
        task = Task.from_metadata({"due_date": date(2024, 3, 1), "start_date": "2024-02-01"})
        assert task.due_date == "2024-03-01"
        assert task.start_date == "2024-02-01"

    def test_numbers(self):
        task = Task.from_metadata({"index_id": "12", "estimate": 5, "project_id": 7})
        assert task.index_id == 12
        assert task.estimate == 5
        assert task.project_id == "7"

    def test_malformed_numbers_are_unset(self):
        task = Task.from_metadata({"index_id": "twelve", "estimate": True})
        assert task.index_id is None
        assert task.estimate is None

    def test_tag_forms(self):
        assert Task.from_metadata({"tags": ["a", " b "]}).tags == ["a", "b"]
        assert Task.from_metadata({"tags": "a, b c"}).tags == ["a", "b", "c"]
        assert Task.from_metadata({"tags": None}).tags == []

    def test_strings_are_stripped(self):
        assert Task.from_metadata({"area": " work "}).area == "work"


class TestTaskHelpers:
    """JSON serialization."""

    def test_to_dict_omits_empty_values(self):
        data = Task(id="01", index_id=1, title="Write", status="open", priority="p1").to_dict()
        assert data == {
            "id": "01",
            "index_id": 1,
            "title": "Write",
            "type": "task",
            "status": "open",
            "tags": [],
            "priority": "p1",
        }

    def test_to_dict_keeps_zero_estimate(self):
        assert Task(estimate=0).to_dict()["estimate"] == 0


class TestProject:
    """Project records."""

    def test_from_metadata(self):
        project = Project.from_metadata({"title": "Launch", "index_id": 7, "tags": "x"})
        assert project.status == "active"
        assert project.type == "project"
        assert project.tags == ["x"]
