"""Tests for reading task and project files."""

from datetime import date

import pytest

from atask.frontmatter import (
    FrontmatterError,
    load_note,
    load_project,
    load_task,
    parse_filename,
    split_frontmatter,
)


class TestSplitFrontmatter:
    """YAML block extraction."""

    def test_basic(self):
        metadata, body = split_frontmatter("---\ntitle: Hello\nindex_id: 3\n---\n\nBody text\n")
        assert metadata == {"title": "Hello", "index_id": 3}
        assert body == "Body text\n"

    def test_no_frontmatter(self):
        metadata, body = split_frontmatter("Just text\n")
        assert metadata == {}
        assert body == "Just text\n"

    def test_empty_block(self):
        metadata, body = split_frontmatter("---\n---\nBody")
        assert metadata == {}
        assert body == "Body"

    def test_yaml_types(self):
        metadata, _ = split_frontmatter("---\ndue_date: 2024-03-01\ntags: [a, b]\n---\n")
        assert metadata["due_date"] == date(2024, 3, 1)
        assert metadata["tags"] == ["a", "b"]

    def test_unterminated(self):
        with pytest.raises(FrontmatterError, match="Unterminated"):
            split_frontmatter("---\ntitle: x\n")

    def test_invalid_yaml(self):
        with pytest.raises(FrontmatterError, match="Invalid YAML"):
            split_frontmatter("---\ntitle: [unclosed\n---\n")

    def test_not_a_mapping(self):
        with pytest.raises(FrontmatterError, match="mapping"):
            split_frontmatter("---\n- a\n- b\n---\n")

    def test_frontmatter_error_is_value_error(self):
        assert issubclass(FrontmatterError, ValueError)


class TestParseFilename:
    """{id}--{slug}__{keywords}.md"""

    def test_ulid_name(self):
        assert parse_filename("01HQA--write-report__task.md") == ("01HQA", "write-report", ("task",))

    def test_multiple_keywords(self):
        assert parse_filename("01HQA--report__task_work.md") == ("01HQA", "report", ("task", "work"))

    def test_legacy_timestamp(self):
        parts = parse_filename("20240301T093000--plan-trip__project.md")
        assert parts == ("20240301T093000", "plan-trip", ("project",))

    def test_single_dash(self):
        assert parse_filename("20240301T093000-notes__task.md")[0] == "20240301T093000"

    def test_no_keywords(self):
        assert parse_filename("01HQA--scratch.md") == ("01HQA", "scratch", ())

    def test_not_a_note(self):
        assert parse_filename("README.md") is None
        assert parse_filename("01HQA--report__task.txt") is None


class TestLoadFiles:
    """load_task and load_project."""

    def test_load_task(self, tmp_path):
        path = tmp_path / "01HQA--report__task.md"
        path.write_text(
            "---\nid: 01HQA\ntitle: Report\nindex_id: 4\ntype: task\npriority: p1\n"
            "due_date: 2024-03-01\ntags: [work]\nestimate: 3\n---\n\nNotes here\n",
            encoding="utf-8",
        )
        task = load_task(path)
        assert task.id == "01HQA"
        assert task.title == "Report"
        assert task.index_id == 4
        assert task.status == "open"
        assert task.due_date == "2024-03-01"
        assert task.tags == ["work"]
        assert task.estimate == 3
        assert task.content == "Notes here\n"
        assert task.file_path == str(path)
        assert task.mod_time is not None

    def test_legacy_id_from_filename(self, tmp_path):
        path = tmp_path / "20240301T093000--report__task.md"
        path.write_text("---\ntitle: Report\n---\n", encoding="utf-8")
        assert load_task(path).id == "20240301T093000"

    def test_non_legacy_prefix_is_not_an_id(self, tmp_path):
        path = tmp_path / "01ABC--x__task.md"
        path.write_text("---\ntitle: X\n---\n", encoding="utf-8")
        assert load_task(path).id == ""

    def test_load_note_fills_legacy_id(self, tmp_path):
        path = tmp_path / "20240301T093000--y__project.md"
        path.write_text("---\ntitle: Y\n---\nBody", encoding="utf-8")
        metadata, body, mod_time = load_note(path)
        assert metadata == {"title": "Y", "id": "20240301T093000"}
        assert body == "Body"

    def test_frontmatter_id_wins(self, tmp_path):
        path = tmp_path / "20240301T093000--report__task.md"
        path.write_text("---\nid: 01HQZ\n---\n", encoding="utf-8")
        assert load_task(path).id == "01HQZ"

    def test_load_project(self, tmp_path):
        path = tmp_path / "01HQP--launch__project.md"
        path.write_text("---\ntitle: Launch\nindex_id: 7\ntype: project\n---\n", encoding="utf-8")
        project = load_project(path)
        assert project.title == "Launch"
        assert project.index_id == 7
        assert project.status == "active"

    def test_broken_file(self, tmp_path):
        path = tmp_path / "01HQX--broken__task.md"
        path.write_text("---\ntitle: [unclosed\n---\n", encoding="utf-8")
        with pytest.raises(FrontmatterError):
            load_task(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_task(tmp_path / "missing.md")
