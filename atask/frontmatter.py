"""
Reading task and project files.

Files are markdown with a YAML frontmatter block:

    ---
    title: Write report
    index_id: 12
    type: task
    status: open
    priority: p1
    due_date: 2024-03-01
    tags: [work, writing]
    ---

    Body text...

Filenames follow ``{id}--{slug}__{keywords}.md``; files written by older
Denote setups use a ``YYYYMMDDTHHMMSS`` timestamp as the id.
"""
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from atask.models import Project, Task

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"

# {id}--{slug}__{keywords}.md, with one or two dashes in legacy files
FILENAME_PATTERN = re.compile(r"^([^-_][^_]*?)-{1,2}([^_]+?)(?:__(.+))?\.md$")
LEGACY_DENOTE_PATTERN = re.compile(r"^(\d{8}T\d{6})-{1,2}([^_]+)(?:__(.+))?\.md$")


class FrontmatterError(ValueError):
    """Raised when a file's frontmatter cannot be read."""
    pass


def split_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """
    Split file content into frontmatter metadata and body.

    Args:
        text: Full file content

    Returns:
        Tuple of (metadata dict, body). Files without frontmatter yield an
        empty dict and the whole text as body.

    Raises:
        FrontmatterError: If the block is unterminated, is not valid YAML,
            or does not hold a mapping
    """
    if not text.startswith(FRONTMATTER_DELIMITER):
        return {}, text

    rest = text[len(FRONTMATTER_DELIMITER):]
    end = rest.find("\n" + FRONTMATTER_DELIMITER)
    if end == -1:
        raise FrontmatterError("Unterminated frontmatter")

    raw = rest[:end]
    body = rest[end + 1 + len(FRONTMATTER_DELIMITER):].lstrip("\n")

    try:
        metadata = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid YAML frontmatter: {e}") from e

    if metadata is None:
        return {}, body
    if not isinstance(metadata, dict):
        raise FrontmatterError(
            f"Frontmatter must be a mapping, got {type(metadata).__name__}"
        )
    return metadata, body


def parse_filename(name: str) -> Optional[Tuple[str, str, Tuple[str, ...]]]:
    """
    Split a note filename into (id, slug, keywords).

    Returns:
        The parts, or None if the name does not follow the convention
    """
    match = FILENAME_PATTERN.match(name)
    if not match:
        return None
    keywords = tuple(k for k in (match.group(3) or "").split("_") if k)
    return match.group(1), match.group(2), keywords


def read_file(path: Union[str, Path]) -> Tuple[Dict[str, Any], str, Optional[datetime]]:
    """Read a note and return (metadata, body, modification time)."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    metadata, body = split_frontmatter(text)
    mod_time = datetime.fromtimestamp(path.stat().st_mtime)
    return metadata, body, mod_time


def load_note(path: Union[str, Path]) -> Tuple[Dict[str, Any], str, Optional[datetime]]:
    """
    Read a note for conversion into a record.

    Like ``read_file``, but a note without an ``id`` key takes its id from a
    legacy ``YYYYMMDDTHHMMSS`` filename. Other filename prefixes are not ids.
    """
    path = Path(path)
    metadata, body, mod_time = read_file(path)
    if not metadata.get("id"):
        match = LEGACY_DENOTE_PATTERN.match(path.name)
        if match:
            metadata["id"] = match.group(1)
    return metadata, body, mod_time


def load_task(path: Union[str, Path]) -> Task:
    """
    Load a task file.

    Args:
        path: Path to the markdown file

    Returns:
        Parsed task; status defaults to ``open``

    Raises:
        FrontmatterError: If the frontmatter cannot be parsed
        OSError: If the file cannot be read
    """
    path = Path(path)
    metadata, body, mod_time = load_note(path)
    return Task.from_metadata(metadata, content=body, file_path=str(path), mod_time=mod_time)


def load_project(path: Union[str, Path]) -> Project:
    """Load a project file; status defaults to ``active``."""
    path = Path(path)
    metadata, body, mod_time = load_note(path)
    return Project.from_metadata(metadata, content=body, file_path=str(path), mod_time=mod_time)
