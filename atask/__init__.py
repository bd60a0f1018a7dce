"""
atask - query and browse Denote-style task files

Tasks and projects live as markdown files with YAML frontmatter in a notes
directory. atask reads them and filters them with a small boolean query
language:

    status:open AND priority:p1
    area:work AND (priority:p1 OR priority:p2)
    due:soon AND NOT status:done

Example Usage:
    >>> from atask import Scanner, parse_query, filter_records, get_config
    >>> config = get_config()
    >>> tasks = Scanner(config.notes_directory).find_tasks()
    >>> expr = parse_query("due:overdue AND NOT status:done")
    >>> overdue = filter_records(expr, tasks, config.eval_config())
"""

__version__ = "0.3.0"
__author__ = "atask Contributors"

# Configuration
from atask.config import AtaskConfig, get_config, init_config

# Records
from atask.models import Task, Project

# Record source
from atask.scanner import Scanner, sort_tasks
from atask.frontmatter import FrontmatterError, load_task, load_project

# Query language
from atask.query import (
    EvalConfig,
    QueryError,
    evaluate,
    filter_records,
    parse_query,
)

__all__ = [
    # Config
    "AtaskConfig",
    "get_config",
    "init_config",
    # Records
    "Task",
    "Project",
    # Record source
    "Scanner",
    "sort_tasks",
    "FrontmatterError",
    "load_task",
    "load_project",
    # Query
    "EvalConfig",
    "QueryError",
    "evaluate",
    "filter_records",
    "parse_query",
]
