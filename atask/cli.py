#!/usr/bin/env python3
"""
atask - query Denote-style task files from the command line.

Reads task and project notes from the configured notes directory and
filters them with the atask query language.
"""
import sys
import argparse
import json
import logging
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from atask.config import init_config, get_config, user_config_path
from atask.constants import (
    MAX_TITLE_DISPLAY,
    PRIORITY_P1,
    PRIORITY_P2,
    SORT_KEYS,
    TASK_STATUS_DELEGATED,
    TASK_STATUS_DONE,
    TASK_STATUS_DROPPED,
    TASK_STATUS_PAUSED,
)
from atask.models import Task
from atask.query import Operator, QueryError, filter_records, iter_fields, parse_query
from atask.query.fields import FieldSpec, parse_calendar_date
from atask.scanner import Scanner, sort_tasks

logger = logging.getLogger(__name__)


console = Console()

STATUS_ICONS = {
    TASK_STATUS_DONE: "✓",
    TASK_STATUS_PAUSED: "⏸",
    TASK_STATUS_DROPPED: "⨯",
    TASK_STATUS_DELEGATED: "→",
}

QUERY_EXAMPLES = """
Examples:
  atask query "status:open AND priority:p1"
  atask query "area:work AND (priority:p1 OR priority:p2)"
  atask query "due:soon AND NOT status:done"
"""


def truncate(text: str, width: int = MAX_TITLE_DISPLAY) -> str:
    if len(text) > width:
        return text[:width - 3] + "..."
    return text


def is_overdue(task: Task, today: Optional[date] = None) -> bool:
    """Overdue for display: due before today and not done."""
    due = parse_calendar_date(task.due_date)
    if due is None or task.status == TASK_STATUS_DONE:
        return False
    return due < (today or date.today())


def display_title(task: Task) -> str:
    title = task.title
    if task.recur:
        title = "↻ " + title
    return truncate(title)


def project_label(task: Task, project_names: Dict[str, str]) -> str:
    if not task.project_id:
        return ""
    return "→ " + (project_names.get(task.project_id) or task.project_id)


def priority_markup(priority: str) -> str:
    if not priority:
        return ""
    if priority == PRIORITY_P1:
        return f"[bold red]{escape(priority)}[/bold red]"
    if priority == PRIORITY_P2:
        return f"[yellow]{escape(priority)}[/yellow]"
    return escape(priority)


def output_tasks(tasks: List[Task], project_names: Dict[str, str],
                 format: str = "table", quiet: bool = False):
    """Output tasks in the specified format."""
    if format == "json":
        data = []
        for t in tasks:
            item = t.to_dict()
            if t.project_id and t.project_id in project_names:
                item["project_name"] = project_names[t.project_id]
            data.append(item)
        print(json.dumps({"tasks": data, "count": len(tasks)}, indent=2))

    elif format == "plain":
        if not quiet:
            print(f"Tasks ({len(tasks)}):\n")
        for t in tasks:
            icon = STATUS_ICONS.get(t.status, "○")
            priority = f"[{t.priority}]" if t.priority else "   "
            due = f"[{t.due_date}]" if t.due_date else " " * 12
            index = t.index_id if t.index_id is not None else 0
            print(f"{index:3d} {icon} {priority} {due}  {display_title(t):<50} "
                  f"{t.area:<10} {project_label(t, project_names)}".rstrip())

    else:  # table
        table = Table(title=None if quiet else f"Tasks ({len(tasks)})")
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("", no_wrap=True)
        table.add_column("Pri")
        table.add_column("Due")
        table.add_column("Title", style="green")
        table.add_column("Area", style="magenta")
        table.add_column("Project", style="blue")

        for t in tasks:
            icon = STATUS_ICONS.get(t.status, "○")
            if t.status == TASK_STATUS_DONE:
                icon = f"[green]{icon}[/green]"
            due = escape(t.due_date)
            if is_overdue(t):
                due = f"[bold red]{due}[/bold red]"
            table.add_row(
                str(t.index_id) if t.index_id is not None else "",
                icon,
                priority_markup(t.priority),
                due,
                escape(display_title(t)),
                escape(t.area),
                escape(project_label(t, project_names)),
            )

        console.print(table)


# =============================================================================
# Commands
# =============================================================================

def cmd_query(args):
    """Filter tasks with a query expression."""
    config = get_config()

    try:
        expr = parse_query(args.expression)
    except QueryError as e:
        console.print(f"[red]Query error:[/red]\n{escape(e.describe(args.expression))}")
        sys.exit(1)

    scanner = Scanner(config.get_notes_path())
    tasks = scanner.find_tasks()
    project_names = scanner.project_names()

    workers = args.workers or config.filter_workers
    matched = filter_records(expr, tasks, config.eval_config(), max_workers=workers)
    matched = sort_tasks(matched, args.sort or config.default_sort, args.reverse)

    output_tasks(matched, project_names, format=args.output, quiet=args.quiet)


def operator_symbols(spec: FieldSpec) -> List[str]:
    """Operator spellings accepted for a field, ":" and "=" both for equality."""
    symbols = []
    for op in Operator:
        if op in spec.operators:
            symbols.extend([":", "="] if op is Operator.EQ else [op.symbol])
    return symbols


def cmd_fields(args):
    """List queryable fields."""
    specs = list(iter_fields())

    if args.output == "json":
        data = [{
            "name": s.name,
            "aliases": list(s.aliases),
            "kind": s.kind.value,
            "operators": operator_symbols(s),
            "special_values": list(s.special_values),
            "description": s.description,
        } for s in specs]
        print(json.dumps(data, indent=2))
        return

    table = Table(title="Query fields")
    table.add_column("Field", style="cyan")
    table.add_column("Aliases", style="dim")
    table.add_column("Kind", style="magenta")
    table.add_column("Operators", style="yellow")
    table.add_column("Special values", style="green")
    table.add_column("Description")

    for s in specs:
        ops = " ".join(operator_symbols(s))
        table.add_row(
            s.name,
            ", ".join(s.aliases),
            s.kind.value,
            escape(ops),
            ", ".join(s.special_values),
            s.description,
        )

    console.print(table)


def cmd_config(args):
    """Manage configuration."""
    config = get_config()

    if args.action == "show":
        if args.key:
            if args.key not in config.keys():
                console.print(f"[red]Unknown config key: {escape(args.key)}[/red]")
                sys.exit(1)
            print(getattr(config, args.key))
        else:
            print(json.dumps(asdict(config), indent=2))

    elif args.action == "set":
        if not args.key or args.value is None:
            console.print("[red]Usage: atask config set KEY VALUE[/red]")
            sys.exit(1)
        config.set_value(args.key, args.value)
        config.validate()
        config.save(Path(args.config) if args.config else None)
        if not args.quiet:
            console.print(f"[green]Set {escape(args.key)} = {escape(args.value)}[/green]")

    elif args.action == "init":
        config_path = Path(args.config) if args.config else user_config_path()
        config.save(config_path)
        console.print(f"[green]Created config at {escape(str(config_path))}[/green]")


# =============================================================================
# Entry point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atask",
        description="atask - query task notes with boolean filter expressions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  atask query "status:open AND priority:p1"
  atask query "area:work AND (priority:p1 OR priority:p2)" --sort due
  atask query "content:blocker AND NOT status:done" -o json
  atask query "estimate>5"
  atask fields
  atask config show soon_horizon

Configuration:
  Config file: ~/.config/atask/config.toml (or ./atask.toml)
  Environment: ATASK_NOTES_DIRECTORY, ATASK_SOON_HORIZON
        """
    )

    # Global options
    parser.add_argument("--dir", help="Notes directory (default: from config)")
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal output")
    parser.add_argument("-o", "--output", choices=["table", "json", "plain"],
                        help="Output format")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Commands")

    # query
    query_parser = subparsers.add_parser(
        "query", help="Query tasks with a filter expression",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=QUERY_EXAMPLES,
    )
    query_parser.add_argument("expression", help="Filter expression")
    query_parser.add_argument("--sort", choices=SORT_KEYS,
                              help="Sort order (default: from config)")
    query_parser.add_argument("-r", "--reverse", action="store_true", help="Reverse sort order")
    query_parser.add_argument("--workers", type=int,
                              help="Threads used to evaluate the query")
    query_parser.set_defaults(func=cmd_query)

    # fields
    fields_parser = subparsers.add_parser("fields", help="List queryable fields")
    fields_parser.set_defaults(func=cmd_fields)

    # config
    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument("action", choices=["show", "set", "init"], help="Config action")
    config_parser.add_argument("key", nargs="?", help="Config key")
    config_parser.add_argument("value", nargs="?", help="Config value (for set)")
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = init_config(
            notes_directory=args.dir,
            config_file=Path(args.config) if args.config else None,
            output_format=args.output,
        )
    except (ValueError, OSError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    level = logging.DEBUG if args.verbose else getattr(logging, config.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s')

    if args.no_color or not config.color_output:
        console.no_color = True

    if not args.output:
        args.output = config.output_format

    # Execute command
    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
