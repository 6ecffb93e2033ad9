"""Command-line interface for the todo list.

Usage:
    todo                          List tasks
    todo add "buy milk" "call mom"
    todo done 2 3                 Toggle tasks 2 and 3
    todo rm 4                     Remove task 4
    todo rm done                  Remove every finished task
    todo sort                     Move finished tasks to the bottom
    todo raw todo                 Print unfinished task text only
    todo export                   Write the markdown export
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from colorama import just_fix_windows_console

from todo_list import codec
from todo_list.config import (
    TodoConfig,
    default_config_path,
    load_config,
    read_environment,
    resolve_export_path,
    resolve_storage_path,
)
from todo_list.display import format_task_lines, format_tasks_table, use_color
from todo_list.exceptions import TodoError
from todo_list.models import Priority
from todo_list.repository import TaskFile, read_text, write_export
from todo_list.store import TaskStore
from todo_list.utils.logger import configure_logging

logger = logging.getLogger(__name__)

COMMANDS = ("list", "add", "rm", "done", "raw", "sort", "export", "priority", "import")
READ_ONLY_COMMANDS = ("list", "raw")
TEXT_COMMANDS = ("add",)
HELP_ARGS = (["-h"], ["--help"])


def parse_priority_level(value: str) -> Optional[Priority]:
    """Parse a priority level; "none" clears the priority."""
    if value.lower() == "none":
        return None
    try:
        return Priority.from_string(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _add_global_options(parser: argparse.ArgumentParser, suppress: bool = False) -> None:
    """Options accepted both before and after the command word."""
    defaults = {"default": argparse.SUPPRESS} if suppress else {}
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr", **defaults
    )
    parser.add_argument("--config", type=Path, help="Config file (or set TODO_CONFIG)", **defaults)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="todo",
        description="A small, fast task list for the terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  todo add "buy carrots"     Add a task
  todo done 2 3              Toggle the second and third tasks
  todo rm done               Remove every finished task
  todo priority high 1       Mark the first task as high priority
  todo raw done              Print finished tasks, useful for scripting

Everything after "add" is task text, options included; give -v and
--config before "add". Task numbers change after rm and sort; list
again before acting.
        """,
    )
    _add_global_options(parser)

    # Subparsers must not reset options already given before the command
    common = argparse.ArgumentParser(add_help=False)
    _add_global_options(common, suppress=True)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # list
    p = subparsers.add_parser("list", parents=[common], help="List all tasks (default)")
    p.add_argument("-t", "--table", action="store_true", help="Show tasks as a table")

    # add
    p = subparsers.add_parser("add", parents=[common], help="Add new task/s")
    p.add_argument("texts", nargs="*", metavar="TASK", help="Task text")

    # rm
    p = subparsers.add_parser(
        "rm", parents=[common], help="Remove tasks by number, or 'done' for all finished"
    )
    p.add_argument("selectors", nargs="*", metavar="INDEX", help="Task number or 'done'")

    # done
    p = subparsers.add_parser(
        "done", parents=[common], help="Toggle tasks between finished and unfinished"
    )
    p.add_argument("selectors", nargs="*", metavar="INDEX", help="Task number")

    # raw
    p = subparsers.add_parser("raw", parents=[common], help="Print only todo/done task text")
    p.add_argument("filters", nargs="*", metavar="todo|done", help="Which tasks to print")

    # sort
    subparsers.add_parser("sort", parents=[common], help="Move finished tasks below unfinished ones")

    # export
    subparsers.add_parser("export", parents=[common], help="Write the task list as markdown")

    # priority
    p = subparsers.add_parser("priority", parents=[common], help="Set the priority of tasks")
    p.add_argument(
        "level", type=parse_priority_level, metavar="LEVEL",
        help="LOW, MEDIUM, HIGH, or NONE to clear"
    )
    p.add_argument("selectors", nargs="*", metavar="INDEX", help="Task number")

    # import
    p = subparsers.add_parser("import", parents=[common], help="Append tasks from a markdown list")
    p.add_argument("path", type=Path, help="Markdown file, e.g. an export or an old TODO file")

    return parser


def _split_command(argv: Sequence[str]) -> tuple[list[str], Optional[str], list[str]]:
    """Split argv into (options before the command, command word, the rest)."""
    index = 0
    while index < len(argv):
        arg = argv[index]
        if arg == "--config":
            index += 2
        elif arg.startswith("-"):
            index += 1
        else:
            return list(argv[:index]), arg, list(argv[index + 1:])
    return list(argv), None, []


def _prepare_argv(argv: Sequence[str]) -> Optional[list[str]]:
    """Return argv ready for the parser, or None for an unknown command.

    Arguments of ``add`` are task text even when they start with "-", so
    they are passed after a "--" separator.
    """
    head, command, rest = _split_command(argv)
    if command is None:
        return head
    if command not in COMMANDS:
        return None
    if command in TEXT_COMMANDS and rest and rest[0] != "--" and rest not in HELP_ARGS:
        rest = ["--"] + rest
    return head + [command] + rest


class CLI:
    """Command-line interface handler.

    Commands that may write hold the lock on the task file for one load,
    mutate, save cycle; list and raw only read.
    """

    def __init__(
        self,
        config: TodoConfig,
        task_file: TaskFile,
        export_path: Path,
        color: bool = False,
    ) -> None:
        """Initialize CLI with resolved settings and file locations."""
        self._config = config
        self._file = task_file
        self._export_path = export_path
        self._color = color

    def run(self, args: argparse.Namespace) -> int:
        """Execute the requested command. Returns exit code."""
        handler = getattr(self, f"_handle_{args.command}")
        exporting = args.command == "export" or self._config.always_export

        # Reads need no lock: writes replace the file in one rename
        if args.command in READ_ONLY_COMMANDS and not exporting:
            handler(self._load(), args)
            return 0

        with self._file.locked():
            store = self._load()
            changed = handler(store, args)
            if changed:
                self._file.write(codec.encode(store))
            if exporting:
                self._export(store)
        return 0

    def _load(self) -> TaskStore:
        data = self._file.read()
        if data is None:
            return TaskStore()
        return codec.decode(data)

    def _export(self, store: TaskStore) -> None:
        title = codec.export_title(self._file.path, self._config.is_global)
        write_export(self._export_path, codec.render_export(store, title))

    # -------------------- command handlers --------------------
    def _handle_list(self, store: TaskStore, args: argparse.Namespace) -> bool:
        """Handle list command."""
        if getattr(args, "table", False):
            print(format_tasks_table(store))
            return False
        for line in format_task_lines(store, self._config.index_color, self._color):
            print(line)
        return False

    def _handle_add(self, store: TaskStore, args: argparse.Namespace) -> bool:
        """Handle add command."""
        added = store.add(args.texts)
        logger.info("Added %d task(s)", added)
        return added > 0

    def _handle_rm(self, store: TaskStore, args: argparse.Namespace) -> bool:
        """Handle rm command."""
        removed = store.remove(args.selectors)
        logger.info("Removed %d task(s)", removed)
        return removed > 0

    def _handle_done(self, store: TaskStore, args: argparse.Namespace) -> bool:
        """Handle done command."""
        toggled = store.toggle_done(args.selectors)
        logger.info("Toggled %d task(s)", toggled)
        return toggled > 0

    def _handle_raw(self, store: TaskStore, args: argparse.Namespace) -> bool:
        """Handle raw command."""
        for content in store.raw(args.filters):
            print(content)
        return False

    def _handle_sort(self, store: TaskStore, args: argparse.Namespace) -> bool:
        """Handle sort command."""
        before = store.tasks
        store.sort()
        return store.tasks != before

    def _handle_export(self, store: TaskStore, args: argparse.Namespace) -> bool:
        """Handle export command; the export itself is written by run()."""
        return False

    def _handle_priority(self, store: TaskStore, args: argparse.Namespace) -> bool:
        """Handle priority command."""
        updated = store.set_priority(args.selectors, args.level)
        logger.info("Updated priority of %d task(s)", updated)
        return updated > 0

    def _handle_import(self, store: TaskStore, args: argparse.Namespace) -> bool:
        """Handle import command."""
        imported = store.extend(codec.parse_markdown(read_text(args.path)))
        logger.info("Imported %d task(s) from %s", imported, args.path)
        return imported > 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = create_parser()

    prepared = _prepare_argv(argv)
    if prepared is None:
        parser.print_help()
        return 0

    args = parser.parse_args(prepared)
    if args.command is None:
        args.command = "list"

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    just_fix_windows_console()

    cwd = Path.cwd()
    home = Path.home()

    try:
        environ = read_environment(cwd, os.environ)
        config_path = args.config or default_config_path(environ, home)
        config = load_config(config_path, environ)

        storage_path = resolve_storage_path(config, cwd=cwd, home=home)
        export_path = resolve_export_path(config, storage_path)
        logger.debug("Using task file %s", storage_path)

        cli = CLI(
            config,
            TaskFile(storage_path),
            export_path,
            color=use_color(sys.stdout, environ),
        )
        return cli.run(args)
    except TodoError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
