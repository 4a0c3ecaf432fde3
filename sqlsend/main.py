"""
sqlsend main entry point.

This module provides the CLI interface: read a SQL file, open one or more
SQLite databases as live sessions, and send one unit of the file.
"""

import argparse
import os
import sqlite3
import sys
from pathlib import Path
from typing import Optional, Tuple

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlsend",
        description="sqlsend - send SQL from a buffer to a live database session",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sqlsend queries.sql --db app.db --offset 120
  sqlsend queries.sql --db app.db --unit paragraph --offset 40
  sqlsend queries.sql --db a.db --db b.db --choose
  sqlsend queries.sql --db app.db --open-table --offset 15
  sqlsend --db a.db --db b.db --list-sessions
        """
    )

    parser.add_argument("file", nargs="?", help="SQL file to send from ('-' for stdin)")

    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version information"
    )

    parser.add_argument(
        "--db",
        action="append",
        default=[],
        metavar="PATH",
        help="SQLite database to open as a session (repeatable, last is most recent)"
    )

    parser.add_argument(
        "--unit", "-u",
        choices=["statement", "paragraph", "line", "region", "buffer"],
        help="Unit to send (default from config)"
    )

    parser.add_argument(
        "--offset", "-o",
        type=int,
        default=0,
        help="Cursor offset into the file"
    )

    parser.add_argument(
        "--region",
        type=int,
        nargs=2,
        metavar=("START", "END"),
        help="Region to send with --unit region"
    )

    parser.add_argument(
        "--choose",
        action="store_true",
        help="Prompt for the session instead of using the most recent one"
    )

    parser.add_argument(
        "--open-table",
        action="store_true",
        help="Show the table named under the cursor instead of sending SQL"
    )

    parser.add_argument(
        "--list-sessions",
        action="store_true",
        help="List the opened sessions, most recent first, and exit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (show technical details)"
    )

    return parser


def _read_source(file_arg: str) -> Tuple[str, str]:
    """Return (surface name, text) for the file argument."""
    if file_arg == "-":
        return "*stdin*", sys.stdin.read()
    path = Path(file_arg).expanduser()
    return path.name, path.read_text(encoding="utf-8")


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def main(argv: Optional[list] = None) -> int:
    """Main entry point for sqlsend."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from . import __version__
        print(f"sqlsend version {__version__}")
        return EXIT_OK

    if not args.file and not args.list_sessions:
        parser.error("a SQL file is required")

    if args.debug:
        os.environ["SQLSEND_DEBUG"] = "1"

    from .config import load_config, set_config
    from .errors import SQLSendError
    from .logging_setup import setup_logging
    from .ui import TerminalUI

    try:
        config = load_config(Path(args.config) if args.config else None)
    except SQLSendError as e:
        print(f"sqlsend: {e.user_message}", file=sys.stderr)
        return EXIT_FAILED
    set_config(config)
    setup_logging(config.logging)

    ui = TerminalUI(config)

    surface_name, text = "*none*", ""
    if args.file:
        try:
            surface_name, text = _read_source(args.file)
        except OSError as e:
            ui.print_error(f"Could not read {args.file}: {e.strerror or e}")
            return EXIT_FAILED

    return run(args, config, ui, surface_name, text)


def run(args, config, ui, surface_name: str, text: str) -> int:
    """Open sessions, send (or open a table) and close sessions again."""
    from .boundary import UnitKind
    from .commands import ConnectionCommands, SendCommands, TableCommands
    from .dispatch import DispatchHistory, DispatchStatus, EditSurface, SQLDispatcher
    from .environment import SQLiteEnvironment
    from .router import SessionRouter
    from .tables import TableNavigator
    from .ui import SessionChooser

    environment = SQLiteEnvironment()

    def preview_table(handle, table):
        result = environment.execute(
            handle, f"SELECT * FROM {_quote_identifier(table)} LIMIT {config.ui.max_rows}"
        )
        ui.print_result(result, title=f"{table} ({handle.label})")

    environment.on_open_table = preview_table

    try:
        for db_path in args.db:
            try:
                environment.open(db_path)
            except (sqlite3.Error, OSError) as e:
                ui.print_error(f"Could not open {db_path}: {e}")
                return EXIT_FAILED

        router = SessionRouter(
            environment.enumerate_session_surfaces,
            SessionChooser(ui.console),
            persist_implicit=config.router.persist_implicit,
        )

        if args.list_sessions:
            ConnectionCommands(ui, router).list_sessions()
            return EXIT_OK

        mark = args.region[0] if args.region else None
        cursor = args.region[1] if args.region else args.offset
        surface = EditSurface(name=surface_name, text=text, cursor=cursor, mark=mark)

        if args.open_table:
            navigator = TableNavigator(router, environment)
            table = TableCommands(ui, navigator).open_table_at_point(surface)
            return EXIT_OK if table else EXIT_FAILED

        dispatcher = SQLDispatcher(
            router,
            environment,
            history=DispatchHistory(config.history.max_entries),
            show_technical_details=config.ui.show_technical_details,
        )
        unit = UnitKind(args.unit or ("region" if args.region else config.router.default_unit))
        outcome = SendCommands(ui, dispatcher).send(surface, unit, choose=args.choose)

        if outcome.status is DispatchStatus.CANCELLED:
            return EXIT_CANCELLED
        if outcome.status is DispatchStatus.FAILED:
            return EXIT_FAILED
        if outcome.result is not None and getattr(outcome.result, "success", True) is False:
            return EXIT_FAILED
        return EXIT_OK
    finally:
        environment.close_all()


if __name__ == "__main__":
    sys.exit(main())
