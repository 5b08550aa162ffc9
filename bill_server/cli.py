"""Command line entry points for running and administering the invoice store."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import db as database
from .config import settings
from .errors import StorageError
from .logs import configure_logging
from .services import exports as exports_service
from .services import invoices as invoices_service


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("bill_server.main:app", host=args.host, port=args.port)
    return 0


def cmd_init_db(_: argparse.Namespace) -> int:
    database.init_db()
    print("Database ready.")
    return 0


def cmd_clear(_: argparse.Namespace) -> int:
    path = database.database_path()
    if path is not None and not path.exists():
        print("Database file does not exist.")
        return 0

    database.init_db()
    with database.SessionLocal() as session:
        try:
            removed = invoices_service.purge_invoices(session)
        except StorageError as exc:
            print(f"Delete failed: {exc.message}", file=sys.stderr)
            return 1

    if not removed:
        print("No invoices found in database. Database is already empty.")
        return 0
    print(f"Successfully deleted {removed} invoice(s) from the database.")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    output_dir = Path(args.output_dir) if args.output_dir else settings.exports_dir
    database.init_db()
    with database.SessionLocal() as session:
        try:
            out_path, count = exports_service.write_export(
                session, args.format, output_dir
            )
        except StorageError as exc:
            print(f"Export failed: {exc.message}", file=sys.stderr)
            return 1
    print(f"Exported {count} invoices to {out_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bill-server", description="Invoice record-keeping service"
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL.")
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    serve = subparsers.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    serve.set_defaults(handler=cmd_serve)

    init_db = subparsers.add_parser("init-db", help="Create the database schema.")
    init_db.set_defaults(handler=cmd_init_db)

    clear = subparsers.add_parser("clear", help="Delete every stored invoice.")
    clear.set_defaults(handler=cmd_clear)

    export = subparsers.add_parser("export", help="Write all invoices to a file.")
    export.add_argument("format", choices=sorted(exports_service.FORMATS))
    export.add_argument(
        "--output-dir", default=None, help="Defaults to EXPORTS_DIR."
    )
    export.set_defaults(handler=cmd_export)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    return args.handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
