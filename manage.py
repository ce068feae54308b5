#!/usr/bin/env python3
"""
Facturier management CLI.

Usage:
    python manage.py serve              Start the API server
    python manage.py migrate            Apply pending database migrations
    python manage.py status             Show migration status
    python manage.py backup PATH        Write a JSON backup to PATH
    python manage.py restore PATH       Restore a JSON backup from PATH
    python manage.py export-csv PATH    Write the invoice list as CSV to PATH
"""

import argparse
import asyncio
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from facturier.application.use_cases import (
    ExportBackupUseCase,
    ExportInvoicesCsvUseCase,
    RestoreBackupUseCase,
)
from facturier.config import configure_logging, get_logger, get_settings
from facturier.core.entities.invoice import InvoiceStatus
from facturier.core.exceptions import FacturierError
from facturier.core.interfaces import IStorage
from facturier.infrastructure.storage import create_storage
from facturier.infrastructure.storage.sqlite.migrations import (
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)

logger = get_logger(__name__)


@asynccontextmanager
async def open_storage() -> AsyncIterator[IStorage]:
    """Open the configured backend for the duration of one command."""
    storage = create_storage(get_settings())
    await storage.initialize()
    try:
        yield storage
    finally:
        await storage.close()


def cmd_serve(args: argparse.Namespace) -> None:
    """Start uvicorn on the configured host."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "facturier.api.main:app",
        host=args.host or settings.api.host,
        port=args.port or settings.api.port,
        reload=args.reload,
    )


async def _migrate() -> None:
    settings = get_settings()
    if settings.storage.backend != "sqlite":
        print(f"Backend '{settings.storage.backend}' has no migrations.")
        return
    results = await initialize_database(settings.storage.db_path)
    if not results:
        print("Database is up to date.")
    for result in results:
        print(f"  {result.version}_{result.name}: {'ok' if result.success else result.error}")


def cmd_migrate(args: argparse.Namespace) -> None:
    asyncio.run(_migrate())


async def _status() -> None:
    settings = get_settings()
    if settings.storage.backend != "sqlite":
        print(f"Backend '{settings.storage.backend}' has no migrations.")
        return
    db_path = settings.storage.db_path
    status = await get_migration_status(db_path)
    print(f"Database: {db_path}")
    print(f"Current version: {status['current_version']}")
    print(f"Pending: {', '.join(status['pending_migrations']) or 'none'}")
    if status["exists"]:
        for check in await verify_schema_integrity(db_path):
            print(f"  {check['check']}: {check['status']}")


def cmd_status(args: argparse.Namespace) -> None:
    asyncio.run(_status())


async def _backup(path: Path) -> None:
    async with open_storage() as storage:
        use_case = ExportBackupUseCase(storage)
        backup = await use_case.execute()
        path.write_text(use_case.to_json(backup), encoding="utf-8")
    print(
        f"Backup written to {path}: {len(backup.clients)} clients, "
        f"{len(backup.invoices)} invoices, {len(backup.quotes)} quotes."
    )


def cmd_backup(args: argparse.Namespace) -> None:
    asyncio.run(_backup(Path(args.path)))


async def _restore(path: Path) -> None:
    async with open_storage() as storage:
        summary = await RestoreBackupUseCase(storage).execute_json(path.read_bytes())
    print(
        f"Restored {summary.clients} clients, {summary.invoices} invoices, "
        f"{summary.quotes} quotes from {path}."
    )


def cmd_restore(args: argparse.Namespace) -> None:
    asyncio.run(_restore(Path(args.path)))


async def _export_csv(path: Path, status: InvoiceStatus | None) -> None:
    async with open_storage() as storage:
        result = await ExportInvoicesCsvUseCase(storage).execute(status)
    # newline="" keeps the CRLF row endings written by the csv module
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(result.content)
    print(f"{result.row_count} invoices exported to {path}.")


def cmd_export_csv(args: argparse.Namespace) -> None:
    status = InvoiceStatus(args.status) if args.status else None
    asyncio.run(_export_csv(Path(args.path), status))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Facturier management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=None, help="Bind host (default: API_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: API_PORT)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending database migrations")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.set_defaults(func=cmd_status)

    # backup
    p_backup = sub.add_parser("backup", help="Write a JSON backup")
    p_backup.add_argument("path", help="Output file")
    p_backup.set_defaults(func=cmd_backup)

    # restore
    p_restore = sub.add_parser("restore", help="Restore a JSON backup")
    p_restore.add_argument("path", help="Backup file")
    p_restore.set_defaults(func=cmd_restore)

    # export-csv
    p_csv = sub.add_parser("export-csv", help="Export invoices as CSV")
    p_csv.add_argument("path", help="Output file")
    p_csv.add_argument(
        "--status",
        choices=[s.value for s in InvoiceStatus],
        default=None,
        help="Only export invoices with this status",
    )
    p_csv.set_defaults(func=cmd_export_csv)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging()
    try:
        args.func(args)
    except FacturierError as e:
        logger.error("command_failed", command=args.command, code=e.code, error=e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
