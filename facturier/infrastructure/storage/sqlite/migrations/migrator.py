"""
Versioned schema migrations for the SQLite backend.

Migration files are named ``vNNN_name.sql`` and applied in version order.
Each file runs in one transaction together with its ``schema_migrations``
row, so a broken script leaves the schema exactly as it was. Applied files
are append-only: editing one after it ran is refused at startup, since
invoices already written under that schema must stay readable.

An existing database file is copied aside before a run and put back if any
migration fails.
"""

import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from facturier.config import get_logger

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
MIGRATION_FILE_RE = re.compile(r"v([0-9]+)_(\w+)\.sql", re.ASCII)

REQUIRED_TABLES = (
    "schema_migrations",
    "settings",
    "clients",
    "invoices",
    "invoice_lines",
    "quotes",
    "quote_lines",
)

MIGRATIONS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    checksum TEXT NOT NULL,
    execution_time_ms INTEGER,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
)
"""


@dataclass
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = MIGRATION_FILE_RE.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        content = path.read_text(encoding="utf-8")
        return cls(
            version=match.group(1),
            name=match.group(2),
            path=path,
            checksum=hashlib.sha256(content.encode()).hexdigest()[:16],
        )

    def script(self) -> str:
        """The file body wrapped with its bookkeeping row in one transaction."""
        body = self.path.read_text(encoding="utf-8").strip().rstrip(";")
        return (
            "BEGIN;\n"
            f"{body};\n"
            "INSERT INTO schema_migrations (version, name, checksum) "
            f"VALUES ('{self.version}', '{self.name}', '{self.checksum}');\n"
            "COMMIT;"
        )


@dataclass
class MigrationResult:
    """Outcome of one migration in a run."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied versions mapped to the checksum they ran with."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        # Table doesn't exist yet
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


def discover_migrations() -> list[MigrationInfo]:
    """Migration files in version order; misnamed files are skipped."""
    migrations = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(migrations, key=lambda m: int(m.version))


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """Run one migration; on error nothing of it remains."""
    logger.info("applying_migration", version=migration.version, name=migration.name)
    start = time.perf_counter()

    try:
        await conn.executescript(migration.script())
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error(
            "migration_failed",
            version=migration.version,
            name=migration.name,
            error=str(e),
        )
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=int((time.perf_counter() - start) * 1000),
            error=str(e),
        )

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    await conn.execute(
        "UPDATE schema_migrations SET execution_time_ms = ? WHERE version = ?",
        (elapsed_ms, migration.version),
    )
    await conn.commit()

    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed_ms,
    )
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=elapsed_ms,
    )


def _checksum_mismatch(migration: MigrationInfo) -> MigrationResult:
    logger.error("migration_checksum_changed", version=migration.version, name=migration.name)
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=False,
        execution_time_ms=0,
        error="applied migration file was modified",
    )


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside before migrating."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{timestamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def _run_pending(db_path: Path) -> list[MigrationResult]:
    results: list[MigrationResult] = []
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA foreign_keys=ON")
        await conn.execute(MIGRATIONS_TABLE_SQL)
        await conn.commit()

        applied = await get_applied_migrations(conn)
        for migration in discover_migrations():
            if migration.version in applied:
                if applied[migration.version] != migration.checksum:
                    results.append(_checksum_mismatch(migration))
                    break
                continue

            result = await apply_migration(conn, migration)
            results.append(result)
            if not result.success:
                break

        # Fold the WAL back in so a later file copy is complete
        await conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
    return results


async def initialize_database(
    db_path: Path,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the database up to the latest schema version.

    Args:
        db_path: Path to database file
        create_backup_before: Whether to copy an existing file aside first

    Returns:
        Results of this run, stopping at the first failure. A failed entry
        means the file was restored to its state before the run.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = create_backup(db_path)

    try:
        results = await _run_pending(db_path)
    except aiosqlite.Error as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path:
            restore_backup(db_path, backup_path)
        raise

    if any(not r.success for r in results):
        if backup_path:
            restore_backup(db_path, backup_path)
        return results

    if backup_path:
        backup_path.unlink()
    return results


async def get_migration_status(db_path: Path) -> dict:
    """Report the applied and pending migrations."""
    discovered = discover_migrations()
    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)
    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": list(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
    }


async def verify_schema_integrity(db_path: Path) -> list[dict]:
    """Run SQLite integrity checks and look for the expected tables."""
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        fk_violations = await cursor.fetchall()
        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]
        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        existing_tables = {row[0] for row in await cursor.fetchall()}

    missing = [t for t in REQUIRED_TABLES if t not in existing_tables]
    return [
        {
            "check": "foreign_keys",
            "status": "PASS" if not fk_violations else "FAIL",
            "violations": len(fk_violations),
        },
        {
            "check": "integrity",
            "status": "PASS" if integrity == "ok" else "FAIL",
            "result": integrity,
        },
        {
            "check": "required_tables",
            "status": "PASS" if not missing else "FAIL",
            "missing": missing,
        },
    ]
