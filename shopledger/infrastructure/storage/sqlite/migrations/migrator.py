"""
Ledger schema migrations.

Migration files live beside this module as ``vNNN_<name>.sql``. Each applied
file is recorded in ``schema_migrations`` with a checksum of its text; a
recorded migration whose file has since changed stops the run instead of
being re-applied over live sales.

Run as ``shopledger-migrate`` (``--status``, ``--verify``, ``--no-backup``).
"""

import asyncio
import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from shopledger.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME = re.compile(r"v(?P<version>\d+)_(?P<name>.+)\.sql")

REQUIRED_TABLES = [
    "shops",
    "products",
    "staff",
    "expenses",
    "sales",
    "sale_items",
    "invoice_sequences",
    "invoices",
    "invoice_modifications",
    "schema_migrations",
]

# Ledger invariants as "count the offending rows" queries
LEDGER_CHECKS: dict[str, str] = {
    "modified_flag": """
        SELECT COUNT(*) FROM invoices i
        WHERE i.is_modified != EXISTS (
            SELECT 1 FROM invoice_modifications m WHERE m.invoice_id = i.id
        )
    """,
    "latest_modification_amount": """
        SELECT COUNT(*) FROM invoices i
        WHERE i.is_modified = 1 AND i.new_total_amount IS NOT (
            SELECT m.new_amount FROM invoice_modifications m
            WHERE m.invoice_id = i.id
            ORDER BY m.created_at DESC, m.rowid DESC
            LIMIT 1
        )
    """,
    "returned_quantity_bounds": """
        SELECT COUNT(*) FROM sale_items
        WHERE returned_quantity < 0 OR returned_quantity > quantity
    """,
}


@dataclass(frozen=True)
class MigrationInfo:
    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.fullmatch(path.name)
        if match is None:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(
            version=match["version"],
            name=match["name"],
            path=path,
            checksum=digest[:16],
        )

    @property
    def label(self) -> str:
        return f"v{self.version}_{self.name}"


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in version order; misnamed files are logged and skipped."""
    found = []
    for path in sorted(migrations_dir.glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return found


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Recorded version -> checksum. Empty before the first migration."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        return {}
    return dict(await cursor.fetchall())


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """Run one migration script and record it in the same commit."""
    logger.info("applying_migration", migration=migration.label)
    started = time.perf_counter()

    def elapsed_ms() -> int:
        return int((time.perf_counter() - started) * 1000)

    error = None
    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            "INSERT OR REPLACE INTO schema_migrations "
            "(version, name, checksum, execution_time_ms) VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed_ms()),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        error = str(e)
        logger.error("migration_failed", migration=migration.label, error=error)
    else:
        logger.info(
            "migration_applied",
            migration=migration.label,
            execution_time_ms=elapsed_ms(),
        )

    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=error is None,
        execution_time_ms=elapsed_ms(),
        error=error,
    )


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside; returns the copy's path."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.info("database_restored_from_backup", backup_path=str(backup_path))


async def _pending(conn: aiosqlite.Connection) -> list[MigrationInfo]:
    """
    Migrations not yet applied.

    Raises RuntimeError when a recorded migration's file no longer matches
    its checksum.
    """
    applied = await get_applied_migrations(conn)
    pending = []
    for migration in discover_migrations():
        recorded = applied.get(migration.version)
        if recorded is None:
            pending.append(migration)
        elif recorded != migration.checksum:
            raise RuntimeError(
                f"migration {migration.label} changed after it was applied "
                f"(recorded {recorded}, found {migration.checksum})"
            )
    return pending


async def _migrate(db_path: Path) -> list[MigrationResult]:
    results: list[MigrationResult] = []
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")

        for migration in await _pending(conn):
            result = await apply_migration(conn, migration)
            results.append(result)
            if not result.success:
                break

            cursor = await conn.execute("PRAGMA foreign_key_check")
            violations = len(await cursor.fetchall())
            if violations:
                logger.error(
                    "foreign_key_check_failed",
                    migration=migration.label,
                    violations=violations,
                )
                result.success = False
                result.error = f"{violations} foreign key violations"
                break
    return results


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the database up to the latest schema version.

    An existing database is backed up first when ``create_backup_before``
    is set. The backup is restored if any migration fails and deleted
    otherwise.

    Returns:
        Results for the migrations this call applied; empty when the schema
        was already current.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = create_backup(db_path)

    try:
        results = await _migrate(db_path)
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path is not None:
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None:
        if all(r.success for r in results):
            backup_path.unlink()
        else:
            restore_backup(db_path, backup_path)

    if not results:
        logger.info("schema_current", db_path=str(db_path))
    return results


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Current schema version plus applied and pending migration versions."""
    db_path = db_path or get_settings().storage.db_path
    discovered = [m.version for m in discover_migrations()]

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": discovered,
            "total_migrations": len(discovered),
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": list(applied),
        "pending_migrations": [v for v in discovered if v not in applied],
        "total_migrations": len(discovered),
    }


def _check(name: str, ok: bool, **extra) -> dict:
    return {"check": name, "status": "PASS" if ok else "FAIL", **extra}


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    SQLite's own checks followed by the ledger invariants in LEDGER_CHECKS.

    The ledger checks are skipped when required tables are missing.
    """
    db_path = db_path or get_settings().storage.db_path
    checks = []

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        fk_violations = len(await cursor.fetchall())
        checks.append(_check("foreign_keys", fk_violations == 0, violations=fk_violations))

        cursor = await conn.execute("PRAGMA integrity_check")
        (integrity,) = await cursor.fetchone()
        checks.append(_check("integrity", integrity == "ok", result=integrity))

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in tables]
        checks.append(_check("required_tables", not missing, missing=missing))
        if missing:
            return checks

        for name, sql in LEDGER_CHECKS.items():
            cursor = await conn.execute(sql)
            (violations,) = await cursor.fetchone()
            checks.append(_check(name, violations == 0, violations=violations))

    return checks


def _print_status(status: dict) -> None:
    print(f"Database exists:    {status['exists']}")
    print(f"Current version:    {status['current_version'] or '-'}")
    print(f"Applied migrations: {', '.join(status['applied_migrations']) or '-'}")
    print(f"Pending migrations: {', '.join(status['pending_migrations']) or '-'}")


def _print_checks(checks: list[dict]) -> None:
    for check in checks:
        print(f"[{check['status']}] {check['check']}")
        if check["status"] == "PASS":
            continue
        for key, value in check.items():
            if key not in ("check", "status"):
                print(f"       {key}: {value}")


def _print_results(results: list[MigrationResult]) -> None:
    if not results:
        print("Schema is up to date.")
    for result in results:
        outcome = "SUCCESS" if result.success else "FAILED"
        print(f"[{outcome}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"         Error: {result.error}")


def main() -> None:
    """CLI entry point for database migration."""
    import argparse

    parser = argparse.ArgumentParser(description="Shop Ledger Database Migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--status", action="store_true", help="Show migration status")
    mode.add_argument("--verify", action="store_true", help="Verify schema and ledger integrity")
    parser.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    args = parser.parse_args()

    if args.status:
        _print_status(asyncio.run(get_migration_status(args.db_path)))
    elif args.verify:
        checks = asyncio.run(verify_schema_integrity(args.db_path))
        _print_checks(checks)
        raise SystemExit(0 if all(c["status"] == "PASS" for c in checks) else 1)
    else:
        results = asyncio.run(
            initialize_database(args.db_path, create_backup_before=not args.no_backup)
        )
        _print_results(results)
        raise SystemExit(0 if all(r.success for r in results) else 1)


if __name__ == "__main__":
    main()
