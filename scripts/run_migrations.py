#!/usr/bin/env python3
"""
Run database migrations.

Applies every SQL file in db/migrations in filename order. Migrations are
written to be re-runnable (IF NOT EXISTS, CREATE OR REPLACE), so running the
script twice is safe.

Usage:
    python scripts/run_migrations.py [--database-url URL] [--verbose]
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import psycopg2

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "db" / "migrations"


def build_connection_string(database_url: str | None = None) -> str:
    """Resolve the connection string from an argument or the environment."""
    if database_url:
        return database_url
    if os.getenv("DATABASE_URL"):
        return os.environ["DATABASE_URL"]
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    user = os.getenv("POSTGRES_USER", "postgres")
    password = os.getenv("POSTGRES_PASSWORD", "postgres")
    db = os.getenv("POSTGRES_DB", "skillsetgo")
    return f"postgresql://{user}:{password}@{host}:{port}/{db}"


def list_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[Path]:
    """Return migration files sorted by name."""
    return sorted(migrations_dir.glob("*.sql"))


def run_migration(conn, migration_file: Path, verbose: bool = False) -> bool:
    """Run a single migration file.

    Args:
        conn: Database connection (autocommit)
        migration_file: Path to migration SQL file
        verbose: If True, show detailed information

    Returns:
        True if migration succeeded, False otherwise
    """
    try:
        migration_sql = migration_file.read_text(encoding="utf-8")
        if verbose:
            logger.info(f"Running migration: {migration_file.name}")

        with conn.cursor() as cur:
            cur.execute(migration_sql)

        if verbose:
            logger.info(f"✓ Migration completed: {migration_file.name}")
        return True

    except (
        psycopg2.errors.DuplicateTable,
        psycopg2.errors.DuplicateObject,
    ) as e:
        if verbose:
            logger.info(f"✓ Migration already applied (skipped): {migration_file.name} - {e}")
        return True
    except psycopg2.Error as e:
        logger.error(f"✗ Migration failed: {migration_file.name} - {e}")
        return False


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run database migrations")
    parser.add_argument("--database-url", help="Connection string (default: from environment)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show detailed information")
    args = parser.parse_args()

    migration_files = list_migrations()
    if not migration_files:
        logger.error(f"No migrations found in {MIGRATIONS_DIR}")
        sys.exit(1)

    try:
        conn = psycopg2.connect(build_connection_string(args.database_url))
        conn.autocommit = True
    except psycopg2.OperationalError as e:
        logger.error(f"Failed to connect to database: {e}")
        sys.exit(1)

    try:
        results = {f.name: run_migration(conn, f, args.verbose) for f in migration_files}
    finally:
        conn.close()

    passed = sum(1 for ok in results.values() if ok)
    logger.info(f"Summary: {passed}/{len(results)} migrations succeeded")

    failed = [name for name, ok in results.items() if not ok]
    if failed:
        logger.warning(f"Failed migrations: {', '.join(failed)}")
        sys.exit(1)
    logger.info("All migrations completed successfully!")


if __name__ == "__main__":
    main()
