from __future__ import annotations

import argparse
import sys
from pathlib import Path
from urllib.parse import urlparse, urlunparse

import psycopg2

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.utils.config import load_db_config  # noqa: E402
from src.utils.logging import get_logger, setup_logging  # noqa: E402


logger = get_logger(component="apply_schema")


def _target_db_name(dsn: str) -> str:
    return (urlparse(dsn).path or "").lstrip("/")


def _admin_dsn(dsn: str) -> str:
    """Same server, 'postgres' database: used to create the target DB if missing."""
    return urlunparse(urlparse(dsn)._replace(path="/postgres"))


def _ensure_database_exists(dsn: str) -> None:
    target = _target_db_name(dsn)
    conn = psycopg2.connect(_admin_dsn(dsn), connect_timeout=5)
    try:
        conn.autocommit = True
        with conn.cursor() as cur:
            cur.execute("SELECT 1 FROM pg_database WHERE datname=%s", (target,))
            if cur.fetchone():
                return
            # CREATE DATABASE cannot be run inside a transaction.
            cur.execute(f'CREATE DATABASE "{target}"')
            logger.info("database_created", db=target)
    finally:
        conn.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the countries_t table if it does not exist")
    parser.add_argument("--schema", default=str(ROOT / "sql" / "countries.sql"), help="SQL file to apply")
    parser.add_argument("--skip-create-db", action="store_true", help="Do not try to create the database")
    args = parser.parse_args()

    setup_logging()
    schema = Path(args.schema)
    if not schema.exists():
        raise SystemExit(f"schema_file_missing:{schema}")

    dsn = load_db_config().dsn
    if not args.skip_create_db:
        _ensure_database_exists(dsn)

    conn = psycopg2.connect(dsn, connect_timeout=5)
    try:
        with conn.cursor() as cur:
            cur.execute(schema.read_text(encoding="utf-8"))
        conn.commit()
    finally:
        conn.close()
    logger.info("schema_applied", file=schema.name)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
