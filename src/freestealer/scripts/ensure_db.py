"""Create the configured Postgres database if it does not exist yet."""
from __future__ import annotations

import argparse
import sys
from urllib.parse import urlsplit, urlunsplit

import psycopg
from psycopg import sql

from freestealer.core.settings import settings


def split_db_url(db_url: str) -> tuple[str, str]:
    """Return ``(admin_url, target_db)`` for a SQLAlchemy-style Postgres URL.

    The admin URL points at the ``postgres`` maintenance database and uses
    the plain ``postgresql`` scheme that ``psycopg.connect`` accepts.
    """
    parts = urlsplit(db_url.strip().strip("'\""))
    if not parts.scheme.startswith("postgresql"):
        raise ValueError(f"Not a Postgres URL: {db_url!r}")
    target_db = parts.path.lstrip("/") or "postgres"
    admin_url = urlunsplit(("postgresql", parts.netloc, "/postgres", parts.query, ""))
    return admin_url, target_db


def ensure_database_exists(db_url: str) -> bool:
    """Create the database named in ``db_url``; return True if it was created."""
    admin_url, target_db = split_db_url(db_url)
    with psycopg.connect(admin_url, autocommit=True) as conn, conn.cursor() as cur:
        cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (target_db,))
        if cur.fetchone() is not None:
            return False
        cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(target_db)))
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ensure the configured database exists")
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to DATABASE_URL)",
    )
    args = parser.parse_args(argv)

    url = args.url or settings.database_url_sync
    if url.startswith("sqlite"):
        print("[ensure_db] SQLite database is created on first connect, nothing to do")
        return 0
    try:
        created = ensure_database_exists(url)
    except (ValueError, psycopg.Error) as exc:
        print(f"[ensure_db] ERROR: {exc}", file=sys.stderr)
        return 1
    print("[ensure_db] created database" if created else "[ensure_db] database already exists")
    return 0


if __name__ == "__main__":
    sys.exit(main())
