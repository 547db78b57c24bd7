from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import psycopg

from sellpoint_auth.settings import get_settings

MIGRATIONS_DIR = Path(os.environ.get("MIGRATIONS_DIR", "migrations"))
SCHEMA_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version    text PRIMARY KEY,
  applied_at timestamptz NOT NULL DEFAULT now()
);
"""

USAGE = "usage: python -m sellpoint_auth.infrastructure.db.migrate [up|status|new <name>]"


def log(msg: str) -> None:
    print(msg, flush=True)


def pending(conn: psycopg.Connection) -> tuple[list[Path], dict[str, datetime]]:
    """(migration files not yet applied, {applied version: applied_at})."""
    if not MIGRATIONS_DIR.exists():
        raise FileNotFoundError(f"migrations dir not found: {MIGRATIONS_DIR}")
    with conn.cursor() as cur:
        cur.execute(SCHEMA_TABLE_SQL)
        cur.execute("SELECT version, applied_at FROM schema_migrations ORDER BY version;")
        applied = {version: at for version, at in cur.fetchall()}
    conn.commit()
    files = sorted(MIGRATIONS_DIR.glob("*.sql"))
    return [p for p in files if p.stem not in applied], applied


def cmd_up() -> int:
    with psycopg.connect(get_settings().database_url, autocommit=False) as conn:
        to_run, _ = pending(conn)
        if not to_run:
            log("No pending migrations.")
            return 0
        for path in to_run:
            log(f"==> applying {path.stem}")
            try:
                with conn.cursor() as cur:
                    cur.execute(path.read_text(encoding="utf-8"))
                    cur.execute(
                        "INSERT INTO schema_migrations (version) VALUES (%s);",
                        (path.stem,),
                    )
                conn.commit()
            except psycopg.Error as e:
                conn.rollback()
                print(f"failed {path.stem}: {e}", file=sys.stderr)
                return 1
            log(f"applied {path.stem}")
    return 0


def cmd_status() -> int:
    with psycopg.connect(get_settings().database_url) as conn:
        to_run, applied = pending(conn)
    print("=== Applied ===")
    for version, at in applied.items():
        print(f"{version} @ {at.isoformat()}")
    print("=== Pending ===")
    for path in to_run:
        print(path.stem)
    return 0


def cmd_new(name: str) -> int:
    existing = sorted(MIGRATIONS_DIR.glob("*.sql"))
    number = int(existing[-1].stem.split("_", 1)[0]) + 1 if existing else 1
    path = MIGRATIONS_DIR / f"{number:04d}_{name}.sql"
    path.parent.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).isoformat(timespec="minutes")
    path.write_text(f"-- created {stamp}\n", encoding="utf-8")
    print(str(path))
    return 0


def main(argv: list[str]) -> int:
    if len(argv) < 2:
        print(USAGE, file=sys.stderr)
        return 2
    cmd = argv[1]
    if cmd == "up":
        return cmd_up()
    if cmd == "status":
        return cmd_status()
    if cmd == "new":
        if len(argv) < 3:
            print("usage: ... new <name>", file=sys.stderr)
            return 2
        return cmd_new(argv[2])
    print(f"unknown command: {cmd}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
