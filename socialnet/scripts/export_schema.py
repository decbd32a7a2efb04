"""
Export Schema Script
Writes the tables, row-level security policies, media bucket and indexes as
one idempotent Supabase migration (apply with `supabase db push` or paste into
the SQL editor). Re-running the output against an existing database is safe.
"""

import argparse
import sys
import logging
from datetime import datetime, timezone
from pathlib import Path

from socialnet.core.policies import POLICY_SET
from socialnet.database.schema import render_schema_sql, tables
from socialnet.modules.media.models import render_bucket_sql

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_migration() -> str:
    """Full DDL: tables + RLS + indexes, then policies, then the media bucket"""
    header = "-- socialnet schema, row-level security policies and storage bucket\n"
    return "\n\n".join([
        header + render_schema_sql(),
        "-- Policies",
        POLICY_SET.render_sql(),
        "-- Storage",
        render_bucket_sql(),
    ]) + "\n"


def default_path(directory: Path) -> Path:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return directory / f"{stamp}_socialnet_schema.sql"


def main(argv=None):
    parser = argparse.ArgumentParser(description="Export socialnet DDL as a Supabase migration")
    parser.add_argument("--output", type=Path, help="File to write; '-' prints to stdout")
    parser.add_argument("--migrations-dir", type=Path, default=Path("supabase/migrations"))
    args = parser.parse_args(argv)

    sql = build_migration()
    if args.output is not None and str(args.output) == "-":
        sys.stdout.write(sql)
        return

    path = args.output or default_path(args.migrations_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(sql)
    logger.info(f"Wrote {len(tables())} tables and {len(POLICY_SET.policies)} policies to {path}")


if __name__ == "__main__":
    main()
