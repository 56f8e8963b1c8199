"""
Direct Postgres access for `scripts/setup_database.py --verify`.
The webhook itself only talks to Supabase through the REST client.
"""

import os

import psycopg2
from psycopg2.extensions import connection


def get_database_url() -> str:
    """DATABASE_URL, falling back to SUPABASE_DB_URL."""
    database_url = os.environ.get("DATABASE_URL") or os.environ.get("SUPABASE_DB_URL")
    if not database_url:
        raise ValueError("Set DATABASE_URL (or SUPABASE_DB_URL) to verify the schema")
    return database_url


def get_postgres_connection() -> connection:
    try:
        return psycopg2.connect(get_database_url())
    except psycopg2.Error as e:
        raise psycopg2.Error(f"Failed to connect to database: {e}") from e


def check_table_exists(conn: connection, table_name: str) -> bool:
    with conn.cursor() as cur:
        cur.execute("""
            SELECT EXISTS (
                SELECT FROM information_schema.tables
                WHERE table_schema = 'public'
                AND table_name = %s
            )
        """, (table_name,))
        return cur.fetchone()[0]


def get_missing_columns(conn: connection, table_name: str, columns) -> list:
    """Columns from `columns` that the table lacks, in the order given."""
    with conn.cursor() as cur:
        cur.execute("""
            SELECT column_name FROM information_schema.columns
            WHERE table_schema = 'public'
            AND table_name = %s
        """, (table_name,))
        existing = {row[0] for row in cur.fetchall()}
    return [column for column in columns if column not in existing]
