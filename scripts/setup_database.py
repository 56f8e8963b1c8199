#!/usr/bin/env python3
"""
Set up the database schema.
Prints the users table SQL; --verify checks an existing database.

Usage:
    python scripts/setup_database.py
    python scripts/setup_database.py --verify

Note: For safety the SQL is not executed - run it in the Supabase SQL
editor. --verify needs DATABASE_URL (or SUPABASE_DB_URL).
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv


def print_schema():
    """Print the schema SQL for manual execution."""
    from src.db.schema import SCHEMA_SQL, INDEXES_SQL

    print("=" * 60)
    print("DATABASE SCHEMA")
    print("=" * 60)
    print("\nCopy and paste this SQL into Supabase SQL Editor:\n")
    print("-" * 60)
    print(SCHEMA_SQL)
    print("-" * 60)
    print("\nINDEXES:")
    print("-" * 60)
    print(INDEXES_SQL)
    print("-" * 60)


def verify_schema() -> bool:
    """Check the users table carries every column the webhook writes."""
    from src.db.postgres import get_postgres_connection, check_table_exists, get_missing_columns
    from src.db.schema import BILLING_COLUMN_NAMES

    conn = get_postgres_connection()
    try:
        if not check_table_exists(conn, "users"):
            print("✗ Table 'users' does not exist")
            return False

        missing = get_missing_columns(conn, "users", BILLING_COLUMN_NAMES)
    finally:
        conn.close()

    if missing:
        print(f"✗ users is missing billing columns: {', '.join(missing)}")
        return False

    print("✓ users table has all billing columns")
    return True


def main():
    parser = argparse.ArgumentParser(description="Database setup")
    parser.add_argument("--verify", action="store_true", help="Verify an existing database")
    args = parser.parse_args()

    load_dotenv()

    if args.verify:
        return 0 if verify_schema() else 1

    print("Pebble CRM Billing - Database Setup")
    print("=" * 40)
    print()
    print("This script outputs the SQL schema for your database.")
    print("For safety, please run the SQL manually in Supabase.")
    print()

    print_schema()

    print()
    print("Next steps:")
    print("1. Go to your Supabase project dashboard")
    print("2. Open the SQL Editor")
    print("3. Paste the schema SQL above and run it")
    print("4. Then run: python scripts/setup_database.py --verify")
    return 0


if __name__ == "__main__":
    sys.exit(main())
