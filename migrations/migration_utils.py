"""
Helpers shared by the intake migrations.

Resolves the database the service itself would use and inspects which
tables and indexes are already present.
"""

import sys

from sqlalchemy import inspect

from hoopspark.shared.records.database import create_db_engine


def get_engine(database_url=None):
    """Engine for database_url, or for DATABASE_URL (.env honoured) when omitted."""
    if database_url is None:
        from dotenv import load_dotenv
        load_dotenv()

        from hoopspark.shared.config import get_database_url
        database_url = get_database_url()
    return create_db_engine(database_url)


def table_exists(connection, table_name):
    return table_name in inspect(connection).get_table_names()


def index_exists(connection, table_name, index_name):
    """Check if an index exists on a table."""
    return any(idx['name'] == index_name for idx in inspect(connection).get_indexes(table_name))


def run_migration(migration_name, migration_func):
    """
    Run a migration, printing a banner and exiting non-zero on failure.

    Args:
        migration_name: Name shown in the output
        migration_func: Callable that performs the migration
    """
    print(f"\n{'='*60}")
    print(f"Running migration: {migration_name}")
    print(f"{'='*60}")

    try:
        migration_func()
    except Exception as e:
        print(f"\n✗ Migration '{migration_name}' failed: {e}")
        sys.exit(1)
    print(f"\n✓ Migration '{migration_name}' completed successfully!")
