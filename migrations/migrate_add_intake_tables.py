#!/usr/bin/env python3
"""
Migration script to create the videos and feedback tables.

This script:
1. Creates the videos table (one row per uploaded clip, status uploaded/analyzed)
2. Creates the feedback table (assessments linked to videos)
3. Adds any history indexes missing from tables that already exist
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from migrations.migration_utils import get_engine, index_exists, run_migration, table_exists  # noqa: E402


def create_intake_tables(engine=None):
    """
    Creates missing intake tables and indexes. Existing rows are never touched.

    Returns:
        (created tables, created indexes) as lists of names
    """
    from hoopspark.shared.records.database import Base
    from hoopspark.shared.records import models

    engine = engine or get_engine()
    print(f"Database: {engine.url.render_as_string(hide_password=True)}")

    created_tables, created_indexes = [], []
    for table_name in (models.Video.__tablename__, models.Feedback.__tablename__):
        table = Base.metadata.tables[table_name]
        with engine.connect() as connection:
            exists = table_exists(connection, table_name)
        if not exists:
            print(f"   Creating {table_name} table...")
            table.create(bind=engine)
            created_tables.append(table_name)
            print(f"   ✓ Created {table_name} table with {len(table.indexes)} indexes.")
            continue

        print(f"   ✓ Table '{table_name}' already exists.")
        for index in sorted(table.indexes, key=lambda i: i.name):
            with engine.connect() as connection:
                if index_exists(connection, table_name, index.name):
                    continue
            print(f"   Creating index {index.name}...")
            index.create(bind=engine)
            created_indexes.append(index.name)
    return created_tables, created_indexes


if __name__ == "__main__":
    run_migration("add intake tables", create_intake_tables)
