from sqlalchemy import text

from migrations.migrate_add_intake_tables import create_intake_tables
from migrations.migration_utils import get_engine, index_exists, table_exists


def test_creates_tables_then_is_a_no_op(tmp_path):
    engine = get_engine(f"sqlite:///{tmp_path / 'migrate.db'}")
    tables, indexes = create_intake_tables(engine)
    assert tables == ["videos", "feedback"]
    assert indexes == []

    with engine.connect() as connection:
        assert table_exists(connection, "videos")
        assert index_exists(connection, "videos", "idx_videos_user_uploaded")
        assert index_exists(connection, "feedback", "idx_feedback_user_created")

    assert create_intake_tables(engine) == ([], [])
    engine.dispose()


def test_adds_missing_index_to_existing_table(tmp_path):
    engine = get_engine(f"sqlite:///{tmp_path / 'migrate.db'}")
    create_intake_tables(engine)
    with engine.begin() as connection:
        connection.execute(text("DROP INDEX idx_videos_user_uploaded"))

    tables, indexes = create_intake_tables(engine)
    assert tables == []
    assert indexes == ["idx_videos_user_uploaded"]
    engine.dispose()
