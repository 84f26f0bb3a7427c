"""The Alembic history must produce the same schema as the ORM models."""

from sqlalchemy import create_engine, inspect

from freestealer.db.session import Base
from freestealer.scripts.migrate import run_upgrade_head


def test_upgrade_head_creates_model_tables(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"

    run_upgrade_head(url)

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names()) - {"alembic_version"}
        assert tables == set(Base.metadata.tables)
        for table in Base.metadata.sorted_tables:
            migrated = {column["name"] for column in inspector.get_columns(table.name)}
            assert migrated == set(table.columns.keys()), table.name
        vote_indexes = {index["name"]: index for index in inspector.get_indexes("votes")}
        assert vote_indexes["uq_votes_user_tier"]["unique"]
    finally:
        engine.dispose()
