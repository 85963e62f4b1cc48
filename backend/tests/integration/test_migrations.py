"""
Migration tests: the Alembic history must build the same schema the
models describe, including the partial unique index on appointments.
"""

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect, text

from core.database import Base

ALEMBIC_DIR = Path(__file__).resolve().parents[2] / "alembic"

pytestmark = pytest.mark.migrations


@pytest.fixture
def migrated_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'migrations.db'}")
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(ALEMBIC_DIR))

    with engine.begin() as connection:
        alembic_cfg.attributes["connection"] = connection
        command.upgrade(alembic_cfg, "head")

    yield engine, alembic_cfg
    engine.dispose()


def test_upgrade_creates_every_model_table(migrated_engine):
    engine, _ = migrated_engine
    table_names = set(inspect(engine).get_table_names())

    assert set(Base.metadata.tables) <= table_names
    assert "alembic_version" in table_names


def test_columns_match_models(migrated_engine):
    engine, _ = migrated_engine
    inspector = inspect(engine)

    for table in Base.metadata.sorted_tables:
        migrated = {column["name"] for column in inspector.get_columns(table.name)}
        assert migrated == set(table.columns.keys()), table.name


def test_active_appointment_index_is_partial_and_unique(migrated_engine):
    engine, _ = migrated_engine

    with engine.connect() as connection:
        sql = connection.execute(text(
            "SELECT sql FROM sqlite_master WHERE name = 'uq_appointments_active_business_date_time'"
        )).scalar_one()

    assert "UNIQUE" in sql.upper()
    assert "cancelled" in sql


def test_downgrade_to_base_drops_tables(migrated_engine):
    engine, alembic_cfg = migrated_engine

    with engine.begin() as connection:
        alembic_cfg.attributes["connection"] = connection
        command.downgrade(alembic_cfg, "base")

    assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
