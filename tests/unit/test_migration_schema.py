"""The Alembic revision must create every table the ORM maps."""

import importlib.util
from pathlib import Path

import pytest

from cpn.db import models  # noqa: F401
from cpn.db.base import Base

REVISION = Path(__file__).resolve().parents[2] / "alembic" / "versions" / "001_initial_schema.py"


@pytest.fixture(scope="module")
def revision_source() -> str:
    return REVISION.read_text()


def test_revision_metadata():
    spec = importlib.util.spec_from_file_location("initial_schema", REVISION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    assert module.revision == "001_initial_schema"
    assert module.down_revision is None
    assert callable(module.upgrade)
    assert callable(module.downgrade)


def test_every_mapped_table_is_created(revision_source: str):
    for table in Base.metadata.tables:
        assert f"CREATE TABLE IF NOT EXISTS {table} (" in revision_source


def test_every_mapped_table_is_dropped(revision_source: str):
    for table in Base.metadata.tables:
        assert f"DROP TABLE IF EXISTS {table} CASCADE" in revision_source


def test_every_mapped_column_is_declared(revision_source: str):
    for table in Base.metadata.tables.values():
        start = revision_source.index(f"CREATE TABLE IF NOT EXISTS {table.name} (")
        body = revision_source[start:revision_source.index('"""', start)]
        for column in table.columns:
            assert f"\n            {column.name} " in body, f"{table.name}.{column.name}"


def test_unique_constraint_names_match(revision_source: str):
    for table in Base.metadata.tables.values():
        for constraint in table.constraints:
            if constraint.name and constraint.name.endswith("_key"):
                assert f"CONSTRAINT {constraint.name} UNIQUE" in revision_source
