import pytest
from sqlalchemy import text

from app.db import bootstrap
from app.db.session import build_engine


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_outdated_tables_are_reported_not_patched(monkeypatch, tmp_path):
    engine = build_engine(f"sqlite+pysqlite:///{tmp_path / 'outdated.db'}")
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE rooms (id VARCHAR(36) PRIMARY KEY, code VARCHAR(50), capacity INTEGER)"))
    monkeypatch.setattr(bootstrap, "engine", engine)

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()

    with engine.connect() as connection:
        missing_tables, missing_columns = bootstrap.missing_schema_items(connection)
    engine.dispose()

    assert missing_tables == []
    assert missing_columns == {"rooms": ["is_active"]}
