import pytest
from sqlalchemy import inspect

from kampus.db import bootstrap
from kampus.db.session import engine


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(bootstrap, "_ensure_exclusivity_indexes", lambda: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_schema",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_bootstrap_recreates_a_dropped_exclusivity_index():
    bootstrap.ensure_runtime_schema_compatibility()
    with engine.begin() as connection:
        connection.exec_driver_sql("DROP INDEX uq_assignments_active_teacher_slot")

    assert bootstrap.inspect_schema()["missing_indexes"] == ["uq_assignments_active_teacher_slot"]

    bootstrap.ensure_runtime_schema_compatibility()

    names = {item["name"] for item in inspect(engine).get_indexes("assignments")}
    assert "uq_assignments_active_teacher_slot" in names
