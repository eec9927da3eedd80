from __future__ import annotations

import logging

from sqlalchemy import inspect, text

import kampus.models  # noqa: F401
from kampus.db.base import Base
from kampus.db.session import engine
from kampus.models.assignment import GROUP_SLOT_INDEX, TEACHER_SLOT_INDEX
from kampus.models.placement import ASSIGNMENT_SLOT_INDEX, ROOM_SLOT_INDEX

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "assignments": {
        "id",
        "teacher_id",
        "group_id",
        "time_slot_id",
        "day_of_week",
        "academic_year_id",
        "period_id",
        "status",
        "deleted_at",
    },
    "placements": {"id", "assignment_id", "classroom_id", "time_slot_id", "day_of_week", "academic_year_id", "deleted_at"},
    "academic_years": {"id", "institution_id", "start_date", "end_date", "deleted_at"},
    "periods": {"id", "academic_year_id", "start_date", "end_date"},
    "time_slots": {"id", "institution_id", "start_time", "end_time", "status"},
}

# The exclusivity guarantees rest on these partial unique indexes.
REQUIRED_INDEXES: dict[str, tuple[str, ...]] = {
    "assignments": (TEACHER_SLOT_INDEX, GROUP_SLOT_INDEX),
    "placements": (ROOM_SLOT_INDEX, ASSIGNMENT_SLOT_INDEX),
}


def _ensure_exclusivity_indexes() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        for table_name, index_names in REQUIRED_INDEXES.items():
            if table_name not in table_names:
                continue
            existing = {item["name"] for item in inspector.get_indexes(table_name)}
            table = Base.metadata.tables[table_name]
            for index in table.indexes:
                if index.name in index_names and index.name not in existing:
                    logger.warning("Creating missing index %s on %s", index.name, table_name)
                    index.create(bind=connection)


def _assert_required_schema() -> None:
    report = inspect_schema()
    if report["missing_tables"]:
        raise RuntimeError(f"Missing required tables: {', '.join(report['missing_tables'])}")
    if report["missing_columns"]:
        missing = [f"{table}.{column}" for table, columns in report["missing_columns"].items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(missing)}")
    if report["missing_indexes"]:
        raise RuntimeError(f"Missing required indexes: {', '.join(report['missing_indexes'])}")


def inspect_schema() -> dict:
    """Report which required tables, columns and indexes are absent, without changing anything."""
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
        missing_columns: dict[str, list[str]] = {}
        missing_indexes: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(required - existing)
            if missing:
                missing_columns[table_name] = missing
        for table_name, index_names in REQUIRED_INDEXES.items():
            if table_name not in table_names:
                continue
            existing = {item["name"] for item in inspector.get_indexes(table_name)}
            missing_indexes.extend(name for name in index_names if name not in existing)
    return {
        "missing_tables": missing_tables,
        "missing_columns": missing_columns,
        "missing_indexes": sorted(missing_indexes),
    }


def ensure_runtime_schema_compatibility() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _ensure_exclusivity_indexes()
        _assert_required_schema()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
