"""create scheduling core

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_ASSIGNMENT_CLAUSE = "status = 'active' AND deleted_at IS NULL"
LIVE_PLACEMENT_CLAUSE = "deleted_at IS NULL"

ENUMS = {
    "day_of_week": ("mon", "tue", "wed", "thu", "fri", "sat"),
    "assignment_status": ("active", "inactive"),
    "academic_year_status": ("active", "inactive"),
    "time_slot_status": ("active", "inactive"),
    "classroom_type": ("classroom", "laboratory", "auditorium", "sports"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name in ENUMS:
        _enum(name).create(bind, checkfirst=True)

    op.create_table(
        "institutions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("code", sa.String(length=50), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "sites",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institution_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("institution_id", "name", name="uq_sites_institution_name"),
    )
    op.create_index("ix_sites_institution_id", "sites", ["institution_id"], unique=False)

    op.create_table(
        "grade_levels",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institution_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("institution_id", "name", name="uq_grade_levels_institution_name"),
    )
    op.create_index("ix_grade_levels_institution_id", "grade_levels", ["institution_id"], unique=False)

    op.create_table(
        "academic_years",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institution_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", _enum("academic_year_status"), nullable=False, server_default="active"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("institution_id", "name", name="uq_academic_years_institution_name"),
    )
    op.create_index("ix_academic_years_institution_id", "academic_years", ["institution_id"], unique=False)

    op.create_table(
        "periods",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("academic_year_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_periods_academic_year_id", "periods", ["academic_year_id"], unique=False)

    op.create_table(
        "time_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institution_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("status", _enum("time_slot_status"), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("institution_id", "start_time", "end_time", name="uq_time_slots_institution_window"),
    )
    op.create_index("ix_time_slots_institution_id", "time_slots", ["institution_id"], unique=False)

    op.create_table(
        "classrooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institution_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", _enum("classroom_type"), nullable=False, server_default="classroom"),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        *_timestamps(),
        sa.UniqueConstraint("institution_id", "name", name="uq_classrooms_institution_name"),
    )
    op.create_index("ix_classrooms_institution_id", "classrooms", ["institution_id"], unique=False)

    op.create_table(
        "teachers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institution_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("specialty", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_teachers_institution_id", "teachers", ["institution_id"], unique=False)

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institution_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=True),
        sa.Column("weekly_hours", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_subjects_institution_id", "subjects", ["institution_id"], unique=False)

    op.create_table(
        "groups",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institution_id", sa.String(length=36), nullable=False),
        sa.Column("site_id", sa.String(length=36), nullable=False),
        sa.Column("grade_level_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("site_id", "grade_level_id", "name", name="uq_groups_site_grade_name"),
    )
    op.create_index("ix_groups_institution_id", "groups", ["institution_id"], unique=False)
    op.create_index("ix_groups_site_id", "groups", ["site_id"], unique=False)
    op.create_index("ix_groups_grade_level_id", "groups", ["grade_level_id"], unique=False)

    op.create_table(
        "assignments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("teacher_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("group_id", sa.String(length=36), nullable=False),
        sa.Column("time_slot_id", sa.String(length=36), nullable=False),
        sa.Column("day_of_week", _enum("day_of_week"), nullable=False),
        sa.Column("academic_year_id", sa.String(length=36), nullable=False),
        sa.Column("period_id", sa.String(length=36), nullable=True),
        sa.Column("status", _enum("assignment_status"), nullable=False, server_default="active"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_assignments_teacher_id", "assignments", ["teacher_id"], unique=False)
    op.create_index("ix_assignments_subject_id", "assignments", ["subject_id"], unique=False)
    op.create_index("ix_assignments_group_id", "assignments", ["group_id"], unique=False)
    op.create_index("ix_assignments_year_period", "assignments", ["academic_year_id", "period_id"], unique=False)
    op.create_index(
        "uq_assignments_active_teacher_slot",
        "assignments",
        ["teacher_id", "day_of_week", "time_slot_id", "academic_year_id"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_ASSIGNMENT_CLAUSE),
        sqlite_where=sa.text(ACTIVE_ASSIGNMENT_CLAUSE),
    )
    op.create_index(
        "uq_assignments_active_group_slot",
        "assignments",
        ["group_id", "day_of_week", "time_slot_id", "academic_year_id"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_ASSIGNMENT_CLAUSE),
        sqlite_where=sa.text(ACTIVE_ASSIGNMENT_CLAUSE),
    )

    op.create_table(
        "placements",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("assignment_id", sa.String(length=36), nullable=False),
        sa.Column("classroom_id", sa.String(length=36), nullable=False),
        sa.Column("time_slot_id", sa.String(length=36), nullable=False),
        sa.Column("day_of_week", _enum("day_of_week"), nullable=False),
        sa.Column("academic_year_id", sa.String(length=36), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_placements_assignment_id", "placements", ["assignment_id"], unique=False)
    op.create_index("ix_placements_classroom_id", "placements", ["classroom_id"], unique=False)
    op.create_index(
        "uq_placements_room_slot",
        "placements",
        ["classroom_id", "time_slot_id", "day_of_week", "academic_year_id"],
        unique=True,
        postgresql_where=sa.text(LIVE_PLACEMENT_CLAUSE),
        sqlite_where=sa.text(LIVE_PLACEMENT_CLAUSE),
    )
    op.create_index(
        "uq_placements_assignment_slot",
        "placements",
        ["assignment_id", "time_slot_id", "day_of_week", "academic_year_id"],
        unique=True,
        postgresql_where=sa.text(LIVE_PLACEMENT_CLAUSE),
        sqlite_where=sa.text(LIVE_PLACEMENT_CLAUSE),
    )

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("institution_id", sa.String(length=36), nullable=True),
        sa.Column("actor_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_institution_id", "activity_logs", ["institution_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_activity_logs_institution_id", table_name="activity_logs")
    op.drop_table("activity_logs")

    for name in ("uq_placements_assignment_slot", "uq_placements_room_slot", "ix_placements_classroom_id", "ix_placements_assignment_id"):
        op.drop_index(name, table_name="placements")
    op.drop_table("placements")

    for name in (
        "uq_assignments_active_group_slot",
        "uq_assignments_active_teacher_slot",
        "ix_assignments_year_period",
        "ix_assignments_group_id",
        "ix_assignments_subject_id",
        "ix_assignments_teacher_id",
    ):
        op.drop_index(name, table_name="assignments")
    op.drop_table("assignments")

    for name in ("ix_groups_grade_level_id", "ix_groups_site_id", "ix_groups_institution_id"):
        op.drop_index(name, table_name="groups")
    op.drop_table("groups")

    for table in ("subjects", "teachers", "classrooms", "time_slots", "academic_years", "grade_levels", "sites"):
        op.drop_index(f"ix_{table}_institution_id", table_name=table)
        op.drop_table(table)
    op.drop_index("ix_periods_academic_year_id", table_name="periods")
    op.drop_table("periods")
    op.drop_table("institutions")

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        _enum(name).drop(bind, checkfirst=True)
