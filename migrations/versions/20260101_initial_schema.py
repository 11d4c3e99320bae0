"""initial schema: events, registrations, audit_logs

Revision ID: 20260101_initial_schema
Revises:
Create Date: 2026-01-01 09:00:00
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "20260101_initial_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels = None
depends_on = None

EVENT_CATEGORY = sa.Enum("hackathon", "game", "celebration", name="eventcategory")
EVENT_SCOPE = sa.Enum("own_institution", "other_institution", name="eventscope")
REGISTRATION_STATUS = sa.Enum("pending", "approved", "rejected", name="registrationstatus")

ACTIVE_ONLY = sa.text("status IN ('pending', 'approved')")


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("category", EVENT_CATEGORY, nullable=False),
        sa.Column("scope", EVENT_SCOPE, nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("venue", sa.String(length=160), nullable=True),
        sa.Column("total_capacity", sa.Integer(), nullable=False),
        sa.Column("consumed_capacity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("registration_closed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("total_capacity >= 1", name=op.f("ck_events_total_capacity_positive")),
        sa.CheckConstraint("consumed_capacity >= 0", name=op.f("ck_events_consumed_capacity_non_negative")),
        sa.CheckConstraint("consumed_capacity <= total_capacity", name=op.f("ck_events_consumed_le_total")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_events")),
        sa.UniqueConstraint("title", name=op.f("uq_events_title")),
    )

    op.create_table(
        "registrations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("user_ref", sa.String(length=64), nullable=True),
        sa.Column("student_id", sa.String(length=40), nullable=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("email", sa.String(length=160), nullable=False),
        sa.Column("email_normalized", sa.String(length=160), nullable=False),
        sa.Column("institution", sa.String(length=200), nullable=False),
        sa.Column("department", sa.String(length=120), nullable=False),
        sa.Column("year", sa.String(length=20), nullable=False),
        sa.Column("status", REGISTRATION_STATUS, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], name=op.f("fk_registrations_event_id_events")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_registrations")),
    )
    op.create_index(op.f("ix_registrations_event_id"), "registrations", ["event_id"])
    op.create_index(op.f("ix_registrations_user_ref"), "registrations", ["user_ref"])
    op.create_index(op.f("ix_registrations_email_normalized"), "registrations", ["email_normalized"])
    op.create_index(op.f("ix_registrations_status"), "registrations", ["status"])
    # one pending/approved registration per (event, email); rejected rows do not count
    op.create_index(
        "uq_registrations_active_event_email",
        "registrations",
        ["event_id", "email_normalized"],
        unique=True,
        sqlite_where=ACTIVE_ONLY,
        postgresql_where=ACTIVE_ONLY,
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("actor", sa.String(length=160), nullable=True),
        sa.Column("entity", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=30), nullable=False),
        sa.Column("diff_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_audit_logs")),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_index("uq_registrations_active_event_email", table_name="registrations")
    op.drop_index(op.f("ix_registrations_status"), table_name="registrations")
    op.drop_index(op.f("ix_registrations_email_normalized"), table_name="registrations")
    op.drop_index(op.f("ix_registrations_user_ref"), table_name="registrations")
    op.drop_index(op.f("ix_registrations_event_id"), table_name="registrations")
    op.drop_table("registrations")
    op.drop_table("events")
    bind = op.get_bind()
    for enum in (REGISTRATION_STATUS, EVENT_SCOPE, EVENT_CATEGORY):
        enum.drop(bind, checkfirst=True)
