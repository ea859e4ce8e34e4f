"""Initial schema: services, branches, practitioners, bookings.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "services",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.CheckConstraint("duration_minutes >= 1", name="ck_services_duration"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "branches",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("start_hour", sa.Integer(), nullable=False),
        sa.Column("end_hour", sa.Integer(), nullable=False),
        sa.CheckConstraint("start_hour >= 0 AND end_hour <= 24", name="ck_branches_hours"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "practitioners",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("start_hour", sa.Integer(), nullable=False),
        sa.Column("end_hour", sa.Integer(), nullable=False),
        sa.Column("branch_id", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["branch_id"], ["branches.id"]),
        sa.CheckConstraint("start_hour >= 0 AND end_hour <= 24", name="ck_practitioners_hours"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_practitioners_branch_id"), "practitioners", ["branch_id"], unique=False)

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=False),
        sa.Column("service_id", sa.String(), nullable=False),
        sa.Column("service_name", sa.String(), nullable=False),
        sa.Column("service_duration_minutes", sa.Integer(), nullable=False),
        sa.Column("branch_id", sa.String(), nullable=True),
        sa.Column("practitioner_id", sa.String(), nullable=True),
        sa.Column("resource_kind", sa.String(), nullable=False),
        sa.Column("resource_id", sa.String(), nullable=False),
        sa.Column("resource_name", sa.String(), nullable=False),
        sa.Column("selected_date", sa.Date(), nullable=False),
        sa.Column("date_key", sa.String(), nullable=False),
        sa.Column("slot_label", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["service_id"], ["services.id"]),
        sa.ForeignKeyConstraint(["branch_id"], ["branches.id"]),
        sa.ForeignKeyConstraint(["practitioner_id"], ["practitioners.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_bookings_date_key"), "bookings", ["date_key"], unique=False)
    op.create_index(op.f("ix_bookings_status"), "bookings", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_bookings_status"), table_name="bookings")
    op.drop_index(op.f("ix_bookings_date_key"), table_name="bookings")
    op.drop_table("bookings")
    op.drop_index(op.f("ix_practitioners_branch_id"), table_name="practitioners")
    op.drop_table("practitioners")
    op.drop_table("branches")
    op.drop_table("services")
