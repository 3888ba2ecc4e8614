"""init schema

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "campuses",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("parent_id", sa.String(length=36), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_campuses_name", "campuses", ["name"])
    op.create_index("ix_campuses_parent_id", "campuses", ["parent_id"])

    op.create_table(
        "bathrooms",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("campus_id", sa.String(length=36), sa.ForeignKey("campuses.id"), nullable=False),
        sa.Column("floor", sa.String(length=40), nullable=False),
        sa.Column("code", sa.String(length=80), nullable=False),
        sa.Column("gender", sa.String(length=20), nullable=False, server_default="AllGender"),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_bathrooms_campus_id", "bathrooms", ["campus_id"])

    op.create_table(
        "inspections",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("bathroom_id", sa.String(length=36), sa.ForeignKey("bathrooms.id"), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("records", sa.JSON(), nullable=False),
        sa.Column("ticket_created", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("ticket_id", sa.String(length=36), nullable=True),
    )
    op.create_index("ix_inspections_bathroom_id", "inspections", ["bathroom_id"])
    op.create_index("ix_inspections_date", "inspections", ["date"])

    op.create_table(
        "tickets",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("type", sa.String(length=20), nullable=False, server_default="Maintenance"),
        sa.Column("inspection_id", sa.String(length=36), nullable=True),
        sa.Column("campus_name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("bathroom_code", sa.String(length=80), nullable=True),
        sa.Column("campus_id", sa.String(length=36), nullable=True),
        sa.Column("bathroom_id", sa.String(length=36), nullable=True),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(length=10), nullable=False, server_default="Medium"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Open"),
        sa.Column("estimated_cost", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("notes", sa.JSON(), nullable=False),
    )
    op.create_index("ix_tickets_inspection_id", "tickets", ["inspection_id"])
    op.create_index("ix_tickets_status", "tickets", ["status"])


def downgrade():
    op.drop_index("ix_tickets_status", table_name="tickets")
    op.drop_index("ix_tickets_inspection_id", table_name="tickets")
    op.drop_table("tickets")
    op.drop_index("ix_inspections_date", table_name="inspections")
    op.drop_index("ix_inspections_bathroom_id", table_name="inspections")
    op.drop_table("inspections")
    op.drop_index("ix_bathrooms_campus_id", table_name="bathrooms")
    op.drop_table("bathrooms")
    op.drop_index("ix_campuses_parent_id", table_name="campuses")
    op.drop_index("ix_campuses_name", table_name="campuses")
    op.drop_table("campuses")
