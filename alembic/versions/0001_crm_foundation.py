"""crm foundation

Revision ID: 0001_crm_foundation
Revises: 
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_crm_foundation"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=120), nullable=False),
        sa.Column("role", sa.String(length=40), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("company", sa.String(length=255), nullable=True),
        sa.Column("nif", sa.String(length=50), nullable=True),
        sa.Column("sector", sa.String(length=255), nullable=True),
        sa.Column("lifecycle_stage", sa.String(length=30), nullable=False, server_default="Lead"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "lifecycle_stage IN ('Lead', 'Oportunidade', 'Cliente Ativo', 'Cliente Perdido')",
            name="ck_clients_lifecycle_stage",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_clients_name"), "clients", ["name"], unique=False)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=True),
        sa.Column("responsible_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("start_time", sa.String(length=8), nullable=True),
        sa.Column("end_time", sa.String(length=8), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="Planejado"),
        sa.Column("pipeline_status", sa.String(length=30), nullable=False, server_default="1º Contato"),
        sa.Column("pipeline_rank", sa.BigInteger(), nullable=True),
        sa.Column("service_ids", sa.JSON(), nullable=False),
        sa.Column("estimated_value", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.ForeignKeyConstraint(["responsible_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_events_client_id"), "events", ["client_id"], unique=False)
    op.create_index(op.f("ix_events_responsible_id"), "events", ["responsible_id"], unique=False)
    op.create_index(op.f("ix_events_name"), "events", ["name"], unique=False)
    op.create_index(op.f("ix_events_pipeline_status"), "events", ["pipeline_status"], unique=False)
    op.create_index(op.f("ix_events_pipeline_rank"), "events", ["pipeline_rank"], unique=False)

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=60), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Ativo"),
        sa.Column("technician_category", sa.String(length=60), nullable=True),
        sa.Column("cost_per_day", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_employees_user_id"), "employees", ["user_id"], unique=False)
    op.create_index(op.f("ix_employees_name"), "employees", ["name"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_employees_name"), table_name="employees")
    op.drop_index(op.f("ix_employees_user_id"), table_name="employees")
    op.drop_table("employees")

    op.drop_index(op.f("ix_events_pipeline_rank"), table_name="events")
    op.drop_index(op.f("ix_events_pipeline_status"), table_name="events")
    op.drop_index(op.f("ix_events_name"), table_name="events")
    op.drop_index(op.f("ix_events_responsible_id"), table_name="events")
    op.drop_index(op.f("ix_events_client_id"), table_name="events")
    op.drop_table("events")

    op.drop_index(op.f("ix_clients_name"), table_name="clients")
    op.drop_table("clients")

    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
