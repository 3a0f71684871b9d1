"""Initial schema: users, client profiles, cases, documents, appointments,
notifications, templates and the audit trail.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from __future__ import annotations

from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, tuple[str, ...], None] = None
depends_on: Union[str, tuple[str, ...], None] = None


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False, index=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # ── Standalone tables (no FKs) ─────────────────────────────────────

    op.create_table(
        "users",
        sa.Column("email", sa.String(255), nullable=False, index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, index=True),
        sa.Column("avatar", sa.String(500)),
        sa.Column("is_active", sa.Boolean(), nullable=False, index=True),
        *_base_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    # ── Tables with FKs to users ───────────────────────────────────────

    op.create_table(
        "client_profiles",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("cpf", sa.String(14), index=True),
        sa.Column("cnpj", sa.String(18), index=True),
        sa.Column("phone", sa.String(20)),
        sa.Column("city", sa.String(100)),
        sa.Column("state", sa.String(2)),
        sa.Column("company", sa.String(200)),
        sa.Column("position", sa.String(100)),
        *_base_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id"),
    )

    op.create_table(
        "cases",
        sa.Column("number", sa.String(50), comment="Court process number"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("value", sa.Numeric(14, 2)),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("lawyer_id", postgresql.UUID(as_uuid=True), index=True),
        *_base_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["client_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["lawyer_id"], ["users.id"]),
        sa.UniqueConstraint("number"),
    )

    op.create_table(
        "templates",
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500)),
        sa.Column("type", sa.String(20), nullable=False, index=True),
        sa.Column("category", sa.String(20), nullable=False, index=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("variables", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("tags", postgresql.ARRAY(sa.String), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, index=True),
        sa.Column("usage_count", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_by_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        *_base_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"]),
    )

    op.create_table(
        "audit_logs",
        sa.Column("action", sa.String(20), nullable=False, index=True),
        sa.Column("entity", sa.String(20), nullable=False, index=True),
        sa.Column("entity_id", sa.String(100), index=True),
        sa.Column("entity_name", sa.String(255)),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("user_name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("old_data", postgresql.JSONB(astext_type=sa.Text())),
        sa.Column("new_data", postgresql.JSONB(astext_type=sa.Text())),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text())),
        sa.Column("ip_address", sa.String(64)),
        sa.Column("user_agent", sa.String(500)),
        *_base_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )

    # ── Tables with FKs to cases ───────────────────────────────────────

    op.create_table(
        "documents",
        sa.Column("case_id", postgresql.UUID(as_uuid=True), index=True),
        sa.Column("uploaded_by_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("mime_type", sa.String(100)),
        sa.Column("size", sa.Integer(), comment="File size in bytes"),
        sa.Column("url", sa.String(500), comment="Static file URL"),
        *_base_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"]),
        sa.ForeignKeyConstraint(["uploaded_by_id"], ["users.id"]),
    )

    op.create_table(
        "appointments",
        sa.Column("case_id", postgresql.UUID(as_uuid=True), index=True),
        sa.Column("lawyer_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("location", sa.String(255)),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("meeting_url", sa.String(500)),
        *_base_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"]),
        sa.ForeignKeyConstraint(["lawyer_id"], ["users.id"]),
    )

    op.create_table(
        "notifications",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(40), nullable=False, index=True),
        sa.Column("priority", sa.String(10), nullable=False),
        sa.Column("action_url", sa.String(500)),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text())),
        sa.Column("is_read", sa.Boolean(), nullable=False, index=True),
        sa.Column("read_at", sa.DateTime(timezone=True)),
        sa.Column("case_id", postgresql.UUID(as_uuid=True)),
        sa.Column("document_id", postgresql.UUID(as_uuid=True)),
        sa.Column("appointment_id", postgresql.UUID(as_uuid=True)),
        *_base_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["appointment_id"], ["appointments.id"], ondelete="SET NULL"),
    )


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("notifications")
    op.drop_table("appointments")
    op.drop_table("documents")
    op.drop_table("audit_logs")
    op.drop_table("templates")
    op.drop_table("cases")
    op.drop_table("client_profiles")
    op.drop_table("users")
