"""Initial schema: schools, job types, users, KPI catalog, submissions

Revision ID: 0001_initial
Revises: None
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "schools",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "job_types",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("school_id", sa.Integer, sa.ForeignKey("schools.id"), nullable=True),
        sa.Column("job_type_id", sa.Integer, sa.ForeignKey("job_types.id"), nullable=True),
        sa.Column("status", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_school_id", "users", ["school_id"])

    op.create_table(
        "kpis",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("job_type_id", sa.Integer, sa.ForeignKey("job_types.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("weight", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("min_accepted_evidence", sa.Integer, nullable=True),
        sa.Column("is_official", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("school_id", sa.Integer, sa.ForeignKey("schools.id"), nullable=True),
        sa.Column("source_kpi_id", sa.Integer, sa.ForeignKey("kpis.id"), nullable=True),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_kpis_job_type_id", "kpis", ["job_type_id"])
    op.create_index("ix_kpis_school_id", "kpis", ["school_id"])

    op.create_table(
        "school_kpi_weights",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("school_id", sa.Integer, sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("job_type_id", sa.Integer, sa.ForeignKey("job_types.id"), nullable=False),
        sa.Column("kpi_id", sa.Integer, sa.ForeignKey("kpis.id"), nullable=False),
        sa.Column("weight", sa.Numeric(5, 2), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("school_id", "job_type_id", "kpi_id", name="uq_school_kpi_weights"),
    )
    op.create_index("ix_school_kpi_weights_school_id", "school_kpi_weights", ["school_id"])

    op.create_table(
        "evidence_items",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("kpi_id", sa.Integer, sa.ForeignKey("kpis.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("is_official", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("school_id", sa.Integer, sa.ForeignKey("schools.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_evidence_items_kpi_id", "evidence_items", ["kpi_id"])
    op.create_index("ix_evidence_items_school_id", "evidence_items", ["school_id"])

    op.create_table(
        "evidence_submissions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("teacher_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("kpi_id", sa.Integer, sa.ForeignKey("kpis.id"), nullable=False),
        sa.Column("evidence_id", sa.Integer, sa.ForeignKey("evidence_items.id"), nullable=False),
        sa.Column("file_url", sa.String(512), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("rating", sa.Integer),
        sa.Column("reject_reason", sa.Text),
        sa.Column("reviewed_at", sa.DateTime),
        sa.Column("reviewed_by", sa.Integer, sa.ForeignKey("users.id")),
        *_timestamps(),
    )
    op.create_index("ix_evidence_submissions_teacher_id", "evidence_submissions", ["teacher_id"])
    op.create_index("ix_evidence_submissions_kpi_id", "evidence_submissions", ["kpi_id"])
    op.create_index("ix_evidence_submissions_status", "evidence_submissions", ["status"])


def downgrade() -> None:
    for t in ("evidence_submissions", "evidence_items", "school_kpi_weights", "kpis", "users", "job_types", "schools"):
        op.drop_table(t)
