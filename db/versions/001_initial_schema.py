"""Initial schema — departments, people, subjects, schedules, alerts, notices.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.TIMESTAMP(),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    # Enable uuid-ossp extension
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # -- departments --
    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("name_key", sa.String(120), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
        sa.UniqueConstraint("name_key"),
    )
    op.create_index("idx_departments_name_key", "departments", ["name_key"])

    # -- staff --
    op.create_table(
        "staff",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("role_title", sa.String(30), nullable=False, server_default="Teacher"),
        sa.Column("department_id", sa.Integer(), nullable=False),
        sa.Column("subject_name", sa.String(200), nullable=True),
        sa.Column("subject_code", sa.String(30), nullable=True),
        sa.Column("subject_key", sa.String(200), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("idx_staff_department_id", "staff", ["department_id"])
    op.create_index("idx_staff_subject_key", "staff", ["subject_key"])

    # -- users --
    op.create_table(
        "users",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("email", sa.String(200), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("password_hash", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="teacher"),
        sa.Column("department_id", sa.Integer(), nullable=True),
        sa.Column("staff_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["staff_id"], ["staff.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.CheckConstraint("role IN ('admin', 'teacher')", name="ck_users_role"),
    )

    # -- subjects --
    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("subject_code", sa.String(30), nullable=False),
        sa.Column("subject_name", sa.String(200), nullable=False),
        sa.Column("name_key", sa.String(200), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=False),
        sa.Column("academic_year", sa.Integer(), nullable=True),
        sa.Column("semester", sa.Integer(), nullable=True),
        sa.Column("is_shared", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("shared_subject_code", sa.String(30), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("subject_code"),
    )
    op.create_index("idx_subjects_name_key", "subjects", ["name_key"])
    op.create_index("idx_subjects_department_id", "subjects", ["department_id"])

    # -- exam_schedules --
    op.create_table(
        "exam_schedules",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=False),
        sa.Column("exam_date", sa.Date(), nullable=False),
        sa.Column("exam_time", sa.Time(), nullable=True),
        sa.Column("assigned_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_shared", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("priority_department_id", sa.Integer(), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["assigned_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(
            ["priority_department_id"], ["departments.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("subject_id", "department_id"),
    )
    op.create_index("idx_exam_schedules_exam_date", "exam_schedules", ["exam_date"])
    op.create_index(
        "idx_exam_schedules_department_id", "exam_schedules", ["department_id"]
    )

    # -- exam_alerts --
    op.create_table(
        "exam_alerts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("exam_type", sa.String(60), nullable=True),
        sa.Column("academic_year_label", sa.String(20), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("booking_deadline", sa.Date(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("semester", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "departments",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_by", sa.String(200), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("end_date >= start_date", name="ck_exam_alerts_window"),
    )
    op.create_index("idx_exam_alerts_status", "exam_alerts", ["status"])

    # -- notifications --
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("staff_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("subject_name", sa.String(200), nullable=False),
        sa.Column("exam_date", sa.Date(), nullable=False),
        sa.Column("acting_department_id", sa.Integer(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.ForeignKeyConstraint(["staff_id"], ["staff.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["acting_department_id"], ["departments.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_notifications_staff_id", "notifications", ["staff_id"])

    # -- audit_log --
    op.create_table(
        "audit_log",
        sa.Column(
            "id", sa.BigInteger(), autoincrement=True, nullable=False
        ),
        sa.Column(
            "actor_id", postgresql.UUID(as_uuid=True), nullable=True
        ),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("event_details", postgresql.JSONB(), nullable=True),
        sa.Column(
            "severity",
            sa.String(20),
            nullable=False,
            server_default="info",
        ),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_audit_log_actor_id", "audit_log", ["actor_id"])
    op.create_index("idx_audit_log_created_at", "audit_log", ["created_at"])
    op.create_index("idx_audit_log_event_type", "audit_log", ["event_type"])
    op.create_index("idx_audit_log_severity", "audit_log", ["severity"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("notifications")
    op.drop_table("exam_alerts")
    op.drop_table("exam_schedules")
    op.drop_table("subjects")
    op.drop_table("users")
    op.drop_table("staff")
    op.drop_table("departments")
    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
