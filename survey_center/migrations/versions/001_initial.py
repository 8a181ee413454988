"""Initial survey schema.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Templates
    op.create_table(
        "survey_template",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("questions", sa.JSON, nullable=False),
        sa.Column("is_default", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_by", sa.String(200)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_survey_template_created_at", "survey_template", ["created_at"])

    # Assignments
    op.create_table(
        "survey_assignment",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("template_id", sa.Uuid, nullable=False),
        sa.Column("template_name", sa.String(200), nullable=False),
        sa.Column("student_id", sa.String(100), nullable=False),
        sa.Column("student_name", sa.String(200), nullable=False),
        sa.Column("student_code", sa.String(50)),
        sa.Column("class_id", sa.String(100)),
        sa.Column("class_name", sa.String(200)),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("assigned_by", sa.String(200)),
        sa.Column("expires_at", sa.DateTime(timezone=True)),
        sa.Column("submitted_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_survey_assignment_template_id", "survey_assignment", ["template_id"])
    op.create_index("ix_survey_assignment_student_id", "survey_assignment", ["student_id"])
    op.create_index("ix_survey_assignment_status", "survey_assignment", ["status"])
    op.create_index("ix_survey_assignment_assigned_at", "survey_assignment", ["assigned_at"])
    op.create_index("ix_survey_assignment_token", "survey_assignment", ["token"], unique=True)
    op.create_index(
        "uq_survey_assignment_pending",
        "survey_assignment",
        ["template_id", "student_id"],
        unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )

    # Responses
    op.create_table(
        "survey_response",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("assignment_id", sa.Uuid),
        sa.Column("template_id", sa.Uuid, nullable=False),
        sa.Column("template_name", sa.String(200), nullable=False),
        sa.Column("student_id", sa.String(100), nullable=False),
        sa.Column("student_name", sa.String(200), nullable=False),
        sa.Column("student_code", sa.String(50)),
        sa.Column("class_id", sa.String(100)),
        sa.Column("class_name", sa.String(200)),
        sa.Column("teacher_score", sa.Integer),
        sa.Column("curriculum_score", sa.Integer),
        sa.Column("care_score", sa.Integer),
        sa.Column("facilities_score", sa.Integer),
        sa.Column("average_score", sa.Float),
        sa.Column("answers", sa.JSON, nullable=False),
        sa.Column("comments", sa.Text),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("submitted_by", sa.String(20), nullable=False, server_default="student"),
        sa.Column("submitter_name", sa.String(200)),
        sa.Column("submitter_phone", sa.String(50)),
    )
    op.create_index(
        "ix_survey_response_assignment_id", "survey_response", ["assignment_id"], unique=True
    )
    op.create_index("ix_survey_response_template_id", "survey_response", ["template_id"])
    op.create_index("ix_survey_response_student_id", "survey_response", ["student_id"])
    op.create_index("ix_survey_response_class_id", "survey_response", ["class_id"])
    op.create_index("ix_survey_response_submitted_at", "survey_response", ["submitted_at"])

    # Students
    op.create_table(
        "student",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("class_id", sa.String(100)),
        sa.Column("class_name", sa.String(200)),
        sa.Column("password_hash", sa.String(255)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_student_code", "student", ["code"], unique=True)


def downgrade() -> None:
    op.drop_table("student")
    op.drop_table("survey_response")
    op.drop_table("survey_assignment")
    op.drop_table("survey_template")
