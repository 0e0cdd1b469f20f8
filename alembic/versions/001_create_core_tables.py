"""create users, student_lists, students, activities

Revision ID: 001
Revises: 
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision  = "001"
down_revision = None
branch_labels = None
depends_on    = None

USER_ROLES = ("COORDINATOR", "MONITOR")
ACTIVITY_CATEGORIES = (
    "EVENTS", "ORGANIZATION", "RESEARCH", "EXTENSION",
    "MONITORING", "INTERNSHIP", "PUBLICATIONS", "COURSES",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id",            sa.Integer(),               primary_key=True, autoincrement=True),
        sa.Column("name",          sa.String(150),             nullable=False),
        sa.Column("email",         sa.String(255),             nullable=False),
        sa.Column("role",          sa.Enum(*USER_ROLES, name="user_role_enum"), nullable=False),
        sa.Column("password_hash", sa.Text(),                  nullable=False),
        sa.Column("is_active",     sa.Boolean(),               nullable=False, server_default="1"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at",    sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_id",    "users", ["id"],    unique=False)

    op.create_table(
        "student_lists",
        sa.Column("id",                     sa.Integer(),               primary_key=True, autoincrement=True),
        sa.Column("title",                  sa.String(200),             nullable=False),
        sa.Column("total_hours_required",   sa.Integer(),               nullable=False, server_default="150"),
        sa.Column("max_hours_per_category", sa.Integer(),               nullable=False, server_default="50"),
        sa.Column("created_at",             sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at",             sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("total_hours_required > 0",   name="ck_student_lists_total_positive"),
        sa.CheckConstraint("max_hours_per_category > 0", name="ck_student_lists_cap_positive"),
    )
    op.create_index("ix_student_lists_id",    "student_lists", ["id"])
    op.create_index("ix_student_lists_title", "student_lists", ["title"])

    op.create_table(
        "students",
        sa.Column("id",         sa.Integer(),               primary_key=True, autoincrement=True),
        sa.Column("list_id",    sa.Integer(),               sa.ForeignKey("student_lists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name",       sa.String(150),             nullable=False),
        sa.Column("cpf",        sa.String(20),              nullable=False),
        sa.Column("course",     sa.String(150),             nullable=False, server_default=""),
        sa.Column("class_name", sa.String(50),              nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("list_id", "cpf", name="uq_students_list_cpf"),
    )
    op.create_index("ix_students_list_id",   "students", ["list_id"])
    op.create_index("ix_students_cpf",       "students", ["cpf"])
    op.create_index("ix_students_list_name", "students", ["list_id", "name"])

    op.create_table(
        "activities",
        sa.Column("id",           sa.Integer(),               primary_key=True, autoincrement=True),
        sa.Column("student_id",   sa.Integer(),               sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category",     sa.Enum(*ACTIVITY_CATEGORIES, name="activity_category_enum"), nullable=False),
        sa.Column("hours",        sa.Numeric(7, 2),           nullable=False),
        sa.Column("occurred_on",  sa.Date(),                  nullable=False),
        sa.Column("recorded_by",  sa.String(150),             nullable=False),
        sa.Column("document_ref", sa.String(500),             nullable=True),
        sa.Column("notes",        sa.Text(),                  nullable=True),
        sa.Column("created_at",   sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at",   sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_activities_id",               "activities", ["id"])
    op.create_index("ix_activities_student_id",       "activities", ["student_id"])
    op.create_index("ix_activities_student_category", "activities", ["student_id", "category"])


def downgrade() -> None:
    op.drop_table("activities")
    op.drop_table("students")
    op.drop_table("student_lists")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_id",    table_name="users")
    op.drop_table("users")
    sa.Enum(name="activity_category_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="user_role_enum").drop(op.get_bind(), checkfirst=True)
