"""initial lms schema

Revision ID: 3a7e9c1d2b40
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3a7e9c1d2b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=150), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.Enum("student", "teacher", "parent", "admin", name="user_role"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
    )
    op.create_table(
        "students",
        sa.Column("student_id", sa.Integer(), primary_key=True),
        sa.Column("registration_number", sa.String(length=20), nullable=True, unique=True),
        sa.Column("class_name", sa.String(length=50), nullable=False),
        sa.Column("section", sa.String(length=10), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("parent_link_code", sa.String(length=36), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["users.user_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_id"], ["users.user_id"]),
    )
    op.create_table(
        "teachers",
        sa.Column("teacher_id", sa.Integer(), primary_key=True),
        sa.Column("employee_id", sa.String(length=50), nullable=False),
        sa.Column("department", sa.String(length=100), nullable=False),
        sa.Column("designation", sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.user_id"], ondelete="CASCADE"),
    )
    op.create_table(
        "parents",
        sa.Column("parent_id", sa.Integer(), primary_key=True),
        sa.Column("phone_number", sa.String(length=30), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(["parent_id"], ["users.user_id"], ondelete="CASCADE"),
    )
    op.create_table(
        "courses",
        sa.Column("course_id", sa.Integer(), primary_key=True),
        sa.Column("course_name", sa.String(length=150), nullable=False),
        sa.Column("course_code", sa.String(length=30), nullable=False),
        sa.Column("teacher_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.user_id"]),
    )
    op.create_table(
        "modules",
        sa.Column("module_id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("module_name", sa.String(length=150), nullable=False),
        sa.Column("total_marks", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["course_id"], ["courses.course_id"]),
        sa.CheckConstraint("total_marks > 0", name="module_total_marks_positive"),
    )
    op.create_table(
        "enrollments",
        sa.Column("enrollment_id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.student_id"]),
        sa.ForeignKeyConstraint(["course_id"], ["courses.course_id"]),
        sa.UniqueConstraint("student_id", "course_id", name="unique_student_course"),
    )
    op.create_table(
        "marks",
        sa.Column("mark_id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("module_id", sa.Integer(), nullable=False),
        sa.Column("obtained_marks", sa.Float(), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("average", sa.Float(), nullable=True),
        sa.Column("std_deviation", sa.Float(), nullable=True),
        sa.Column("min_marks", sa.Float(), nullable=True),
        sa.Column("max_marks", sa.Float(), nullable=True),
        sa.Column("median_marks", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["student_id"], ["students.student_id"]),
        sa.ForeignKeyConstraint(["module_id"], ["modules.module_id"]),
        sa.UniqueConstraint("student_id", "module_id", name="unique_student_module"),
    )
    op.create_table(
        "attendance",
        sa.Column("attendance_id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", sa.Enum("present", "absent", "late", name="attendance_status"), nullable=False),
        sa.ForeignKeyConstraint(["student_id"], ["students.student_id"]),
        sa.ForeignKeyConstraint(["course_id"], ["courses.course_id"]),
        sa.UniqueConstraint("student_id", "course_id", "date", name="unique_student_course_date"),
    )
    op.create_table(
        "assignments",
        sa.Column("assignment_id", sa.Integer(), primary_key=True),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("teacher_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("deadline", sa.DateTime(), nullable=False),
        sa.Column("file_path", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["course_id"], ["courses.course_id"]),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.user_id"]),
    )
    op.create_table(
        "submissions",
        sa.Column("submission_id", sa.Integer(), primary_key=True),
        sa.Column("assignment_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("text_answer", sa.Text(), nullable=True),
        sa.Column("file_path", sa.String(length=255), nullable=True),
        sa.Column("marks", sa.Float(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(), nullable=False),
        sa.Column("graded_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["assignment_id"], ["assignments.assignment_id"]),
        sa.ForeignKeyConstraint(["student_id"], ["students.student_id"]),
        sa.UniqueConstraint("assignment_id", "student_id", name="unique_assignment_student"),
    )
    op.create_table(
        "announcements",
        sa.Column("announcement_id", sa.Integer(), primary_key=True),
        sa.Column("teacher_id", sa.Integer(), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=True),
        sa.Column("audience", sa.Enum("students", "parents", "both", name="announcement_audience"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["teacher_id"], ["users.user_id"]),
        sa.ForeignKeyConstraint(["course_id"], ["courses.course_id"]),
    )


def downgrade():
    op.drop_table("announcements")
    op.drop_table("submissions")
    op.drop_table("assignments")
    op.drop_table("attendance")
    op.drop_table("marks")
    op.drop_table("enrollments")
    op.drop_table("modules")
    op.drop_table("courses")
    op.drop_table("parents")
    op.drop_table("teachers")
    op.drop_table("students")
    op.drop_table("users")
