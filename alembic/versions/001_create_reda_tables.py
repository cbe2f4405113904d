"""create users, profiles, courses, games and statistics tables

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "001"
down_revision = None
branch_labels = None
depends_on = None

user_role_enum = postgresql.ENUM("STUDENT", "TEACHER", "ADMIN", name="user_role_enum", create_type=False)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    user_role_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id",            sa.String(255), primary_key=True),
        sa.Column("username",      sa.String(255), nullable=False),
        sa.Column("password_hash", sa.Text(),      nullable=False),
        sa.Column("role",          user_role_enum, nullable=False),
        sa.Column("created_at",    sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "admins",
        sa.Column("id",            sa.String(255), primary_key=True),
        sa.Column("user_id",       sa.String(255), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("access_level",  sa.Integer(),   nullable=False, server_default="1"),
        sa.Column("permissions",   postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at",    sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_admins_user_id", "admins", ["user_id"])

    op.create_table(
        "teachers",
        sa.Column("id",      sa.String(255), primary_key=True),
        sa.Column("user_id", sa.String(255), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name",    sa.String(255), nullable=False),
        sa.Column("surname", sa.String(255), nullable=False),
        sa.Column("email",   sa.String(255), nullable=False),
        sa.Column("enable",  sa.Boolean(),   nullable=False, server_default="true"),
        *_timestamps(),
    )
    op.create_index("ix_teachers_user_id", "teachers", ["user_id"])
    op.create_index("ix_teachers_email", "teachers", ["email"], unique=True)

    op.create_table(
        "courses",
        sa.Column("id",         sa.String(255), primary_key=True),
        sa.Column("name",       sa.String(255), nullable=False),
        sa.Column("teacher_id", sa.String(255), sa.ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_courses_name", "courses", ["name"], unique=True)
    op.create_index("ix_courses_teacher_id", "courses", ["teacher_id"])

    op.create_table(
        "students",
        sa.Column("id",        sa.String(255), primary_key=True),
        sa.Column("user_id",   sa.String(255), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name",      sa.String(255), nullable=False),
        sa.Column("lastname",  sa.String(255), nullable=False),
        sa.Column("dni",       sa.String(20),  nullable=False),
        sa.Column("course_id", sa.String(255), sa.ForeignKey("courses.id", ondelete="SET NULL"), nullable=True),
        sa.Column("enable",    sa.Boolean(),   nullable=False, server_default="true"),
        *_timestamps(),
        sa.UniqueConstraint("dni", name="uq_students_dni"),
    )
    op.create_index("ix_students_user_id", "students", ["user_id"])
    op.create_index("ix_students_dni", "students", ["dni"])
    op.create_index("ix_students_course_id", "students", ["course_id"])

    op.create_table(
        "games",
        sa.Column("id",               sa.String(255), primary_key=True),
        sa.Column("name",             sa.String(255), nullable=False),
        sa.Column("description",      sa.Text(),      nullable=True),
        sa.Column("image_url",        sa.String(500), nullable=True),
        sa.Column("route",            sa.String(255), nullable=False),
        sa.Column("difficulty_level", sa.Integer(),   nullable=False, server_default="1"),
        sa.Column("is_active",        sa.Boolean(),   nullable=False, server_default="true"),
        *_timestamps(),
    )
    op.create_index("ix_games_name", "games", ["name"], unique=True)

    op.create_table(
        "games_levels",
        sa.Column("id",               sa.String(255), primary_key=True),
        sa.Column("game_id",          sa.String(255), sa.ForeignKey("games.id", ondelete="CASCADE"), nullable=False),
        sa.Column("level",            sa.Integer(),   nullable=False),
        sa.Column("name",             sa.String(255), nullable=False),
        sa.Column("description",      sa.Text(),      nullable=True),
        sa.Column("difficulty",       sa.String(50),  nullable=True),
        sa.Column("activities_count", sa.Integer(),   nullable=False, server_default="5"),
        sa.Column("config",           postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("is_active",        sa.Boolean(),   nullable=False, server_default="true"),
        *_timestamps(),
        sa.UniqueConstraint("game_id", "level", name="uq_games_levels_game_level"),
    )
    op.create_index("ix_games_levels_game_id", "games_levels", ["game_id"])
    op.create_index("ix_games_levels_game_active", "games_levels", ["game_id", "is_active"])

    op.create_table(
        "courses_games",
        sa.Column("id",          sa.String(255), primary_key=True),
        sa.Column("course_id",   sa.String(255), sa.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("game_id",     sa.String(255), sa.ForeignKey("games.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_enabled",  sa.Boolean(),   nullable=False, server_default="true"),
        sa.Column("order_index", sa.Integer(),   nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("course_id", "game_id", name="uq_courses_games_course_game"),
    )
    op.create_index("ix_courses_games_course_id", "courses_games", ["course_id"])
    op.create_index("ix_courses_games_game_id", "courses_games", ["game_id"])

    # one row per attempt, so (student, game, level, activity) repeats
    op.create_table(
        "student_statistics",
        sa.Column("id",                 sa.String(255), primary_key=True),
        sa.Column("student_id",         sa.String(255), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("game_id",            sa.String(255), sa.ForeignKey("games.id", ondelete="CASCADE"), nullable=False),
        sa.Column("level",              sa.Integer(),   nullable=False, server_default="1"),
        sa.Column("activity",           sa.Integer(),   nullable=False, server_default="1"),
        sa.Column("points",             sa.Integer(),   nullable=False, server_default="0"),
        sa.Column("total_points",       sa.Integer(),   nullable=False, server_default="0"),
        sa.Column("attempts",           sa.Integer(),   nullable=False, server_default="0"),
        sa.Column("correct_answers",    sa.Integer(),   nullable=True),
        sa.Column("total_questions",    sa.Integer(),   nullable=True),
        sa.Column("completion_time",    sa.Integer(),   nullable=True),
        sa.Column("is_completed",       sa.Boolean(),   nullable=False, server_default="false"),
        sa.Column("max_unlocked_level", sa.Integer(),   nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_student_statistics_student_id", "student_statistics", ["student_id"])
    op.create_index("ix_student_statistics_game_id", "student_statistics", ["game_id"])
    op.create_index("ix_student_statistics_created_at", "student_statistics", ["created_at"])
    op.create_index("ix_student_statistics_student_game", "student_statistics", ["student_id", "game_id"])
    op.create_index(
        "ix_student_statistics_student_game_level", "student_statistics", ["student_id", "game_id", "level"]
    )


def downgrade() -> None:
    for table in (
        "student_statistics",
        "courses_games",
        "games_levels",
        "games",
        "students",
        "courses",
        "teachers",
        "admins",
        "users",
    ):
        op.drop_table(table)
    user_role_enum.drop(op.get_bind(), checkfirst=True)
