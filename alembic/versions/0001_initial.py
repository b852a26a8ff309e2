"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum("admin", "teacher", name="userrole")
user_status = sa.Enum("invited", "active", "inactive", "suspended", name="userstatus")
code_status = sa.Enum("active", "inactive", name="codestatus")
word_search_status = sa.Enum("active", "inactive", name="wordsearchstatus")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.String(), nullable=True, unique=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("status", user_status, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("modified_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_categories_id", "categories", ["id"])
    op.create_index("ix_categories_deleted_at", "categories", ["deleted_at"])

    op.create_table(
        "stories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("file_link", sa.String(1024), nullable=False),
        sa.Column("subtitles", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_stories_id", "stories", ["id"])
    op.create_index("ix_stories_category_id", "stories", ["category_id"])
    op.create_index("ix_stories_created_at", "stories", ["created_at"])
    op.create_index("ix_stories_deleted_at", "stories", ["deleted_at"])

    op.create_table(
        "quiz_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("story_id", sa.Integer(), sa.ForeignKey("stories.id", ondelete="CASCADE"), nullable=False),
        sa.Column("quiz_number", sa.Integer(), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("correct_answer", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_quiz_items_id", "quiz_items", ["id"])
    op.create_index("ix_quiz_items_story_id", "quiz_items", ["story_id"])
    op.create_index("ix_quiz_items_deleted_at", "quiz_items", ["deleted_at"])

    op.create_table(
        "choices",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("quiz_item_id", sa.Integer(), sa.ForeignKey("quiz_items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
    )
    op.create_index("ix_choices_id", "choices", ["id"])
    op.create_index("ix_choices_quiz_item_id", "choices", ["quiz_item_id"])

    op.create_table(
        "codes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("story_id", sa.Integer(), sa.ForeignKey("stories.id"), nullable=False),
        sa.Column("status", code_status, nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_codes_id", "codes", ["id"])
    op.create_index("ix_codes_code", "codes", ["code"], unique=True)
    op.create_index("ix_codes_story_id", "codes", ["story_id"])
    op.create_index("ix_codes_created_at", "codes", ["created_at"])
    op.create_index("ix_codes_deleted_at", "codes", ["deleted_at"])

    op.create_table(
        "student_story_views",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code_id", sa.Integer(), sa.ForeignKey("codes.id"), nullable=False),
        sa.Column("story_id", sa.Integer(), sa.ForeignKey("stories.id"), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("section", sa.String(255), nullable=False),
        sa.Column("device_id", sa.String(64), nullable=False, server_default=""),
        sa.Column("viewed_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "code_id", "story_id", "full_name", "section", "device_id",
            name="uq_story_view_student_device"
        ),
    )
    op.create_index("ix_student_story_views_id", "student_story_views", ["id"])
    op.create_index("ix_student_story_views_code_id", "student_story_views", ["code_id"])
    op.create_index("ix_student_story_views_story_id", "student_story_views", ["story_id"])

    op.create_table(
        "student_submissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code_id", sa.Integer(), sa.ForeignKey("codes.id"), nullable=False),
        sa.Column("story_id", sa.Integer(), sa.ForeignKey("stories.id"), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("section", sa.String(255), nullable=False),
        sa.Column("device_id", sa.String(64), nullable=False, server_default=""),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_student_submissions_id", "student_submissions", ["id"])
    op.create_index("ix_student_submissions_code_id", "student_submissions", ["code_id"])
    op.create_index("ix_student_submissions_story_id", "student_submissions", ["story_id"])
    op.create_index("ix_student_submissions_submitted_at", "student_submissions", ["submitted_at"])
    op.create_index("ix_student_submissions_deleted_at", "student_submissions", ["deleted_at"])
    op.create_index(
        "uq_submission_code_student_live",
        "student_submissions",
        ["code_id", "full_name", "section"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
        sqlite_where=sa.text("deleted_at IS NULL"),
    )

    op.create_table(
        "answers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "submission_id", sa.Integer(),
            sa.ForeignKey("student_submissions.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("quiz_item_id", sa.Integer(), sa.ForeignKey("quiz_items.id"), nullable=False),
        sa.Column("selected_answer", sa.Text(), nullable=False),
    )
    op.create_index("ix_answers_id", "answers", ["id"])
    op.create_index("ix_answers_submission_id", "answers", ["submission_id"])
    op.create_index("ix_answers_quiz_item_id", "answers", ["quiz_item_id"])

    op.create_table(
        "system_config",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("default_choices_count", sa.Integer(), nullable=False),
        sa.Column("max_choices_count", sa.Integer(), nullable=False),
        sa.Column("min_choices_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_system_config_id", "system_config", ["id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("type", sa.String(64), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_notifications_id", "notifications", ["id"])
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])

    op.create_table(
        "word_searches",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", word_search_status, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_word_searches_id", "word_searches", ["id"])

    op.create_table(
        "word_search_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "word_search_id", sa.Integer(),
            sa.ForeignKey("word_searches.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("word", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
    )
    op.create_index("ix_word_search_items_id", "word_search_items", ["id"])
    op.create_index("ix_word_search_items_word_search_id", "word_search_items", ["word_search_id"])


def downgrade():
    op.drop_table("word_search_items")
    op.drop_table("word_searches")
    op.drop_table("notifications")
    op.drop_table("system_config")
    op.drop_table("answers")
    op.drop_index("uq_submission_code_student_live", table_name="student_submissions")
    op.drop_table("student_submissions")
    op.drop_table("student_story_views")
    op.drop_table("codes")
    op.drop_table("choices")
    op.drop_table("quiz_items")
    op.drop_table("stories")
    op.drop_table("categories")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (word_search_status, code_status, user_status, user_role):
        enum_type.drop(bind, checkfirst=True)
