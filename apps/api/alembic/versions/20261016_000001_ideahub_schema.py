"""create ideas hub schema

Revision ID: 20261016_000001
Revises:
Create Date: 2026-10-16 00:00:01.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261016_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("tier", sa.String(length=20), nullable=False, server_default="free"),
        *_timestamps(),
        sa.CheckConstraint("length(trim(email)) > 0", name="users_email_not_empty"),
        sa.CheckConstraint("tier in ('free', 'premium')", name="users_tier_valid"),
        sa.CheckConstraint("display_name is null or length(display_name) <= 100", name="users_display_name_length"),
        sa.CheckConstraint("bio is null or length(bio) <= 1000", name="users_bio_length"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_created_at"), "users", ["created_at"], unique=False)

    op.create_table(
        "ideas",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("difficulty", sa.String(length=20), nullable=False, server_default="Beginner"),
        sa.Column("tools", sa.JSON(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("monetization_potential", sa.Text(), nullable=True),
        sa.Column("estimated_build_time", sa.String(length=50), nullable=True),
        sa.Column("free_tier", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("guest_visible", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("project_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("length(trim(title)) > 0", name="ideas_title_not_empty"),
        sa.CheckConstraint("length(trim(description)) > 0", name="ideas_description_not_empty"),
        sa.CheckConstraint("difficulty in ('Beginner', 'Intermediate', 'Advanced')", name="ideas_difficulty_valid"),
        sa.CheckConstraint("view_count >= 0", name="ideas_view_count_positive"),
        sa.CheckConstraint("comment_count >= 0", name="ideas_comment_count_positive"),
        sa.CheckConstraint("project_count >= 0", name="ideas_project_count_positive"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_ideas_category"), "ideas", ["category"], unique=False)
    op.create_index(op.f("ix_ideas_difficulty"), "ideas", ["difficulty"], unique=False)
    op.create_index(op.f("ix_ideas_free_tier"), "ideas", ["free_tier"], unique=False)
    op.create_index(op.f("ix_ideas_created_at"), "ideas", ["created_at"], unique=False)
    op.create_index("ix_ideas_category_difficulty", "ideas", ["category", "difficulty"], unique=False)
    op.create_index("ix_ideas_view_count", "ideas", ["view_count"], unique=False)

    op.create_table(
        "comments",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("idea_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("parent_comment_id", sa.String(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("flagged_for_moderation", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.CheckConstraint("length(trim(content)) > 0", name="comments_content_not_empty"),
        sa.CheckConstraint("length(content) <= 5000", name="comments_content_max_length"),
        sa.CheckConstraint("parent_comment_id is null or id != parent_comment_id", name="comments_no_self_reference"),
        sa.ForeignKeyConstraint(["idea_id"], ["ideas.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_comment_id"], ["comments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_comments_idea_id"), "comments", ["idea_id"], unique=False)
    op.create_index(op.f("ix_comments_user_id"), "comments", ["user_id"], unique=False)
    op.create_index(op.f("ix_comments_parent_comment_id"), "comments", ["parent_comment_id"], unique=False)
    op.create_index(op.f("ix_comments_created_at"), "comments", ["created_at"], unique=False)
    op.create_index("ix_comments_idea_id_created_at", "comments", ["idea_id", "created_at"], unique=False)

    op.create_table(
        "project_links",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("idea_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("url", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tools_used", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("length(trim(title)) > 0", name="project_links_title_not_empty"),
        sa.CheckConstraint("length(trim(url)) > 0", name="project_links_url_not_empty"),
        sa.CheckConstraint("description is null or length(description) <= 500", name="project_links_description_max_length"),
        sa.ForeignKeyConstraint(["idea_id"], ["ideas.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_project_links_idea_id"), "project_links", ["idea_id"], unique=False)
    op.create_index(op.f("ix_project_links_user_id"), "project_links", ["user_id"], unique=False)
    op.create_index(op.f("ix_project_links_created_at"), "project_links", ["created_at"], unique=False)

    op.create_table(
        "page_views",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("page", sa.String(length=100), nullable=False),
        sa.Column("idea_id", sa.String(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.CheckConstraint("length(trim(page)) > 0", name="page_views_page_not_empty"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["idea_id"], ["ideas.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_page_views_user_id"), "page_views", ["user_id"], unique=False)
    op.create_index(op.f("ix_page_views_idea_id"), "page_views", ["idea_id"], unique=False)
    op.create_index(op.f("ix_page_views_timestamp"), "page_views", ["timestamp"], unique=False)
    op.create_index("ix_page_views_idea_id_timestamp", "page_views", ["idea_id", "timestamp"], unique=False)

    op.create_table(
        "metrics",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("metric_key", sa.String(length=100), nullable=False),
        sa.Column("metric_value", sa.Float(), nullable=False, server_default="0"),
        sa.Column("date", sa.Date(), nullable=False, server_default=sa.text("CURRENT_DATE")),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.CheckConstraint("length(trim(metric_key)) > 0", name="metrics_key_not_empty"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("metric_key", "date", name="metrics_unique_key_date"),
    )
    op.create_index(op.f("ix_metrics_metric_key"), "metrics", ["metric_key"], unique=False)
    op.create_index(op.f("ix_metrics_date"), "metrics", ["date"], unique=False)

    op.create_table(
        "news_banners",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("link", sa.String(length=500), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("length(trim(title)) > 0", name="news_banners_title_not_empty"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_news_banners_active"), "news_banners", ["active"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_news_banners_active"), table_name="news_banners")
    op.drop_table("news_banners")
    op.drop_index(op.f("ix_metrics_date"), table_name="metrics")
    op.drop_index(op.f("ix_metrics_metric_key"), table_name="metrics")
    op.drop_table("metrics")
    op.drop_index("ix_page_views_idea_id_timestamp", table_name="page_views")
    op.drop_index(op.f("ix_page_views_timestamp"), table_name="page_views")
    op.drop_index(op.f("ix_page_views_idea_id"), table_name="page_views")
    op.drop_index(op.f("ix_page_views_user_id"), table_name="page_views")
    op.drop_table("page_views")
    op.drop_index(op.f("ix_project_links_created_at"), table_name="project_links")
    op.drop_index(op.f("ix_project_links_user_id"), table_name="project_links")
    op.drop_index(op.f("ix_project_links_idea_id"), table_name="project_links")
    op.drop_table("project_links")
    op.drop_index("ix_comments_idea_id_created_at", table_name="comments")
    op.drop_index(op.f("ix_comments_created_at"), table_name="comments")
    op.drop_index(op.f("ix_comments_parent_comment_id"), table_name="comments")
    op.drop_index(op.f("ix_comments_user_id"), table_name="comments")
    op.drop_index(op.f("ix_comments_idea_id"), table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_ideas_view_count", table_name="ideas")
    op.drop_index("ix_ideas_category_difficulty", table_name="ideas")
    op.drop_index(op.f("ix_ideas_created_at"), table_name="ideas")
    op.drop_index(op.f("ix_ideas_free_tier"), table_name="ideas")
    op.drop_index(op.f("ix_ideas_difficulty"), table_name="ideas")
    op.drop_index(op.f("ix_ideas_category"), table_name="ideas")
    op.drop_table("ideas")
    op.drop_index(op.f("ix_users_created_at"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
