"""initial schema: profiles, ideas, engagement tables and side-effect outbox

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # --- Members & lookup data ---
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False, unique=True),
        sa.Column("avatar_url", sa.Text()),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("level", sa.String(20), nullable=False, server_default="Beginner"),
        *_timestamps(),
        sa.CheckConstraint("points >= 0", name="ck_profiles_points_nonneg"),
    )
    op.create_index("ix_profiles_points_desc", "profiles", ["points"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        *_timestamps(),
    )
    op.create_table(
        "tags",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
        *_timestamps(),
    )

    # --- Ideas ---
    op.create_table(
        "ideas",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "user_id", sa.Uuid(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "category_id", sa.Uuid(),
            sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("share_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("share_count >= 0", name="ck_ideas_share_count_nonneg"),
    )
    op.create_index("ix_ideas_created_at", "ideas", ["created_at"])
    op.create_index("ix_ideas_user_id", "ideas", ["user_id"])
    op.create_index("ix_ideas_category_id", "ideas", ["category_id"])

    op.create_table(
        "idea_tags",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "idea_id", sa.Uuid(),
            sa.ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "tag_id", sa.Uuid(),
            sa.ForeignKey("tags.id", ondelete="CASCADE"), nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("idea_id", "tag_id", name="uq_idea_tags_idea_tag"),
    )

    # --- Engagement ---
    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "idea_id", sa.Uuid(),
            sa.ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "user_id", sa.Uuid(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_comments_idea_time", "comments", ["idea_id", "created_at"])

    op.create_table(
        "likes",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "idea_id", sa.Uuid(),
            sa.ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "user_id", sa.Uuid(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("idea_id", "user_id", name="uq_likes_idea_user"),
    )

    op.create_table(
        "follows",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "follower_id", sa.Uuid(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "following_id", sa.Uuid(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
    )
    op.create_index("ix_follows_following", "follows", ["following_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id", sa.Uuid(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "sender_id", sa.Uuid(),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "idea_id", sa.Uuid(),
            sa.ForeignKey("ideas.id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column(
            "comment_id", sa.Uuid(),
            sa.ForeignKey("comments.id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_notifications_user_read", "notifications", ["user_id", "is_read"])
    op.create_index("ix_notifications_user_time", "notifications", ["user_id", "created_at"])

    op.create_table(
        "milestones",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "idea_id", sa.Uuid(),
            sa.ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False, server_default="planned"),
        sa.Column("due_date", sa.Date()),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_milestones_idea", "milestones", ["idea_id"])

    # --- Side-effect outbox ---
    op.create_table(
        "side_effects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("saga_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("step", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("payload", postgresql.JSONB(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_error", sa.Text()),
        *_timestamps(),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.UniqueConstraint("saga_id", "step", name="uq_side_effects_saga_step"),
    )
    op.create_index("ix_side_effects_status", "side_effects", ["status", "id"])


def downgrade() -> None:
    op.drop_index("ix_side_effects_status", table_name="side_effects")
    op.drop_table("side_effects")
    op.drop_index("ix_milestones_idea", table_name="milestones")
    op.drop_table("milestones")
    op.drop_index("ix_notifications_user_time", table_name="notifications")
    op.drop_index("ix_notifications_user_read", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_follows_following", table_name="follows")
    op.drop_table("follows")
    op.drop_table("likes")
    op.drop_index("ix_comments_idea_time", table_name="comments")
    op.drop_table("comments")
    op.drop_table("idea_tags")
    op.drop_index("ix_ideas_category_id", table_name="ideas")
    op.drop_index("ix_ideas_user_id", table_name="ideas")
    op.drop_index("ix_ideas_created_at", table_name="ideas")
    op.drop_table("ideas")
    op.drop_table("tags")
    op.drop_table("categories")
    op.drop_index("ix_profiles_points_desc", table_name="profiles")
    op.drop_table("profiles")
