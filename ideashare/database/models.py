"""
ideashare.database.models — SQLAlchemy 2.0 Data Models
========================================================

Tables:
- profiles        One row per member (id comes from the auth provider)
- categories      Inert lookup data for ideas
- tags            Inert lookup data for ideas
- ideas           User-authored posts, the primary content unit
- idea_tags       Idea ↔ Tag join table
- comments        Comments on ideas
- likes           At most one per (idea, user)
- follows         At most one per (follower, following)
- notifications   Fan-out records produced by engagement actions
- milestones      Implementation milestones tracked per idea
- side_effects    Durable outbox of pending point awards / notifications
"""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all IdeaShare ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class Level(enum.StrEnum):
    """Named bands of the points scale."""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"
    MASTER = "Master"


class ActionKind(enum.StrEnum):
    """Engagement actions that trigger points and notifications."""
    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    SHARE = "share"


class NotificationType(enum.StrEnum):
    COMMENT = "comment"
    LIKE = "like"
    FOLLOW = "follow"


class MilestoneStatus(enum.StrEnum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class SideEffectKind(enum.StrEnum):
    """What a queued outbox step does when applied."""
    AWARD_POINTS = "award_points"
    NOTIFY = "notify"


class SideEffectStatus(enum.StrEnum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Profiles: one row per member
# ---------------------------------------------------------------------------
class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, default=None)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    level: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Level.BEGINNER.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    ideas: Mapped[list[Idea]] = relationship(
        back_populates="profile", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_profiles_points_desc", "points"),
        CheckConstraint("points >= 0", name="ck_profiles_points_nonneg"),
    )

    def __repr__(self) -> str:
        return f"<Profile id={self.id} name={self.username!r} lvl={self.level}>"


# ---------------------------------------------------------------------------
# Categories & Tags: inert lookup data
# ---------------------------------------------------------------------------
class Category(Base):
    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Category name={self.name!r}>"


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Tag name={self.name!r}>"


# ---------------------------------------------------------------------------
# Ideas: the primary content unit
# ---------------------------------------------------------------------------
class Idea(Base):
    __tablename__ = "ideas"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    share_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships: deleting an idea removes everything hanging off it
    profile: Mapped[Profile] = relationship(back_populates="ideas")
    category: Mapped[Category | None] = relationship()
    comments: Mapped[list[Comment]] = relationship(
        back_populates="idea", cascade="all, delete-orphan"
    )
    likes: Mapped[list[Like]] = relationship(cascade="all, delete-orphan")
    idea_tags: Mapped[list[IdeaTag]] = relationship(
        back_populates="idea", cascade="all, delete-orphan"
    )
    milestones: Mapped[list[Milestone]] = relationship(cascade="all, delete-orphan")
    notifications: Mapped[list[Notification]] = relationship(
        foreign_keys="Notification.idea_id", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_ideas_created_at", "created_at"),
        Index("ix_ideas_user_id", "user_id"),
        Index("ix_ideas_category_id", "category_id"),
        CheckConstraint("share_count >= 0", name="ck_ideas_share_count_nonneg"),
    )

    def __repr__(self) -> str:
        return f"<Idea id={self.id} title={self.title!r}>"


class IdeaTag(Base):
    __tablename__ = "idea_tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    idea_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False
    )
    tag_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    idea: Mapped[Idea] = relationship(back_populates="idea_tags")
    tag: Mapped[Tag] = relationship()

    __table_args__ = (
        UniqueConstraint("idea_id", "tag_id", name="uq_idea_tags_idea_tag"),
    )


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------
class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    idea_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    idea: Mapped[Idea] = relationship(back_populates="comments")
    profile: Mapped[Profile] = relationship()
    notifications: Mapped[list[Notification]] = relationship(
        foreign_keys="Notification.comment_id", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_comments_idea_time", "idea_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Comment id={self.id} idea={self.idea_id}>"


# ---------------------------------------------------------------------------
# Likes & Follows
# ---------------------------------------------------------------------------
class Like(Base):
    __tablename__ = "likes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    idea_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("idea_id", "user_id", name="uq_likes_idea_user"),
    )


class Follow(Base):
    __tablename__ = "follows"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    follower_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    following_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        Index("ix_follows_following", "following_id"),
    )


# ---------------------------------------------------------------------------
# Notifications: written only by the notification fan-out
# ---------------------------------------------------------------------------
class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    idea_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=True
    )
    comment_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    sender: Mapped[Profile | None] = relationship(foreign_keys=[sender_id])

    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "is_read"),
        Index("ix_notifications_user_time", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification id={self.id} user={self.user_id} "
            f"type={self.type!r} read={self.is_read}>"
        )


# ---------------------------------------------------------------------------
# Milestones: implementation tracking per idea
# ---------------------------------------------------------------------------
class Milestone(Base):
    __tablename__ = "milestones"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    idea_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MilestoneStatus.PLANNED.value
    )
    due_date: Mapped[date | None] = mapped_column(Date, default=None)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_milestones_idea", "idea_id"),
    )

    def __repr__(self) -> str:
        return f"<Milestone id={self.id} status={self.status!r}>"


# ---------------------------------------------------------------------------
# SideEffect: durable outbox of engagement side effects
# ---------------------------------------------------------------------------
class SideEffect(Base):
    """One queued step of an engagement action.

    Rows are written in the same transaction as the primary record (like,
    comment, follow, share) and applied afterwards, one transaction per
    step.  ``status`` moves ``pending → done`` exactly once; a step that
    keeps failing ends up ``failed`` and is left for an operator.
    """
    __tablename__ = "side_effects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    saga_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    step: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    payload: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SideEffectStatus.PENDING.value
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )

    __table_args__ = (
        UniqueConstraint("saga_id", "step", name="uq_side_effects_saga_step"),
        Index("ix_side_effects_status", "status", "id"),
    )

    def __repr__(self) -> str:
        return (
            f"<SideEffect id={self.id} saga={self.saga_id} "
            f"step={self.step} kind={self.kind!r} status={self.status!r}>"
        )
