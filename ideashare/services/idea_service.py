"""
ideashare.services.idea_service — Ideas & Comments
====================================================

CRUD for the primary content unit.  Reads project the owning profile, the
category, tags and like/comment counts in one go, the way the idea feed
and the idea page consume them.

Only the owner may edit or delete an idea; only the author may delete a
comment.  Deleting an idea cascades to its comments, likes, tags,
milestones and notifications.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence

from sqlalchemy import Engine, func, or_, select
from sqlalchemy.orm import Session, selectinload

from ideashare.constants import MAX_TITLE_LENGTH, MIN_SEARCH_QUERY_LENGTH
from ideashare.database.engine import get_session
from ideashare.database.models import (
    Category,
    Comment,
    Idea,
    IdeaTag,
    Like,
    Profile,
    Tag,
)
from ideashare.errors import NotFoundError, PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS: frozenset[str] = frozenset({"title", "description", "category_id"})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _idea_query():
    return select(Idea).options(
        selectinload(Idea.profile),
        selectinload(Idea.category),
        selectinload(Idea.idea_tags).selectinload(IdeaTag.tag),
    )


def _counts(session: Session, model, idea_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, int]:
    if not idea_ids:
        return {}
    rows = session.execute(
        select(model.idea_id, func.count())
        .where(model.idea_id.in_(idea_ids))
        .group_by(model.idea_id)
    ).all()
    return {idea_id: count for idea_id, count in rows}


def _serialize(session: Session, ideas: Sequence[Idea], viewer_id: uuid.UUID | None) -> list[dict]:
    ids = [i.id for i in ideas]
    likes = _counts(session, Like, ids)
    comments = _counts(session, Comment, ids)
    liked: set[uuid.UUID] = set()
    if viewer_id is not None and ids:
        liked = set(session.scalars(
            select(Like.idea_id).where(Like.user_id == viewer_id, Like.idea_id.in_(ids))
        ).all())
    return [
        idea_to_dict(
            i,
            likes_count=likes.get(i.id, 0),
            comments_count=comments.get(i.id, 0),
            user_has_liked=(i.id in liked) if viewer_id is not None else None,
        )
        for i in ideas
    ]


def idea_to_dict(
    i: Idea,
    *,
    likes_count: int = 0,
    comments_count: int = 0,
    user_has_liked: bool | None = None,
) -> dict:
    return {
        "id": str(i.id),
        "title": i.title,
        "description": i.description,
        "user_id": str(i.user_id),
        "category_id": str(i.category_id) if i.category_id else None,
        "share_count": i.share_count,
        "created_at": i.created_at.isoformat() if i.created_at else None,
        "updated_at": i.updated_at.isoformat() if i.updated_at else None,
        "profile": {"username": i.profile.username, "avatar_url": i.profile.avatar_url},
        "category": (
            {"name": i.category.name, "description": i.category.description}
            if i.category else None
        ),
        "tags": sorted(
            ({"id": str(t.tag.id), "name": t.tag.name} for t in i.idea_tags),
            key=lambda t: t["name"],
        ),
        "likes_count": likes_count,
        "comments_count": comments_count,
        "user_has_liked": user_has_liked,
    }


def require_owned_idea(session: Session, idea_id: uuid.UUID, user_id: uuid.UUID) -> Idea:
    """Load an idea and check *user_id* owns it."""
    idea = session.get(Idea, idea_id)
    if idea is None:
        raise NotFoundError("Idea", idea_id)
    if idea.user_id != user_id:
        raise PermissionDeniedError("Only the owner can change this idea")
    return idea


def _clean_text(value: str | None, field: str, max_length: int | None = None) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field} cannot be empty")
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


def _check_category(session: Session, category_id: uuid.UUID | None) -> None:
    if category_id is not None and session.get(Category, category_id) is None:
        raise NotFoundError("Category", category_id)


def _resolve_tags(session: Session, tag_ids: Iterable[uuid.UUID]) -> list[Tag]:
    wanted = list(dict.fromkeys(tag_ids))
    if not wanted:
        return []
    tags = session.scalars(select(Tag).where(Tag.id.in_(wanted))).all()
    found = {t.id for t in tags}
    missing = [t for t in wanted if t not in found]
    if missing:
        raise NotFoundError("Tag", missing[0])
    return list(tags)


# ---------------------------------------------------------------------------
# Ideas: reads
# ---------------------------------------------------------------------------
def list_ideas(
    engine: Engine,
    *,
    category_id: uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
    viewer_id: uuid.UUID | None = None,
) -> list[dict]:
    """Newest-first feed, optionally filtered by category or owner."""
    query = _idea_query().order_by(Idea.created_at.desc())
    if category_id is not None:
        query = query.where(Idea.category_id == category_id)
    if user_id is not None:
        query = query.where(Idea.user_id == user_id)
    with get_session(engine) as session:
        ideas = session.scalars(query).all()
        return _serialize(session, ideas, viewer_id)


def get_idea(engine: Engine, idea_id: uuid.UUID, viewer_id: uuid.UUID | None = None) -> dict:
    with get_session(engine) as session:
        idea = session.scalar(_idea_query().where(Idea.id == idea_id))
        if idea is None:
            raise NotFoundError("Idea", idea_id)
        return _serialize(session, [idea], viewer_id)[0]


def search_ideas(engine: Engine, query: str, limit: int = 20) -> list[dict]:
    """Case-insensitive title/description search.  Short queries return []."""
    term = (query or "").strip()
    if len(term) < MIN_SEARCH_QUERY_LENGTH:
        return []
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    with get_session(engine) as session:
        ideas = session.scalars(
            _idea_query()
            .where(or_(
                Idea.title.ilike(pattern, escape="\\"),
                Idea.description.ilike(pattern, escape="\\"),
            ))
            .order_by(Idea.created_at.desc())
            .limit(limit)
        ).all()
        return _serialize(session, ideas, None)


# ---------------------------------------------------------------------------
# Ideas: writes
# ---------------------------------------------------------------------------
def create_idea(
    engine: Engine,
    user_id: uuid.UUID,
    *,
    title: str,
    description: str,
    category_id: uuid.UUID | None = None,
    tag_ids: Iterable[uuid.UUID] = (),
) -> dict:
    clean_title = _clean_text(title, "Title", MAX_TITLE_LENGTH)
    clean_description = _clean_text(description, "Description")

    with get_session(engine) as session:
        if session.get(Profile, user_id) is None:
            raise NotFoundError("Profile", user_id)
        _check_category(session, category_id)
        tags = _resolve_tags(session, tag_ids)

        idea = Idea(
            title=clean_title,
            description=clean_description,
            user_id=user_id,
            category_id=category_id,
            share_count=0,
        )
        session.add(idea)
        session.flush()
        for tag in tags:
            session.add(IdeaTag(idea_id=idea.id, tag_id=tag.id))
        session.flush()

        created = session.scalar(
            _idea_query().where(Idea.id == idea.id).execution_options(populate_existing=True)
        )
        logger.info("Idea %s created by %s", idea.id, user_id)
        return _serialize(session, [created], user_id)[0]


def update_idea(engine: Engine, idea_id: uuid.UUID, user_id: uuid.UUID, **changes) -> dict:
    """Owner-only edit of title, description and category."""
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot edit idea fields: {', '.join(sorted(unknown))}")
    if "title" in changes:
        changes["title"] = _clean_text(changes["title"], "Title", MAX_TITLE_LENGTH)
    if "description" in changes:
        changes["description"] = _clean_text(changes["description"], "Description")

    with get_session(engine) as session:
        idea = require_owned_idea(session, idea_id, user_id)
        if "category_id" in changes:
            _check_category(session, changes["category_id"])
        for key, value in changes.items():
            setattr(idea, key, value)
        session.flush()
        updated = session.scalar(
            _idea_query().where(Idea.id == idea_id).execution_options(populate_existing=True)
        )
        return _serialize(session, [updated], user_id)[0]


def delete_idea(engine: Engine, idea_id: uuid.UUID, user_id: uuid.UUID) -> None:
    with get_session(engine) as session:
        idea = require_owned_idea(session, idea_id, user_id)
        session.delete(idea)
    logger.info("Idea %s deleted by %s", idea_id, user_id)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------
def comment_to_dict(c: Comment, profile: Profile | None = None) -> dict:
    data = {
        "id": str(c.id),
        "content": c.content,
        "idea_id": str(c.idea_id),
        "user_id": str(c.user_id),
        "created_at": c.created_at.isoformat() if c.created_at else None,
    }
    if profile is not None:
        data["profile"] = {"username": profile.username, "avatar_url": profile.avatar_url}
    return data


def list_comments(engine: Engine, idea_id: uuid.UUID) -> list[dict]:
    """Oldest-first comments with their author."""
    with get_session(engine) as session:
        if session.get(Idea, idea_id) is None:
            raise NotFoundError("Idea", idea_id)
        rows = session.scalars(
            select(Comment)
            .options(selectinload(Comment.profile))
            .where(Comment.idea_id == idea_id)
            .order_by(Comment.created_at)
        ).all()
        return [comment_to_dict(c, c.profile) for c in rows]


def delete_comment(engine: Engine, comment_id: uuid.UUID, user_id: uuid.UUID) -> None:
    with get_session(engine) as session:
        comment = session.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)
        if comment.user_id != user_id:
            raise PermissionDeniedError("Only the author can delete this comment")
        session.delete(comment)
