"""
ideashare.services.taxonomy_service — Categories & Tags
=========================================================

Read access to the lookup tables and tag assignment for ideas.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from sqlalchemy import Engine, delete, select

from ideashare.database.engine import get_session
from ideashare.database.models import Category, IdeaTag, Tag
from ideashare.errors import NotFoundError
from ideashare.services.idea_service import require_owned_idea


def category_to_dict(c: Category) -> dict:
    return {"id": str(c.id), "name": c.name, "description": c.description}


def tag_to_dict(t: Tag) -> dict:
    return {"id": str(t.id), "name": t.name}


def list_categories(engine: Engine) -> list[dict]:
    with get_session(engine) as session:
        rows = session.scalars(select(Category).order_by(Category.name)).all()
        return [category_to_dict(c) for c in rows]


def list_tags(engine: Engine) -> list[dict]:
    with get_session(engine) as session:
        rows = session.scalars(select(Tag).order_by(Tag.name)).all()
        return [tag_to_dict(t) for t in rows]


def get_idea_tags(engine: Engine, idea_id: uuid.UUID) -> list[dict]:
    with get_session(engine) as session:
        rows = session.scalars(
            select(Tag)
            .join(IdeaTag, IdeaTag.tag_id == Tag.id)
            .where(IdeaTag.idea_id == idea_id)
            .order_by(Tag.name)
        ).all()
        return [tag_to_dict(t) for t in rows]


def set_idea_tags(
    engine: Engine,
    idea_id: uuid.UUID,
    user_id: uuid.UUID,
    tag_ids: Iterable[uuid.UUID],
) -> list[dict]:
    """Replace the tag set of an idea the caller owns.  Returns the new set."""
    wanted = list(dict.fromkeys(tag_ids))
    with get_session(engine) as session:
        require_owned_idea(session, idea_id, user_id)
        tags = session.scalars(select(Tag).where(Tag.id.in_(wanted))).all() if wanted else []
        found = {t.id for t in tags}
        for tag_id in wanted:
            if tag_id not in found:
                raise NotFoundError("Tag", tag_id)

        session.execute(
            delete(IdeaTag)
            .where(IdeaTag.idea_id == idea_id)
            .execution_options(synchronize_session=False)
        )
        for tag_id in wanted:
            session.add(IdeaTag(idea_id=idea_id, tag_id=tag_id))

    return sorted((tag_to_dict(t) for t in tags), key=lambda t: t["name"])
