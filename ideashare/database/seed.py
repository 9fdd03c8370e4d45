"""
ideashare.database.seed — Default Categories & Tags Seeder
============================================================

Baseline lookup data seeded on first startup so the idea form has
something to pick from.

Idempotent: only inserts names that don't already exist.  Categories and
tags added later by operators are never touched.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from ideashare.database.models import Category, Tag

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Default catalogue
# ---------------------------------------------------------------------------
DEFAULT_CATEGORIES: dict[str, str] = {
    "Technology": "Software, hardware and everything digital",
    "Environment": "Climate, energy and sustainability",
    "Education": "Learning, teaching and knowledge sharing",
    "Health": "Wellbeing, medicine and fitness",
    "Business": "Startups, products and ways of working",
    "Community": "Local initiatives and social projects",
}
"""Each entry maps ``name`` → ``description``."""

DEFAULT_TAGS: tuple[str, ...] = (
    "ai",
    "open-source",
    "mobile",
    "web",
    "sustainability",
    "productivity",
    "social-impact",
    "hardware",
)


# ---------------------------------------------------------------------------
# Seeder
# ---------------------------------------------------------------------------
def seed_defaults(engine: Engine) -> None:
    """Insert default categories and tags that don't yet exist.

    Safe to call on every startup.
    """
    session = Session(engine)
    inserted = 0
    try:
        existing_categories = set(session.scalars(select(Category.name)).all())
        for name, description in DEFAULT_CATEGORIES.items():
            if name not in existing_categories:
                session.add(Category(name=name, description=description))
                inserted += 1

        existing_tags = set(session.scalars(select(Tag.name)).all())
        for name in DEFAULT_TAGS:
            if name not in existing_tags:
                session.add(Tag(name=name))
                inserted += 1
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    if inserted:
        logger.info("Seeded %d default categories/tags.", inserted)
