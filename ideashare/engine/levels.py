"""
ideashare.engine.levels — Points → Level Computation
======================================================

THE single canonical level table.  Pure functions, no DB I/O, except
:func:`level_case` which renders the same table as a SQL ``CASE`` so the
points engine can recompute the level inside the UPDATE that changes the
points.

Tiers are evaluated highest first, so each boundary belongs to the
higher tier (100 is Intermediate, not Beginner).
"""

from __future__ import annotations

from sqlalchemy import case
from sqlalchemy.sql.elements import ColumnElement

from ideashare.database.models import Level
from ideashare.errors import ValidationError

__all__ = ["LEVEL_THRESHOLDS", "level_case", "level_for", "level_progress"]

# Highest tier first.  (minimum points, level)
LEVEL_THRESHOLDS: list[tuple[int, Level]] = [
    (1000, Level.MASTER),
    (500, Level.EXPERT),
    (200, Level.ADVANCED),
    (100, Level.INTERMEDIATE),
    (0, Level.BEGINNER),
]


def level_for(points: int) -> Level:
    """Return the tier whose range contains *points*."""
    if points < 0:
        raise ValidationError(f"points must be >= 0, got {points}")
    for minimum, level in LEVEL_THRESHOLDS:
        if points >= minimum:
            return level
    # Unreachable: the lowest threshold is 0
    return Level.BEGINNER


def level_progress(points: int) -> dict:
    """Level info for profile display.

    ``next_level`` and ``points_to_next`` are ``None`` at the top tier.
    """
    current = level_for(points)
    next_level: Level | None = None
    points_to_next: int | None = None
    # Walk upwards: the next tier is the lowest threshold above *points*
    for minimum, level in reversed(LEVEL_THRESHOLDS):
        if minimum > points:
            next_level = level
            points_to_next = minimum - points
            break
    return {
        "level": current.value,
        "points": points,
        "next_level": next_level.value if next_level else None,
        "points_to_next": points_to_next,
    }


def level_case(points_expr: ColumnElement[int]) -> ColumnElement[str]:
    """SQL expression mapping *points_expr* to a level name.

    Usage::

        update(Profile).values(
            points=Profile.points + delta,
            level=level_case(Profile.points + delta),
        )
    """
    *ranked, (_, lowest) = LEVEL_THRESHOLDS
    return case(
        *[(points_expr >= minimum, level.value) for minimum, level in ranked],
        else_=lowest.value,
    )
