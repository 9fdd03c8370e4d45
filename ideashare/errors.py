"""
ideashare.errors — Domain Error Taxonomy
=========================================

Every service either returns its result or raises one of these.  The
orchestrator never catches them; the HTTP layer maps them to status codes
in :mod:`ideashare.api.errors`.
"""

from __future__ import annotations


class IdeaShareError(Exception):
    """Base class for all domain errors."""


class ValidationError(IdeaShareError):
    """Caller-supplied input is malformed.  Raised before any store call."""


class NotFoundError(IdeaShareError):
    """A referenced row (idea, profile, comment, ...) does not exist."""

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class PermissionDeniedError(IdeaShareError):
    """The acting user does not own the row they are trying to change."""


class PersistenceError(IdeaShareError):
    """A store read or write failed.  The original exception is chained."""
