"""
IdeaShare — Gamified Idea-Sharing Backend
===========================================
Members post ideas, comment, like, share and follow each other.  Every
engagement action earns points, moves members through levels and fans out
notifications, with the side effects kept in a durable outbox so an
interrupted action can always be finished later.

Package layout::

    ideashare/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Content limits, counter whitelist
    ├── errors.py          # Domain error taxonomy
    ├── worker.py          # Outbox replay loop (python -m ideashare.worker)
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine, session helper, async bridge
    │   ├── models.py      # All ORM models (11 tables)
    │   └── seed.py        # Default categories & tags
    ├── engine/
    │   ├── levels.py      # Points → level table (pure + SQL CASE)
    │   ├── actions.py     # Point deltas, message templates, outbox steps
    │   └── transitions.py # Like / read / milestone state machines
    ├── services/
    │   ├── points_service.py       # Atomic point awards
    │   ├── notification_service.py # Notification fan-out & read state
    │   ├── outbox_service.py       # Side-effect sagas & replay
    │   ├── social_service.py       # Like / comment / follow / share
    │   ├── idea_service.py         # Ideas & comments CRUD, search
    │   ├── profile_service.py      # Profiles
    │   ├── milestone_service.py    # Milestones
    │   └── taxonomy_service.py     # Categories & tags
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Engine/config/JWT dependencies
        ├── errors.py      # Domain error → HTTP mapping
        └── routes/        # Public, member and admin REST endpoints
"""

__version__ = "0.1.0"
