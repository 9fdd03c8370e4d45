"""
ideashare.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for application settings (community identity,
notification polling, outbox replay tuning).  Secrets and connection
strings stay in the environment (``DATABASE_URL``, ``JWT_SECRET``).

Usage::

    from ideashare.config import load_config

    cfg = load_config()              # reads $IDEASHARE_CONFIG or ./config.yaml
    print(cfg.community_name)        # "IdeaShare"
    print(cfg.unread_poll_seconds)   # 30
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = "config.yaml"


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class IdeaShareConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    community_name: str

    # API
    api_port: int

    # Notifications: how often the UI should poll the unread count
    unread_poll_seconds: int = 30

    # Side-effect outbox
    outbox_max_attempts: int = 5
    outbox_replay_seconds: int = 60
    outbox_batch_size: int = 100


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path | None = None) -> IdeaShareConfig:
    """Read *path* and return an :class:`IdeaShareConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.  Defaults to
        ``$IDEASHARE_CONFIG`` or ``config.yaml`` in the working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path or os.getenv("IDEASHARE_CONFIG", DEFAULT_CONFIG_PATH))
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return IdeaShareConfig(
        community_name=raw["community_name"],
        api_port=int(raw["api_port"]),
        unread_poll_seconds=int(raw.get("unread_poll_seconds", 30)),
        outbox_max_attempts=int(raw.get("outbox_max_attempts", 5)),
        outbox_replay_seconds=int(raw.get("outbox_replay_seconds", 60)),
        outbox_batch_size=int(raw.get("outbox_batch_size", 100)),
    )
