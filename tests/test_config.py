"""
tests/test_config.py — YAML Configuration Loader
==================================================
"""

from __future__ import annotations

import pytest

from ideashare.config import load_config


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_defaults_for_optional_keys(self, tmp_path):
        cfg = load_config(_write(tmp_path, "community_name: Makers\napi_port: 9000\n"))
        assert cfg.community_name == "Makers"
        assert cfg.api_port == 9000
        assert cfg.unread_poll_seconds == 30
        assert cfg.outbox_max_attempts == 5
        assert cfg.outbox_replay_seconds == 60
        assert cfg.outbox_batch_size == 100

    def test_overrides(self, tmp_path):
        cfg = load_config(_write(
            tmp_path,
            "community_name: Makers\n"
            "api_port: '8080'\n"
            "unread_poll_seconds: 10\n"
            "outbox_max_attempts: 2\n",
        ))
        assert cfg.api_port == 8080
        assert cfg.unread_poll_seconds == 10
        assert cfg.outbox_max_attempts == 2

    def test_env_var_path(self, tmp_path, monkeypatch):
        path = _write(tmp_path, "community_name: FromEnv\napi_port: 1\n")
        monkeypatch.setenv("IDEASHARE_CONFIG", str(path))
        assert load_config().community_name == "FromEnv"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="config.yaml.example"):
            load_config(tmp_path / "nope.yaml")

    def test_missing_required_key(self, tmp_path):
        with pytest.raises(KeyError):
            load_config(_write(tmp_path, "api_port: 8000\n"))

    def test_config_is_frozen(self, tmp_path):
        cfg = load_config(_write(tmp_path, "community_name: X\napi_port: 1\n"))
        with pytest.raises(AttributeError):
            cfg.api_port = 2
