# tests/test_config_prod_guards.py
from __future__ import annotations

import pytest

from unicensus.config import Settings


def test_prod_rejects_memory_store():
    with pytest.raises(ValueError):
        Settings(app_env="prod", store_backend="memory", cors_allow_origins=["https://census.example.edu"])


def test_prod_rejects_wildcard_cors():
    with pytest.raises(ValueError):
        Settings(app_env="prod", store_backend="sql", cors_allow_origins=["*"])


def test_backend_is_normalized_and_validated():
    s = Settings(app_env="local", store_backend=" Memory ")
    assert s.store_backend == "memory"
    with pytest.raises(ValueError):
        Settings(store_backend="mongo")


def test_generator_enabled_by_key_or_url(monkeypatch):
    monkeypatch.delenv("DRAFT_API_KEY", raising=False)
    monkeypatch.delenv("DRAFT_BASE_URL", raising=False)
    assert Settings(draft_api_key=None, draft_base_url=None).draft_generator_enabled is False
    assert Settings(draft_base_url="http://localhost:1234").draft_generator_enabled is True
