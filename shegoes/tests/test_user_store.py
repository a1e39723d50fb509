"""Both store backends honour the same get/put/patch contract."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from shegoes.core.errors import ConflictError, NotFoundError
from shegoes.features.users.store import InMemoryUserStateStore, SqlUserStateStore, build_store


def _sqlite_store():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    return SqlUserStateStore(engine=engine)


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    if request.param == "memory":
        return InMemoryUserStateStore()
    return _sqlite_store()


def test_get_missing_returns_none(any_store):
    assert any_store.get("nobody") is None


def test_put_then_get(any_store):
    any_store.put("u1", {"uid": "u1", "streak": 0, "wins": []})
    assert any_store.get("u1") == {"uid": "u1", "streak": 0, "wins": []}


def test_put_twice_conflicts(any_store):
    any_store.put("u1", {"uid": "u1"})
    with pytest.raises(ConflictError):
        any_store.put("u1", {"uid": "u1"})


def test_patch_merges_fields(any_store):
    any_store.put("u1", {"uid": "u1", "streak": 1, "theme": "light"})

    any_store.patch("u1", {"streak": 2, "lastCompletedDate": "2024-01-11"})

    assert any_store.get("u1") == {
        "uid": "u1",
        "streak": 2,
        "theme": "light",
        "lastCompletedDate": "2024-01-11",
    }


def test_patch_last_write_wins(any_store):
    any_store.put("u1", {"uid": "u1", "streak": 1})
    any_store.patch("u1", {"streak": 5})
    any_store.patch("u1", {"streak": 3})
    assert any_store.get("u1")["streak"] == 3


def test_patch_missing_raises(any_store):
    with pytest.raises(NotFoundError):
        any_store.patch("ghost", {"streak": 1})


def test_in_memory_returns_copies():
    store = InMemoryUserStateStore()
    store.put("u1", {"uid": "u1", "wins": []})

    store.get("u1")["wins"].append("mutated")

    assert store.get("u1")["wins"] == []


def test_build_store_selects_backend():
    assert isinstance(build_store("memory"), InMemoryUserStateStore)
    assert isinstance(build_store("sql"), SqlUserStateStore)
    with pytest.raises(ValueError):
        build_store("redis")


def test_sql_backend_without_url_fails_fast(monkeypatch):
    from shegoes.core import database

    monkeypatch.setattr(database, "_engine", None)
    monkeypatch.delenv("TEST_DATABASE_URL", raising=False)
    monkeypatch.setattr(database.settings, "TEST_DATABASE_URL", None)
    monkeypatch.setattr(database.settings, "DATABASE_URL", None)

    with pytest.raises(ValueError, match="DATABASE_URL"):
        database.get_engine()
