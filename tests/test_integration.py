from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from mongosession import (
    AsyncInMemorySessionStore,
    AsyncSessionStore,
    SessionStoreConnectionError,
    StoreSettings,
)
from mongosession.integration import get_session_store, install_session_store


def create_test_app(**kwargs):
    app = FastAPI()
    install_session_store(app, **kwargs)

    @app.post("/visit/{session_id}")
    async def visit(
        session_id: str,
        store: AsyncSessionStore = Depends(get_session_store),
    ):
        session = await store.fetch(session_id) or {"count": 0}
        session["count"] += 1
        await store.store(session_id, session)
        return {"count": session["count"]}

    @app.post("/logout/{session_id}")
    async def logout(
        session_id: str,
        store: AsyncSessionStore = Depends(get_session_store),
    ):
        await store.remove(session_id)
        return {"detail": "OK"}

    return app


def test_shared_store():
    store = AsyncInMemorySessionStore()
    with TestClient(create_test_app(store=store)) as client:
        assert client.post("/visit/abc123").json() == {"count": 1}
        assert client.post("/visit/abc123").json() == {"count": 2}
        assert client.post("/visit/other").json() == {"count": 1}
        assert client.post("/logout/abc123").status_code == 200
        assert client.post("/visit/abc123").json() == {"count": 1}
    assert len(store) == 2


def test_health_check():
    app = create_test_app(store=AsyncInMemorySessionStore())
    with TestClient(app) as client:
        data = client.get("/sessions/hc").json()
    assert data["type"] == "AsyncInMemorySessionStore"
    assert data["healthy"] is True
    assert data["latency_ms"] >= 0


def test_store_missing_outside_lifespan():
    client = TestClient(create_test_app(store=AsyncInMemorySessionStore()))
    with pytest.raises(RuntimeError):
        client.post("/visit/abc123")


def test_store_opened_from_settings():
    mongo_store = MagicMock(name="AsyncMongoSessionStore")
    mongo_store.connect = AsyncMock()
    mongo_store.ping = AsyncMock(return_value=False)
    settings = StoreSettings(db_name="testdb")
    with patch(
        "mongosession.integration.AsyncMongoSessionStore"
    ) as store_cls:
        store_cls.from_settings.return_value = mongo_store
        with TestClient(create_test_app(settings=settings)) as client:
            assert client.get("/sessions/hc").json()["healthy"] is False
    store_cls.from_settings.assert_called_once_with(settings)
    mongo_store.connect.assert_awaited_once()
    mongo_store.close.assert_called_once()


def test_startup_fails_without_database():
    mongo_store = MagicMock(name="AsyncMongoSessionStore")
    mongo_store.connect = AsyncMock(
        side_effect=SessionStoreConnectionError("localhost", 27017)
    )
    with patch(
        "mongosession.integration.AsyncMongoSessionStore"
    ) as store_cls:
        store_cls.from_settings.return_value = mongo_store
        app = create_test_app(settings=StoreSettings(db_name="testdb"))
        with pytest.raises(SessionStoreConnectionError):
            with TestClient(app):
                pass
    mongo_store.connect.assert_awaited_once()


def test_existing_lifespan_still_runs():
    events = []

    @asynccontextmanager
    async def lifespan(app):
        events.append("startup")
        yield
        events.append("shutdown")

    app = FastAPI(lifespan=lifespan)
    store = AsyncInMemorySessionStore()
    install_session_store(app, store=store, hc_path=None)
    with TestClient(app):
        assert events == ["startup"]
        assert app.state.session_store is store
    assert events == ["startup", "shutdown"]
    assert app.state.session_store is None
