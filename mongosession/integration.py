import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from starlette.requests import Request

from mongosession.backend import AsyncSessionStore
from mongosession.motor_store import AsyncMongoSessionStore
from mongosession.settings import StoreSettings

__all__ = ("install_session_store", "get_session_store")

_logger = logging.getLogger("mongosession.integration")


def get_session_store(request: Request) -> AsyncSessionStore:
    store = getattr(request.app.state, "session_store", None)
    if store is None:
        raise RuntimeError("Session store has not been initialised")
    return store


async def _open_store(
    settings: Optional[StoreSettings], store: Optional[AsyncSessionStore]
) -> AsyncSessionStore:
    if store is not None:
        return store
    settings = settings or StoreSettings()
    _logger.info(
        "opening session store (host=%s, port=%s, db_name=%s, coll_name=%s)",
        settings.host,
        settings.port,
        settings.db_name,
        settings.coll_name,
    )
    store = AsyncMongoSessionStore.from_settings(settings)
    await store.connect()
    return store


def install_session_store(
    app: FastAPI,
    settings: Optional[StoreSettings] = None,
    *,
    store: Optional[AsyncSessionStore] = None,
    hc_path: Optional[str] = "/sessions/hc",
):
    """
    Binds one shared session store to ``app``: it is opened when the
    application starts, released when it stops, and handed to endpoints by
    the ``get_session_store`` dependency. An explicitly passed store is used
    as is and never closed by the application.
    """
    previous_lifespan = app.router.lifespan_context

    @asynccontextmanager
    async def lifespan(application):
        session_store = await _open_store(settings, store)
        application.state.session_store = session_store
        try:
            async with previous_lifespan(application) as state:
                yield state
        finally:
            application.state.session_store = None
            if store is None:
                session_store.close()

    app.router.lifespan_context = lifespan

    if hc_path:

        async def _hc(request: Request):
            session_store = get_session_store(request)
            ping = getattr(session_store, "ping", None)
            now = time.time_ns()
            healthy = True if ping is None else await ping()
            return {
                "type": type(session_store).__name__,
                "healthy": healthy,
                "latency_ms": (time.time_ns() - now) / 1000000,
            }

        app.add_api_route(
            hc_path, _hc, methods=["GET"], response_class=ORJSONResponse
        )
