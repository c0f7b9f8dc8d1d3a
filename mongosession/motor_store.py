import asyncio
import logging
from typing import Optional, Type, Union

import async_timeout
import motor.motor_asyncio
from bson.errors import InvalidDocument
from pymongo.errors import PyMongoError

from mongosession.backend import AsyncSessionStore
from mongosession.common import (
    SessionPayload,
    TSessionData,
    acknowledged_write_concern,
    check_session_id,
    from_document,
    resolve_target,
    to_document,
)
from mongosession.exceptions import (
    SessionFetchError,
    SessionStoreConnectionError,
    SessionWriteError,
)
from mongosession.settings import StoreSettings

__all__ = ("AsyncMongoSessionStore",)

_logger = logging.getLogger("mongosession.motor_store")


class AsyncMongoSessionStore(AsyncSessionStore):
    """
    asyncio flavour of MongoSessionStore built on motor. Document layout and
    error handling are the same; since motor connects lazily the server is
    checked by ``connect()`` (``create()`` does both steps).
    """

    def __init__(
        self,
        db_name: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        coll_name: Optional[str] = None,
        *,
        client: Optional[motor.motor_asyncio.AsyncIOMotorClient] = None,
        server_selection_timeout_ms: int = 5000,
        write_concern_w: Union[int, str] = 1,
    ):
        self._target = resolve_target(db_name, host, port, coll_name)
        write_concern = acknowledged_write_concern(write_concern_w)
        self._owns_client = client is None
        if client is None:
            client = motor.motor_asyncio.AsyncIOMotorClient(
                host=self._target.host,
                port=self._target.port,
                serverSelectionTimeoutMS=server_selection_timeout_ms,
            )
        self._client = client
        self._db = self._client.get_database(self._target.db_name)
        self._collection = self._db.get_collection(
            self._target.coll_name, write_concern=write_concern
        )

    @classmethod
    async def create(cls, *args, **kwargs) -> "AsyncMongoSessionStore":
        store = cls(*args, **kwargs)
        await store.connect()
        return store

    @classmethod
    def from_settings(
        cls,
        settings: StoreSettings,
        client: Optional[motor.motor_asyncio.AsyncIOMotorClient] = None,
    ) -> "AsyncMongoSessionStore":
        return cls(
            db_name=settings.db_name,
            host=settings.host,
            port=settings.port,
            coll_name=settings.coll_name,
            client=client,
            server_selection_timeout_ms=settings.server_selection_timeout_ms,
            write_concern_w=settings.write_concern_w,
        )

    async def connect(self):
        try:
            await self._client.admin.command("ping")
        except PyMongoError as exc:
            self.close()
            raise SessionStoreConnectionError(
                self._target.host, self._target.port, str(exc)
            ) from exc
        _logger.info(
            "session store connected to %s:%s/%s.%s",
            self._target.host,
            self._target.port,
            self._target.db_name,
            self._target.coll_name,
        )

    @property
    def host(self) -> str:
        return self._target.host

    @property
    def port(self) -> int:
        return self._target.port

    @property
    def db_name(self) -> str:
        return self._target.db_name

    @property
    def coll_name(self) -> str:
        return self._target.coll_name

    @property
    def db(self):
        return self._db

    @property
    def collection(self):
        return self._collection

    async def fetch(
        self,
        session_id: str,
        session_class: Optional[Type[TSessionData]] = None,
    ):
        check_session_id(session_id)
        try:
            document = await self._collection.find_one({"_id": session_id})
        except PyMongoError as exc:
            raise SessionFetchError(session_id, str(exc)) from exc
        return from_document(document, session_class)

    async def store(self, session_id: str, payload: SessionPayload) -> None:
        check_session_id(session_id)
        document = to_document(session_id, payload)
        try:
            result = await self._collection.replace_one(
                {"_id": session_id}, document, upsert=True
            )
        except (PyMongoError, InvalidDocument) as exc:
            raise SessionWriteError(session_id, str(exc)) from exc
        if not result.acknowledged:
            raise SessionWriteError(session_id, "write was not acknowledged")

    async def remove(self, session_id: str) -> None:
        check_session_id(session_id)
        try:
            await self._collection.delete_one({"_id": session_id})
        except PyMongoError as exc:
            _logger.warning(
                "Failed removing session object from MongoDB database: %s",
                exc,
            )

    async def ping(self, timeout: float = 0.5) -> bool:
        try:
            async with async_timeout.timeout(timeout):
                await self._client.admin.command("ping")
        except (PyMongoError, asyncio.TimeoutError) as exc:
            _logger.warning("MongoDB ping failed: %s", type(exc).__name__)
            return False
        return True

    def close(self):
        if self._owns_client:
            self._client.close()
