import logging
from typing import Optional, Type, Union

from bson.errors import InvalidDocument
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from mongosession.backend import SessionStore
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

__all__ = ("MongoSessionStore",)

_logger = logging.getLogger("mongosession.store")


class MongoSessionStore(SessionStore):
    """
    MongoDB based session store.

    Every session is one document of the target collection: ``_id`` holds
    the session id and the remaining fields are the session payload, stored
    flat. Each operation is a single round trip, nothing is cached, so one
    instance can be shared by all request handlers of a process.

    Usage::

        store = MongoSessionStore(
            db_name="myapp",
            coll_name="myapp_sessions",  # defaults to 'sessions'
            host="mongodb.myhost.com",  # defaults to 'localhost'
            port=27017,  # this is the default
        )
    """

    def __init__(
        self,
        db_name: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        coll_name: Optional[str] = None,
        *,
        client: Optional[MongoClient] = None,
        server_selection_timeout_ms: int = 5000,
        write_concern_w: Union[int, str] = 1,
    ):
        self._target = resolve_target(db_name, host, port, coll_name)
        write_concern = acknowledged_write_concern(write_concern_w)

        self._owns_client = client is None
        if client is None:
            client = MongoClient(
                host=self._target.host,
                port=self._target.port,
                serverSelectionTimeoutMS=server_selection_timeout_ms,
            )
        self._client = client
        try:
            client.admin.command("ping")
        except PyMongoError as exc:
            if self._owns_client:
                client.close()
            raise SessionStoreConnectionError(
                self._target.host, self._target.port, str(exc)
            ) from exc

        self._db: Database = client.get_database(self._target.db_name)
        self._collection: Collection = self._db.get_collection(
            self._target.coll_name, write_concern=write_concern
        )
        _logger.debug(
            "session store bound to %s:%s/%s.%s",
            self._target.host,
            self._target.port,
            self._target.db_name,
            self._target.coll_name,
        )

    @classmethod
    def from_settings(
        cls, settings: StoreSettings, client: Optional[MongoClient] = None
    ) -> "MongoSessionStore":
        return cls(
            db_name=settings.db_name,
            host=settings.host,
            port=settings.port,
            coll_name=settings.coll_name,
            client=client,
            server_selection_timeout_ms=settings.server_selection_timeout_ms,
            write_concern_w=settings.write_concern_w,
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
    def db(self) -> Database:
        return self._db

    @property
    def collection(self) -> Collection:
        return self._collection

    def fetch(
        self,
        session_id: str,
        session_class: Optional[Type[TSessionData]] = None,
    ):
        """
        Fetches a session object from the database. Returns None if there is
        no session with such id.
        """
        check_session_id(session_id)
        try:
            document = self._collection.find_one({"_id": session_id})
        except PyMongoError as exc:
            raise SessionFetchError(session_id, str(exc)) from exc
        return from_document(document, session_class)

    def store(self, session_id: str, payload: SessionPayload) -> None:
        """
        Stores a session object in the database, replacing the previous one.
        Raises SessionWriteError if the write fails.
        """
        check_session_id(session_id)
        document = to_document(session_id, payload)
        try:
            result = self._collection.replace_one(
                {"_id": session_id}, document, upsert=True
            )
        except (PyMongoError, InvalidDocument) as exc:
            raise SessionWriteError(session_id, str(exc)) from exc
        if not result.acknowledged:
            raise SessionWriteError(session_id, "write was not acknowledged")

    def remove(self, session_id: str) -> None:
        """
        Removes the session object from the database. A database error is
        logged as a warning and not raised.
        """
        check_session_id(session_id)
        try:
            self._collection.delete_one({"_id": session_id})
        except PyMongoError as exc:
            _logger.warning(
                "Failed removing session object from MongoDB database: %s",
                exc,
            )

    def ping(self) -> bool:
        try:
            self._client.admin.command("ping")
        except PyMongoError as exc:
            _logger.warning("MongoDB ping failed: %s", exc)
            return False
        return True

    def close(self):
        if self._owns_client:
            self._client.close()

    def __repr__(self):
        return (
            f"{type(self).__name__}(host={self.host!r}, port={self.port!r},"
            f" db_name={self.db_name!r}, coll_name={self.coll_name!r})"
        )
