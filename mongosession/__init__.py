VERSION = "0.3.0"

from mongosession.backend import (  # noqa: E402
    AsyncInMemorySessionStore,
    AsyncSessionStore,
    InMemorySessionStore,
    SessionStore,
)
from mongosession.exceptions import (  # noqa: E402
    ConfigurationError,
    InvalidSessionId,
    SessionFetchError,
    SessionStoreConnectionError,
    SessionStoreError,
    SessionWriteError,
)
from mongosession.motor_store import AsyncMongoSessionStore  # noqa: E402
from mongosession.settings import StoreSettings  # noqa: E402
from mongosession.store import MongoSessionStore  # noqa: E402

__all__ = (
    "VERSION",
    "SessionStore",
    "AsyncSessionStore",
    "InMemorySessionStore",
    "AsyncInMemorySessionStore",
    "MongoSessionStore",
    "AsyncMongoSessionStore",
    "StoreSettings",
    "SessionStoreError",
    "ConfigurationError",
    "SessionStoreConnectionError",
    "SessionWriteError",
    "SessionFetchError",
    "InvalidSessionId",
)
