import copy
from abc import ABC, abstractmethod
from typing import Any, Optional, Type

from mongosession.common import (
    SessionPayload,
    TSessionData,
    check_session_id,
    from_document,
    to_document,
)

__all__ = (
    "SessionStore",
    "AsyncSessionStore",
    "InMemorySessionStore",
    "AsyncInMemorySessionStore",
)


class SessionStore(ABC):
    """
    Blocking session store contract used by session middleware: ``fetch`` at
    request start, ``store`` at request end, ``remove`` on logout.
    """

    @abstractmethod
    def fetch(
        self,
        session_id: str,
        session_class: Optional[Type[TSessionData]] = None,
    ) -> Optional[Any]:
        ...

    @abstractmethod
    def store(self, session_id: str, payload: SessionPayload) -> None:
        ...

    @abstractmethod
    def remove(self, session_id: str) -> None:
        ...


class AsyncSessionStore(ABC):
    @abstractmethod
    async def fetch(
        self,
        session_id: str,
        session_class: Optional[Type[TSessionData]] = None,
    ) -> Optional[Any]:
        ...

    @abstractmethod
    async def store(self, session_id: str, payload: SessionPayload) -> None:
        ...

    @abstractmethod
    async def remove(self, session_id: str) -> None:
        ...


class InMemorySessionStore(SessionStore):
    def __init__(self):
        self._store: dict[str, dict[str, Any]] = {}

    def fetch(self, session_id, session_class=None):
        check_session_id(session_id)
        return from_document(
            copy.deepcopy(self._store.get(session_id)), session_class
        )

    def store(self, session_id, payload):
        check_session_id(session_id)
        self._store[session_id] = copy.deepcopy(
            to_document(session_id, payload)
        )

    def remove(self, session_id):
        check_session_id(session_id)
        self._store.pop(session_id, None)

    def __len__(self):
        return len(self._store)


class AsyncInMemorySessionStore(AsyncSessionStore):
    def __init__(self):
        self._sync = InMemorySessionStore()

    async def fetch(self, session_id, session_class=None):
        return self._sync.fetch(session_id, session_class)

    async def store(self, session_id, payload):
        self._sync.store(session_id, payload)

    async def remove(self, session_id):
        self._sync.remove(session_id)

    def __len__(self):
        return len(self._sync)
