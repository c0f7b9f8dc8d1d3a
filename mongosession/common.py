import logging
from typing import Any, Mapping, NamedTuple, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError
from pymongo.write_concern import WriteConcern

from mongosession.exceptions import ConfigurationError, InvalidSessionId
from mongosession.settings import (
    DEFAULT_COLLECTION,
    DEFAULT_HOST,
    DEFAULT_PORT,
    normalize_write_concern,
)

__all__ = (
    "StoreTarget",
    "SessionPayload",
    "TSessionData",
    "resolve_target",
    "acknowledged_write_concern",
    "check_session_id",
    "to_document",
    "from_document",
)

_logger = logging.getLogger("mongosession.common")

TSessionData = TypeVar("TSessionData", bound=BaseModel)
SessionPayload = Union[Mapping[str, Any], BaseModel]


class StoreTarget(NamedTuple):
    db_name: str
    host: str
    port: int
    coll_name: str


def resolve_target(
    db_name: Optional[str],
    host: Optional[str] = None,
    port: Optional[int] = None,
    coll_name: Optional[str] = None,
) -> StoreTarget:
    if not db_name:
        raise ConfigurationError(
            "db_name",
            "You must provide the name of the database to use"
            " (parameter 'db_name').",
        )
    if not isinstance(db_name, str):
        raise ConfigurationError("db_name", "db_name must be a string")
    port = port or DEFAULT_PORT
    if not isinstance(port, int) or isinstance(port, bool) or not (
        0 < port < 65536
    ):
        raise ConfigurationError("port", f"Invalid MongoDB port: {port!r}")
    return StoreTarget(
        db_name=db_name,
        host=host or DEFAULT_HOST,
        port=port,
        coll_name=coll_name or DEFAULT_COLLECTION,
    )


def acknowledged_write_concern(w: Union[int, str] = 1) -> WriteConcern:
    try:
        w = normalize_write_concern(w)
    except ValueError as exc:
        raise ConfigurationError("write_concern_w", str(exc)) from exc
    return WriteConcern(w=w)


def check_session_id(session_id: Any) -> str:
    if not isinstance(session_id, str) or session_id == "":
        raise InvalidSessionId(session_id)
    return session_id


def to_document(session_id: str, payload: SessionPayload) -> dict[str, Any]:
    """
    Builds the flat document stored for a session: ``_id`` plus the payload
    fields. The payload itself is left untouched.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="python")
    elif not isinstance(payload, Mapping):
        raise TypeError(
            "session payload must be a mapping or a pydantic model, got"
            f" {type(payload).__name__}"
        )
    document = {"_id": session_id}
    for key, value in payload.items():
        if key != "_id":
            document[key] = value
    return document


def from_document(
    document: Optional[Mapping[str, Any]],
    session_class: Optional[Type[TSessionData]] = None,
):
    if document is None:
        return None
    if session_class is None:
        return dict(document)
    fields = {k: v for k, v in document.items() if k != "_id"}
    try:
        return session_class.model_validate(fields)
    except ValidationError as exc:
        _logger.warning(
            "session %s does not match %s, treating it as absent: %s",
            document.get("_id"),
            session_class.__name__,
            exc,
        )
        return None
