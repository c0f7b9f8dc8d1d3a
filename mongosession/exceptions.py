from typing import Any, Optional


class SessionStoreError(Exception):
    pass


class ConfigurationError(SessionStoreError):
    def __init__(self, option: str, message: Optional[str] = None):
        self.option = option
        super(ConfigurationError, self).__init__(
            message or f"Invalid value for session store option '{option}'"
        )


class SessionStoreConnectionError(SessionStoreError):
    def __init__(self, host: str, port: int, reason: Optional[str] = None):
        self.host = host
        self.port = port
        super(SessionStoreConnectionError, self).__init__(
            f"Failed connecting to MongoDB at {host}:{port}"
            + (f": {reason}" if reason else "")
        )


class SessionWriteError(SessionStoreError):
    def __init__(self, session_id: str, reason: Optional[str] = None):
        self.session_id = session_id
        super(SessionWriteError, self).__init__(
            "Failed inserting session object to MongoDB database"
            + (f": {reason}" if reason else "")
        )


class SessionFetchError(SessionStoreError):
    def __init__(self, session_id: str, reason: Optional[str] = None):
        self.session_id = session_id
        super(SessionFetchError, self).__init__(
            "Failed fetching session object from MongoDB database"
            + (f": {reason}" if reason else "")
        )


class InvalidSessionId(SessionStoreError, ValueError):
    def __init__(self, session_id: Any):
        self.session_id = session_id
        super(InvalidSessionId, self).__init__(
            f"Session id must be a non-empty string, got {session_id!r}"
        )
