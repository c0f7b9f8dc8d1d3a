from typing import Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = (
    "StoreSettings",
    "TestingSettings",
    "DEFAULT_PORT",
    "normalize_write_concern",
)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 27017
DEFAULT_COLLECTION = "sessions"


def normalize_write_concern(value: Union[int, str]) -> Union[int, str]:
    """
    Digit strings become numbers; anything below 1 and any tag other than
    "majority" is rejected, since session writes must be acknowledged.
    """
    if isinstance(value, str) and value.isdigit():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError("write concern must be a number or 'majority'")
    if isinstance(value, str) and value != "majority":
        raise ValueError("write concern must be a number or 'majority'")
    if isinstance(value, int) and value < 1:
        raise ValueError("unacknowledged writes (w=0) are not supported")
    return value


class StoreSettings(BaseSettings):
    # target database and collection
    db_name: Optional[str] = None
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, lt=65536)
    coll_name: str = DEFAULT_COLLECTION

    # driver
    server_selection_timeout_ms: int = Field(default=5000, gt=0)
    write_concern_w: Union[int, str] = 1

    model_config = SettingsConfigDict(
        env_prefix="mongosession_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("write_concern_w")
    @classmethod
    def _acknowledged_only(cls, value):
        return normalize_write_concern(value)


class TestingSettings(StoreSettings):
    db_name: Optional[str] = "test_sessions"
    port: int = 27222
    server_selection_timeout_ms: int = 1500
