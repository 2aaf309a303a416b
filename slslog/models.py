"""
Log and query models for the SLS log SDK.
"""

from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_validator

MILLISECOND_THRESHOLD = 1_000_000_000_000  # 10^12
MAX_SECONDS = 2**32 - 1  # Log.Time is a uint32


class LogEntity(BaseModel):
    """
    A single log record.

    ``timestamp`` is epoch time in seconds or milliseconds; values below 10^12
    are read as seconds. ``timestamp_ns_part`` overrides the sub-second
    nanosecond remainder derived from a millisecond timestamp.
    """

    model_config = ConfigDict(frozen=True)

    content: dict[str, Any]
    timestamp: int | float | None = Field(default=None, ge=0)
    timestamp_ns_part: int | None = Field(default=None, ge=0, lt=1_000_000_000)

    @field_validator("timestamp")
    @classmethod
    def _fits_wire_time(cls, value):
        if value is None:
            return value
        seconds = int(value) if value < MILLISECOND_THRESHOLD else int(value // 1000)
        if seconds > MAX_SECONDS:
            raise ValueError(f"timestamp {value} is past the last representable second ({MAX_SECONDS})")
        return value


class LogData(BaseModel):
    """Records and metadata for a single write."""

    logs: list[LogEntity]
    tags: list[dict[str, str]] | None = None
    topic: str | None = None
    source: str | None = None


class GetLogsQuery(BaseModel):
    """Time window and options for a log query."""

    model_config = ConfigDict(populate_by_name=True)

    from_: int | float = Field(alias="from")
    to: int | float
    query: str | None = None
    topic: str | None = None
    line: int | None = None
    offset: int | None = None
    reverse: bool | None = None
    power_sql: bool | None = Field(default=None, alias="powerSql")


QueriedLog = TypedDict(
    "QueriedLog",
    {
        "__topic__": str,
        "__source__": str,
        "__time__": str,
        "__time_ns_part__": str,
    },
    total=False,
)
