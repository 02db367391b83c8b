"""Request wrapper shared by identity endpoints.

All identity requests arrive in the same wrapper. ``requesttime`` must use the
exact UTC pattern ``yyyy-MM-ddTHH:mm:ss.SSSZ``; anything else raises
DateTimeParseError, which the error handlers report as an invalid
``requesttime`` parameter.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, field_validator

from idrepo.exceptions import DateTimeParseError

REQUEST_TIME_PATTERN = "%Y-%m-%dT%H:%M:%S.%fZ"


def parse_request_time(value: str) -> datetime:
    """Parse a request timestamp such as ``2024-01-31T10:15:30.123Z``.

    Exactly three fractional digits are accepted.
    """
    fraction = value.rpartition(".")[2]
    if len(fraction) != 4 or not fraction.endswith("Z"):
        raise DateTimeParseError(value)
    try:
        parsed = datetime.strptime(value, REQUEST_TIME_PATTERN)
    except ValueError:
        raise DateTimeParseError(value) from None
    return parsed.replace(tzinfo=UTC)


class IdRequest(BaseModel):
    id: str
    version: str
    requesttime: datetime
    request: dict[str, Any] | None = None

    @field_validator("requesttime", mode="before")
    @classmethod
    def _parse_requesttime(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_request_time(value)
        return value
