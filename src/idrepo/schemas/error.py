"""Error response schemas.

Every error response uses the same envelope:
{"id": "...", "version": "...", "errors": [{"code": "...", "message": "..."}]}.

``id`` and ``errors`` may be unset. They are dropped from the JSON body rather
than rendered as null, so clients can tell "no errors list" apart from an
empty one.
"""

from pydantic import BaseModel, ConfigDict


class ErrorRecord(BaseModel):
    """A single machine-readable code with its human-readable message."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str


class ResponseEnvelope(BaseModel):
    """Top-level body returned for every translated error."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    version: str
    errors: list[ErrorRecord] | None = None

    def to_json(self) -> dict[str, object]:
        """Serialize for JSONResponse, omitting unset fields."""
        return self.model_dump(exclude_none=True)
