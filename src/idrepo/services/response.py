"""Error response assembly."""

from http import HTTPMethod

from idrepo.causes import find_domain_cause
from idrepo.config import ResponseConfig
from idrepo.schemas.error import ResponseEnvelope
from idrepo.services.aggregation import get_all_errors
from idrepo.services.operation import resolve_response_id


class ResponseBuilder:
    """Builds the response envelope for an already classified exception."""

    def __init__(self, config: ResponseConfig) -> None:
        self._config = config

    @property
    def version(self) -> str:
        return self._config.version

    def build(
        self,
        exc: BaseException,
        method: HTTPMethod | str | None = None,
        operation: str | None = None,
    ) -> ResponseEnvelope:
        """Assemble the envelope for ``exc``.

        Error content comes from the shallowest application error in the
        chain, not from ``exc`` itself, so an ``IdRepoAppError`` re-raised
        from another one reports the inner errors.
        """
        domain_cause = find_domain_cause(exc)
        return ResponseEnvelope(
            id=resolve_response_id(operation, method, self._config.ids),
            errors=get_all_errors(domain_cause),
            version=self._config.version,
        )
