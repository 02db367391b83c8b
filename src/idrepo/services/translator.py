"""Exception translation: classify, then build the error response.

``ExceptionTranslator.translate`` is the terminal error handler of the
service. It never raises: any failure while classifying or building falls
back to the unknown-error response.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from http import HTTPStatus
from typing import Self

from idrepo.config import ResponseConfig, Settings
from idrepo.constants import IdRepoErrorConstants
from idrepo.logging import get_logger, log_quietly
from idrepo.schemas.error import ErrorRecord, ResponseEnvelope
from idrepo.services.classifier import (
    DEFAULT_RULES,
    ClassificationRule,
    RequestInfo,
    classify,
    handle_all_exceptions,
)
from idrepo.services.response import ResponseBuilder

logger = get_logger(__name__)


@dataclass(frozen=True)
class TranslatedResponse:
    envelope: ResponseEnvelope
    status_code: int


class ExceptionTranslator:
    """Turns any exception into an error envelope plus transport status.

    Usage:
        translator = ExceptionTranslator(ResponseConfig.from_settings(settings))
        result = translator.translate(exc, RequestInfo(method="GET", path="/identity/123"))
    """

    def __init__(
        self,
        config: ResponseConfig,
        rules: Sequence[ClassificationRule] = DEFAULT_RULES,
    ) -> None:
        self._builder = ResponseBuilder(config)
        self._rules = tuple(rules)

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        return cls(ResponseConfig.from_settings(settings))

    def translate(self, exc: BaseException, request: RequestInfo | None = None) -> TranslatedResponse:
        request = request or RequestInfo()
        try:
            classification = classify(exc, request, self._rules)
            envelope = self._builder.build(
                classification.exc, request.method, classification.operation
            )
            return TranslatedResponse(envelope, int(classification.status_code))
        except Exception:
            log_quietly(
                logger.exception,
                "exception_translation_failed",
                exception_type=type(exc).__name__,
            )
            return self._unknown_error(exc, request)

    def _unknown_error(self, exc: BaseException, request: RequestInfo) -> TranslatedResponse:
        try:
            classification = handle_all_exceptions(exc, request)
            envelope = self._builder.build(classification.exc, request.method)
        except Exception:
            log_quietly(logger.exception, "unknown_error_response_failed")
            constant = IdRepoErrorConstants.UNKNOWN_ERROR
            envelope = ResponseEnvelope(
                version=self._builder.version,
                errors=[ErrorRecord(code=constant.error_code, message=constant.error_message)],
            )
        return TranslatedResponse(envelope, HTTPStatus.OK)
