"""Exception classification.

An ordered table of rules decides how each exception is reported. Rules are
tried top-down and the first match wins; the order matters because some
exceptions wrap others (a ComponentCreationError is also a ComponentError,
and usually hides an AuthenticationError).

Every handler logs the exception it handles, with the stack trace of its
root cause, before the response is built.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from idrepo.causes import find_root_cause
from idrepo.constants import (
    DEACTIVATE,
    EXCEPTION_HANDLER,
    REACTIVATE,
    REQUEST_TIME,
    AuthAdapterErrorCode,
    IdRepoErrorConstants,
)
from idrepo.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    ComponentCreationError,
    ComponentError,
    DateTimeParseError,
    IdRepoAppError,
    IdRepoAppUncheckedError,
    IdRepoUnknownError,
    MessageNotReadableError,
    ProtocolError,
)
from idrepo.logging import format_stack_trace, get_logger, log_quietly
from idrepo.security import get_user

logger = get_logger(__name__)


@dataclass(frozen=True)
class RequestInfo:
    """The parts of the inbound request the classifier looks at."""

    method: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class Classification:
    """Outcome of a rule: what to render, with which status and operation."""

    exc: BaseException
    status_code: int = HTTPStatus.OK
    operation: str | None = None


Handler = Callable[[Any, RequestInfo], Classification]


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    matches: Callable[[BaseException], bool]
    handle: Handler


def log_handled(handler: str, exc: BaseException) -> None:
    root_cause = find_root_cause(exc)
    log_quietly(
        logger.error,
        handler,
        user=get_user(),
        component=EXCEPTION_HANDLER,
        exception_type=type(exc).__name__,
        root_cause=type(root_cause).__name__,
        stack_trace=format_stack_trace(root_cause),
    )


def handle_all_exceptions(exc: BaseException, request: RequestInfo) -> Classification:
    """Catch-all: anything unexpected is an unknown error."""
    log_handled("handle_all_exceptions", exc)
    return Classification(IdRepoUnknownError.from_constant(IdRepoErrorConstants.UNKNOWN_ERROR))


def handle_component_creation_error(
    exc: ComponentCreationError, request: RequestInfo
) -> Classification:
    """Report the failure that broke a lazily created component.

    Components that call REST services during setup surface their failures
    wrapped in ComponentCreationError, so the root cause decides the handler.
    """
    log_handled("handle_component_creation_error", exc)
    root_cause = find_root_cause(exc)
    if isinstance(root_cause, AuthenticationError):
        return handle_authentication_error(root_cause, request)
    if isinstance(root_cause, IdRepoAppUncheckedError):
        return handle_app_unchecked_error(root_cause, request)
    return handle_all_exceptions(root_cause, request)


def handle_access_denied(exc: AccessDeniedError, request: RequestInfo) -> Classification:
    log_handled("handle_access_denied", exc)
    return Classification(
        IdRepoUnknownError.from_constant(IdRepoErrorConstants.AUTHORIZATION_FAILED)
    )


def handle_authentication_error(exc: AuthenticationError, request: RequestInfo) -> Classification:
    """The only rule that changes the transport status.

    Uses the auth service's own code/message when it sent any, and its status
    when one was declared (401 otherwise).
    """
    log_handled("handle_authentication_error", exc)
    if exc.messages:
        error = IdRepoUnknownError(exc.error_code, exc.error_text)
    else:
        error = IdRepoUnknownError(
            AuthAdapterErrorCode.UNAUTHORIZED.error_code,
            AuthAdapterErrorCode.UNAUTHORIZED.error_message,
        )
    return Classification(error, status_code=exc.status_code or HTTPStatus.UNAUTHORIZED)


def _is_unreadable_request_time(exc: BaseException) -> bool:
    return isinstance(exc, MessageNotReadableError) and isinstance(
        find_root_cause(exc), DateTimeParseError
    )


def handle_unreadable_request_time(
    exc: MessageNotReadableError, request: RequestInfo
) -> Classification:
    """A malformed ``requesttime`` is reported as an invalid parameter.

    Deactivate and reactivate share HTTP methods with other operations, so
    their response id is picked from the request path.
    """
    log_handled("handle_unreadable_request_time", exc)
    error = IdRepoAppError.from_constant(
        IdRepoErrorConstants.INVALID_INPUT_PARAMETER, REQUEST_TIME
    )
    path = request.path or ""
    operation = None
    if path.endswith(DEACTIVATE):
        operation = DEACTIVATE
    elif path.endswith(REACTIVATE):
        operation = REACTIVATE
    return Classification(error, operation=operation)


def handle_invalid_request(exc: BaseException, request: RequestInfo) -> Classification:
    log_handled("handle_invalid_request", exc)
    return Classification(IdRepoAppError.from_constant(IdRepoErrorConstants.INVALID_REQUEST))


def handle_app_error(exc: IdRepoAppError, request: RequestInfo) -> Classification:
    log_handled("handle_app_error", exc)
    return Classification(exc, operation=exc.operation)


def handle_app_unchecked_error(
    exc: IdRepoAppUncheckedError, request: RequestInfo
) -> Classification:
    log_handled("handle_app_unchecked_error", exc)
    return Classification(exc)


def _instance_of(*types: type[BaseException]) -> Callable[[BaseException], bool]:
    return lambda exc: isinstance(exc, types)


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        "component_creation",
        _instance_of(ComponentCreationError),
        handle_component_creation_error,
    ),
    ClassificationRule("access_denied", _instance_of(AccessDeniedError), handle_access_denied),
    ClassificationRule(
        "authentication", _instance_of(AuthenticationError), handle_authentication_error
    ),
    ClassificationRule(
        "unreadable_request_time", _is_unreadable_request_time, handle_unreadable_request_time
    ),
    ClassificationRule(
        "invalid_request",
        _instance_of(MessageNotReadableError, ProtocolError, ComponentError),
        handle_invalid_request,
    ),
    ClassificationRule("app_error", _instance_of(IdRepoAppError), handle_app_error),
    ClassificationRule(
        "app_unchecked_error", _instance_of(IdRepoAppUncheckedError), handle_app_unchecked_error
    ),
    ClassificationRule("unknown", _instance_of(BaseException), handle_all_exceptions),
)


def classify(
    exc: BaseException,
    request: RequestInfo,
    rules: Sequence[ClassificationRule] = DEFAULT_RULES,
) -> Classification:
    """Run ``exc`` through ``rules``; the first matching rule handles it."""
    for rule in rules:
        if rule.matches(exc):
            return rule.handle(exc, request)
    return handle_all_exceptions(exc, request)
