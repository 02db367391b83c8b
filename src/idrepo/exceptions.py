"""Fault taxonomy understood by the exception translator.

Services raise the application errors (``IdRepoAppError`` and
``IdRepoAppUncheckedError``) to signal business-rule violations. The remaining
classes model framework-level failures: the FastAPI adapter converts
Starlette/FastAPI exceptions into them so the translator only ever has to
reason about this closed set.

Application errors carry parallel ``codes`` / ``messages`` lists. One error
may describe several problems at once; ``add_info`` appends another pair.
"""

from typing import Self

from idrepo.constants import AuthAdapterErrorCode, IdRepoErrorConstants


class BaseServiceError(Exception):
    """Base class for errors that carry (code, message) pairs."""

    def __init__(self, error_code: str = "", error_message: str = "") -> None:
        self.codes: list[str] = []
        self.messages: list[str] = []
        if error_code or error_message:
            self.add_info(error_code, error_message)
        super().__init__(error_message)

    def add_info(self, error_code: str, error_message: str) -> Self:
        """Append another (code, message) pair. Returns self for chaining."""
        self.codes.append(error_code)
        self.messages.append(error_message)
        return self

    @property
    def error_code(self) -> str:
        return self.codes[0] if self.codes else ""

    @property
    def error_text(self) -> str:
        return self.messages[0] if self.messages else ""

    def __str__(self) -> str:
        return "; ".join(f"{code} --> {message}" for code, message in zip(self.codes, self.messages))


class BaseCheckedError(BaseServiceError):
    """Declared error a caller is expected to handle."""


class BaseUncheckedError(BaseServiceError):
    """Error that may surface from anywhere without being declared."""


class IdRepoAppError(BaseCheckedError):
    """Business-rule violation raised by identity repository services.

    ``operation`` names the logical operation (e.g. ``"deactivate"``) the
    failure belongs to, when the HTTP method alone can't tell.
    """

    def __init__(
        self,
        error_code: str = "",
        error_message: str = "",
        *,
        operation: str | None = None,
    ) -> None:
        self.operation = operation
        super().__init__(error_code, error_message)

    @classmethod
    def from_constant(
        cls,
        constant: IdRepoErrorConstants,
        *args: object,
        operation: str | None = None,
    ) -> Self:
        return cls(constant.error_code, constant.format_message(*args), operation=operation)


class IdRepoAppUncheckedError(BaseUncheckedError):
    """Unchecked counterpart of ``IdRepoAppError``."""

    @classmethod
    def from_constant(cls, constant: IdRepoErrorConstants, *args: object) -> Self:
        return cls(constant.error_code, constant.format_message(*args))


class IdRepoUnknownError(IdRepoAppUncheckedError):
    """Fixed classification built by the translator itself."""


class AuthenticationError(BaseUncheckedError):
    """An outbound REST call was rejected by the authentication service.

    ``status_code`` is the status the auth service answered with; 0 means
    none was declared.
    """

    def __init__(
        self,
        error_code: str = "",
        error_message: str = "",
        status_code: int = 0,
    ) -> None:
        self.status_code = status_code
        super().__init__(error_code, error_message)

    @classmethod
    def unauthorized(cls, status_code: int = 0) -> Self:
        return cls(
            AuthAdapterErrorCode.UNAUTHORIZED.error_code,
            AuthAdapterErrorCode.UNAUTHORIZED.error_message,
            status_code,
        )


class AccessDeniedError(Exception):
    """The authenticated caller is not allowed to use the endpoint."""


class ComponentError(Exception):
    """A component could not be wired together at runtime."""


class ComponentCreationError(ComponentError):
    """A lazily created component failed during initialization.

    The underlying failure (often an ``AuthenticationError`` from a REST call
    made during setup) is attached as ``__cause__``.
    """

    def __init__(self, component: str, message: str = "") -> None:
        self.component = component
        super().__init__(message or f"Error creating component '{component}'")


class MessageNotReadableError(Exception):
    """The request body could not be read into the expected model."""


class ProtocolError(Exception):
    """The request was rejected at the transport level (404, 405, ...)."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        self.status_code = status_code
        super().__init__(message)


class DateTimeParseError(ValueError):
    """Text could not be parsed as a date/time in the expected format."""

    def __init__(self, text: str, message: str = "") -> None:
        self.text = text
        super().__init__(message or f"Text '{text}' could not be parsed")
