"""Error constants and operation names shared by the error-handling layer.

Each error constant carries a machine-readable code and a human-readable
message. Messages containing ``{}`` are templates, filled with the offending
parameter name via ``format_message``.
"""

from enum import Enum


class IdRepoErrorConstants(Enum):
    """Error codes returned by the identity repository."""

    MISSING_INPUT_PARAMETER = ("IDR-IDC-001", "Missing Input Parameter - {}")
    INVALID_INPUT_PARAMETER = ("IDR-IDC-002", "Invalid Input Parameter - {}")
    INVALID_REQUEST = ("IDR-IDC-003", "Invalid Request")
    UNKNOWN_ERROR = ("IDR-IDC-004", "Unknown error occurred")
    AUTHORIZATION_FAILED = ("IDR-IDC-005", "Authorization Failed")

    def __init__(self, error_code: str, error_message: str) -> None:
        self.error_code = error_code
        self.error_message = error_message

    def format_message(self, *args: object) -> str:
        return self.error_message.format(*args)


class AuthAdapterErrorCode(Enum):
    """Errors reported by the authentication adapter."""

    UNAUTHORIZED = ("KER-ATH-401", "Authentication Failed")

    def __init__(self, error_code: str, error_message: str) -> None:
        self.error_code = error_code
        self.error_message = error_message


# Operation names, also the keys of the response identifier table
READ = "read"
CREATE = "create"
UPDATE = "update"
DEACTIVATE = "deactivate"
REACTIVATE = "reactivate"

# Request field reported when the request timestamp cannot be parsed
REQUEST_TIME = "requesttime"

# Tags attached to every log event emitted by the error handlers
APP_NAME = "IdRepo"
EXCEPTION_HANDLER = "IdRepoExceptionHandler"
