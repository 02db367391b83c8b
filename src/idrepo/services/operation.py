"""Response identifier selection."""

from collections.abc import Mapping
from http import HTTPMethod

from idrepo.constants import CREATE, READ, UPDATE

_METHOD_OPERATIONS: dict[str, str] = {
    HTTPMethod.GET: READ,
    HTTPMethod.POST: CREATE,
    HTTPMethod.PATCH: UPDATE,
}


def resolve_operation(operation: str | None, method: HTTPMethod | str | None) -> str | None:
    """Return the operation a response belongs to.

    An explicit operation always wins over the HTTP method. Methods other
    than GET, POST and PATCH map to no operation.
    """
    if operation is not None:
        return operation
    if method is None:
        return None
    return _METHOD_OPERATIONS.get(method.upper())


def resolve_response_id(
    operation: str | None,
    method: HTTPMethod | str | None,
    ids: Mapping[str, str],
) -> str | None:
    """Look up the response identifier for an operation or HTTP method.

    A key missing from ``ids`` gives None rather than an error.
    """
    key = resolve_operation(operation, method)
    return ids.get(key) if key is not None else None
