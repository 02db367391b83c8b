"""Error aggregation.

Turns the parallel code/message lists of an application error into the
``errors`` list of a response.
"""

from idrepo.exceptions import BaseServiceError
from idrepo.schemas.error import ErrorRecord


def get_all_errors(exc: BaseException) -> list[ErrorRecord] | None:
    """Pair each message with the code at the same index, one record per message.

    Messages are deduplicated by text: when the same message appears under
    several codes, only the first code is kept. Order of first occurrence is
    preserved.

    Returns None (not an empty list) for exceptions that carry no
    code/message lists.
    """
    if not isinstance(exc, BaseServiceError):
        return None

    errors: list[ErrorRecord] = []
    seen: set[str] = set()
    for code, message in zip(exc.codes, exc.messages):
        if message in seen:
            continue
        seen.add(message)
        errors.append(ErrorRecord(code=code, message=message))
    return errors
