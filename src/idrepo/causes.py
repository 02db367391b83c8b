"""Cause-chain walkers.

Two walkers that deliberately disagree:

- ``find_root_cause`` goes to the deepest cause. Used for diagnostics: it is
  what gets logged.
- ``find_domain_cause`` stops at the shallowest ``IdRepoAppError`` reachable
  through an unbroken run of explicit ``IdRepoAppError`` causes. Used to pick
  the error content of the response.

Both are total: cyclic or pathologically deep chains never loop forever and
never raise.
"""

from idrepo.exceptions import IdRepoAppError
from idrepo.logging import get_logger, log_quietly

logger = get_logger(__name__)

# Links followed before a chain is treated as broken
MAX_CAUSE_DEPTH = 100


class CauseWalkError(Exception):
    """The cause chain could not be walked to its end."""


def get_cause(exc: BaseException) -> BaseException | None:
    """Return the exception ``exc`` was raised from.

    Explicit ``raise ... from ...`` wins; otherwise the implicit context is
    used unless it was suppressed, the same rule tracebacks are printed with.
    """
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def _walk_to_root(exc: BaseException) -> BaseException:
    seen = {id(exc)}
    current = exc
    for _ in range(MAX_CAUSE_DEPTH):
        cause = get_cause(current)
        if cause is None:
            return current
        if id(cause) in seen:
            raise CauseWalkError(f"cause cycle at {type(cause).__name__}")
        seen.add(id(cause))
        current = cause
    raise CauseWalkError(f"cause chain deeper than {MAX_CAUSE_DEPTH}")


def find_root_cause(exc: BaseException) -> BaseException:
    """Return the deepest cause of ``exc`` (``exc`` itself if it has none).

    If the chain can't be walked, a warning is logged and the result of
    ``find_domain_cause`` is returned instead.
    """
    try:
        return _walk_to_root(exc)
    except Exception as walk_error:
        log_quietly(logger.warning, "root_cause_walk_failed", error=str(walk_error))
        return find_domain_cause(exc)


def find_domain_cause(exc: BaseException) -> BaseException:
    """Follow explicit causes only while the next one is an ``IdRepoAppError``.

    Only ``raise ... from ...`` links count. An error raised while handling
    another one replaces it, so the implicit context is never followed.
    Never descends past a cause of another kind, even if an
    ``IdRepoAppError`` sits further down the chain.
    """
    seen = {id(exc)}
    current = exc
    for _ in range(MAX_CAUSE_DEPTH):
        cause = current.__cause__
        if not isinstance(cause, IdRepoAppError) or id(cause) in seen:
            break
        seen.add(id(cause))
        current = cause
    return current
