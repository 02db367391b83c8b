"""Access to the calling user, for log attribution only.

The user is held in a ContextVar so every request (and every task spawned
from it) sees its own value. RequestContextMiddleware binds it at the start
of each request.
"""

from contextvars import ContextVar, Token

_current_user: ContextVar[str] = ContextVar("current_user", default="")


def get_user() -> str:
    """Return the user bound to the current request, or "" when anonymous."""
    return _current_user.get()


def bind_user(user: str) -> Token[str]:
    return _current_user.set(user)


def reset_user(token: Token[str]) -> None:
    _current_user.reset(token)
