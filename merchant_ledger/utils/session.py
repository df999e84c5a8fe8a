"""Session context management for the calling role."""

from __future__ import annotations

import contextvars
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from merchant_ledger.auth import RequestContext

# Context variable for the current request context
_current_context: contextvars.ContextVar[Optional["RequestContext"]] = contextvars.ContextVar(
    "current_request_context", default=None
)


def get_current_context() -> "RequestContext":
    """Get the request context of the current session.

    No default role is assumed.

    Returns:
        The current RequestContext

    Raises:
        RuntimeError: If no context was set for this session
    """
    context = _current_context.get()
    if context is not None:
        return context

    raise RuntimeError(
        "No request context in session. Ensure set_current_context() is called "
        "before invoking ledger tools."
    )


def set_current_context(context: "RequestContext") -> contextvars.Token[Optional["RequestContext"]]:
    """Set the request context for the current session.

    Args:
        context: The RequestContext to set

    Returns:
        Token that can be used to reset the context
    """
    return _current_context.set(context)


def reset_current_context(token: contextvars.Token[Optional["RequestContext"]]) -> None:
    """Reset the session context to its previous value.

    Args:
        token: Token returned from set_current_context()
    """
    _current_context.reset(token)
