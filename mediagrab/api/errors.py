from typing import Callable

from fastapi import HTTPException

from mediagrab.core.errors import DependencyUnavailableError, MediaGrabError


def http_error(
    error: Exception,
    _: Callable[..., str],
    context_key: str,
    with_help: bool = False
) -> HTTPException:
    """
    Convert any pipeline failure into the HTTP response the client sees.
    Missing dependencies map to 503 with remediation text, everything else
    keeps its own status (500 by default) with the cause wrapped in
    `context_key`.
    """
    if isinstance(error, DependencyUnavailableError):
        message = _(error.message_key)
        if with_help and error.help:
            detail = {"error": message, "details": error.reason, "help": error.help}
        else:
            detail = message
        return HTTPException(status_code=error.status_code, detail=detail)

    if isinstance(error, MediaGrabError):
        reason = _(error.message_key, reason=error.reason, **error.params)
        return HTTPException(status_code=error.status_code, detail=_(context_key, reason=reason))

    return HTTPException(status_code=500, detail=_(context_key, reason=str(error) or type(error).__name__))
