"""
CRUD Gateway: Event Logging Helpers
====================================

What:  `log_info` / `log_error` record an outcome together with the request
       it belongs to.
How:   Builds a flat `extra` dict (request id, method, path, client ip,
       error type/text) and hands it to the `crudgateway.events` logger.
Who:   Route handlers on success, global exception handlers on failure.

Fire-and-forget: a failing handler is reported by the logging module's own
`Handler.handleError` and never propagates to the caller.
"""

import logging
from typing import Any, Dict, Optional

from starlette.requests import Request

from crudgateway.middleware.request_id import request_id_var

logger = logging.getLogger("crudgateway.events")


def request_context(request: Optional[Request]) -> Dict[str, Any]:
    """Extract the loggable fields of a request; empty when there is none."""
    if request is None:
        return {}
    client_ip = request.client.host if request.client else "unknown"
    return {
        "request_id": request_id_var.get(""),
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
    }


def log_info(message: str, request: Optional[Request] = None) -> None:
    ctx = request_context(request)
    if ctx:
        logger.info(
            "%s | %s %s [%s]", message, ctx["method"], ctx["path"], ctx["request_id"],
            extra=ctx,
        )
    else:
        logger.info(message)


def log_error(
    message: str,
    request: Optional[Request] = None,
    error: Optional[BaseException] = None,
) -> None:
    """
    Record a failure.

    The full traceback is attached when `error` is given, so the raw cause
    is always available server-side even if the response hides it.
    """
    ctx = request_context(request)
    if error is not None:
        ctx["error_type"] = type(error).__name__
        ctx["error"] = str(error)

    if "method" in ctx:
        logger.error(
            "%s | %s %s [%s]: %s",
            message,
            ctx["method"],
            ctx["path"],
            ctx["request_id"],
            ctx.get("error", ""),
            extra=ctx,
            exc_info=error,
        )
    else:
        logger.error("%s: %s", message, ctx.get("error", ""), extra=ctx, exc_info=error)
