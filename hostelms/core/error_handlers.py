"""
Render HostelError and validation failures as JSON responses.

Field errors use ``{"errors": {field: [messages]}}``; everything else uses
``{"error": message}``.
"""

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..config import Settings
from .exceptions import HostelError, ValidationFailed
from .permissions import caller_for_token, request_token, route_operation
from .policy import check_role

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again later."

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}
_PYDANTIC_PREFIXES = ("Value error, ", "Assertion failed, ")


def field_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    """Group pydantic errors by the wire (camelCase) field name"""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = list(error.get("loc", ()))
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        if error.get("type") == "json_invalid":
            # loc holds the decode offset, not a field
            loc = []
        field = ".".join(str(part) for part in loc) or "body"
        message = error.get("msg", "Invalid value")
        for prefix in _PYDANTIC_PREFIXES:
            if message.startswith(prefix):
                message = message[len(prefix):]
        errors.setdefault(field, []).append(message)
    return errors


def _policy_failure(request: Request) -> Optional[HostelError]:
    """Apply the route's role rule when body decoding failed before dependencies ran."""
    operation = route_operation(request.scope.get("route"))
    if operation is None:
        return None
    db = request.app.state.database.session()
    try:
        caller = caller_for_token(db, request_token(request))
    finally:
        db.close()
    try:
        check_role(caller, operation)
    except HostelError as exc:
        return exc
    return None


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(HostelError)
    async def hostel_error_handler(request: Request, exc: HostelError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        if any(error.get("type") == "json_invalid" for error in exc.errors()):
            denied = await run_in_threadpool(_policy_failure, request)
            if denied is not None:
                return JSONResponse(status_code=denied.status_code, content=denied.to_dict())
        failure = ValidationFailed(field_errors(exc))
        return JSONResponse(status_code=failure.status_code, content=failure.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = GENERIC_ERROR_MESSAGE if settings.is_production else f"{type(exc).__name__}: {exc}"
        return JSONResponse(status_code=500, content={"error": message})
