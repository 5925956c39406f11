# civicvoice/core/errors.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

log = logging.getLogger("civicvoice.errors")


class CivicVoiceError(Exception):
    """Base for every error the workflow core raises.

    Carries a machine-readable ``kind``, a human message and, for input
    problems, the offending field.
    """

    kind = "error"
    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.message, "kind": self.kind}
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(CivicVoiceError):
    """Missing or malformed input: required fields, enums, geo pair, rating range."""

    kind = "validation"
    status_code = 400


class NotFoundError(CivicVoiceError):
    kind = "not_found"
    status_code = 404


class PermissionDeniedError(CivicVoiceError):
    """Role, ownership or department-assignment mismatch."""

    kind = "permission"
    status_code = 403


class ConflictError(CivicVoiceError):
    """Transition not legal from the record's current state."""

    kind = "conflict"
    status_code = 409


def register_exception_handlers(app: FastAPI) -> None:
    """Map workflow errors to JSON responses with the matching status code."""

    @app.exception_handler(CivicVoiceError)
    async def civicvoice_exc_handler(request: Request, exc: CivicVoiceError):
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        log.log(
            level,
            "%s %s %s -> %s | field=%s | %s",
            exc.kind,
            request.method,
            request.url.path,
            exc.status_code,
            exc.field,
            exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_exc_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = [str(p) for p in first.get("loc", ()) if p != "body"]
        err = ValidationError(first.get("msg", "Invalid request"), field=".".join(loc) or None)
        log.warning("validation %s %s -> 400 | field=%s | %s", request.method, request.url.path, err.field, err.message)
        return JSONResponse(status_code=400, content=err.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        # Full traceback to server logs; generic message to client
        log.exception("Unhandled exception %s %s -> 500", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error.", "kind": "internal_error"},
        )
