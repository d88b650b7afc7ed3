import logging
from typing import Any, Dict, List
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder

from repairdesk.core.registry import JobRegistryError

logger = logging.getLogger("repairdesk.errors")

FALLBACK_MESSAGE = "Please fill in all required fields."


def _form_feedback(errors: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Field names plus one user-facing sentence for the registration form."""
    fields = [str(e["loc"][-1]) for e in errors if e.get("loc") and e["loc"][0] == "body"]
    message = FALLBACK_MESSAGE
    for e in errors:
        ctx_error = (e.get("ctx") or {}).get("error")
        if ctx_error is not None:
            message = str(ctx_error)
            break
    return {"fields": fields, "message": message}


def register_error_handlers(app: FastAPI):
    @app.exception_handler(HTTPException)
    async def http_exc_handler(request: Request, exc: HTTPException):
        logger.warning("HTTPException %s %s -> %s %r", request.method, request.url.path, exc.status_code, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail) if exc.detail else "HTTP error"},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        feedback = _form_feedback(errors)
        logger.info("Rejected input path=%s fields=%s", request.url.path, feedback["fields"])
        return JSONResponse(
            status_code=422,
            content={"error": "Validation error", **feedback, "details": jsonable_encoder(errors)},
        )

    @app.exception_handler(JobRegistryError)
    async def registry_exc_handler(request: Request, exc: JobRegistryError):
        # The registry logged the cause; clients only see the generic message.
        logger.error("Registry failure path=%s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error at path=%s", request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
