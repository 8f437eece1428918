"""
app/api/errors.py

Translates request-level failures into `{error, details}` JSON bodies.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.errors import PlanImportError

logger = logging.getLogger(__name__)


async def plan_import_error_handler(request: Request, exc: PlanImportError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log("Request failed path=%s status=%s error=%r", request.url.path, exc.status_code, exc.error)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    )
    return JSONResponse(status_code=422, content={"error": "Invalid request", "details": problems})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Error parsing project file", "details": str(exc) or exc.__class__.__name__},
    )


def register_exception_handlers(application: FastAPI) -> None:
    application.add_exception_handler(PlanImportError, plan_import_error_handler)
    application.add_exception_handler(RequestValidationError, request_validation_error_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)
