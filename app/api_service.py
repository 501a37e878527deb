from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog.product_service import catalog_error_message
from config.settings import settings
from ops.structured_logger import setup_logging
from registration.lifecycle import SubmissionNotFound, UpdateFailed
from registration.settings_editor import SettingsEditError
from storage.gateway import (
    ConnectivityError,
    GatewayError,
    GatewayTimeout,
    GatewayValidationError,
    RelationNotFound,
    RowNotFound,
)
from utils.request_context import bind_request_id, reset_request_id

from app.routers.admin_settings import router as admin_settings_router
from app.routers.health import router as health_router
from app.routers.products import router as products_router
from app.routers.registrations import router as registrations_router
from app.routers.settings import router as settings_router
from app.routers.submissions import router as submissions_router

setup_logging(settings.LOG_LEVEL)

app = FastAPI(title="PrimoBoost API", version="1.0.0")
log = logging.getLogger("primoboost.api")


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id") or ""


def _error(request: Request, status_code: int, detail, event: str, exc: Exception | None = None) -> JSONResponse:
    rid = _get_request_id(request)
    fields = {
        "event": event,
        "status_code": status_code,
        "path": request.url.path,
        "method": request.method,
        "request_id": rid,
    }
    if exc is not None:
        fields.update({"error_type": type(exc).__name__, "error_message": str(exc)})
    log.warning(event, extra={"extra": fields})
    return JSONResponse(status_code=status_code, content={"detail": jsonable_encoder(detail), "request_id": rid})


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    token = bind_request_id(rid)
    try:
        response = await call_next(request)
    finally:
        reset_request_id(token)
    response.headers["X-Request-Id"] = rid
    return response


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _error(request, exc.status_code, exc.detail, "http_exception")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error(request, 422, exc.errors(), "validation_error")


@app.exception_handler(SubmissionNotFound)
async def submission_not_found_handler(request: Request, exc: SubmissionNotFound):
    return _error(request, 404, "submission_not_found", "submission_not_found", exc)


@app.exception_handler(UpdateFailed)
async def update_failed_handler(request: Request, exc: UpdateFailed):
    return _error(request, 502, "update_failed", "update_failed", exc)


@app.exception_handler(SettingsEditError)
async def settings_edit_error_handler(request: Request, exc: SettingsEditError):
    return _error(request, 400, str(exc), "settings_edit_rejected", exc)


@app.exception_handler(RowNotFound)
async def row_not_found_handler(request: Request, exc: RowNotFound):
    return _error(request, 404, "not_found", "row_not_found", exc)


@app.exception_handler(RelationNotFound)
async def relation_not_found_handler(request: Request, exc: RelationNotFound):
    return _error(request, 503, catalog_error_message(exc), "relation_not_found", exc)


@app.exception_handler(GatewayTimeout)
async def gateway_timeout_handler(request: Request, exc: GatewayTimeout):
    return _error(request, 504, catalog_error_message(exc), "gateway_timeout", exc)


@app.exception_handler(ConnectivityError)
async def connectivity_error_handler(request: Request, exc: ConnectivityError):
    return _error(request, 503, "gateway_unavailable", "gateway_unavailable", exc)


@app.exception_handler(GatewayValidationError)
async def gateway_validation_handler(request: Request, exc: GatewayValidationError):
    return _error(request, 422, str(exc) or "payload_rejected", "gateway_payload_rejected", exc)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    return _error(request, 503, "gateway_error", "gateway_error", exc)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _get_request_id(request)
    log.error(
        "internal_unhandled_exception",
        extra={
            "extra": {
                "event": "internal_unhandled_exception",
                "error_type": type(exc).__name__,
                "error_message": str(exc),
                "path": request.url.path,
                "method": request.method,
                "request_id": rid,
            }
        },
        exc_info=True,
    )
    return JSONResponse(status_code=500, content={"error": "internal_unhandled_exception", "request_id": rid})


app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ALLOW_ORIGINS.split(",") if o.strip()],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(health_router, tags=["health"])
app.include_router(products_router, prefix="/api", tags=["products"])
app.include_router(settings_router, prefix="/api", tags=["settings"])
app.include_router(registrations_router, prefix="/api", tags=["registrations"])
app.include_router(submissions_router, prefix="/admin", tags=["submissions"])
app.include_router(admin_settings_router, prefix="/admin", tags=["admin-settings"])
