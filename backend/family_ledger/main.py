from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError
from starlette.exceptions import HTTPException as StarletteHTTPException

from family_ledger.api.routers import api_router
from family_ledger.core.config import settings
from family_ledger.core.errors import AppError
from family_ledger.core.logging import configure_logging
from family_ledger.db.init_db import check_connection, check_schema, ensure_seed_data
from family_ledger.db.session import SessionLocal, engine

logger = logging.getLogger(__name__)

app = FastAPI(title="Family Ledger API")

origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


def _error(status_code: int, message: str, fields: dict[str, str] | None = None) -> JSONResponse:
    body: dict = {"success": False, "message": message}
    if fields:
        body["fields"] = fields
    return JSONResponse(body, status_code=status_code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc, AppError):
        return _error(exc.status_code, exc.message, exc.fields)
    if exc.status_code == 404 and exc.detail == "Not Found":
        return _error(404, "Route not found")
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields: dict[str, str] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        fields[".".join(loc) or "request"] = err.get("msg", "Invalid value")
    return _error(400, "Validation failed", fields)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Stack traces, SQL and bound parameters stay in the server log.
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc.orig) if isinstance(exc, DBAPIError) and exc.orig is not None else str(exc)
    return _error(500, message or "Internal Server Error")


@app.on_event("startup")
def on_startup() -> None:
    configure_logging(settings.log_level)
    try:
        check_connection(engine)
    except Exception:
        logger.critical("Could not connect to the database at startup", exc_info=True)
        raise
    check_schema(engine)
    logger.info("Database connected (%s)", engine.dialect.name)

    if settings.seed_default_categories:
        db = SessionLocal()
        try:
            ensure_seed_data(db)
        finally:
            db.close()


@app.on_event("shutdown")
def on_shutdown() -> None:
    # Drain the pool before the process exits.
    engine.dispose()
    logger.info("Database pool disposed")
