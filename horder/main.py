from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from horder.api.routes_auth import router as auth_router
from horder.api.routes_backup import router as backup_router
from horder.api.routes_catalog import router as catalog_router
from horder.api.routes_orders import router as orders_router
from horder.api.routes_reports import router as reports_router
from horder.core.config import get_settings
from horder.core.logging import configure_logging
from horder.demo import seed_default_catalog
from horder.domain.errors import (
    AuthenticationError,
    EntityNotFound,
    HorderError,
    InvalidOrderTransition,
)
from horder.persistence.db import init_db, session_scope
from horder.persistence.repositories import SqlRepository

configure_logging()
logger = logging.getLogger(__name__)
settings = get_settings()

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    if settings.bootstrap_demo_on_startup:
        with session_scope() as session:
            result = seed_default_catalog(SqlRepository(session))
        logger.info("default catalog ready: seeded_now=%s", result.get("seeded_now"))


def _status_for(exc: HorderError) -> int:
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, EntityNotFound):
        return 404
    if isinstance(exc, InvalidOrderTransition):
        return 409
    return 400


@app.exception_handler(HorderError)
async def horder_error_handler(_: Request, exc: HorderError):
    status_code = _status_for(exc)
    logger.info("request rejected: status=%d error=%s detail=%s", status_code, exc.error_code, exc)
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "detail": str(exc),
            "error": exc.error_code,
        },
    )


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(catalog_router)
app.include_router(orders_router)
app.include_router(reports_router)
app.include_router(backup_router)
