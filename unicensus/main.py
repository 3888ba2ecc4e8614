# unicensus/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import settings
from .domain.errors import CycleError, NotFoundError, PersistenceError, ValidationError
from .logging_config import configure_logging
from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware
from .routers.bathrooms import router as bathrooms_router
from .routers.calendar import router as calendar_router
from .routers.campuses import router as campuses_router
from .routers.dashboard import router as dashboard_router
from .routers.exports import router as exports_router
from .routers.health import router as health_router
from .routers.imports import router as imports_router
from .routers.inspections import router as inspections_router
from .routers.sync import router as sync_router
from .routers.tickets import router as tickets_router
from .services.workspace import FacilityWorkspace, build_workspace

API_PREFIX = "/api"

log = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    val = getattr(settings, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation(_: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": exc.message, "error": "validation"})

    @app.exception_handler(NotFoundError)
    async def _not_found(_: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content={"detail": exc.message, "error": "not_found", "kind": exc.kind, "id": exc.entity_id},
        )

    @app.exception_handler(CycleError)
    async def _cycle(_: Request, exc: CycleError):
        return JSONResponse(
            status_code=409,
            content={
                "detail": exc.message,
                "error": "cycle",
                "campus_id": exc.campus_id,
                "new_parent_id": exc.new_parent_id,
            },
        )

    @app.exception_handler(PersistenceError)
    async def _persistence(_: Request, exc: PersistenceError):
        # the in-memory change stands; the client can retry through /sync/retry
        return JSONResponse(
            status_code=502,
            content={
                "detail": exc.message,
                "error": "persistence",
                "kind": exc.kind,
                "action": exc.action,
                "entity_id": exc.entity_id,
                "pending": len(exc.pending or []),
            },
        )


def create_app(workspace: Optional[FacilityWorkspace] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ws = workspace or build_workspace()
        if not ws.loaded:
            await ws.load()
        app.state.workspace = ws
        log.info("app_started env=%s store=%s", settings.app_env, settings.store_backend)
        yield

    app = FastAPI(title="UniCensus Facility", version=__version__, lifespan=lifespan)

    # added last = runs first: the request id is set before the request log line
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_error_handlers(app)

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(campuses_router, prefix=API_PREFIX)
    app.include_router(bathrooms_router, prefix=API_PREFIX)
    app.include_router(inspections_router, prefix=API_PREFIX)
    app.include_router(tickets_router, prefix=API_PREFIX)
    app.include_router(imports_router, prefix=API_PREFIX)
    app.include_router(exports_router, prefix=API_PREFIX)
    app.include_router(dashboard_router, prefix=API_PREFIX)
    app.include_router(calendar_router, prefix=API_PREFIX)
    app.include_router(sync_router, prefix=API_PREFIX)
    return app


def _build_default_app() -> FastAPI:
    configure_logging()
    return create_app()


app = _build_default_app()
