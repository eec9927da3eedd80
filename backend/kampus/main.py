import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kampus.api.routes import (
    assignments,
    calendar,
    catalog,
    conflicts,
    health,
    institutions,
    placements,
)
from kampus.core.config import get_settings
from kampus.core.exceptions import AppError
from kampus.core.middleware import RequestLoggingMiddleware, RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from kampus.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema_compatibility()
    logger.info("%s ready", settings.project_name)
    yield


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

scoped_prefix = f"{settings.api_prefix}/institutions/{{institution_id}}"

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(institutions.router, prefix=f"{settings.api_prefix}/institutions", tags=["institutions"])
app.include_router(catalog.router, prefix=scoped_prefix, tags=["catalog"])
app.include_router(calendar.router, prefix=scoped_prefix, tags=["calendar"])
app.include_router(assignments.router, prefix=scoped_prefix, tags=["assignments"])
app.include_router(placements.router, prefix=scoped_prefix, tags=["placements"])
app.include_router(conflicts.router, prefix=scoped_prefix, tags=["conflicts"])
