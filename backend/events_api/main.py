import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse, PlainTextResponse

from events_api.api.deps import get_repo
from events_api.api.routes import events
from events_api.cache.redis_cache import cache_status
from events_api.core.config import settings
from events_api.core.errors import StorageError
from events_api.core.observability import MetricsRegistry, ObservabilityMiddleware, configure_logging
from events_api.db import session as db_session
from events_api.db.base import Base
import events_api.models  # noqa: F401


configure_logging(settings.log_level)
logger = logging.getLogger("events_api")

metrics_registry = MetricsRegistry()
COMMON_ERROR_RESPONSES = {
    "400": "Bad Request",
    "404": "Not Found",
    "500": "Internal Server Error",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@asynccontextmanager
async def lifespan(app: FastAPI):
    backend = settings.resolved_backend
    logger.info("Starting Event Management API (env=%s, storage=%s)", settings.environment, backend)
    if backend == "sql" and db_session.engine is not None:
        Base.metadata.create_all(bind=db_session.engine)
        logger.info("Database tables ready")
    yield
    logger.info("Event Management API shutting down")


app = FastAPI(title="Event Management API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)
app.add_middleware(
    ObservabilityMiddleware,
    registry=metrics_registry,
    exclude_paths={"/metrics", "/health"},
)

app.include_router(events.router)


def _validation_detail(errors) -> str:
    missing: list[str] = []
    for err in errors:
        if err.get("type") == "json_invalid":
            return "Request body must be valid JSON"
        loc = err.get("loc", ())
        if len(loc) >= 2 and loc[0] == "body" and isinstance(loc[1], str) and loc[1] not in missing:
            missing.append(loc[1])
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    return "Request body must be a JSON object with the required fields"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"detail": _validation_detail(exc.errors())}, status_code=400)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    request_id = getattr(request.state, "request_id", None)
    logger.error("Storage failure on %s %s (request_id=%s): %s", request.method, request.url.path, request_id, exc)
    detail = "Storage error"
    if not settings.is_production:
        detail = f"{detail}: {exc}"
    return JSONResponse({"detail": detail}, status_code=500)


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    components = openapi_schema.setdefault("components", {})
    schemas = components.setdefault("schemas", {})
    schemas.setdefault(
        "ErrorResponse",
        {
            "title": "ErrorResponse",
            "type": "object",
            "properties": {"detail": {"type": "string"}},
            "required": ["detail"],
        },
    )

    for path, path_item in openapi_schema.get("paths", {}).items():
        for method, operation in path_item.items():
            if method not in {"get", "post", "put", "patch", "delete", "options", "head"}:
                continue
            responses = operation.setdefault("responses", {})
            # request validation answers 400 instead of FastAPI's 422
            responses.pop("422", None)
            if path == "/health":
                responses["503"] = {
                    "description": "Service Unavailable",
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "required": ["status", "timestamp", "checks"],
                                "properties": {
                                    "status": {"type": "string"},
                                    "timestamp": {"type": "string"},
                                    "checks": {"type": "object", "additionalProperties": {}},
                                },
                            }
                        }
                    },
                }
            for status_code, description in COMMON_ERROR_RESPONSES.items():
                responses.setdefault(
                    status_code,
                    {
                        "description": description,
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/ErrorResponse"}
                            }
                        },
                    },
                )

    schemas.pop("HTTPValidationError", None)
    schemas.pop("ValidationError", None)
    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi


@app.get("/")
def root():
    return {"message": "🚀 Event Management API is running!", "timestamp": _now()}


@app.get("/health")
def health(repo=Depends(get_repo)):
    checks = {"api": "ok", "storage_backend": settings.resolved_backend}
    failures: list[str] = []

    try:
        repo.ping()
        checks["storage"] = "ok"
    except StorageError as exc:
        checks["storage"] = "error"
        checks["storage_error"] = str(exc)
        failures.append("storage")

    # cache problems are reported but do not degrade the service
    checks["cache"] = cache_status()

    payload = {
        "status": "OK" if not failures else "DEGRADED",
        "timestamp": _now(),
        "checks": checks,
    }
    return JSONResponse(payload, status_code=200 if not failures else 503)


@app.get("/metrics", response_class=PlainTextResponse)
def metrics():
    return PlainTextResponse(
        metrics_registry.render_prometheus(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
