# Listly API Main Entry Point
import logging
import sys
import uuid

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.errors import AppError, UnauthorizedError
from .core.responses import error_response
from .deps import get_current_user, has_live_session
from .limiter import limiter
from .settings import settings
from .routers.auth import router as auth_router
from .routers.categories import router as categories_router
from .routers.dev import router as dev_router
from .routers.items import router as items_router
from .routers.lists import router as lists_router
from .routers.meal_plans import router as meal_plans_router
from .routers.pantry import router as pantry_router
from .routers.ready import router as ready_router
from .routers.recipes import router as recipes_router
from .routers.stores import router as stores_router
from .routers.users import router as users_router

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("listly")

HTTP_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "RATE_LIMITED",
}
SOURCE_PARTS = {"body", "query", "path", "header", "cookie"}
GATED_PREFIX = "/api/v1/"

app = FastAPI(title="Listly API", version="0.1.0")
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex[:10]
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-Id"] = request_id
    return response


# --- Error envelope ---

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    if first.get("type") == "json_invalid":
        # The body is decoded before route dependencies run, so the auth gate
        # has not been consulted yet.
        if request.url.path.startswith(GATED_PREFIX) and not await has_live_session(request):
            gate = UnauthorizedError()
            return error_response(gate.status_code, gate.code, gate.message)
        return error_response(
            400, "VALIDATION_ERROR", "Invalid JSON body",
            [{"field": "body", "message": first.get("msg", "Invalid JSON")}],
        )

    details = []
    for err in errors:
        field = ".".join(str(p) for p in err.get("loc", ()) if p not in SOURCE_PARTS)
        details.append({"field": field or "body", "message": err.get("msg", "Invalid value")})

    if first.get("type") == "missing":
        message = f"{details[0]['field']} is required"
    else:
        message = "Invalid request data"
    return error_response(400, "VALIDATION_ERROR", message, details)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(
        exc.status_code,
        HTTP_CODES.get(exc.status_code),
        message,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return error_response(429, "RATE_LIMITED", f"Too many requests: {exc.detail}")


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return error_response(409, "CONFLICT", "Resource conflicts with existing data")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, "request_id", "-")
    logger.exception("unhandled error [%s] %s %s", request_id, request.method, request.url.path)
    return error_response(
        500,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
        headers={"X-Request-Id": request_id},
    )


# --- Routes ---

app.include_router(ready_router, prefix="/api", tags=["ready"])
app.include_router(auth_router, prefix="/api", tags=["auth"])

# Everything under /api/v1 passes the auth gate once, here.
v1 = APIRouter(prefix="/api/v1", dependencies=[Depends(get_current_user)])
v1.include_router(lists_router, tags=["lists"])
v1.include_router(items_router, tags=["items"])
v1.include_router(recipes_router, tags=["recipes"])
v1.include_router(meal_plans_router, tags=["meal-plans"])
v1.include_router(stores_router, tags=["stores"])
v1.include_router(pantry_router, tags=["pantry"])
v1.include_router(categories_router, tags=["categories"])
v1.include_router(users_router, tags=["users"])
app.include_router(v1)

if settings.dev_endpoints_enabled:
    app.include_router(dev_router, prefix="/api", tags=["dev"])
