import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from safetrip.api import api_router
from safetrip.core.config import settings
from safetrip.core.exceptions import BaseAppError
from safetrip.core.logging import current_request_id, get_logger, setup_logging

setup_logging("safetrip", settings.LOG_LEVEL)
logger = get_logger("http")

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Travel safety API.

    ## Features

    * Trips with one active destination, kept in sync with the travel plans service
    * A ranked safety, news, weather, event and scam alert feed for that destination
    * Social notifications with read state
    * Subscription and trial status

    ## Identity

    Authentication happens at the gateway, which forwards the traveler's id
    in the `X-User-Id` header.
    """,
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BaseAppError)
async def app_error_handler(request: Request, exc: BaseAppError):
    # Lets clients tell "reload and retry" apart from "fix the input"
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "needsRefresh": getattr(exc, "needs_refresh", False)},
        headers=exc.headers,
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    token = current_request_id.set(request_id)

    started = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        current_request_id.reset(token)

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Content-Type-Options"] = "nosniff"

    logger.info(
        f"{request.method} {request.url.path} {response.status_code}",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000),
            "user_id": request.headers.get("X-User-Id"),
        },
    )
    return response


app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}"}
