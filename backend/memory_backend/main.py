"""
FastAPI application entry point for the conversational memory backend.
"""

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from dotenv import load_dotenv
import logging
import time
import uuid

# Load environment variables from .env file
load_dotenv()

from memory_backend.config import ServerConfig, DatabaseConfig, WebhookConfig
from memory_backend.logging_config import setup_logging
from memory_backend.database import connect_to_mongo, close_mongo_connection
from memory_backend.memory import health_check as storage_health_check
from memory_backend.memory.records import utc_now_iso
from memory_backend.tools import initialize_tools
from memory_backend.routes import memory as memory_router
from memory_backend.routes import tools as tools_router
from memory_backend.routes import webhook as webhook_router

# Environment may have changed after load_dotenv()
DatabaseConfig.load()
ServerConfig.load()
WebhookConfig.load()

setup_logging()
logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()

app = FastAPI(
    title="Memory API",
    description="Conversational memory backend for the voice agent",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ServerConfig.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request ID Middleware for logging and traceability
class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        logger.info(f"[{request_id}] {request.method} {request.url.path}", extra={"request_id": request_id})

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RequestIDMiddleware)

app.include_router(memory_router.router)
app.include_router(tools_router.router)
app.include_router(webhook_router.router)


@app.on_event("startup")
async def startup_event():
    await connect_to_mongo()
    initialize_tools()
    logger.info(
        f"Memory backend ready: environment={ServerConfig.ENVIRONMENT} "
        f"database={DatabaseConfig.DATABASE_NAME} "
        f"webhook_secret={'set' if WebhookConfig.is_configured() else 'not set'}"
    )


@app.on_event("shutdown")
async def shutdown_event():
    await close_mongo_connection()


def _error_body(detail, code: str) -> dict:
    return {"success": False, "error": detail, "code": code}


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(exc.headers or {})
    code = headers.pop("code", None)
    if code is None:
        code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "HTTP_ERROR"

    body = _error_body(exc.detail, code)
    # Unmatched route
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        body["error"] = "API endpoint not found"
        body["path"] = request.url.path
        body["timestamp"] = utc_now_iso()

    return JSONResponse(status_code=exc.status_code, content=body, headers=headers or None)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    error_messages = []
    for error in exc.errors():
        field = ".".join(str(x) for x in error.get("loc", []))
        msg = error.get("msg", "Validation error")
        error_messages.append(f"{field}: {msg}")

    detail = "; ".join(error_messages) if error_messages else "Validation error"

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(detail, "VALIDATION_ERROR"),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Catches every unhandled exception and answers with a JSON 500.
    """
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            **_error_body("Internal server error", "INTERNAL_ERROR"),
            "message": str(exc),
            "timestamp": utc_now_iso(),
        },
    )


@app.get("/api/health")
async def health():
    """
    Health check with storage status and process uptime.
    """
    try:
        storage = await storage_health_check()
        return {
            "status": "healthy",
            "timestamp": utc_now_iso(),
            "environment": ServerConfig.ENVIRONMENT,
            "services": {
                "database": storage,
                "server": {
                    "status": "healthy",
                    "uptime": round(time.monotonic() - STARTED_AT, 3),
                },
            },
        }
    except Exception as e:
        logger.error(f"Health check error: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "unhealthy", "timestamp": utc_now_iso(), "error": str(e)},
        )


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("memory_backend.main:app", host="0.0.0.0", port=ServerConfig.PORT)
