import logging
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from api.di.container import ApplicationContainer as DependencyContainer
from api.shared.dtos import ErrorResponse, HealthCheckResponse
from api.shared.entities.registry import BaseEntity
from api.shared.exceptions import ChatServiceException, InternalError, UpstreamRateLimitedError
from core.logging import configure_logging
from core.settings import SETTINGS

configure_logging(SETTINGS.APP)

logger = logging.getLogger("chat")

STATIC_DIR = Path(__file__).resolve().parent / "static"


class CustomFastAPI(FastAPI):
    container: DependencyContainer


@asynccontextmanager
async def lifespan(_app: CustomFastAPI):
    logger.info("Starting application initialization...")
    start_time = time.time()

    try:
        if not SETTINGS.OPENAI.OPENAI_API_KEY.get_secret_value():
            raise RuntimeError("OPENAI_API_KEY is not configured")

        logger.info("Initializing database connection...")
        db_start = time.time()
        db_resource = _app.container.infrastructure.database()
        await db_resource.init()
        await db_resource.ping()
        if SETTINGS.DATABASE.AUTO_CREATE_SCHEMA:
            await db_resource.create_schema(BaseEntity.metadata)
            logger.info("Database schema ensured")
        logger.info(
            f"✅ Database connection established in {time.time() - db_start:.2f}s"
        )

        logger.info(
            f"✅ Application startup completed in {time.time() - start_time:.2f}s"
        )
    except Exception as e:
        logger.exception(f"❌ Failed to initialize application: {str(e)}")
        raise

    yield

    db_resource = _app.container.infrastructure.database()
    await db_resource.shutdown()
    logger.info("Application shutdown complete")


def error_response(
    status_code: int, error: str, detail: str, details=None, headers=None
) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail, status_code=status_code, details=details or None)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


async def service_exception_handler(request: Request, exc: ChatServiceException):
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.error_code} on {request.method} {request.url.path}")
    headers = None
    if isinstance(exc, UpstreamRateLimitedError) and exc.retry_after:
        headers = {"Retry-After": exc.retry_after}
    return error_response(
        exc.status_code, exc.error_code, exc.message, exc.details, headers=headers
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "BAD_REQUEST", str(exc.errors()))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(
        exc.status_code, "HTTP_ERROR", str(exc.detail), headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    error = InternalError("An unexpected error occurred")
    return error_response(error.status_code, error.error_code, error.message)


def create_fastapi_app() -> CustomFastAPI:
    _app = CustomFastAPI(
        title="LLM Chat Service",
        description="Chat, structured book recommendations and persistent conversations",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Initialize dependency container
    _app.container = DependencyContainer()
    _app.container.wire(modules=[sys.modules[__name__]])
    _app.container.init_resources()

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _app.add_exception_handler(ChatServiceException, service_exception_handler)
    _app.add_exception_handler(RequestValidationError, validation_exception_handler)
    _app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    _app.add_exception_handler(Exception, general_exception_handler)

    # Include feature routers
    from api.features.books.router import router as books_router
    from api.features.chat.router import router as chat_router
    from api.features.conversation.router import router as conversation_router

    _app.include_router(
        conversation_router, prefix="/api/conversations", tags=["Conversations"]
    )
    _app.include_router(chat_router, prefix="/api", tags=["Chat"])
    _app.include_router(books_router, prefix="/books", tags=["Books"])

    # Browser chat client
    _app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @_app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(STATIC_DIR / "index.html")

    @_app.get("/health", response_model=HealthCheckResponse)
    async def health():
        return HealthCheckResponse(status="ok")

    @_app.get("/ready", response_model=HealthCheckResponse)
    async def ready():
        db_resource = _app.container.infrastructure.database()
        try:
            await db_resource.ping()
        except Exception as e:
            logger.warning(f"Readiness check failed: {e.__class__.__name__}")
            return error_response(503, "STORE_UNAVAILABLE", "Database is not reachable")
        return HealthCheckResponse(status="ok", dependencies={"database": "ok"})

    return _app


app = create_fastapi_app()
