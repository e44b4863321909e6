from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import time

from explorer.config import settings
from explorer.database import Base, engine
from explorer.errors import ApiError
from explorer.logger import logger
from explorer.routers import files, folders, search
from explorer.utils.cache import SimpleCache

# CORS configuration - supports development and production modes
allowed_origins = [
    "http://localhost:5173",          # Vite dev server
    "http://localhost:4173",          # Vite preview server
    "http://localhost:8000",          # FastAPI dev server
    "http://localhost:3000",          # Alternative dev server
]

if settings.CORS_ORIGINS:
    allowed_origins.extend(origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip())


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def create_app(cache: SimpleCache = None) -> FastAPI:
    """
    Build the API application.

    Args:
        cache: Read cache shared by this app's requests. A new one sized from
            settings is created when omitted.
    """
    app = FastAPI(
        title="Folder Explorer",
        description="Folder and file hierarchy with lazy tree loading and search",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        docs_url="/api/docs" if settings.DEBUG else None,  # Only show docs in debug mode
        redoc_url="/api/redoc" if settings.DEBUG else None,
    )
    if cache is None:
        cache = SimpleCache(
            ttl_seconds=settings.CACHE_TTL_SECONDS,
            max_entries=settings.CACHE_MAX_ENTRIES,
        )
    app.state.cache = cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        logger.info({
            "request": {"url": str(request.url), "method": request.method},
            "status": response.status_code,
            "process Time": process_time,
        })
        return response

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _describe_validation_error(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error."})

    # Register all API routers
    app.include_router(folders.router)
    app.include_router(files.router)
    app.include_router(search.router)

    # Health check endpoint
    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "message": "Folder Explorer API is running"
        }

    @app.on_event("startup")
    async def startup_event():
        Base.metadata.create_all(bind=engine)
        logger.info(f"Server starting... Version: {settings.APP_VERSION}, Debug: {settings.DEBUG}")

    @app.on_event("shutdown")
    async def shutdown_event():
        app.state.cache.clear()
        logger.info("Application shutdown")

    return app


app = create_app()
