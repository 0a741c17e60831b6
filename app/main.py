import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.db.database import Base, engine, init_db
from app.ingestion.errors import IngestionError
from app.pipeline.errors import SearchError
from app.schemas.search import ErrorResponse
from app.services.web_search import WebSearchError
from app.utils.logging import get_logger, setup_logging

from app.api.health import router as health_router
from app.api.ingest import router as ingest_router
from app.api.records import router as records_router
from app.api.search import router as search_router
from app.api.web_search import router as web_search_router

logger = get_logger("eligibility.main")

app = FastAPI(
    title=settings.app_name,
    description="Eligibility records ingestion and natural-language search API",
    version="1.0.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your frontend domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api")        # /api/health
app.include_router(search_router, prefix="/api")        # /api/search-eligibility
app.include_router(records_router, prefix="/api")       # /api/eligibility-records, /api/history
app.include_router(ingest_router, prefix="/api")        # /api/parse-eligibility, /api/parse-url
app.include_router(web_search_router, prefix="/api")    # /api/web-search


# ── Error envelopes: {"error": code, "message": message} ────────────

def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    envelope = ErrorResponse(error=code, message=message)
    return JSONResponse(status_code=status_code, content=envelope.model_dump())


@app.exception_handler(SearchError)
async def search_error_handler(request: Request, exc: SearchError):
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(IngestionError)
async def ingestion_error_handler(request: Request, exc: IngestionError):
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(WebSearchError)
async def web_search_error_handler(request: Request, exc: WebSearchError):
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "Invalid request.")
    message = f"{location}: {detail}" if location else detail
    return _error_response(400, "invalid_request", message)


@app.on_event("startup")
async def on_startup():
    """
    Startup:
    1. Initialize logging
    2. Verify the database connection
    3. Run migrations (extensions, missing columns, indexes)
    4. Create tables
    """
    level = setup_logging(settings.effective_log_level)
    logger.info(
        "Starting Eligibility Search backend... | environment=%s log_level=%s",
        settings.environment, logging.getLevelName(level),
    )

    if not init_db():
        logger.error("Failed to initialize database connection")
        raise RuntimeError("Database initialization failed")

    # Import models to register them with Base
    from app.db import models  # noqa: F401
    from app.db.migrations import run_migrations

    logger.info("Running database migrations...")
    run_migrations()

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("[OK] Database tables ready")

    logger.info("[OK] Eligibility Search backend started successfully")


@app.on_event("shutdown")
async def on_shutdown():
    """Cleanup on shutdown."""
    logger.info("Shutting down Eligibility Search backend...")
    engine.dispose()
    logger.info("[OK] Shutdown complete")
