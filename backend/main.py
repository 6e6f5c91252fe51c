"""
Verity - Contract Risk Analysis for Indian Freelancers
======================================================
Main FastAPI application entry point.

This application provides:
- Document upload (PDF, DOCX, TXT, images) with OCR fallback
- Multi-script support (English and major Indic scripts)
- Offline detection of void and unfair clauses under Indian law
- Deterministic, explainable risk scoring
- Fair-template deviation checks
- PII redaction for external analysis services

Version: 1.0.0
"""

import logging
import shutil
import sys
from contextlib import asynccontextmanager
from datetime import datetime

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import analyze_router, redact_router, templates_router
from schemas import HealthCheckResponse
from verity import RULES, available_templates, get_settings

API_VERSION = "1.0.0"

# === Configuration ===
settings = get_settings()


# === Logging Setup ===
def setup_logging():
    """Configure structured logging."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


setup_logging()
logger = structlog.get_logger(__name__)


def tesseract_available() -> bool:
    return shutil.which(settings.tesseract_path) is not None


# === Lifespan Management ===
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management.

    Startup logs the loaded rule and template tables and warns when OCR
    cannot run; nothing needs cleaning up on shutdown.
    """
    logger.info("Starting Verity API", version=API_VERSION)
    logger.info(
        "Catalog loaded",
        rules=len(RULES),
        templates=len(available_templates()),
        default_template=settings.default_template,
    )

    if not tesseract_available():
        logger.warning(
            "Tesseract not found; scanned documents and images will fail",
            tesseract_path=settings.tesseract_path,
        )

    yield

    logger.info("Shutting down Verity API")


# === Application Setup ===
app = FastAPI(
    title="Verity API",
    description="""
    ## Contract Risk Analysis

    Verity reads a contract and tells you which clauses are void or unfair
    under Indian law.

    - **Accepts** PDF, Word, text and image uploads
    - **Normalizes** text, escalating to OCR for scans and broken encodings
    - **Detects** violations such as non-competes (Section 27) and unlimited liability
    - **Scores** overall risk on a 0-100 scale
    - **Compares** payment, revision and notice terms with fair templates

    ### API Flow

    1. `POST /analyze` - Upload and analyze a document
    2. `POST /analyze/text` - Analyze plain text
    3. `GET /templates` - List fair templates
    4. `POST /redact` - Redact PII before external processing
    """,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)


# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # Next.js dev server
        "http://localhost:3001",
        "*",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# === Exception Handlers ===
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.exception("Unhandled exception", path=request.url.path, error=str(exc))

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "InternalServerError",
            "message": "An unexpected error occurred. Please try again.",
            "reason": None,
            "details": {"path": request.url.path} if settings.debug else None
        }
    )


# === Health Check ===
@app.get(
    "/health",
    response_model=HealthCheckResponse,
    tags=["Health"],
    summary="Health check",
    description="Check if the API is running and whether OCR is available."
)
async def health_check() -> HealthCheckResponse:
    services = {
        "api": "healthy",
        "detector": "healthy",
        "ocr": "healthy" if tesseract_available() else "unavailable",
    }

    return HealthCheckResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=datetime.utcnow(),
        services=services
    )


@app.get(
    "/",
    tags=["Health"],
    summary="Root endpoint",
    description="Welcome message and API information."
)
async def root():
    """Root endpoint with welcome message."""
    return {
        "name": "Verity API",
        "version": API_VERSION,
        "description": "Contract risk analysis for Indian contract law",
        "docs": "/docs",
        "health": "/health"
    }


# === Register Routers ===
app.include_router(analyze_router)
app.include_router(templates_router)
app.include_router(redact_router)


# === Main Entry Point ===
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
