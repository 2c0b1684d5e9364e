"""
Rapport - Conversation tracking and fact extraction
FastAPI Application Entry Point

Start the server with:

    python -m api.main

or with uvicorn directly:

    uvicorn api.main:app --port 5000
"""
# Load environment variables from .env file first, before any imports
from dotenv import load_dotenv
load_dotenv()

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from api.routes import extract
from api.services.facts import empty_envelope
from config.settings import settings

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Rapport",
    description="Conversation tracker that extracts interests, dates, places and notes from text",
    version="0.1.0",
)

# CORS middleware for the browser client
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(extract.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert validation errors to 400 with the standard four-list envelope."""
    errors = exc.errors()

    # Sanitize errors for JSON serialization (convert bytes to string)
    sanitized_errors = []
    for error in errors:
        sanitized = {k: v for k, v in dict(error).items() if k != "ctx"}
        if "input" in sanitized and isinstance(sanitized["input"], bytes):
            sanitized["input"] = sanitized["input"].decode("utf-8", errors="replace")
        sanitized_errors.append(sanitized)

    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": "Request body could not be validated",
            "detail": sanitized_errors,
            **empty_envelope(),
        }
    )


@app.get("/ping")
async def ping():
    """Liveness check."""
    return {
        "success": True,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
async def health_check():
    """Health check endpoint that verifies the extraction backend."""
    backend = settings.extraction_backend

    checks = {}
    if backend == "ollama":
        from api.services.ollama_client import OllamaClient
        checks["ollama_available"] = await OllamaClient().is_available()
    elif backend == "anthropic":
        checks["api_key_configured"] = bool(
            settings.anthropic_api_key and settings.anthropic_api_key.strip()
        )
    else:
        checks["rules_loaded"] = True

    all_healthy = all(checks.values())

    return {
        "status": "healthy" if all_healthy else "degraded",
        "service": "rapport",
        "backend": backend,
        "fallback_to_rules": settings.fallback_to_rules,
        "checks": checks,
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    logger.info(f"Extraction endpoint: POST http://localhost:{settings.port}/extract")
    uvicorn.run(app, host=settings.host, port=settings.port)
