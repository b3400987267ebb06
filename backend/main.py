"""
Main module for the FastAPI application.

OpenAI-compatible API for Google Gemini models via the Gemini CLI OAuth flow,
running as a plain Python server instead of a Cloudflare worker.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from gemini_openai.__version__ import __version__
from gemini_openai.core.config import settings
from gemini_openai.core.env import load_env
from gemini_openai.core.logging import configure_logging
from gemini_openai.core.version import get_version_info
from gemini_openai.middleware.logging import RequestLoggingMiddleware

configure_logging(settings.LOG_LEVEL)

# Setup logging
logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = ["GET", "POST", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization"]


# Lifespan event handler
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan event handler - runs on startup and shutdown.
    """
    # Startup
    app.state.env = load_env(settings)

    port = settings.PORT

    print("\n" + "="*80)
    print(f"🚀 Gemini CLI OpenAI Worker (Python) starting on port {port}")
    print("="*80)
    print(f"\n🗄️  KV backend: {settings.KV_BACKEND}")
    if settings.KV_BACKEND == "local":
        print(f"📁 KV storage: {settings.KV_STORAGE_PATH}")

    if settings.requires_auth:
        print("🔐 Authentication: Bearer token required on /v1")
    else:
        print("⚠️  Authentication: disabled - set OPENAI_API_KEY to require a bearer token")

    if not settings.GCP_SERVICE_ACCOUNT:
        print("⚠️  GCP_SERVICE_ACCOUNT: not set")
    else:
        print("✅ GCP_SERVICE_ACCOUNT: configured")

    print(f"\n🌐 Server: http://{settings.HOST}:{port}")
    print("="*80 + "\n")

    yield

    # Shutdown
    logger.info("Gemini CLI OpenAI Worker shutting down")


app = FastAPI(
    title="Gemini CLI OpenAI Worker",
    description="OpenAI-compatible API for Google Gemini models via OAuth",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def options_preflight(request: Request, call_next):
    """
    Answer any OPTIONS request that the CORS middleware did not treat as a
    browser preflight.
    """
    if request.method != "OPTIONS":
        return await call_next(request)

    headers = {
        "Access-Control-Allow-Methods": ", ".join(CORS_ALLOW_METHODS),
        "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
    }
    origin = request.headers.get("origin")
    if "*" in settings.CORS_ORIGINS:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin in settings.CORS_ORIGINS:
        headers["Access-Control-Allow-Origin"] = origin
    return Response(status_code=204, headers=headers)


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=CORS_ALLOW_HEADERS,
)

# Add logging middleware (outermost, so it also sees CORS responses)
app.add_middleware(RequestLoggingMiddleware)


@app.get("/")
async def root():
    """
    Root endpoint - basic info about the service.
    """
    requires_auth = settings.requires_auth

    return {
        "name": "Gemini CLI OpenAI Worker (Python)",
        "description": "OpenAI-compatible API for Google Gemini models via OAuth",
        "version": __version__,
        "authentication": {
            "required": requires_auth,
            "type": "Bearer token in Authorization header" if requires_auth else "None",
        },
        "endpoints": {
            "chat_completions": "/v1/chat/completions",
            "models": "/v1/models",
            "debug": {
                "cache": "/v1/debug/cache",
                "token_test": "/v1/token-test",
                "full_test": "/v1/test",
            },
        },
        "documentation": "https://github.com/gewoonjaap/gemini-cli-openai",
    }


@app.get("/health")
async def health():
    """
    Health check endpoint.
    """
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/version", tags=["health"])
async def get_version():
    """
    Get API version and feature flags.

    Returns:
        dict: Version information including:
            - version: API version string
            - features: Dictionary of enabled features
    """
    return get_version_info(settings)


if __name__ == "__main__":
    """
    Run the application directly.
    """
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
    )
