"""CORS configuration for browser clients of the expansion API."""
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

logger = logging.getLogger(__name__)

# Get environment configuration
ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")

# Base allowed origins for development
DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def allowed_origins(environment: str = ENVIRONMENT, frontend_url: str = FRONTEND_URL) -> list:
    """Origins allowed for ``environment``; production only trusts FRONTEND_URL."""
    origins = [] if environment == "production" else list(DEV_ORIGINS)
    if frontend_url and frontend_url not in origins:
        origins.append(frontend_url)
    return origins


def add_cors_middleware(app, environment: str = ENVIRONMENT, frontend_url: str = FRONTEND_URL):
    """Add CORS middleware to the FastAPI application."""
    origins = allowed_origins(environment, frontend_url)
    logger.info("[CORS] Environment: %s, allowed origins: %s", environment, origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
