"""Main FastAPI application for the recurrence expansion engine."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from recurrence_engine import __version__
from recurrence_engine.db.init import init_db
from recurrence_engine.errors import ExpansionError
from recurrence_engine.middleware.cors import add_cors_middleware
from recurrence_engine.routers import exceptions_router, occurrences_router, rules_router

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Recurrence Expansion API",
    description="Expands recurring calendar events into concrete occurrences",
    version=__version__,
)

# Add CORS middleware
add_cors_middleware(app)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    try:
        init_db()
        logger.info("[SUCCESS] Database tables initialized successfully.")
    except Exception as e:
        logger.warning("[WARNING] Database initialization failed: %s", e)
        logger.warning("[WARNING] Server will continue but database operations may fail.")


@app.exception_handler(ExpansionError)
async def expansion_error_handler(request: Request, exc: ExpansionError):
    """Render engine errors as {code, message, details} with their HTTP status."""
    if exc.status_code >= 500:
        logger.error("Unhandled expansion error on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root():
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to the Recurrence Expansion API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


app.include_router(rules_router, prefix="/api")  # /api/rules, /api/events/{id}/rule
app.include_router(occurrences_router, prefix="/api")  # /api/events/{id}/occurrences
app.include_router(exceptions_router, prefix="/api")  # /api/events/{id}/exceptions


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "recurrence_engine.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
