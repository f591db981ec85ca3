"""
FastAPI Application Entry Point.

Washington Law API - offline lookup, browse and search over the crawled corpus.

Run with:
    uvicorn walaw.server.main:app --host 0.0.0.0 --port 8000

Or through the CLI:
    walaw serve
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import get_settings
from .api import router
from .dependencies import shutdown_close, startup_load

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Opens the store read-only on startup and closes it on shutdown.
    """
    logger.info("Starting Washington Law API Server...")
    startup_load()

    yield

    logger.info("Shutting down Washington Law API Server...")
    shutdown_close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
## Washington Law API

Read-only access to a local mirror of Washington State law.

### Collections

- **RCW**: Revised Code of Washington (statutes)
- **WAC**: Washington Administrative Code
- **Court rules**: IRLJ, CRLJ, RALJ, RPC

### Operations

- Lookup by citation, hierarchical browse, ranked full-text search, statistics
""",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Include API routes
    app.include_router(router, prefix="/laws", tags=["Laws"])

    # Root endpoint
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/laws/health",
            "search": "/laws/search",
            "stats": "/laws/stats",
        }

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "walaw.server.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
