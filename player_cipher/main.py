"""
Player Cipher API - FastAPI application entry point.

Resolves playable media URLs from signed format descriptors by extracting
the signature decipher and n-transform functions from the platform's player
script and running them in an isolated JavaScript context.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .core.diagnostics import set_debug
from .routes.api import router
from .service import get_service

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if get_settings().debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Player Cipher API starting up...")

    settings = get_settings()
    set_debug(settings.debug)
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Player base URL: {settings.player_base_url}")
    if settings.debug_dump_dir:
        logger.info(f"Player dumps written to: {settings.debug_dump_dir}")

    yield

    await get_service().close()
    logger.info("Player Cipher API shutting down...")


app = FastAPI(
    title="Player Cipher API",
    description=(
        "Extracts signature decipher and n-transform functions from player "
        "scripts, caches them per player version and applies them to format "
        "descriptors to produce playable URLs."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# CORS: use CORS_ORIGINS env (comma-separated) for explicit origins; empty = "*" without credentials (safe default)
_origins = [o.strip() for o in get_settings().cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins if _origins else ["*"],
    allow_credentials=bool(_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.get("/", tags=["root"])
async def root():
    return {
        "name": "Player Cipher API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "resolve": "/api/resolve",
            "fragments": "/api/fragments",
            "cache": "/api/cache",
            "health": "/api/health",
        },
    }


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "player_cipher.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
