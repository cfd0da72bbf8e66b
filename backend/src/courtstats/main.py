"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from courtstats.config import settings
from courtstats.api.routes.games import router as games_router
from courtstats.services.stats_store import HttpStatsStore, get_stats_store

logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup: tests may have set a store already
    if not hasattr(app.state, "store"):
        app.state.store = get_stats_store(
            settings.stats_api_url, timeout=settings.stats_api_timeout
        )
    yield
    # Shutdown: close the HTTP client if we opened one
    if isinstance(app.state.store, HttpStatsStore):
        await app.state.store.close()


app = FastAPI(
    title="Courtstats",
    description="Game stats recorded against the game video",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "courtstats"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Courtstats API",
        "version": "0.1.0",
        "docs": "/docs",
    }


# Register routers
app.include_router(games_router)
