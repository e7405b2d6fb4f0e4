from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from routes import catalog_router
from services.app_state import AppState
from services.error_handler import setup_error_handlers
from smart_cache import start_cache_cleanup

logger = logging.getLogger(__name__)


def create_app(state: AppState, http_client=None, cache_cleanup_interval: Optional[int] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    State is injected so tests can build an app around a fake marketplace.
    The shared http_client, when given, is closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler for startup/shutdown."""
        logger.info("[STARTUP] Market data service starting...")
        logger.info(f"[STARTUP] Debug mode: {state.debug_mode}")
        oracle = state.orchestrator.oracle if state.orchestrator else None
        logger.info(f"[STARTUP] Oracle: {'enabled' if oracle is not None and oracle.enabled else 'disabled'}")

        app.state.app_state = state
        if cache_cleanup_interval and state.orchestrator:
            start_cache_cleanup(state.orchestrator.cache, cache_cleanup_interval)

        yield

        logger.info("[SHUTDOWN] Market data service shutting down...")
        logger.info(f"[SHUTDOWN] Total requests: {state.stats['total_requests']}")
        if http_client is not None:
            await http_client.aclose()

    app = FastAPI(
        title="Auction Market Data Service",
        description="Adaptive search-query resolution and market insight fusion for auction cataloging",
        lifespan=lifespan,
    )
    # Routes read state from app.state; set it eagerly for clients that skip lifespan
    app.state.app_state = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_error_handlers(app, debug=state.debug_mode)

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=204)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "total_requests": state.stats["total_requests"],
            **state.get_memory_stats(),
        }

    app.include_router(catalog_router)

    return app


def get_app_state(app: FastAPI) -> AppState:
    """Get the AppState instance from the FastAPI app."""
    return app.state.app_state
