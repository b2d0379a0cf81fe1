"""Main application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from app.config import get_settings

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# Reduce noise from third-party libraries (must be set before importing them)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)
logging.getLogger("picows").setLevel(logging.WARNING)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from app.api import router, manager, websocket_endpoint
from app.clients import KrakenOhlcWebSocket, KrakenRestClient
from app.services import TriggerMonitor
from app.trigger_config import load_trigger_config
from core.board import TriggerBoard

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting Titan Triggers...")

    config_path = Path(settings.triggers_file) if settings.triggers_file else None
    assets = load_trigger_config(config_path).get_assets()

    board = TriggerBoard(assets)
    board.on_change(manager.notify)

    rest_client = KrakenRestClient(
        base_url=settings.kraken_rest_url,
        timeout=settings.http_timeout,
    )
    monitor = TriggerMonitor(
        board=board,
        rest_client=rest_client,
        ws_factory=lambda: KrakenOhlcWebSocket(settings.kraken_ws_url),
        currency=settings.quote_currency,
        request_delay=settings.history_request_delay,
    )

    app.state.board = board
    app.state.monitor = monitor

    await monitor.start()
    logger.info(f"Tracking {len(assets)} assets in {settings.quote_currency}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    app.state.monitor = None
    await monitor.stop()
    await rest_client.close()
    logger.info("Shutdown complete")


def create_app(lifespan=lifespan) -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="Titan Triggers",
        description="Entry/exit trigger signals for tracked crypto assets",
        version="0.1.0",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")
    app.websocket("/ws")(websocket_endpoint)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Titan Triggers",
            "version": "0.1.0",
            "docs": "/docs",
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
