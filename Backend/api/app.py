# Backend/api/app.py
from fastapi import FastAPI, Request
import time
import uuid
import logging
from contextlib import asynccontextmanager
from typing import Optional

from config.settings import Settings
from orchestration.orchestrator import AnalyzerOrchestrator
from api import app_state
from api.routes import health, metrics

logger = logging.getLogger(__name__)


def build_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run the orchestrator for the lifetime of the app"""
        logger.info("Starting Conversation Analyzer...")

        settings.validate()
        orchestrator = AnalyzerOrchestrator(settings.server_options(), settings)

        try:
            await orchestrator.init()
            logger.info("✓ Resources initialized")

            report = await orchestrator.start()
            logger.info(f"✓ Handlers registered: {', '.join(report.registered) or 'none'}")
        except Exception as e:
            logger.error(f"❌ Failed to start analyzer: {e}")
            await orchestrator.stop()
            raise

        app_state.orchestrator = orchestrator
        logger.info("🚀 Application startup completed successfully")

        yield

        logger.info("Shutting down Conversation Analyzer...")
        app_state.orchestrator = None
        report = await orchestrator.stop()
        if report.ok:
            logger.info("✓ Application shutdown completed")
        else:
            logger.warning(f"Shutdown completed with {len(report.errors)} teardown errors")

    return lifespan


def create_app(settings: Optional[Settings] = None, manage_lifecycle: bool = True) -> FastAPI:
    """Create the FastAPI app; manage_lifecycle=False skips the orchestrator"""
    settings = settings or Settings()

    app = FastAPI(
        title="Conversation Analyzer",
        description="Persists conversation intelligence events from RabbitMQ into Neo4j",
        version="1.0.0",
        docs_url="/api/docs" if settings.debug_mode else None,
        redoc_url="/api/redoc" if settings.debug_mode else None,
        lifespan=build_lifespan(settings) if manage_lifecycle else None
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time and request ID headers"""
        start_time = time.time()
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{time.time() - start_time:.4f}"
        return response

    app.include_router(health.router, prefix="/api/v1", tags=["Health"])
    app.include_router(metrics.router, prefix="/api/v1", tags=["Metrics"])

    return app
