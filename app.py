import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

import config
from db import create_db_and_tables, get_db_session
from exceptions.base import MarketplaceException
from jobs.escrow_release_job import escrow_release_scheduler
from jobs.payment_timeout_job import PaymentTimeoutJob
from middleware.security_headers import SecurityHeadersMiddleware, CSPMiddleware
from processing.processing import processing_router
from redis_instance import get_redis, close_redis
from services.realtime import start_realtime_hub, close_realtime_hub
from services.section import SectionService
from utils.error_handler import error_response, handle_unexpected_error
from web.api_router import api_router

# Background tasks
escrow_release_task = None
payment_timeout_job = PaymentTimeoutJob(check_interval_seconds=config.BACKGROUND_TASK_INTERVAL_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    global escrow_release_task

    # Startup
    await create_db_and_tables()
    async with get_db_session() as session:
        seeded = await SectionService.seed_built_in(session)
    if seeded:
        logging.info(f"[Startup] Seeded {seeded} built-in section(s)")

    await start_realtime_hub(get_redis())

    await payment_timeout_job.start()
    escrow_release_task = asyncio.create_task(escrow_release_scheduler())
    logging.info("[Startup] Escrow auto-release scheduler started")

    yield

    # Shutdown
    logging.warning('Shutting down..')
    await payment_timeout_job.stop()

    if escrow_release_task is not None:
        escrow_release_task.cancel()
        try:
            await escrow_release_task
        except asyncio.CancelledError:
            logging.info("[Shutdown] Escrow auto-release scheduler stopped")
        escrow_release_task = None

    await close_realtime_hub()
    await close_redis()
    logging.warning('Bye!')


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(title="Marketplace API", lifespan=lifespan if with_lifespan else None)

    if config.SECURITY_HEADERS_ENABLED:
        app.add_middleware(SecurityHeadersMiddleware)
        logging.info("[Startup] Security headers middleware enabled")

    if config.CSP_ENABLED:
        app.add_middleware(CSPMiddleware)
        logging.info("[Startup] Content Security Policy middleware enabled")

    if config.CORS_ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
            allow_headers=["Authorization", "Content-Type"],
        )
        logging.info(f"[Startup] CORS middleware enabled for origins: {config.CORS_ALLOWED_ORIGINS}")

    app.include_router(api_router)
    app.include_router(processing_router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.exception_handler(MarketplaceException)
    async def marketplace_exception_handler(request: Request, exc: MarketplaceException):
        return error_response(exc)

    @app.exception_handler(Exception)
    async def exception_handler(request: Request, exc: Exception):
        return handle_unexpected_error(exc)

    return app


app = create_app()
