import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from tortoise import Tortoise
from tortoise.contrib.fastapi import tortoise_exception_handlers

from .core.config import TORTOISE_ORM_CONFIG
from .core.logging_config import configure_logging
from .features.reports.exceptions import ReportError
from .features.reports.router import router as reports_router

configure_logging()
logger = logging.getLogger("sales_reports.main")  # This logger will inherit from 'sales_reports'


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Connects Tortoise-ORM on startup and closes the connections on shutdown.
    Schema and data are expected to exist already.
    """
    logger.info("Starting application...")
    await Tortoise.init(config=TORTOISE_ORM_CONFIG)
    logger.info("Tortoise-ORM has been initialized.")

    yield

    await Tortoise.close_connections()
    logger.info("Tortoise-ORM connections have been closed.")


async def report_error_handler(request: Request, exc: ReportError) -> JSONResponse:
    """Renders every report failure as {"error": message} with its status code."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


app = FastAPI(
    title="Sales Reports API",
    description="Read-only aggregate sales reports by user and group.",
    version="0.1.0",
    exception_handlers={**tortoise_exception_handlers(), ReportError: report_error_handler},
    lifespan=lifespan,
)


@app.get("/health")
async def health():
    """
    Liveness endpoint.
    """
    return {"status": "ok"}


app.include_router(reports_router)
