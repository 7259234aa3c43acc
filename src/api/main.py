"""
FILE: src/api/main.py
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.observability import setup_observability
from src.api.routers import orders_config
from src.api.routers.approvals import router as approvals_router
from src.api.routers.orders import router as orders_router
from src.api.routers.securities import router as securities_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _app_lifespan(_app: FastAPI):
    orders_config.get_order_desk_service()
    simulation_task = None
    if orders_config.simulation_enabled():
        interval_seconds = orders_config.simulation_interval_seconds()
        simulator = orders_config.build_order_book_simulator()
        simulation_task = asyncio.create_task(simulator.run(interval_seconds=interval_seconds))
        logger.info("Order book simulation started. interval_seconds=%s", interval_seconds)
    try:
        yield
    finally:
        if simulation_task is not None:
            simulation_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await simulation_task
            logger.info("Order book simulation stopped.")


app = FastAPI(
    title="Order Desk API",
    version="0.1.0",
    description=(
        "Order entry and approval desk with pre-trade compliance checks.\n\n"
        "Check outcomes are reported as `hard`, `soft`, `warning`, or `pass`. "
        "`hard` blocks submission and `soft` routes the order to the approval queue."
    ),
    openapi_tags=[
        {
            "name": "Order Entry",
            "description": "Ticket preview, pre-trade checks, submission, and the order book.",
        },
        {
            "name": "Order Approvals",
            "description": "Supervisory approval queue and decisions.",
        },
        {
            "name": "Securities",
            "description": "Security catalog search.",
        },
    ],
    lifespan=_app_lifespan,
)

setup_observability(app)

app.include_router(securities_router)
app.include_router(orders_router)
app.include_router(approvals_router)


@app.exception_handler(Exception)
async def unhandled_exception_to_problem_details(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception while serving request", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        media_type="application/problem+json",
        content={
            "type": "about:blank",
            "title": "Internal Server Error",
            "status": 500,
            "detail": "An unexpected error occurred.",
            "instance": str(request.url.path),
        },
    )


@app.get("/health", tags=["Health"])
@app.get("/api/v1/health", tags=["Health"], include_in_schema=False)
def health() -> dict:
    return {"status": "ok"}


@app.get("/health/live", tags=["Health"])
@app.get("/api/v1/health/live", tags=["Health"], include_in_schema=False)
def health_live() -> dict:
    return {"status": "live"}


@app.get("/health/ready", tags=["Health"])
@app.get("/api/v1/health/ready", tags=["Health"], include_in_schema=False)
def health_ready() -> dict:
    return {"status": "ready"}
